"""Daily mission models and enumerations."""
from enum import Enum
import uuid

from sqlalchemy import Boolean, Column, Date, DateTime, Float, Index, Integer, String

from gamification.database import Base
from gamification.models.base import created_at_column, get_uuid_column
from gamification.utils.exceptions import InvariantViolationError

COMPOUND_TEMPLATE_ID = "communication_legend"


class MissionActionType(str, Enum):
    """In-app activity that can advance a mission."""
    SEND_MESSAGES = "send_messages"
    COMPLETE_TRANSLATIONS = "complete_translations"
    SHARE_MEDIA = "share_media"
    USE_FEATURES = "use_features"
    CHAT_DURATION = "chat_duration"
    ADD_CONTACTS = "add_contacts"
    UPDATE_STATUS = "update_status"
    CHANGE_SETTINGS = "change_settings"
    USE_OFFLINE = "use_offline"
    COMPRESS_MEDIA = "compress_media"


class MissionRarity(str, Enum):
    """Ordinal rarity tier, Common < Uncommon < Rare < Epic < Legendary."""
    COMMON = "common"
    UNCOMMON = "uncommon"
    RARE = "rare"
    EPIC = "epic"
    LEGENDARY = "legendary"

    @property
    def display_name(self) -> str:
        return self.value.capitalize()


class MissionInstance(Base):
    """A player's concrete occurrence of a mission template for one day.

    Template fields are copied at generation time so catalog edits never
    change a mission that is already in flight.
    """
    __tablename__ = "mission_instances"

    mission_id = get_uuid_column(primary_key=True, default=uuid.uuid4)
    player_id = get_uuid_column(nullable=False, index=True)
    template_id = Column(String(50), nullable=False)
    title = Column(String(100), nullable=False)
    description = Column(String(500), nullable=False)
    icon = Column(String(50), nullable=False)
    action_type = Column(String(50), nullable=False)
    rarity = Column(String(20), nullable=False)
    target_value = Column(Integer, nullable=False)
    current_value = Column(Integer, nullable=False, default=0)
    points_reward = Column(Integer, nullable=False)
    special_reward_chance = Column(Float, nullable=False, default=0.0)
    is_completed = Column(Boolean, nullable=False, default=False)
    is_claimed = Column(Boolean, nullable=False, default=False)
    expires_at = Column(DateTime(timezone=True), nullable=False)
    created_at = created_at_column()
    completed_at = Column(DateTime(timezone=True), nullable=True)
    claimed_at = Column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        Index("ix_mission_instances_player_expires", "player_id", "expires_at"),
        Index("ix_mission_instances_player_action", "player_id", "action_type"),
    )

    @property
    def is_compound(self) -> bool:
        return self.template_id == COMPOUND_TEMPLATE_ID

    @property
    def progress(self) -> float:
        if not self.target_value:
            return 0.0
        return min(self.current_value / self.target_value, 1.0)

    def verify_invariants(self) -> None:
        """Raise if stored state could only come from corruption or a bug."""
        if self.current_value is not None and self.current_value < 0:
            raise InvariantViolationError(
                f"Mission {self.mission_id} has negative current_value={self.current_value}"
            )
        if self.is_claimed and not self.is_completed:
            raise InvariantViolationError(f"Mission {self.mission_id} is claimed but not completed")

    def __repr__(self):
        return (f"<MissionInstance(mission_id={self.mission_id}, template={self.template_id}, "
                f"progress={self.current_value}/{self.target_value}, claimed={self.is_claimed})>")


class CompoundProgress(Base):
    """Per-player counters backing the compound legendary mission."""
    __tablename__ = "compound_progress"

    player_id = get_uuid_column(primary_key=True)
    messages = Column(Integer, nullable=False, default=0)
    translations = Column(Integer, nullable=False, default=0)
    media = Column(Integer, nullable=False, default=0)
    created_at = created_at_column()

    def __repr__(self):
        return (f"<CompoundProgress(player_id={self.player_id}, messages={self.messages}, "
                f"translations={self.translations}, media={self.media})>")


class MissionGenerationMarker(Base):
    """Calendar date on which a player's mission set was last generated."""
    __tablename__ = "mission_generation_markers"

    player_id = get_uuid_column(primary_key=True)
    last_generated_date = Column(Date, nullable=False)

    def __repr__(self):
        return f"<MissionGenerationMarker(player_id={self.player_id}, date={self.last_generated_date})>"
