"""Special reward and mission history models."""
from enum import Enum
import uuid

from sqlalchemy import Column, DateTime, Index, Integer, JSON, String

from gamification.database import Base
from gamification.models.base import created_at_column, get_uuid_column, utc_now


class SpecialRewardType(str, Enum):
    """Cosmetic unlock kinds."""
    THEME = "theme"
    AVATAR_FRAME = "avatar_frame"
    SOUND = "sound"
    EMOJI = "emoji"
    BACKGROUND = "background"
    STICKER = "sticker"


class SpecialReward(Base):
    """A cosmetic reward minted when a mission claim wins the special roll."""
    __tablename__ = "special_rewards"

    reward_id = get_uuid_column(primary_key=True, default=uuid.uuid4)
    player_id = get_uuid_column(nullable=False, index=True)
    title = Column(String(100), nullable=False)
    description = Column(String(500), nullable=False)
    icon = Column(String(50), nullable=False)
    rarity = Column(String(20), nullable=False)
    reward_type = Column(String(20), nullable=False)
    payload = Column(JSON, nullable=False, default=dict)
    created_at = created_at_column()

    def __repr__(self):
        return f"<SpecialReward(reward_id={self.reward_id}, type={self.reward_type}, rarity={self.rarity})>"


class MissionHistoryEntry(Base):
    """Append-only record of a claimed mission."""
    __tablename__ = "mission_history"

    entry_id = get_uuid_column(primary_key=True, default=uuid.uuid4)
    player_id = get_uuid_column(nullable=False, index=True)
    template_id = Column(String(50), nullable=False)
    action_type = Column(String(50), nullable=False)
    completed_at = Column(DateTime(timezone=True), nullable=False, default=utc_now)
    points_earned = Column(Integer, nullable=False)
    reward_id = get_uuid_column(nullable=True)

    __table_args__ = (
        Index("ix_mission_history_player_completed", "player_id", "completed_at"),
    )

    def __repr__(self):
        return (f"<MissionHistoryEntry(player_id={self.player_id}, template={self.template_id}, "
                f"points={self.points_earned})>")
