"""Progression ledger model and enumerations."""
from enum import Enum

from sqlalchemy import Column, Date, DateTime, Integer, JSON, String
from sqlalchemy.ext.mutable import MutableDict, MutableList

from gamification.database import Base
from gamification.models.base import created_at_column, get_uuid_column, utc_now


class PlayerLevel(str, Enum):
    """Level derived from lifetime points."""
    NOVICE = "novice"
    APPRENTICE = "apprentice"
    ADEPT = "adept"
    EXPERT = "expert"
    MASTER = "master"
    GRANDMASTER = "grandmaster"


class RewardAction(str, Enum):
    """Activity that earns ledger points and feeds achievement counters."""
    MESSAGE_SENT = "message_sent"
    TRANSLATION_COMPLETED = "translation_completed"
    DAILY_LOGIN = "daily_login"
    STREAK_MILESTONE = "streak_milestone"
    FEATURE_USED = "feature_used"
    PROFILE_COMPLETED = "profile_completed"
    MEDIA_SHARED = "media_shared"
    CHAT_CREATED = "chat_created"
    OFFLINE_USE = "offline_use"
    SETTINGS_CUSTOMIZED = "settings_customized"
    DAILY_MISSION_COMPLETED = "daily_mission_completed"


class AchievementCategory(str, Enum):
    """Action family an achievement listens to."""
    LOGIN = "login"
    MESSAGES = "messages"
    TRANSLATIONS = "translations"
    FEATURES = "features"
    MEDIA = "media"


class ProgressionLedger(Base):
    """Per-player points, level, streak, achievements and action counters."""
    __tablename__ = "progression_ledgers"

    player_id = get_uuid_column(primary_key=True)
    points = Column(Integer, nullable=False, default=0)
    level = Column(String(20), nullable=False, default=PlayerLevel.NOVICE.value)
    streak_days = Column(Integer, nullable=False, default=0)
    last_activity_date = Column(Date, nullable=True)
    achievements_unlocked = Column(MutableList.as_mutable(JSON), nullable=False, default=list)
    owned_reward_ids = Column(MutableList.as_mutable(JSON), nullable=False, default=list)
    action_counters = Column(MutableDict.as_mutable(JSON), nullable=False, default=dict)
    created_at = created_at_column()
    updated_at = Column(DateTime(timezone=True), default=utc_now, onupdate=utc_now, nullable=False)

    def __repr__(self):
        return (f"<ProgressionLedger(player_id={self.player_id}, points={self.points}, "
                f"level={self.level}, streak={self.streak_days})>")
