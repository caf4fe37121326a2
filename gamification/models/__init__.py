"""Database models."""
from gamification.models.mission import (
    COMPOUND_TEMPLATE_ID,
    CompoundProgress,
    MissionActionType,
    MissionGenerationMarker,
    MissionInstance,
    MissionRarity,
)
from gamification.models.special_reward import MissionHistoryEntry, SpecialReward, SpecialRewardType
from gamification.models.progression import (
    AchievementCategory,
    PlayerLevel,
    ProgressionLedger,
    RewardAction,
)

__all__ = [
    "COMPOUND_TEMPLATE_ID",
    "CompoundProgress",
    "MissionActionType",
    "MissionGenerationMarker",
    "MissionInstance",
    "MissionRarity",
    "MissionHistoryEntry",
    "SpecialReward",
    "SpecialRewardType",
    "AchievementCategory",
    "PlayerLevel",
    "ProgressionLedger",
    "RewardAction",
]
