"""Gamification services."""
from gamification.services.catalog import Catalog, get_catalog
from gamification.services.collaborators import (
    Clock,
    FixedClock,
    LoggingNotificationSink,
    NotificationSink,
    RandomSource,
    SystemClock,
    SystemRandomSource,
)
from gamification.services.events import ActionEvent
from gamification.services.gamification_engine import GamificationEngine
from gamification.services.progression_service import (
    ProgressionService,
    UnlockAccepted,
    UnlockRejected,
    UnlockRejectionReason,
    calculate_level,
)
from gamification.services.repository import Repository
from gamification.services.reward_resolver import (
    ClaimAccepted,
    ClaimRejected,
    ClaimRejectionReason,
    RewardResolver,
)
from gamification.services.statistics_service import MissionStats, StatisticsService

__all__ = [
    "Catalog",
    "get_catalog",
    "Clock",
    "FixedClock",
    "LoggingNotificationSink",
    "NotificationSink",
    "RandomSource",
    "SystemClock",
    "SystemRandomSource",
    "ActionEvent",
    "GamificationEngine",
    "ProgressionService",
    "UnlockAccepted",
    "UnlockRejected",
    "UnlockRejectionReason",
    "calculate_level",
    "Repository",
    "ClaimAccepted",
    "ClaimRejected",
    "ClaimRejectionReason",
    "RewardResolver",
    "MissionStats",
    "StatisticsService",
]
