"""Points, levels, login streaks, achievements and point-threshold rewards."""
import logging
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Dict, List, Optional, Union
from uuid import UUID

from gamification.models.progression import (
    AchievementCategory,
    PlayerLevel,
    ProgressionLedger,
    RewardAction,
)
from gamification.services.catalog import Achievement, Catalog, UnlockableReward
from gamification.services.collaborators import Clock
from gamification.services.repository import Repository
from gamification.utils.datetime_helpers import is_next_day

logger = logging.getLogger(__name__)


# Evaluated highest first
LEVEL_THRESHOLDS = (
    (5000, PlayerLevel.GRANDMASTER),
    (2500, PlayerLevel.MASTER),
    (1000, PlayerLevel.EXPERT),
    (500, PlayerLevel.ADEPT),
    (200, PlayerLevel.APPRENTICE),
)

ACTION_POINTS: Dict[RewardAction, int] = {
    RewardAction.MESSAGE_SENT: 1,
    RewardAction.TRANSLATION_COMPLETED: 5,
    RewardAction.DAILY_LOGIN: 10,  # Overridden by login_bonus_points
    RewardAction.FEATURE_USED: 5,
    RewardAction.PROFILE_COMPLETED: 20,
    RewardAction.MEDIA_SHARED: 2,
    RewardAction.CHAT_CREATED: 5,
    RewardAction.OFFLINE_USE: 3,
    RewardAction.SETTINGS_CUSTOMIZED: 5,
    RewardAction.DAILY_MISSION_COMPLETED: 0,
}

# Streak length -> bonus, paid through RewardAction.STREAK_MILESTONE
STREAK_MILESTONE_POINTS: Dict[int, int] = {7: 50, 30: 200, 100: 500}

ACTION_CATEGORIES: Dict[RewardAction, AchievementCategory] = {
    RewardAction.DAILY_LOGIN: AchievementCategory.LOGIN,
    RewardAction.STREAK_MILESTONE: AchievementCategory.LOGIN,
    RewardAction.MESSAGE_SENT: AchievementCategory.MESSAGES,
    RewardAction.TRANSLATION_COMPLETED: AchievementCategory.TRANSLATIONS,
    RewardAction.FEATURE_USED: AchievementCategory.FEATURES,
    RewardAction.MEDIA_SHARED: AchievementCategory.MEDIA,
}


def calculate_level(points: int) -> PlayerLevel:
    """Map lifetime points to a level."""
    for threshold, level in LEVEL_THRESHOLDS:
        if points >= threshold:
            return level
    return PlayerLevel.NOVICE


class UnlockRejectionReason(str, Enum):
    UNKNOWN_REWARD = "unknown_reward"
    ALREADY_OWNED = "already_owned"
    INSUFFICIENT_POINTS = "insufficient_points"


@dataclass
class UnlockAccepted:
    reward: UnlockableReward
    success: bool = True


@dataclass
class UnlockRejected:
    reward_id: str
    reason: UnlockRejectionReason
    success: bool = False


UnlockResult = Union[UnlockAccepted, UnlockRejected]


@dataclass
class AchievementStatus:
    achievement: Achievement
    unlocked: bool


@dataclass
class UnlockableRewardStatus:
    reward: UnlockableReward
    unlocked: bool
    can_unlock: bool


class ProgressionService:
    """Service for a player's progression ledger.

    All values here only grow: points, counters, unlocked achievements and
    owned rewards are never decremented outside :meth:`reset`.
    """

    def __init__(self, repo: Repository, catalog: Catalog, clock: Clock, login_bonus_points: int = 10):
        self.repo = repo
        self.catalog = catalog
        self.clock = clock
        self.login_bonus_points = login_bonus_points

    async def get_or_create(self, player_id: UUID) -> ProgressionLedger:
        ledger = await self.repo.get(ProgressionLedger, player_id, player_id)
        if ledger is None:
            ledger = await self.repo.create(
                ProgressionLedger,
                player_id,
                points=0,
                level=PlayerLevel.NOVICE.value,
                streak_days=0,
                last_activity_date=None,
                achievements_unlocked=[],
                owned_reward_ids=[],
                action_counters={},
            )
            logger.info(f"Created progression ledger for {player_id=}")
        return ledger

    async def add_points(self, player_id: UUID, points: int) -> int:
        """Add ``points`` (>= 0) and recompute the level. Returns the new total."""
        if points < 0:
            raise ValueError(f"Cannot add negative points: {points}")

        ledger = await self.get_or_create(player_id)
        if points == 0:
            return ledger.points

        old_level = ledger.level
        new_total = ledger.points + points
        new_level = calculate_level(new_total).value

        def mutate(record: ProgressionLedger) -> None:
            record.points = new_total
            record.level = new_level

        await self.repo.update(ledger, mutate)

        if new_level != old_level:
            logger.info(f"Level up for {player_id=}: {old_level} -> {new_level} ({new_total} points)")
        return new_total

    async def record_daily_login(self, player_id: UUID, today: Optional[date] = None) -> bool:
        """Update the login streak and pay the daily bonus once per calendar day.

        Returns:
            True if this was the first login of ``today``.
        """
        today = today or self.clock.today()
        ledger = await self.get_or_create(player_id)
        if ledger.last_activity_date == today:
            return False

        if is_next_day(ledger.last_activity_date, today):
            new_streak = ledger.streak_days + 1
        else:
            if ledger.last_activity_date is not None:
                logger.info(f"Login streak broken for {player_id=} after {ledger.streak_days} days")
            new_streak = 1

        def mutate(record: ProgressionLedger) -> None:
            record.streak_days = new_streak
            record.last_activity_date = today

        await self.repo.update(ledger, mutate)

        await self.track_action(player_id, RewardAction.DAILY_LOGIN)
        if new_streak in STREAK_MILESTONE_POINTS:
            logger.info(f"Streak milestone {new_streak} reached for {player_id=}")
            await self.track_action(player_id, RewardAction.STREAK_MILESTONE, new_streak)

        return True

    def points_for_action(self, action: RewardAction, value: int) -> int:
        if action == RewardAction.STREAK_MILESTONE:
            return STREAK_MILESTONE_POINTS.get(value, 0)
        if action == RewardAction.DAILY_LOGIN:
            return self.login_bonus_points
        return ACTION_POINTS.get(action, 0)

    async def track_action(self, player_id: UUID, action: RewardAction, value: int = 1) -> int:
        """Count an action, pay its points and evaluate achievements.

        Returns:
            The cumulative count for ``action``.
        """
        if value < 1:
            raise ValueError(f"Action value must be positive, got {value}")

        ledger = await self.get_or_create(player_id)
        count = ledger.action_counters.get(action.value, 0) + value

        def mutate(record: ProgressionLedger) -> None:
            record.action_counters[action.value] = count

        await self.repo.update(ledger, mutate)

        points = self.points_for_action(action, value)
        if points > 0:
            await self.add_points(player_id, points)

        await self.check_achievements(player_id, action, count)
        return count

    async def check_achievements(self, player_id: UUID, action: RewardAction, cumulative_count: int
                                 ) -> List[Achievement]:
        """Unlock every achievement of the action's family whose requirement is met."""
        category = ACTION_CATEGORIES.get(action)
        if category is None:
            return []

        ledger = await self.get_or_create(player_id)
        progress = ledger.streak_days if category == AchievementCategory.LOGIN else cumulative_count

        unlocked: List[Achievement] = []
        for achievement in self.catalog.achievements_for(category):
            if achievement.id in ledger.achievements_unlocked:
                continue
            if achievement.requirement <= progress:
                await self._unlock_achievement(player_id, ledger, achievement)
                unlocked.append(achievement)
        return unlocked

    async def _unlock_achievement(self, player_id: UUID, ledger: ProgressionLedger, achievement: Achievement
                                  ) -> None:
        await self.repo.update(ledger, lambda record: record.achievements_unlocked.append(achievement.id))
        await self.add_points(player_id, achievement.points)
        logger.info(f"Achievement unlocked for {player_id=}: {achievement.id}, +{achievement.points} points")

    async def grant_owned_reward(self, player_id: UUID, reward_id: str) -> None:
        """Add ``reward_id`` to the owned set (no-op if already owned)."""
        ledger = await self.get_or_create(player_id)
        if reward_id in ledger.owned_reward_ids:
            return
        await self.repo.update(ledger, lambda record: record.owned_reward_ids.append(reward_id))

    async def unlock_reward(self, player_id: UUID, reward_id: str) -> UnlockResult:
        """Unlock a catalog reward once the player has enough points. Points are not spent."""
        reward = self.catalog.get_unlockable_reward(reward_id)
        if reward is None:
            return UnlockRejected(reward_id=reward_id, reason=UnlockRejectionReason.UNKNOWN_REWARD)

        ledger = await self.get_or_create(player_id)
        if reward_id in ledger.owned_reward_ids:
            return UnlockRejected(reward_id=reward_id, reason=UnlockRejectionReason.ALREADY_OWNED)
        if ledger.points < reward.points_required:
            return UnlockRejected(reward_id=reward_id, reason=UnlockRejectionReason.INSUFFICIENT_POINTS)

        await self.grant_owned_reward(player_id, reward_id)
        logger.info(f"Reward unlocked for {player_id=}: {reward_id}")
        return UnlockAccepted(reward=reward)

    async def list_achievements(self, player_id: UUID) -> List[AchievementStatus]:
        ledger = await self.get_or_create(player_id)
        return [
            AchievementStatus(achievement=a, unlocked=a.id in ledger.achievements_unlocked)
            for a in self.catalog.achievements
        ]

    async def list_unlockable_rewards(self, player_id: UUID) -> List[UnlockableRewardStatus]:
        ledger = await self.get_or_create(player_id)
        return [
            UnlockableRewardStatus(
                reward=r,
                unlocked=r.id in ledger.owned_reward_ids,
                can_unlock=r.id not in ledger.owned_reward_ids and ledger.points >= r.points_required,
            )
            for r in self.catalog.unlockable_rewards
        ]

    async def get_action_stats(self, player_id: UUID) -> Dict[str, int]:
        ledger = await self.get_or_create(player_id)
        return dict(ledger.action_counters)

    async def reset(self, player_id: UUID) -> ProgressionLedger:
        """Admin/test reset of the whole ledger."""
        ledger = await self.get_or_create(player_id)

        def mutate(record: ProgressionLedger) -> None:
            record.points = 0
            record.level = PlayerLevel.NOVICE.value
            record.streak_days = 0
            record.last_activity_date = None
            record.achievements_unlocked = []
            record.owned_reward_ids = []
            record.action_counters = {}

        await self.repo.update(ledger, mutate)
        logger.warning(f"Progression ledger reset for {player_id=}")
        return ledger
