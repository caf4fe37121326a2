"""Public facade over the gamification services.

Every operation serializes on a per-player lock, opens its own session and
runs in a single repository transaction. Daily generation is checked in its
own transaction first, so a failing claim or event never rolls back a fresh
mission set.
"""
import logging
from dataclasses import dataclass
from datetime import tzinfo, UTC
from typing import Any, Awaitable, Callable, Dict, List, Optional, TypeVar, Union
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from gamification.models.mission import (
    CompoundProgress,
    MissionActionType,
    MissionGenerationMarker,
    MissionInstance,
)
from gamification.models.progression import ProgressionLedger, RewardAction
from gamification.models.special_reward import SpecialReward
from gamification.services.catalog import Catalog, get_catalog
from gamification.services.collaborators import (
    Clock,
    LoggingNotificationSink,
    NotificationSink,
    RandomSource,
    SystemClock,
    SystemRandomSource,
)
from gamification.services.events import ActionEvent
from gamification.services.mission_generator import MissionGenerator
from gamification.services.progress_tracker import ProgressTracker
from gamification.services.progression_service import (
    AchievementStatus,
    ProgressionService,
    UnlockableRewardStatus,
    UnlockResult,
)
from gamification.services.repository import Repository
from gamification.services.reward_resolver import ClaimResult, RewardResolver
from gamification.services.statistics_service import MissionStats, StatisticsService
from gamification.utils.exceptions import InvariantViolationError
from gamification.utils.lock_client import LockClient

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class _Services:
    """Services bound to one repository (one session, one transaction)."""
    repo: Repository
    generator: MissionGenerator
    tracker: ProgressTracker
    resolver: RewardResolver
    progression: ProgressionService
    statistics: StatisticsService


class GamificationEngine:
    """Daily missions, claims and progression for any number of players."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        lock_client: LockClient,
        catalog: Optional[Catalog] = None,
        clock: Optional[Clock] = None,
        random_source: Optional[RandomSource] = None,
        notifier: Optional[NotificationSink] = None,
        tz: tzinfo = UTC,
        lock_timeout: float = 10.0,
        login_bonus_points: int = 10,
    ):
        self.session_factory = session_factory
        self.lock_client = lock_client
        self.catalog = catalog or get_catalog()
        self.clock = clock or SystemClock(tz)
        self.random_source = random_source or SystemRandomSource()
        self.notifier = notifier or LoggingNotificationSink()
        self.tz = tz
        self.lock_timeout = lock_timeout
        self.login_bonus_points = login_bonus_points

    def _services(self, repo: Repository) -> _Services:
        generator = MissionGenerator(repo, self.catalog, self.clock, self.random_source, self.tz)
        progression = ProgressionService(repo, self.catalog, self.clock, self.login_bonus_points)
        return _Services(
            repo=repo,
            generator=generator,
            tracker=ProgressTracker(repo, self.clock),
            resolver=RewardResolver(repo, self.clock, self.random_source, progression, generator),
            progression=progression,
            statistics=StatisticsService(repo),
        )

    async def _transaction(self, fn: Callable[[_Services], Awaitable[T]]) -> T:
        async with self.session_factory() as db:
            repo = Repository(db)
            try:
                return await repo.transaction(lambda r: fn(self._services(r)))
            except InvariantViolationError as e:
                logger.error(f"Invariant violation, transaction rolled back: {e}")
                raise

    async def _locked(self, player_id: UUID, fn: Callable[[_Services], Awaitable[T]],
                      refresh: bool = False) -> T:
        """Run ``fn`` under the player's lock, optionally refreshing missions first."""
        async with self.lock_client.lock(f"gamification:player:{player_id}", timeout=self.lock_timeout):
            if refresh:
                await self._refresh(player_id)
            return await self._transaction(fn)

    async def _refresh(self, player_id: UUID) -> bool:
        refreshed = await self._transaction(lambda s: s.generator.refresh_if_new_day(player_id))
        if refreshed:
            self._notify(self.notifier.missions_refreshed, player_id)
        return refreshed

    def _notify(self, method: Callable[..., None], *args: Any) -> None:
        try:
            method(*args)
        except Exception as e:
            logger.error(f"Notification {method.__name__} failed: {e}")

    # Missions

    async def refresh_daily_missions(self, player_id: UUID) -> bool:
        """Generate today's missions if they do not exist yet. Returns True if generated."""
        async with self.lock_client.lock(f"gamification:player:{player_id}", timeout=self.lock_timeout):
            return await self._refresh(player_id)

    async def list_active_missions(self, player_id: UUID) -> List[MissionInstance]:
        """Today's missions (completed and claimed ones included), oldest first."""

        async def run(s: _Services) -> List[MissionInstance]:
            return await s.repo.query(
                MissionInstance,
                player_id,
                MissionInstance.expires_at > self.clock.now(),
                order_by=MissionInstance.created_at,
            )

        return await self._locked(player_id, run, refresh=True)

    async def apply_action_event(self, player_id: UUID, action_type: Union[MissionActionType, str],
                                 value: int = 1) -> List[MissionInstance]:
        """Advance eligible missions. Returns the missions completed by this event."""
        event = ActionEvent(action_type, value)
        completed = await self._locked(player_id, lambda s: s.tracker.apply(player_id, event), refresh=True)
        for mission in completed:
            self._notify(self.notifier.mission_completed, player_id, mission.title)
        return completed

    async def claim(self, player_id: UUID, mission_id: UUID) -> ClaimResult:
        """Claim a completed mission. Rejections are returned as ClaimRejected."""
        return await self._locked(player_id, lambda s: s.resolver.claim(player_id, mission_id), refresh=True)

    async def get_stats(self, player_id: UUID) -> MissionStats:
        return await self._locked(player_id, lambda s: s.statistics.get_stats(player_id))

    async def get_owned_special_rewards(self, player_id: UUID) -> List[SpecialReward]:
        return await self._locked(player_id, lambda s: s.statistics.get_owned_special_rewards(player_id))

    async def reset_daily(self, player_id: UUID) -> bool:
        """Delete every mission and compound counter, then regenerate today's set."""

        async def run(s: _Services) -> bool:
            await s.repo.delete_where(MissionInstance, player_id)
            await s.repo.delete_where(CompoundProgress, player_id)
            await s.repo.delete_where(MissionGenerationMarker, player_id)
            return await s.generator.generate(player_id, self.clock.today())

        async with self.lock_client.lock(f"gamification:player:{player_id}", timeout=self.lock_timeout):
            regenerated = await self._transaction(run)
        logger.warning(f"Daily missions reset for {player_id=}")
        if regenerated:
            self._notify(self.notifier.missions_refreshed, player_id)
        return regenerated

    # Progression

    async def record_daily_login(self, player_id: UUID) -> bool:
        return await self._locked(player_id, lambda s: s.progression.record_daily_login(player_id))

    async def track_action(self, player_id: UUID, action: Union[RewardAction, str], value: int = 1) -> int:
        action = RewardAction(action)
        if value < 1:
            raise ValueError(f"Action value must be positive, got {value}")
        return await self._locked(player_id, lambda s: s.progression.track_action(player_id, action, value))

    async def get_progression(self, player_id: UUID) -> ProgressionLedger:
        return await self._locked(player_id, lambda s: s.progression.get_or_create(player_id))

    async def list_achievements(self, player_id: UUID) -> List[AchievementStatus]:
        return await self._locked(player_id, lambda s: s.progression.list_achievements(player_id))

    async def list_unlockable_rewards(self, player_id: UUID) -> List[UnlockableRewardStatus]:
        return await self._locked(player_id, lambda s: s.progression.list_unlockable_rewards(player_id))

    async def unlock_reward(self, player_id: UUID, reward_id: str) -> UnlockResult:
        return await self._locked(player_id, lambda s: s.progression.unlock_reward(player_id, reward_id))

    async def get_action_stats(self, player_id: UUID) -> Dict[str, int]:
        return await self._locked(player_id, lambda s: s.progression.get_action_stats(player_id))

    async def reset_progression(self, player_id: UUID) -> ProgressionLedger:
        return await self._locked(player_id, lambda s: s.progression.reset(player_id))
