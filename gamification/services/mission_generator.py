"""Daily mission generation and lazy retirement of stale missions."""
import logging
from datetime import date, tzinfo, UTC
from typing import List, Optional
from uuid import UUID

from gamification.models.mission import (
    CompoundProgress,
    MissionGenerationMarker,
    MissionInstance,
)
from gamification.services.catalog import Catalog, MissionTemplate
from gamification.services.collaborators import Clock, RandomSource
from gamification.services.repository import Repository
from gamification.utils.datetime_helpers import end_of_day

logger = logging.getLogger(__name__)


class MissionGenerator:
    """Materializes a player's missions once per calendar day.

    Runs inside the caller's repository transaction: the generation marker is
    the last write, so a failure anywhere leaves the previous marker in place
    and the next access retries.
    """

    def __init__(self, repo: Repository, catalog: Catalog, clock: Clock, random_source: RandomSource,
                 tz: tzinfo = UTC):
        self.repo = repo
        self.catalog = catalog
        self.clock = clock
        self.random_source = random_source
        self.tz = tz

    async def refresh_if_new_day(self, player_id: UUID) -> bool:
        """Generate today's missions unless that already happened. Returns True if generated."""
        today = self.clock.today()
        marker = await self.repo.get(MissionGenerationMarker, player_id, player_id)
        if marker is not None and marker.last_generated_date == today:
            return False
        return await self.generate(player_id, today, marker)

    async def generate(self, player_id: UUID, today: date,
                       marker: Optional[MissionGenerationMarker] = None) -> bool:
        """Retire stale missions, create a new set and advance the marker."""
        purged = await self.purge_expired(player_id)

        templates = self.catalog.sample_daily(self.random_source)
        if not templates:
            logger.warning(f"No mission templates qualified for {player_id=} on {today}")
            return False

        if any(t.is_compound for t in templates) or any(m.is_compound for m in purged):
            await self.reset_compound_progress(player_id)

        expires_at = end_of_day(today, self.tz)
        created = [await self._create_instance(player_id, template, expires_at) for template in templates]

        if marker is None:
            marker = await self.repo.get(MissionGenerationMarker, player_id, player_id)
        if marker is None:
            await self.repo.create(MissionGenerationMarker, player_id, last_generated_date=today)
        else:
            await self.repo.update(marker, lambda m: setattr(m, "last_generated_date", today))

        logger.info(
            f"Generated {len(created)} daily missions for {player_id=} on {today}: "
            f"{[t.id for t in templates]}"
        )
        return True

    async def purge_expired(self, player_id: UUID) -> List[MissionInstance]:
        """Delete unclaimed missions that expired before now. Claimed missions are kept."""
        now = self.clock.now()
        expired = await self.repo.query(
            MissionInstance,
            player_id,
            MissionInstance.is_claimed.is_(False),
            MissionInstance.expires_at < now,
        )
        for mission in expired:
            await self.repo.delete(mission)

        if expired:
            logger.info(f"Purged {len(expired)} expired unclaimed missions for {player_id=}")
        return expired

    async def reset_compound_progress(self, player_id: UUID) -> None:
        await self.repo.delete_where(CompoundProgress, player_id)

    async def _create_instance(self, player_id: UUID, template: MissionTemplate, expires_at) -> MissionInstance:
        return await self.repo.create(
            MissionInstance,
            player_id,
            template_id=template.id,
            title=template.title,
            description=template.description,
            icon=template.icon,
            action_type=template.action_type.value,
            rarity=template.rarity.value,
            target_value=template.target_value,
            current_value=0,
            points_reward=template.points_reward,
            special_reward_chance=template.special_reward_chance,
            is_completed=False,
            is_claimed=False,
            expires_at=expires_at,
            created_at=self.clock.now(),
        )
