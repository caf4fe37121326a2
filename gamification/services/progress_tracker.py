"""Applies activity events to a player's active missions."""
import logging
import math
from typing import List
from uuid import UUID

from gamification.models.mission import CompoundProgress, MissionInstance
from gamification.services.catalog import COMPOUND_REQUIREMENTS
from gamification.services.collaborators import Clock
from gamification.services.events import ActionEvent
from gamification.services.repository import Repository

logger = logging.getLogger(__name__)


class ProgressTracker:
    """Advances eligible missions and detects completion."""

    def __init__(self, repo: Repository, clock: Clock):
        self.repo = repo
        self.clock = clock

    async def apply(self, player_id: UUID, event: ActionEvent) -> List[MissionInstance]:
        """Apply ``event`` to every eligible mission.

        Returns:
            The missions that became completed because of this event.
        """
        now = self.clock.now()
        candidates = await self.repo.query(
            MissionInstance,
            player_id,
            MissionInstance.is_completed.is_(False),
            MissionInstance.expires_at > now,
            order_by=MissionInstance.created_at,
        )

        completed: List[MissionInstance] = []
        for mission in candidates:
            if not self._is_eligible(mission, event):
                continue

            mission.verify_invariants()
            if mission.is_compound:
                done = await self._apply_compound(player_id, mission, event)
            else:
                done = await self._apply_simple(mission, event)

            if done:
                completed.append(mission)
                logger.info(f"Mission {mission.template_id} completed for {player_id=}")

        return completed

    @staticmethod
    def _is_eligible(mission: MissionInstance, event: ActionEvent) -> bool:
        if mission.is_compound:
            # Nominally SEND_MESSAGES, but it listens to all of its counters
            return event.action_type in COMPOUND_REQUIREMENTS
        return mission.action_type == event.action_type.value

    async def _apply_simple(self, mission: MissionInstance, event: ActionEvent) -> bool:
        new_value = mission.current_value + event.value
        completes = new_value >= mission.target_value

        def mutate(record: MissionInstance) -> None:
            record.current_value = new_value
            if completes:
                record.is_completed = True
                record.completed_at = self.clock.now()

        await self.repo.update(mission, mutate)
        return completes

    async def _apply_compound(self, player_id: UUID, mission: MissionInstance, event: ActionEvent) -> bool:
        progress = await self.repo.get(CompoundProgress, player_id, player_id)
        if progress is None:
            progress = await self.repo.create(CompoundProgress, player_id, messages=0, translations=0, media=0)

        field_name, _ = COMPOUND_REQUIREMENTS[event.action_type]
        await self.repo.update(
            progress, lambda p: setattr(p, field_name, getattr(p, field_name) + event.value)
        )

        ratios = [min(getattr(progress, name) / cap, 1.0) for name, cap in COMPOUND_REQUIREMENTS.values()]
        # Display value only; floor keeps it below target until every ratio is 1
        displayed = math.floor(sum(ratios) / len(ratios) * mission.target_value)
        completes = all(getattr(progress, name) >= cap for name, cap in COMPOUND_REQUIREMENTS.values())

        def mutate(record: MissionInstance) -> None:
            record.current_value = max(record.current_value, displayed)
            if completes:
                record.is_completed = True
                record.completed_at = self.clock.now()

        await self.repo.update(mission, mutate)
        return completes
