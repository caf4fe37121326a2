"""Read-only mission statistics derived from claim history."""
import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, List
from uuid import UUID

from gamification.models.special_reward import MissionHistoryEntry, SpecialReward
from gamification.services.repository import Repository

logger = logging.getLogger(__name__)


@dataclass
class MissionStats:
    total_completed: int = 0
    total_points: int = 0
    special_rewards: int = 0
    mission_type_breakdown: Dict[str, int] = field(default_factory=dict)


class StatisticsService:
    def __init__(self, repo: Repository):
        self.repo = repo

    async def get_stats(self, player_id: UUID) -> MissionStats:
        history = await self.repo.query(MissionHistoryEntry, player_id)
        breakdown = Counter(entry.action_type for entry in history)
        return MissionStats(
            total_completed=len(history),
            total_points=sum(entry.points_earned for entry in history),
            special_rewards=sum(1 for entry in history if entry.reward_id is not None),
            mission_type_breakdown=dict(breakdown),
        )

    async def get_owned_special_rewards(self, player_id: UUID) -> List[SpecialReward]:
        return await self.repo.query(SpecialReward, player_id, order_by=SpecialReward.created_at)
