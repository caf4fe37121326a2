"""Mission-related Pydantic schemas."""
from typing import Any, Dict, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from gamification.models.mission import MissionActionType
from gamification.schemas.base import BaseSchema, UtcDatetime


class MissionResponse(BaseSchema):
    """A player's mission instance."""
    mission_id: UUID
    template_id: str
    title: str
    description: str
    icon: str
    action_type: str
    rarity: str
    target_value: int
    current_value: int
    points_reward: int
    special_reward_chance: float
    is_completed: bool
    is_claimed: bool
    expires_at: UtcDatetime
    created_at: UtcDatetime
    completed_at: Optional[UtcDatetime] = None
    claimed_at: Optional[UtcDatetime] = None

    # Computed
    progress: float


class MissionListResponse(BaseSchema):
    missions: list[MissionResponse]
    total_count: int
    completed_count: int
    claimed_count: int
    claimable_count: int


class RefreshMissionsResponse(BaseSchema):
    refreshed: bool


class ActionEventRequest(BaseModel):
    """Activity reported by the host app."""
    action_type: MissionActionType
    value: int = Field(default=1, ge=1)


class ActionEventResponse(BaseSchema):
    completed_missions: list[MissionResponse]


class SpecialRewardResponse(BaseSchema):
    reward_id: UUID
    title: str
    description: str
    icon: str
    rarity: str
    reward_type: str
    payload: Dict[str, Any]
    created_at: UtcDatetime


class ClaimMissionResponse(BaseSchema):
    """Response after claiming a mission."""
    success: bool
    mission_id: UUID
    points_awarded: int
    special_reward: Optional[SpecialRewardResponse] = None


class MissionStatsResponse(BaseSchema):
    total_completed: int
    total_points: int
    special_rewards: int
    mission_type_breakdown: Dict[str, int]


class ResetDailyResponse(BaseSchema):
    regenerated: bool
