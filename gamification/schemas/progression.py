"""Progression-related Pydantic schemas."""
from datetime import date
from typing import Dict, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from gamification.models.progression import RewardAction
from gamification.schemas.base import BaseSchema, UtcDatetime


class ProgressionResponse(BaseSchema):
    """A player's progression ledger."""
    player_id: UUID
    points: int
    level: str
    streak_days: int
    last_activity_date: Optional[date] = None
    achievements_unlocked: list[str]
    owned_reward_ids: list[str]
    action_counters: Dict[str, int]
    updated_at: Optional[UtcDatetime] = None


class DailyLoginResponse(BaseSchema):
    first_login_today: bool
    progression: ProgressionResponse


class TrackActionRequest(BaseModel):
    action: RewardAction
    value: int = Field(default=1, ge=1)


class TrackActionResponse(BaseSchema):
    action: str
    count: int
    progression: ProgressionResponse


class AchievementResponse(BaseSchema):
    achievement_id: str
    title: str
    description: str
    icon: str
    category: str
    requirement: int
    points: int
    unlocked: bool


class UnlockableRewardResponse(BaseSchema):
    reward_id: str
    title: str
    description: str
    icon: str
    category: str
    points_required: int
    payload: Dict[str, str]
    unlocked: bool
    can_unlock: bool


class UnlockRewardResponse(BaseSchema):
    success: bool
    reward_id: str
    points: int
