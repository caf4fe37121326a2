"""Points, streak, achievement and reward unlock endpoints."""
import logging
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException

from gamification.dependencies import get_current_player_id, get_engine
from gamification.schemas.progression import (
    AchievementResponse,
    DailyLoginResponse,
    ProgressionResponse,
    TrackActionRequest,
    TrackActionResponse,
    UnlockableRewardResponse,
    UnlockRewardResponse,
)
from gamification.services import GamificationEngine, UnlockRejected, UnlockRejectionReason

logger = logging.getLogger(__name__)

router = APIRouter()

UNLOCK_REJECTION_STATUS = {
    UnlockRejectionReason.UNKNOWN_REWARD: 404,
    UnlockRejectionReason.INSUFFICIENT_POINTS: 400,
    UnlockRejectionReason.ALREADY_OWNED: 409,
}


@router.get("", response_model=ProgressionResponse)
async def get_progression(
    player_id: UUID = Depends(get_current_player_id),
    engine: GamificationEngine = Depends(get_engine),
):
    ledger = await engine.get_progression(player_id)
    return ProgressionResponse.model_validate(ledger)


@router.post("/login", response_model=DailyLoginResponse)
async def record_daily_login(
    player_id: UUID = Depends(get_current_player_id),
    engine: GamificationEngine = Depends(get_engine),
):
    """Record today's login, updating the streak and paying the daily bonus once."""
    first_login = await engine.record_daily_login(player_id)
    ledger = await engine.get_progression(player_id)
    return DailyLoginResponse(
        first_login_today=first_login,
        progression=ProgressionResponse.model_validate(ledger),
    )


@router.post("/actions", response_model=TrackActionResponse)
async def track_action(
    request: TrackActionRequest,
    player_id: UUID = Depends(get_current_player_id),
    engine: GamificationEngine = Depends(get_engine),
):
    count = await engine.track_action(player_id, request.action, request.value)
    ledger = await engine.get_progression(player_id)
    return TrackActionResponse(
        action=request.action.value,
        count=count,
        progression=ProgressionResponse.model_validate(ledger),
    )


@router.get("/achievements", response_model=list[AchievementResponse])
async def list_achievements(
    player_id: UUID = Depends(get_current_player_id),
    engine: GamificationEngine = Depends(get_engine),
):
    statuses = await engine.list_achievements(player_id)
    return [
        AchievementResponse(
            achievement_id=s.achievement.id,
            title=s.achievement.title,
            description=s.achievement.description,
            icon=s.achievement.icon,
            category=s.achievement.category.value,
            requirement=s.achievement.requirement,
            points=s.achievement.points,
            unlocked=s.unlocked,
        )
        for s in statuses
    ]


@router.get("/rewards", response_model=list[UnlockableRewardResponse])
async def list_unlockable_rewards(
    player_id: UUID = Depends(get_current_player_id),
    engine: GamificationEngine = Depends(get_engine),
):
    statuses = await engine.list_unlockable_rewards(player_id)
    return [
        UnlockableRewardResponse(
            reward_id=s.reward.id,
            title=s.reward.title,
            description=s.reward.description,
            icon=s.reward.icon,
            category=s.reward.category.value,
            points_required=s.reward.points_required,
            payload=s.reward.payload,
            unlocked=s.unlocked,
            can_unlock=s.can_unlock,
        )
        for s in statuses
    ]


@router.post("/rewards/{reward_id}/unlock", response_model=UnlockRewardResponse)
async def unlock_reward(
    reward_id: str,
    player_id: UUID = Depends(get_current_player_id),
    engine: GamificationEngine = Depends(get_engine),
):
    """Unlock a point-threshold reward. Points are not spent."""
    result = await engine.unlock_reward(player_id, reward_id)
    if isinstance(result, UnlockRejected):
        raise HTTPException(status_code=UNLOCK_REJECTION_STATUS[result.reason], detail=result.reason.value)

    ledger = await engine.get_progression(player_id)
    return UnlockRewardResponse(success=True, reward_id=result.reward.id, points=ledger.points)
