"""Daily mission endpoints."""
import logging
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException

from gamification.dependencies import get_current_player_id, get_engine, require_admin_player
from gamification.models.mission import MissionInstance
from gamification.schemas.mission import (
    ActionEventRequest,
    ActionEventResponse,
    ClaimMissionResponse,
    MissionListResponse,
    MissionResponse,
    MissionStatsResponse,
    RefreshMissionsResponse,
    ResetDailyResponse,
    SpecialRewardResponse,
)
from gamification.services import ClaimRejected, ClaimRejectionReason, GamificationEngine

logger = logging.getLogger(__name__)

router = APIRouter()

CLAIM_REJECTION_STATUS = {
    ClaimRejectionReason.NOT_FOUND: 404,
    ClaimRejectionReason.NOT_COMPLETED: 400,
    ClaimRejectionReason.ALREADY_CLAIMED: 409,
}


def _map_mission_to_response(mission: MissionInstance) -> MissionResponse:
    return MissionResponse(
        mission_id=mission.mission_id,
        template_id=mission.template_id,
        title=mission.title,
        description=mission.description,
        icon=mission.icon,
        action_type=mission.action_type,
        rarity=mission.rarity,
        target_value=mission.target_value,
        current_value=mission.current_value,
        points_reward=mission.points_reward,
        special_reward_chance=mission.special_reward_chance,
        is_completed=mission.is_completed,
        is_claimed=mission.is_claimed,
        expires_at=mission.expires_at,
        created_at=mission.created_at,
        completed_at=mission.completed_at,
        claimed_at=mission.claimed_at,
        progress=mission.progress,
    )


@router.get("", response_model=MissionListResponse)
async def list_missions(
    player_id: UUID = Depends(get_current_player_id),
    engine: GamificationEngine = Depends(get_engine),
):
    """List today's missions, generating them on the first request of the day."""
    missions = await engine.list_active_missions(player_id)
    completed_count = sum(1 for m in missions if m.is_completed)
    claimed_count = sum(1 for m in missions if m.is_claimed)
    return MissionListResponse(
        missions=[_map_mission_to_response(m) for m in missions],
        total_count=len(missions),
        completed_count=completed_count,
        claimed_count=claimed_count,
        claimable_count=completed_count - claimed_count,
    )


@router.post("/refresh", response_model=RefreshMissionsResponse)
async def refresh_missions(
    player_id: UUID = Depends(get_current_player_id),
    engine: GamificationEngine = Depends(get_engine),
):
    return RefreshMissionsResponse(refreshed=await engine.refresh_daily_missions(player_id))


@router.post("/events", response_model=ActionEventResponse)
async def report_action_event(
    request: ActionEventRequest,
    player_id: UUID = Depends(get_current_player_id),
    engine: GamificationEngine = Depends(get_engine),
):
    """Apply in-app activity to the player's missions."""
    completed = await engine.apply_action_event(player_id, request.action_type, request.value)
    return ActionEventResponse(completed_missions=[_map_mission_to_response(m) for m in completed])


@router.post("/{mission_id}/claim", response_model=ClaimMissionResponse)
async def claim_mission(
    mission_id: UUID,
    player_id: UUID = Depends(get_current_player_id),
    engine: GamificationEngine = Depends(get_engine),
):
    """Claim a completed mission's reward."""
    result = await engine.claim(player_id, mission_id)
    if isinstance(result, ClaimRejected):
        raise HTTPException(status_code=CLAIM_REJECTION_STATUS[result.reason], detail=result.reason.value)

    special_reward = None
    if result.special_reward is not None:
        special_reward = SpecialRewardResponse.model_validate(result.special_reward)
    return ClaimMissionResponse(
        success=True,
        mission_id=result.mission.mission_id,
        points_awarded=result.points_awarded,
        special_reward=special_reward,
    )


@router.get("/stats", response_model=MissionStatsResponse)
async def get_mission_stats(
    player_id: UUID = Depends(get_current_player_id),
    engine: GamificationEngine = Depends(get_engine),
):
    stats = await engine.get_stats(player_id)
    return MissionStatsResponse(
        total_completed=stats.total_completed,
        total_points=stats.total_points,
        special_rewards=stats.special_rewards,
        mission_type_breakdown=stats.mission_type_breakdown,
    )


@router.get("/rewards", response_model=list[SpecialRewardResponse])
async def get_special_rewards(
    player_id: UUID = Depends(get_current_player_id),
    engine: GamificationEngine = Depends(get_engine),
):
    """Special rewards won from mission claims."""
    rewards = await engine.get_owned_special_rewards(player_id)
    return [SpecialRewardResponse.model_validate(r) for r in rewards]


@router.post("/reset", response_model=ResetDailyResponse)
async def reset_daily_missions(
    player_id: UUID = Depends(require_admin_player),
    engine: GamificationEngine = Depends(get_engine),
):
    """Admin only: wipe and regenerate the caller's missions."""
    return ResetDailyResponse(regenerated=await engine.reset_daily(player_id))
