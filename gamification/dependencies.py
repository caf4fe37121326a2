"""FastAPI dependencies."""
import logging
from functools import lru_cache
from uuid import UUID

from fastapi import Depends, Header, HTTPException

from gamification.config import get_settings
from gamification.database import AsyncSessionLocal
from gamification.services import GamificationEngine, SystemClock, SystemRandomSource
from gamification.services.catalog import get_catalog
from gamification.utils import lock_client

logger = logging.getLogger(__name__)


def _mask_identifier(identifier: str) -> str:
    """Mask a player id for logging."""
    if not identifier:
        return "<missing>"
    if len(identifier) <= 8:
        return f"{identifier[:2]}...{identifier[-2:]}"
    return f"{identifier[:4]}...{identifier[-4:]}"


@lru_cache()
def get_engine() -> GamificationEngine:
    """Get the process-wide engine built from settings."""
    settings = get_settings()
    tz = settings.tzinfo
    return GamificationEngine(
        session_factory=AsyncSessionLocal,
        lock_client=lock_client,
        catalog=get_catalog(),
        clock=SystemClock(tz),
        random_source=SystemRandomSource(settings.random_seed),
        tz=tz,
        lock_timeout=settings.lock_timeout_seconds,
        login_bonus_points=settings.login_bonus_points,
    )


async def get_current_player_id(
        x_player_id: str | None = Header(default=None, alias="X-Player-Id"),
) -> UUID:
    """Resolve the acting player from the ``X-Player-Id`` header.

    Authentication happens upstream; this only validates the identifier.
    """
    if not x_player_id:
        raise HTTPException(status_code=401, detail="missing_player_id")
    try:
        return UUID(x_player_id)
    except ValueError:
        logger.warning(f"Rejected malformed player id {_mask_identifier(x_player_id)}")
        raise HTTPException(status_code=400, detail="invalid_player_id")


async def require_admin_player(player_id: UUID = Depends(get_current_player_id)) -> UUID:
    """Allow only configured admin players, and never in production."""
    settings = get_settings()
    if settings.environment == "production":
        raise HTTPException(status_code=403, detail="disabled_in_production")
    if not settings.is_admin_player(player_id):
        logger.warning(f"Non-admin reset attempt by {_mask_identifier(str(player_id))}")
        raise HTTPException(status_code=403, detail="admin_only")
    return player_id
