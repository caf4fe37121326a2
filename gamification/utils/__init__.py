"""Utilities module - lock client and datetime helpers."""
from gamification.config import get_settings
from gamification.utils.lock_client import LockClient
from gamification.utils.datetime_helpers import ensure_utc, end_of_day, is_next_day

settings = get_settings()

# Create singleton instance
lock_client = LockClient(
    settings.redis_url if settings.redis_url else None,
    lease_seconds=settings.lock_lease_seconds,
)

__all__ = ["lock_client", "LockClient", "ensure_utc", "end_of_day", "is_next_day"]
