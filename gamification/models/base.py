"""Base utilities for SQLAlchemy models."""
from datetime import datetime, UTC

from sqlalchemy import Column, DateTime, Uuid


def get_uuid_column(*args, **kwargs):
    """Get a UUID column that is native on PostgreSQL and CHAR(32) elsewhere.

    Args:
        *args: Positional arguments to pass to Column (e.g., ForeignKey)
        **kwargs: Keyword arguments to pass to Column (e.g., primary_key=True)

    Example:
        mission_id = get_uuid_column(primary_key=True, default=uuid.uuid4)
        reward_id = get_uuid_column(nullable=True)
    """
    return Column(Uuid(as_uuid=True), *args, **kwargs)


def utc_now() -> datetime:
    return datetime.now(UTC)


def created_at_column():
    return Column(DateTime(timezone=True), default=utc_now, nullable=False)
