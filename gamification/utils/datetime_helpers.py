"""Datetime utility functions for timezone and calendar-day handling."""
from datetime import date, datetime, time, timedelta, tzinfo, UTC
from typing import Optional


def ensure_utc(dt: Optional[datetime]) -> Optional[datetime]:
    """
    Ensure datetime is timezone-aware in UTC.

    SQLite stores datetimes without an offset, so values read back from it are
    naive and must be treated as UTC before comparing them with ``Clock.now()``.

    Example:
        >>> naive_dt = datetime(2025, 1, 1, 12, 0, 0)
        >>> ensure_utc(naive_dt).tzinfo == UTC
        True

        >>> ensure_utc(None) is None
        True
    """
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)


def end_of_day(day: date, tz: tzinfo) -> datetime:
    """Return the last millisecond (23:59:59.999) of ``day`` in ``tz``, as UTC."""
    local_end = datetime.combine(day, time(23, 59, 59, 999000), tzinfo=tz)
    return local_end.astimezone(UTC)


def is_next_day(previous: Optional[date], current: date) -> bool:
    """True when ``current`` is exactly one calendar day after ``previous``."""
    if previous is None:
        return False
    return current - previous == timedelta(days=1)
