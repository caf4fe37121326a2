"""Tests for datetime helper utilities."""
from datetime import UTC, date, datetime, timedelta, timezone
from zoneinfo import ZoneInfo

from gamification.utils.datetime_helpers import end_of_day, ensure_utc, is_next_day


def test_ensure_utc_none_returns_none():
    assert ensure_utc(None) is None


def test_ensure_utc_attaches_timezone_to_naive_datetime():
    """Naive datetimes read back from SQLite are UTC without clock adjustment."""
    naive = datetime(2026, 5, 1, 12, 30, 0)

    result = ensure_utc(naive)

    assert result.tzinfo is UTC
    assert result.replace(tzinfo=None) == naive


def test_ensure_utc_converts_from_other_timezones_to_utc():
    eastern = timezone(timedelta(hours=-4))
    aware = datetime(2026, 5, 1, 8, 0, tzinfo=eastern)

    result = ensure_utc(aware)

    assert result.tzinfo is UTC
    assert result.replace(tzinfo=None) == datetime(2026, 5, 1, 12, 0)


def test_end_of_day_in_utc():
    assert end_of_day(date(2026, 3, 10), UTC) == datetime(2026, 3, 10, 23, 59, 59, 999000, tzinfo=UTC)


def test_end_of_day_in_local_timezone_is_returned_as_utc():
    result = end_of_day(date(2026, 1, 15), ZoneInfo("Europe/Madrid"))

    # Madrid is UTC+1 in January
    assert result == datetime(2026, 1, 15, 22, 59, 59, 999000, tzinfo=UTC)


def test_is_next_day():
    assert is_next_day(date(2026, 2, 28), date(2026, 3, 1))
    assert not is_next_day(date(2026, 3, 1), date(2026, 3, 1))
    assert not is_next_day(date(2026, 3, 1), date(2026, 3, 3))
    assert not is_next_day(None, date(2026, 3, 1))
