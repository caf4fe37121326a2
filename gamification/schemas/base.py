"""Base schemas with common configuration."""
from datetime import datetime, UTC
from typing import Annotated

from pydantic import BaseModel, ConfigDict, PlainSerializer


def serialize_datetime_utc(dt: datetime) -> str:
    """
    Serialize datetime to ISO 8601 with an explicit UTC suffix.

    SQLite hands back naive datetimes; every stored instant is UTC, so naive
    values are treated as UTC.
    """
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC).isoformat().replace('+00:00', 'Z')


# Datetime that renders as "...Z" in JSON, including inside nested models
UtcDatetime = Annotated[datetime, PlainSerializer(serialize_datetime_utc, return_type=str, when_used="json")]


class BaseSchema(BaseModel):
    """Base schema for all API responses."""

    model_config = ConfigDict(
        from_attributes=True,
    )
