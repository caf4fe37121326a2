"""Application configuration management."""
from pydantic import model_validator, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict
from functools import lru_cache
from sqlalchemy.engine.url import make_url, URL
from typing import Annotated, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError
import logging

SQLITE_LOCAL_URL = "sqlite+aiosqlite:///./gamification.db"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database
    database_url: str = SQLITE_LOCAL_URL
    db_pool_size: int = 5
    db_max_overflow: int = 10

    # Redis (optional, falls back to in-memory locks)
    redis_url: str = ""

    # Application
    environment: str = "development"
    admin_player_ids: Annotated[set[str], NoDecode] = set()

    # Engine
    engine_timezone: str = "UTC"  # Calendar-day boundaries for generation, expiry and streaks
    lock_timeout_seconds: float = 10.0  # Per-player serialization lock
    lock_lease_seconds: float = 60.0  # Redis lock lifetime, kept longer than any operation
    login_bonus_points: int = 10
    random_seed: Optional[int] = None  # Fixed seed for reproducible sampling

    @field_validator("admin_player_ids", mode="before")
    @classmethod
    def parse_admin_player_ids(cls, value):
        """Parse comma-separated admin player ids from environment variables."""
        if value is None:
            return set()
        if isinstance(value, str):
            items = [item.strip().lower() for item in value.split(",") if item.strip()]
        elif isinstance(value, (list, tuple, set)):
            items = [str(item).strip().lower() for item in value if str(item).strip()]
        else:
            raise TypeError("admin_player_ids must be provided as a string or sequence")
        return set(items)

    def is_admin_player(self, player_id) -> bool:
        """Determine if the provided player id belongs to an administrator."""
        if not player_id:
            return False
        return str(player_id).strip().lower() in self.admin_player_ids

    @property
    def tzinfo(self) -> ZoneInfo:
        return ZoneInfo(self.engine_timezone)

    @model_validator(mode="after")
    def validate_all_config(self):
        """Validate engine configuration and normalize Postgres URLs."""
        logger = logging.getLogger(__name__)

        try:
            ZoneInfo(self.engine_timezone)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise ValueError(f"Unknown engine_timezone: {self.engine_timezone}") from exc

        if self.lock_timeout_seconds <= 0:
            raise ValueError("lock_timeout_seconds must be positive")

        if self.lock_lease_seconds < self.lock_timeout_seconds:
            raise ValueError("lock_lease_seconds must not be shorter than lock_timeout_seconds")

        if self.login_bonus_points < 0:
            raise ValueError("login_bonus_points must not be negative")

        # Database URL normalization
        url = self.database_url
        if not url:
            logger.warning("Empty DATABASE_URL, using SQLite fallback")
            self.database_url = SQLITE_LOCAL_URL
            return self

        parsed: Optional[URL] = None
        try:
            parsed = make_url(url)
        except Exception as e:
            logger.error(f"Failed to parse DATABASE_URL: {e}")
            logger.warning(f"Invalid DATABASE_URL; falling back to default sqlite database.")
            self.database_url = SQLITE_LOCAL_URL
            return self

        drivername = parsed.drivername
        if drivername.startswith("postgres") and "+asyncpg" not in drivername:
            parsed = parsed.set(drivername="postgresql+asyncpg")
            logger.info(f"Driver normalized: {drivername} -> {parsed.drivername}")
            # Use render_as_string to properly re-encode special characters in password
            self.database_url = parsed.render_as_string(hide_password=False)

        return self

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
