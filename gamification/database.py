"""Database connection and session management."""
import logging
from typing import Any, Dict

from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import declarative_base
from sqlalchemy.engine.url import make_url
from gamification.config import get_settings

logger = logging.getLogger(__name__)

settings = get_settings()


def is_memory_database(database_url: str) -> bool:
    """True for SQLite URLs that point at an in-memory database."""
    url = make_url(database_url)
    if url.get_backend_name() != "sqlite":
        return False
    return url.database in (None, "", ":memory:", "%3Amemory%3A")


def build_engine_kwargs(database_url: str, environment: str, pool_size: int, max_overflow: int) -> Dict[str, Any]:
    """Keyword arguments for ``create_async_engine`` given the configured URL."""
    url = make_url(database_url)

    # Determine if we need SSL (for Heroku or other cloud databases)
    connect_args = {}
    needs_ssl = (
        "heroku" in (url.host or "") or
        "amazonaws" in (url.host or "") or
        environment == "production"
    )

    if needs_ssl and url.get_backend_name() != "sqlite":
        connect_args["ssl"] = "require"
        logger.debug("SSL connection enabled (ssl=require)")

    engine_kwargs = {
        "echo": environment == "development",
        "future": True,
        "connect_args": connect_args,
        "pool_pre_ping": True,  # Verify connections before use
    }

    # In-memory SQLite runs on a StaticPool, which takes no sizing options
    if not is_memory_database(database_url):
        engine_kwargs["pool_recycle"] = 3600
        engine_kwargs["pool_size"] = max(1, pool_size)
        engine_kwargs["max_overflow"] = max(0, max_overflow)

    return engine_kwargs


engine_kwargs = build_engine_kwargs(
    settings.database_url,
    settings.environment,
    settings.db_pool_size,
    settings.db_max_overflow,
)

# Create async engine
try:
    engine = create_async_engine(settings.database_url, **engine_kwargs)
    logger.debug("Database engine created successfully")
except Exception as e:
    logger.error(f"Failed to create database engine: {e}")
    raise

# Session factory
AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)

# Base class for models
Base = declarative_base()

