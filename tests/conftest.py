"""Pytest configuration and fixtures."""
import os
from collections import deque
from datetime import datetime, UTC
from pathlib import Path
import uuid

import pytest
from alembic import command
from alembic.config import Config as AlembicConfig
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import StaticPool

# Configure the application before any gamification module reads settings
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["ENVIRONMENT"] = "test"
os.environ["REDIS_URL"] = ""
ADMIN_PLAYER_ID = uuid.UUID("00000000-0000-4000-8000-00000000a0a0")
os.environ["ADMIN_PLAYER_IDS"] = str(ADMIN_PLAYER_ID)

from gamification.services import (
    FixedClock,
    GamificationEngine,
    NotificationSink,
    RandomSource,
    Repository,
    get_catalog,
)
from gamification.utils.lock_client import LockClient

BASE_DIR = Path(__file__).resolve().parent.parent

START_TIME = datetime(2026, 3, 10, 12, 0, tzinfo=UTC)

# Random draws consumed by one default generation: 3 common shuffle, uncommon
# count, 2 uncommon shuffle, then the rare, epic and legendary chances.
GENERATION_DRAWS = 9
# Generation that additionally includes the legendary compound mission
LEGENDARY_DAY = [0.99] * (GENERATION_DRAWS - 1) + [0.0]


class ScriptedRandomSource(RandomSource):
    """Returns queued values first, then ``default``.

    With the default of 0.99 every shuffle is the identity and every chance
    roll fails, so a generated day is the first three Common templates plus
    the first Uncommon one.
    """

    def __init__(self, values=(), default: float = 0.99):
        self.values = deque(values)
        self.default = default
        self.draws = 0

    def script(self, *values: float) -> None:
        self.values.extend(values)

    def uniform(self) -> float:
        self.draws += 1
        if self.values:
            return self.values.popleft()
        return self.default


class RecordingNotificationSink(NotificationSink):
    def __init__(self):
        self.refreshed = []
        self.completed = []

    def missions_refreshed(self, player_id):
        self.refreshed.append(player_id)

    def mission_completed(self, player_id, title):
        self.completed.append((player_id, title))


class FailingNotificationSink(NotificationSink):
    def missions_refreshed(self, player_id):
        raise RuntimeError("push service down")

    def mission_completed(self, player_id, title):
        raise RuntimeError("push service down")


def apply_migrations(connection, revision: str = "head") -> None:
    """Upgrade the database behind ``connection`` with the alembic migrations."""
    alembic_cfg = AlembicConfig(str(BASE_DIR / "alembic.ini"))
    alembic_cfg.attributes["connection"] = connection
    alembic_cfg.attributes["configure_logger"] = False
    command.upgrade(alembic_cfg, revision)


@pytest.fixture
async def test_engine():
    """In-memory database shared by every session of one test."""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(apply_migrations)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(test_engine):
    return async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest.fixture
async def db_session(session_factory):
    """Create test database session."""
    async with session_factory() as session:
        yield session
        await session.rollback()
        await session.close()


@pytest.fixture
def repo(db_session):
    return Repository(db_session)


@pytest.fixture
def catalog():
    return get_catalog()


@pytest.fixture
def clock():
    return FixedClock(START_TIME)


@pytest.fixture
def random_source():
    return ScriptedRandomSource()


@pytest.fixture
def notifier():
    return RecordingNotificationSink()


@pytest.fixture
def player_id():
    return uuid.uuid4()


@pytest.fixture
def engine(session_factory, catalog, clock, random_source, notifier):
    """Engine wired to the test database and deterministic collaborators."""
    return GamificationEngine(
        session_factory=session_factory,
        lock_client=LockClient(),
        catalog=catalog,
        clock=clock,
        random_source=random_source,
        notifier=notifier,
        lock_timeout=2.0,
    )


@pytest.fixture
async def test_app(engine):
    """Create test app with the engine dependency overridden."""
    from gamification.main import app
    from gamification.dependencies import get_engine

    app.dependency_overrides[get_engine] = lambda: engine

    yield app

    app.dependency_overrides.clear()


@pytest.fixture
async def client(test_app):
    async with AsyncClient(transport=ASGITransport(app=test_app), base_url="http://test") as ac:
        yield ac
