"""Collaborator interfaces the engine is injected with.

The engine never reads the wall clock, the global RNG or a notification SDK
directly; hosts pass implementations of these interfaces instead.
"""
import logging
import random
from abc import ABC, abstractmethod
from datetime import date, datetime, timedelta, tzinfo, UTC
from typing import Any, MutableSequence, Optional
from uuid import UUID

logger = logging.getLogger(__name__)


class Clock(ABC):
    """Source of the current instant and calendar date."""

    @abstractmethod
    def now(self) -> datetime:
        """Return the current instant as a UTC-aware datetime."""

    @abstractmethod
    def today(self) -> date:
        """Return the current calendar date in the engine timezone."""


class SystemClock(Clock):
    """Wall-clock time; calendar days are evaluated in ``tz``."""

    def __init__(self, tz: tzinfo = UTC):
        self.tz = tz

    def now(self) -> datetime:
        return datetime.now(UTC)

    def today(self) -> date:
        return datetime.now(self.tz).date()


class FixedClock(Clock):
    """Manually advanced clock for deterministic day-boundary handling."""

    def __init__(self, current: datetime, tz: tzinfo = UTC):
        if current.tzinfo is None:
            current = current.replace(tzinfo=UTC)
        self.current = current
        self.tz = tz

    def now(self) -> datetime:
        return self.current

    def today(self) -> date:
        return self.current.astimezone(self.tz).date()

    def advance(self, **kwargs) -> datetime:
        """Move the clock forward by ``timedelta(**kwargs)``."""
        self.current = self.current + timedelta(**kwargs)
        return self.current

    def set(self, current: datetime) -> None:
        if current.tzinfo is None:
            current = current.replace(tzinfo=UTC)
        self.current = current


class RandomSource(ABC):
    """Uniform randomness; ``shuffle`` is derived from ``uniform``."""

    @abstractmethod
    def uniform(self) -> float:
        """Return a float in [0, 1)."""

    def shuffle(self, items: MutableSequence[Any]) -> None:
        """Shuffle ``items`` in place (Fisher-Yates)."""
        for i in range(len(items) - 1, 0, -1):
            j = min(int(self.uniform() * (i + 1)), i)
            items[i], items[j] = items[j], items[i]

    def choice_index(self, length: int) -> int:
        """Uniformly pick an index in ``range(length)``."""
        if length <= 0:
            raise ValueError("Cannot choose from an empty sequence")
        return min(int(self.uniform() * length), length - 1)


class SystemRandomSource(RandomSource):
    """``random.Random`` backed source, reproducible when seeded."""

    def __init__(self, seed: Optional[int] = None):
        self._random = random.Random(seed)

    def uniform(self) -> float:
        return self._random.random()


class NotificationSink(ABC):
    """Fire-and-forget notifications; the engine never depends on the outcome."""

    @abstractmethod
    def missions_refreshed(self, player_id: UUID) -> None:
        pass

    @abstractmethod
    def mission_completed(self, player_id: UUID, title: str) -> None:
        pass


class LoggingNotificationSink(NotificationSink):
    """Default sink that only records notifications in the log."""

    def missions_refreshed(self, player_id: UUID) -> None:
        logger.info(f"New daily missions available for {player_id=}")

    def mission_completed(self, player_id: UUID, title: str) -> None:
        logger.info(f"Mission '{title}' completed for {player_id=}, reward ready to claim")
