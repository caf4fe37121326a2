"""Lock client abstraction - Redis or in-memory fallback."""
import asyncio
import logging
import weakref
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from gamification.utils.exceptions import LockTimeoutError

logger = logging.getLogger(__name__)


class LockClient:
    """Named async locks - uses Redis if available, else per-process asyncio locks.

    Locks are keyed by name, so callers that lock ``player:<id>`` only ever
    contend with operations on that same player.

    Two durations apply. ``timeout`` bounds how long a caller waits to acquire
    the lock; ``lease_seconds`` bounds how long a Redis lock survives if its
    holder dies without releasing it.
    """

    def __init__(self, redis_url: Optional[str] = None, lease_seconds: float = 60.0):
        self.backend = "memory"
        self.lease_seconds = lease_seconds
        # Entries vanish once no holder or waiter references the lock
        self._memory_locks: weakref.WeakValueDictionary[str, asyncio.Lock] = weakref.WeakValueDictionary()

        if redis_url:
            try:
                import redis
                import redis.asyncio as redis_async

                redis.from_url(redis_url).ping()
                self.redis = redis_async.from_url(redis_url)
                self.backend = "redis"
                logger.info("Using Redis for locks")
            except Exception as e:
                logger.warning(f"Redis not available, using in-memory locks: {e}")
        else:
            logger.info("Using in-memory locks (Redis URL not provided)")

    @asynccontextmanager
    async def lock(self, name: str, timeout: float = 10.0) -> AsyncIterator[None]:
        """Hold the lock ``name`` for the duration of the block.

        Raises:
            LockTimeoutError: If the lock is not acquired within ``timeout`` seconds.
        """
        if self.backend == "redis":
            async with self._redis_lock(name, timeout):
                yield
        else:
            async with self._memory_lock(name, timeout):
                yield

    @asynccontextmanager
    async def _redis_lock(self, name: str, timeout: float) -> AsyncIterator[None]:
        from redis.exceptions import LockError

        lease = max(self.lease_seconds, timeout)
        redis_lock = self.redis.lock(name, timeout=lease, blocking_timeout=timeout)
        acquired = await redis_lock.acquire()
        if not acquired:
            raise LockTimeoutError(f"Timed out acquiring lock {name}")
        try:
            yield
        finally:
            try:
                await redis_lock.release()
            except LockError as e:
                # The lease ran out while held; the work already ran
                logger.warning(f"Lock {name} expired before release: {e}")

    @asynccontextmanager
    async def _memory_lock(self, name: str, timeout: float) -> AsyncIterator[None]:
        lock = self._memory_locks.get(name)
        if lock is None:
            lock = asyncio.Lock()
            self._memory_locks[name] = lock
        try:
            await asyncio.wait_for(lock.acquire(), timeout)
        except asyncio.TimeoutError as e:
            raise LockTimeoutError(f"Timed out acquiring lock {name}") from e
        try:
            yield
        finally:
            lock.release()
