"""Player-partitioned record store over an async SQLAlchemy session."""
import logging
from typing import Any, Awaitable, Callable, List, Optional, Type, TypeVar
from uuid import UUID

from sqlalchemy import delete, inspect, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from gamification.utils.exceptions import PersistenceError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Repository:
    """Generic record store used by the engine services.

    Every read and write takes an explicit ``player_id``; a record belonging to
    another player is never returned or touched. Services only flush, the
    enclosing :meth:`transaction` owns commit and rollback.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(self, model: Type[T], record_id: Any, player_id: UUID, *, for_update: bool = False
                  ) -> Optional[T]:
        """Load one record by primary key, scoped to ``player_id``."""
        pk_column = inspect(model).primary_key[0]
        stmt = select(model).where(pk_column == record_id, model.player_id == player_id)
        if for_update:
            stmt = stmt.with_for_update()
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def query(self, model: Type[T], player_id: UUID, *criteria, order_by=None) -> List[T]:
        """Return the player's records of ``model`` matching ``criteria``."""
        stmt = select(model).where(model.player_id == player_id, *criteria)
        if order_by is not None:
            stmt = stmt.order_by(order_by)
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def create(self, model: Type[T], player_id: UUID, **fields) -> T:
        record = model(player_id=player_id, **fields)
        self.db.add(record)
        await self.db.flush()
        return record

    async def update(self, record: T, mutator: Callable[[T], None]) -> T:
        """Apply ``mutator`` to ``record`` and flush the change."""
        mutator(record)
        self.db.add(record)
        await self.db.flush()
        return record

    async def delete(self, record: Any) -> None:
        await self.db.delete(record)
        await self.db.flush()

    async def delete_where(self, model: Type[Any], player_id: UUID, *criteria) -> int:
        """Bulk-delete the player's records of ``model`` matching ``criteria``."""
        result = await self.db.execute(
            delete(model).where(model.player_id == player_id, *criteria)
        )
        return result.rowcount or 0

    async def transaction(self, fn: Callable[["Repository"], Awaitable[T]]) -> T:
        """Run ``fn`` and commit, or roll back everything it did.

        Raises:
            PersistenceError: If the store fails at any point, including commit.
        """
        try:
            result = await fn(self)
            await self.db.commit()
            return result
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.exception(f"Repository transaction rolled back: {e}")
            raise PersistenceError(str(e)) from e
        except Exception:
            await self.db.rollback()
            raise
