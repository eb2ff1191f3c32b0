"""
Base Repository Pattern

Purpose
-------
Type-safe, generic repository abstraction over SQLAlchemy 2.0 async
sessions. Repositories encapsulate query construction; the caller owns the
session and therefore the transaction boundary.

Design Notes
------------
- No business logic, no commits
- Structured debug logging for every query
- Ordering and limits are explicit arguments so "newest first" reads are
  visible at the call site

Usage
-----
    reflections = BaseRepository(Reflection, logger)
    rows = await reflections.find_many_where(
        session,
        Reflection.user_id == user_id,
        order_by=[Reflection.created_at.desc()],
        limit=50,
    )
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Generic, List, Optional, Sequence, Type, TypeVar

from sqlalchemy import select

if TYPE_CHECKING:
    from logging import Logger

    from sqlalchemy import ColumnElement
    from sqlalchemy.ext.asyncio import AsyncSession

T = TypeVar("T")


class BaseRepository(Generic[T]):
    """
    Generic base repository for type-safe database operations.

    Type Parameters:
        T: The SQLAlchemy model class this repository manages
    """

    def __init__(self, model_class: Type[T], logger: Logger) -> None:
        self.model_class = model_class
        self.log = logger

    async def get(self, session: AsyncSession, id_value: Any) -> Optional[T]:
        """Get a single record by primary key."""
        instance = await session.get(self.model_class, id_value)

        self.log.debug(
            f"Repository.get: {self.model_class.__name__}",
            extra={
                "model": self.model_class.__name__,
                "id": id_value,
                "found": instance is not None,
            },
        )

        return instance

    async def find_one_where(
        self,
        session: AsyncSession,
        *conditions: ColumnElement[bool],
        order_by: Optional[Sequence[Any]] = None,
    ) -> Optional[T]:
        """Find the first record matching conditions (in `order_by` order)."""
        stmt = select(self.model_class).where(*conditions)

        if order_by:
            stmt = stmt.order_by(*order_by)

        result = await session.execute(stmt.limit(1))
        instance = result.scalars().first()

        self.log.debug(
            f"Repository.find_one_where: {self.model_class.__name__}",
            extra={
                "model": self.model_class.__name__,
                "found": instance is not None,
            },
        )

        return instance

    async def find_many_where(
        self,
        session: AsyncSession,
        *conditions: ColumnElement[bool],
        order_by: Optional[Sequence[Any]] = None,
        limit: Optional[int] = None,
    ) -> List[T]:
        """Find records matching conditions, optionally ordered and limited."""
        stmt = select(self.model_class).where(*conditions)

        if order_by:
            stmt = stmt.order_by(*order_by)

        if limit is not None:
            stmt = stmt.limit(limit)

        result = await session.execute(stmt)
        instances = list(result.scalars().all())

        self.log.debug(
            f"Repository.find_many_where: {self.model_class.__name__}",
            extra={
                "model": self.model_class.__name__,
                "found_count": len(instances),
                "limit": limit,
            },
        )

        return instances

    async def add(self, session: AsyncSession, instance: T) -> T:
        """Add a new instance and flush so generated keys are populated."""
        session.add(instance)
        await session.flush()

        self.log.debug(
            f"Repository.add: {self.model_class.__name__}",
            extra={
                "model": self.model_class.__name__,
                "id": getattr(instance, "id", None),
            },
        )

        return instance

    async def delete(self, session: AsyncSession, instance: T) -> None:
        await session.delete(instance)
        await session.flush()

        self.log.debug(
            f"Repository.delete: {self.model_class.__name__}",
            extra={
                "model": self.model_class.__name__,
                "id": getattr(instance, "id", None),
            },
        )
