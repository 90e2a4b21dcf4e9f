"""Base repository with common CRUD operations."""

from typing import Any, ClassVar, Generic, TypeVar

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from cadence.db.base import Base

T = TypeVar("T", bound=Base)


class BaseRepository(Generic[T]):
    """Generic async repository for SQLAlchemy models.

    Subclasses set ``model_class`` and ``pk_field``. Writes flush but never
    commit; the calling service owns the transaction.
    """

    model_class: ClassVar[type[Base]]
    pk_field: ClassVar[str]

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get(self, pk_value: str) -> T | None:
        """Get a single record by primary key."""
        return await self.get_where(**{self.pk_field: pk_value})

    async def get_where(self, **filters: Any) -> T | None:
        """Get the single record matching every field filter."""
        stmt = select(self.model_class).filter_by(**filters)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_where(self, *order_by: Any, **filters: Any) -> list[T]:
        """List records matching every field filter."""
        stmt = select(self.model_class).filter_by(**filters).order_by(*order_by)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def create(self, **kwargs: Any) -> T:
        """Create and persist a new record."""
        row = self.model_class(**kwargs)
        self.session.add(row)
        await self.session.flush()
        return row

    async def update(self, row: T, **kwargs: Any) -> T:
        """Update an existing record."""
        for key, value in kwargs.items():
            setattr(row, key, value)
        await self.session.flush()
        return row
