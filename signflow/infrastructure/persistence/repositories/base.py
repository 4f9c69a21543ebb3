"""Base repository: generic lookup, create and delete for ORM models."""

from typing import Any, Generic, TypeVar

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from signflow.infrastructure.persistence.database import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """Base repository with _get_orm, _add and _delete helpers.

    Subclasses expose DTO-returning methods; ORM objects never leave the
    repository.
    """

    def __init__(self, db: AsyncSession, model: type[ModelType]) -> None:
        self.db = db
        self.model = model

    async def _get_orm(self, entity_id: str, *, for_update: bool = False) -> ModelType | None:
        """Return a single record by primary key, or None."""
        model: Any = self.model
        stmt = select(self.model).where(model.id == entity_id)
        if for_update:
            stmt = stmt.with_for_update()
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def _add(self, obj: ModelType) -> ModelType:
        """Persist a new record and reload server defaults."""
        self.db.add(obj)
        await self.db.flush()
        await self.db.refresh(obj)
        return obj

    async def _delete(self, obj: ModelType) -> None:
        await self.db.delete(obj)
        await self.db.flush()
