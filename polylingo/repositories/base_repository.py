from abc import ABC, abstractmethod
from typing import Generic, TypeVar

from sqlalchemy import exists, select
from sqlalchemy.ext.asyncio import AsyncSession

T = TypeVar("T")


class BaseRepository(ABC, Generic[T]):
    """Abstract base repository providing common CRUD operations."""

    def __init__(self, db: AsyncSession):
        """
        Initialize repository with async database session.
        :param db: SQLAlchemy async database session
        """
        self.db = db

    async def _check_exists_where(self, *where_clauses) -> bool:
        """
        Helper: Check existence with given WHERE clauses using SELECT EXISTS.

        :param where_clauses: SQLAlchemy WHERE clause expressions
        :return: True if entity exists, False otherwise
        """
        exists_query = select(exists().where(*where_clauses))
        exists_result = await self.db.scalar(exists_query)
        return exists_result or False

    @abstractmethod
    async def get_by_id(self, id: int) -> T | None:
        """
        Get entity by ID.
        :param id: Entity ID
        :return: Entity or None if not found
        """
        pass

    async def create(self, entity: T) -> T:
        """
        Create new entity.
        :param entity: Entity to create
        :return: Created entity with generated ID
        """
        self.db.add(entity)
        await self.db.commit()
        await self.db.refresh(entity)
        return entity

    @abstractmethod
    async def delete(self, id: int) -> bool:
        """
        Delete entity by ID.
        :param id: Entity ID to delete
        :return: True if deleted, False if not found
        """
        pass
