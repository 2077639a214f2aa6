from abc import abstractmethod

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from polylingo.models.favorite import Favorite
from polylingo.repositories.base_repository import BaseRepository


class IFavoriteRepository(BaseRepository[Favorite]):
    """Abstract interface for favorites."""

    @abstractmethod
    async def add_favorite(
        self, source_text: str, translated_text: str, source_language: str, target_language: str
    ) -> tuple[Favorite, bool]:
        """Save a favorite unless one exists for (source_text, source_language, target_language)."""
        pass

    @abstractmethod
    async def find_favorite(self, source_text: str, source_language: str, target_language: str) -> Favorite | None:
        """Get the favorite for a (source_text, source_language, target_language) triple."""
        pass

    @abstractmethod
    async def favorite_exists(self, source_text: str, source_language: str, target_language: str) -> bool:
        """Check if a favorite exists for the triple."""
        pass

    @abstractmethod
    async def get_favorites(self, limit: int = 100, offset: int = 0) -> list[Favorite]:
        """Get favorites, newest first."""
        pass


class FavoriteRepository(IFavoriteRepository):
    """SQLAlchemy implementation of the favorites repository."""

    def __init__(self, db: AsyncSession):
        super().__init__(db)

    async def get_by_id(self, id: int) -> Favorite | None:
        query = select(Favorite).where(Favorite.id == id)
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def find_favorite(self, source_text: str, source_language: str, target_language: str) -> Favorite | None:
        query = select(Favorite).where(
            Favorite.source_text == source_text,
            Favorite.source_language == source_language,
            Favorite.target_language == target_language,
        )
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def favorite_exists(self, source_text: str, source_language: str, target_language: str) -> bool:
        return await self._check_exists_where(
            Favorite.source_text == source_text,
            Favorite.source_language == source_language,
            Favorite.target_language == target_language,
        )

    async def add_favorite(
        self, source_text: str, translated_text: str, source_language: str, target_language: str
    ) -> tuple[Favorite, bool]:
        """
        Save a favorite unless one exists for the same triple.
        :return: (favorite, created) where created is False for a duplicate
        """
        existing = await self.find_favorite(source_text, source_language, target_language)
        if existing:
            return existing, False

        favorite = Favorite(
            source_text=source_text,
            translated_text=translated_text,
            source_language=source_language,
            target_language=target_language,
        )
        try:
            return await self.create(favorite), True
        except IntegrityError:
            # Concurrent insert of the same triple
            await self.db.rollback()
            existing = await self.find_favorite(source_text, source_language, target_language)
            if existing is None:
                raise
            return existing, False

    async def get_favorites(self, limit: int = 100, offset: int = 0) -> list[Favorite]:
        query = select(Favorite).order_by(Favorite.id.desc()).limit(limit).offset(offset)
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def delete(self, id: int) -> bool:
        result = await self.db.execute(delete(Favorite).where(Favorite.id == id))
        await self.db.commit()
        return (result.rowcount or 0) > 0
