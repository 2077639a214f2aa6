import structlog

from polylingo.core.exceptions import FavoriteNotFoundException
from polylingo.models.favorite import Favorite
from polylingo.models.history_entry import HistoryEntry
from polylingo.repositories.favorite_repository import IFavoriteRepository
from polylingo.repositories.history_repository import IHistoryRepository
from polylingo.schemas.history_schemas import FavoriteCreate

logger = structlog.get_logger(__name__)


class LibraryService:
    """Service for the search history and saved favorites."""

    def __init__(self, history_repo: IHistoryRepository, favorite_repo: IFavoriteRepository):
        self.history_repo = history_repo
        self.favorite_repo = favorite_repo

    async def get_history(self, limit: int, offset: int = 0) -> list[HistoryEntry]:
        """Get history entries, newest first."""
        return await self.history_repo.get_history(limit=limit, offset=offset)

    async def clear_history(self) -> int:
        """
        Delete the whole history.
        :return: Number of deleted entries
        """
        deleted = await self.history_repo.clear_history()
        logger.info("history_cleared", deleted=deleted)
        return deleted

    async def add_favorite(self, favorite_data: FavoriteCreate) -> tuple[Favorite, bool]:
        """
        Save a translation as favorite.
        :param favorite_data: Favorite to save
        :return: (favorite, created); an existing favorite for the same text and languages is returned as is
        """
        favorite, created = await self.favorite_repo.add_favorite(
            source_text=favorite_data.source_text,
            translated_text=favorite_data.translated_text,
            source_language=favorite_data.source_language,
            target_language=favorite_data.target_language,
        )
        if created:
            logger.info("favorite_added", favorite_id=favorite.id, target_language=favorite.target_language)
        return favorite, created

    async def get_favorites(self, limit: int, offset: int = 0) -> list[Favorite]:
        return await self.favorite_repo.get_favorites(limit=limit, offset=offset)

    async def favorite_exists(self, source_text: str, source_language: str, target_language: str) -> bool:
        return await self.favorite_repo.favorite_exists(source_text, source_language, target_language)

    async def remove_favorite(self, favorite_id: int) -> None:
        """
        :raises FavoriteNotFoundException: If no favorite has the ID
        """
        if not await self.favorite_repo.delete(favorite_id):
            raise FavoriteNotFoundException(favorite_id)
        logger.info("favorite_removed", favorite_id=favorite_id)
