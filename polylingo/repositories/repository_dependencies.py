from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from polylingo.core.config import settings
from polylingo.core.database import get_db
from polylingo.repositories.favorite_repository import FavoriteRepository, IFavoriteRepository
from polylingo.repositories.history_repository import HistoryRepository, IHistoryRepository


def get_history_repository(db: AsyncSession = Depends(get_db)) -> IHistoryRepository:
    """
    Create HistoryRepository instance with async database session.
    :param db: Async database session from get_db dependency
    :return: HistoryRepository instance
    """
    return HistoryRepository(db, max_items=settings.max_history_items)


def get_favorite_repository(db: AsyncSession = Depends(get_db)) -> IFavoriteRepository:
    """
    Create FavoriteRepository instance with async database session.
    :param db: Async database session from get_db dependency
    :return: FavoriteRepository instance
    """
    return FavoriteRepository(db)
