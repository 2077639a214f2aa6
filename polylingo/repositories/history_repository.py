from abc import abstractmethod

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from polylingo.core.constants import DEFAULT_MAX_HISTORY_ITEMS
from polylingo.models.history_entry import HistoryEntry
from polylingo.repositories.base_repository import BaseRepository
from polylingo.schemas.history_schemas import HistoryRecord


class IHistoryRepository(BaseRepository[HistoryEntry]):
    """Abstract interface for the translation history."""

    @abstractmethod
    async def add_to_history(self, record: HistoryRecord) -> HistoryEntry:
        """Insert a record, replacing older entries for the same source text and language."""
        pass

    @abstractmethod
    async def get_history(self, limit: int = DEFAULT_MAX_HISTORY_ITEMS, offset: int = 0) -> list[HistoryEntry]:
        """Get history entries, newest first."""
        pass

    @abstractmethod
    async def clear_history(self) -> int:
        """Delete every history entry."""
        pass


class HistoryRepository(IHistoryRepository):
    """SQLAlchemy implementation of the history repository."""

    def __init__(self, db: AsyncSession, max_items: int = DEFAULT_MAX_HISTORY_ITEMS):
        """
        :param db: SQLAlchemy async database session
        :param max_items: Number of newest entries kept after each insert
        """
        super().__init__(db)
        self.max_items = max_items

    async def get_by_id(self, id: int) -> HistoryEntry | None:
        query = select(HistoryEntry).where(HistoryEntry.id == id)
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def add_to_history(self, record: HistoryRecord) -> HistoryEntry:
        """Insert a record, replacing older entries for the same source text and language."""
        await self.db.execute(
            delete(HistoryEntry).where(
                HistoryEntry.source_text == record.source_text,
                HistoryEntry.source_language == record.source_language,
            )
        )

        entry = HistoryEntry(
            source_language=record.source_language,
            target_language=record.target_language,
            source_text=record.source_text,
            translated_text=record.translated_text,
            searched_data=[item.model_dump() for item in record.searched_data],
        )
        self.db.add(entry)
        await self.db.flush()

        # Keep only the newest entries
        overflow_ids = select(HistoryEntry.id).order_by(HistoryEntry.id.desc()).offset(self.max_items)
        await self.db.execute(delete(HistoryEntry).where(HistoryEntry.id.in_(overflow_ids)))

        await self.db.commit()
        await self.db.refresh(entry)
        return entry

    async def get_history(self, limit: int = DEFAULT_MAX_HISTORY_ITEMS, offset: int = 0) -> list[HistoryEntry]:
        query = select(HistoryEntry).order_by(HistoryEntry.id.desc()).limit(limit).offset(offset)
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def clear_history(self) -> int:
        result = await self.db.execute(delete(HistoryEntry))
        await self.db.commit()
        return result.rowcount or 0

    async def delete(self, id: int) -> bool:
        result = await self.db.execute(delete(HistoryEntry).where(HistoryEntry.id == id))
        await self.db.commit()
        return (result.rowcount or 0) > 0
