"""Unit tests for HistoryRepository."""

import pytest

from polylingo.repositories.history_repository import HistoryRepository
from polylingo.schemas.history_schemas import HistoryRecord, SearchedItem


def make_record(source_text: str, source_language: str = "en", pairs=(("ko", "단어"),)) -> HistoryRecord:
    return HistoryRecord(
        source_language=source_language,
        target_language="multiple",
        source_text=source_text,
        translated_text=f"{len(pairs)} translations",
        searched_data=[SearchedItem(lng=lng, text=text) for lng, text in pairs],
    )


@pytest.mark.unit
class TestHistoryRepository:
    @pytest.mark.asyncio
    async def test_add_and_list_newest_first(self, db_session):
        repo = HistoryRepository(db_session)

        await repo.add_to_history(make_record("one"))
        await repo.add_to_history(make_record("two"))

        history = await repo.get_history()
        assert [entry.source_text for entry in history] == ["two", "one"]
        assert history[0].searched_data == [{"lng": "ko", "text": "단어"}]
        assert history[0].searched_at is not None

    @pytest.mark.asyncio
    async def test_same_source_text_and_language_is_replaced(self, db_session):
        repo = HistoryRepository(db_session)

        await repo.add_to_history(make_record("hello"))
        await repo.add_to_history(make_record("hello", source_language="fr"))
        await repo.add_to_history(make_record("hello", pairs=(("ja", "こんにちは"), ("ko", "안녕"))))

        history = await repo.get_history()
        assert [(entry.source_text, entry.source_language) for entry in history] == [("hello", "en"), ("hello", "fr")]
        assert history[0].translated_text == "2 translations"

    @pytest.mark.asyncio
    async def test_only_newest_entries_are_kept(self, db_session):
        repo = HistoryRepository(db_session, max_items=3)

        for index in range(5):
            await repo.add_to_history(make_record(f"word-{index}"))

        history = await repo.get_history()
        assert [entry.source_text for entry in history] == ["word-4", "word-3", "word-2"]

    @pytest.mark.asyncio
    async def test_clear_history(self, db_session, history_entry_factory):
        await history_entry_factory.create(db_session)
        await history_entry_factory.create(db_session)
        repo = HistoryRepository(db_session)

        assert await repo.clear_history() == 2
        assert await repo.get_history() == []

    @pytest.mark.asyncio
    async def test_get_and_delete_by_id(self, db_session, history_entry_factory):
        entry = await history_entry_factory.create(db_session)
        repo = HistoryRepository(db_session)

        assert (await repo.get_by_id(entry.id)).source_text == entry.source_text
        assert await repo.delete(entry.id) is True
        assert await repo.delete(entry.id) is False
