"""Unit tests for TranslationBatch and BatchOrchestrator."""

import pytest

from polylingo.core.exceptions import (
    BatchClosedException,
    BatchNotFoundException,
    EmptyTextException,
    NoTargetLanguagesException,
    UnitNotFoundException,
)
from polylingo.services.translation.orchestrator import BatchOrchestrator, BatchStatus, plan_targets
from polylingo.services.translation.translation_unit import UnitStatus
from tests.fixtures import drain


@pytest.mark.unit
class TestPlanTargets:
    def test_source_language_and_duplicates_are_dropped(self):
        assert plan_targets("en", ["ko", "en", "ja", "ko", "fr"]) == ["ko", "ja", "fr"]

    def test_only_source_language_leaves_nothing(self):
        assert plan_targets("en", ["en", "en"]) == []


@pytest.mark.unit
class TestBatchOrchestrator:
    """Covers fan-out, ordering, cancellation, supersession and eviction."""

    @pytest.mark.asyncio
    async def test_results_keep_target_order_regardless_of_completion_order(self, orchestrator, translator):
        translator.hold("ko", "ja", "fr")
        updates = []

        batch = orchestrator.start_batch(
            "hello",
            "en",
            ["ko", "ja", "fr"],
            listener=lambda changed, index, unit: updates.append((index, unit.status)),
        )
        await drain()
        assert [unit.status for unit in batch.units] == [UnitStatus.LOADING] * 3

        translator.release("ja")
        await drain()
        assert batch.results[0] is None
        assert batch.results[1].translated_text == "こんにちは"
        assert batch.results[2] is None
        assert not batch.is_complete

        translator.release("fr")
        await drain()
        translator.release("ko")

        assert await batch.wait_complete() is BatchStatus.COMPLETED
        assert [result.translated_text for result in batch.results] == ["안녕하세요", "こんにちは", "bonjour"]
        assert updates == [(1, UnitStatus.SUCCESS), (2, UnitStatus.SUCCESS), (0, UnitStatus.SUCCESS)]

    @pytest.mark.asyncio
    async def test_identical_language_is_filtered(self, orchestrator, translator):
        batch = orchestrator.start_batch("hello", "en", ["en", "ko"])

        await batch.wait_complete()

        assert batch.target_languages == ["ko"]
        assert len(batch.units) == 1
        assert all(call[2] != "en" for call in translator.calls)

    @pytest.mark.asyncio
    async def test_no_targets_after_filtering(self, orchestrator):
        with pytest.raises(NoTargetLanguagesException):
            orchestrator.start_batch("hello", "en", ["en"])
        assert len(orchestrator) == 0

    @pytest.mark.asyncio
    async def test_empty_text_is_rejected(self, orchestrator):
        with pytest.raises(EmptyTextException):
            orchestrator.start_batch("   ", "en", ["ko"])

    @pytest.mark.asyncio
    async def test_partial_failure_completes_batch(self, orchestrator, translator):
        del translator.translations["ja"]

        batch = orchestrator.start_batch("hello", "en", ["ko", "ja", "fr"])
        await batch.wait_complete()

        assert batch.is_complete
        assert batch.units[1].status is UnitStatus.ERROR
        assert batch.results[1] is None
        assert [result.target_language for result in batch.successful_results] == ["ko", "fr"]

    @pytest.mark.asyncio
    async def test_timed_out_unit_counts_as_settled(self, translator, cache):
        orchestrator = BatchOrchestrator(translator=translator, cache=cache, timeout_seconds=0.05)
        translator.hold("ko")

        batch = orchestrator.start_batch("hello", "en", ["ko", "ja"])

        assert await batch.wait_complete() is BatchStatus.COMPLETED
        assert batch.units[0].status is UnitStatus.TIMEOUT
        assert len(batch.successful_results) == 1
        translator.release("ko")

    @pytest.mark.asyncio
    async def test_cached_targets_skip_provider(self, orchestrator, translator):
        first = orchestrator.start_batch("hello", "en", ["ko", "ja"])
        await first.wait_complete()
        calls_before = len(translator.calls)

        second = orchestrator.start_batch("Hello", "en", ["ko", "ja"])

        assert second.is_complete
        assert len(translator.calls) == calls_before
        assert [result.translated_text for result in second.results] == ["안녕하세요", "こんにちは"]

    @pytest.mark.asyncio
    async def test_cancel_batch_discards_results(self, orchestrator, translator):
        translator.hold("ko")
        batch = orchestrator.start_batch("hello", "en", ["ko", "ja"])
        await drain()
        assert batch.results[1] is not None

        orchestrator.cancel_batch(batch.batch_id)

        assert batch.status is BatchStatus.CANCELLED
        assert batch.results == [None, None]
        assert batch.units[0].status is UnitStatus.CANCELLED
        assert await batch.wait_complete() is BatchStatus.CANCELLED
        with pytest.raises(BatchNotFoundException):
            orchestrator.get_batch(batch.batch_id)

        translator.release("ko")
        await drain()
        assert batch.results == [None, None]

    @pytest.mark.asyncio
    async def test_cancel_unit_leaves_siblings_running(self, orchestrator, translator):
        translator.hold("ko", "ja")
        batch = orchestrator.start_batch("hello", "en", ["ko", "ja"])

        unit = orchestrator.cancel_unit(batch.batch_id, "ko")
        translator.release("ja")
        await batch.wait_complete()

        assert unit.status is UnitStatus.CANCELLED
        assert batch.units[1].status is UnitStatus.SUCCESS
        assert batch.results == [None, batch.units[1].result]
        translator.release("ko")

    @pytest.mark.asyncio
    async def test_new_batch_supersedes_session(self, orchestrator, translator):
        translator.hold("ko")
        first = orchestrator.start_batch("hello", "en", ["ko"], session_key="device-1")

        second = orchestrator.start_batch("bye", "en", ["ja"], session_key="device-1")

        assert first.status is BatchStatus.CANCELLED
        assert second.status is not BatchStatus.CANCELLED
        assert orchestrator.get_batch(second.batch_id) is second
        with pytest.raises(BatchNotFoundException):
            orchestrator.get_batch(first.batch_id)
        translator.release("ko")

    @pytest.mark.asyncio
    async def test_retry_unit(self, orchestrator, translator):
        del translator.translations["ja"]
        batch = orchestrator.start_batch("hello", "en", ["ko", "ja"])
        await batch.wait_complete()

        translator.translations["ja"] = "こんにちは"
        unit = orchestrator.retry_unit(batch.batch_id, "ja")
        await unit.wait_settled()

        assert unit.retry_count == 1
        assert batch.results[1].translated_text == "こんにちは"
        assert batch.status is BatchStatus.COMPLETED

    @pytest.mark.asyncio
    async def test_retrying_completed_batch_reports_running(self, orchestrator, translator):
        del translator.translations["ja"]
        batch = orchestrator.start_batch("hello", "en", ["ko", "ja"])
        await batch.wait_complete()

        translator.translations["ja"] = "こんにちは"
        translator.hold("ja")
        unit = orchestrator.retry_unit(batch.batch_id, "ja")
        await drain()

        assert batch.status is BatchStatus.COMPLETED
        assert not batch.is_complete
        assert batch.reported_status is BatchStatus.RUNNING

        translator.release("ja")
        await unit.wait_settled()

        assert batch.reported_status is BatchStatus.COMPLETED

    @pytest.mark.asyncio
    async def test_operations_on_closed_batch_are_rejected(self, orchestrator):
        batch = orchestrator.start_batch("hello", "en", ["ko"])
        await batch.wait_complete()
        batch.cancel()

        with pytest.raises(BatchClosedException):
            orchestrator.retry_unit(batch.batch_id, "ko")
        with pytest.raises(BatchClosedException):
            orchestrator.cancel_unit(batch.batch_id, "ko")

    @pytest.mark.asyncio
    async def test_unknown_unit(self, orchestrator):
        batch = orchestrator.start_batch("hello", "en", ["ko"])

        with pytest.raises(UnitNotFoundException):
            orchestrator.cancel_unit(batch.batch_id, "de")
        await batch.wait_complete()

    @pytest.mark.asyncio
    async def test_finished_batches_are_evicted_first(self, translator, cache):
        orchestrator = BatchOrchestrator(translator=translator, cache=cache, max_tracked_batches=1)
        first = orchestrator.start_batch("hello", "en", ["ko"])
        await first.wait_complete()

        second = orchestrator.start_batch("hello", "en", ["ja"])

        assert len(orchestrator) == 1
        assert orchestrator.get_batch(second.batch_id) is second
        with pytest.raises(BatchNotFoundException):
            orchestrator.get_batch(first.batch_id)

    @pytest.mark.asyncio
    async def test_shutdown_cancels_everything(self, orchestrator, translator):
        translator.hold("ko")
        batch = orchestrator.start_batch("hello", "en", ["ko"])

        orchestrator.shutdown()

        assert batch.status is BatchStatus.CANCELLED
        assert len(orchestrator) == 0
        translator.release("ko")
