import asyncio

import structlog
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from polylingo.core.background_tasks import BackgroundTaskRegistry
from polylingo.core.constants import (
    DEFAULT_MAX_HISTORY_ITEMS,
    DEFAULT_MAX_TEXT_LENGTH,
    MULTIPLE_TARGETS_MARKER,
)
from polylingo.core.exceptions import (
    EmptyTextException,
    NoTargetLanguagesException,
    QuotaExceededException,
    TextTooLongException,
    TranslationUnavailableException,
    UnsupportedLanguageException,
)
from polylingo.core.validators import validate_language_code
from polylingo.interfaces.usage_gate import IUsageGate
from polylingo.repositories.history_repository import HistoryRepository
from polylingo.schemas.history_schemas import HistoryRecord, SearchedItem
from polylingo.schemas.translation_schemas import TranslateResponse, TranslationResult
from polylingo.services.translation.orchestrator import (
    BatchOrchestrator,
    BatchStatus,
    TranslationBatch,
    plan_targets,
)
from polylingo.services.translation.translation_unit import TranslationUnit, UnitStatus

logger = structlog.get_logger(__name__)


def build_history_record(batch: TranslationBatch) -> HistoryRecord | None:
    """
    Aggregate the successful results of a batch into one history record.
    :param batch: Completed batch
    :return: History record, or None when nothing succeeded
    """
    successful = batch.successful_results
    if not successful:
        return None

    return HistoryRecord(
        source_language=batch.source_language,
        target_language=MULTIPLE_TARGETS_MARKER,
        source_text=batch.text,
        translated_text=f"{len(successful)} translations",
        searched_data=[SearchedItem(lng=result.target_language, text=result.translated_text) for result in successful],
    )


class TranslationService:
    """Quota-gated batch translation with history and usage bookkeeping."""

    def __init__(
        self,
        orchestrator: BatchOrchestrator,
        session_factory: async_sessionmaker[AsyncSession],
        max_text_length: int = DEFAULT_MAX_TEXT_LENGTH,
        max_history_items: int = DEFAULT_MAX_HISTORY_ITEMS,
        background_tasks: BackgroundTaskRegistry | None = None,
    ):
        """
        :param orchestrator: Batch orchestrator (process-wide)
        :param session_factory: Opens sessions for history writes that outlive a request
        :param max_text_length: Maximum source text length
        :param max_history_items: History entries kept after each insert
        :param background_tasks: Registry holding finalizer and usage tasks
        """
        self.orchestrator = orchestrator
        self.session_factory = session_factory
        self.max_text_length = max_text_length
        self.max_history_items = max_history_items
        self.background_tasks = background_tasks or BackgroundTaskRegistry()

        self._finalizers: dict[str, asyncio.Task] = {}

    def _validate_text(self, text: str) -> str:
        text = text.strip()
        if not text:
            raise EmptyTextException()
        if len(text) > self.max_text_length:
            raise TextTooLongException(self.max_text_length)
        return text

    @staticmethod
    def _validate_languages(*language_codes: str) -> None:
        for language_code in language_codes:
            if not validate_language_code(language_code):
                raise UnsupportedLanguageException(language_code)

    # ------------------------------------------------------------------
    # Batches
    # ------------------------------------------------------------------

    async def start_batch(
        self,
        text: str,
        source_language: str,
        target_languages: list[str],
        usage_gate: IUsageGate,
        session_key: str | None = None,
    ) -> TranslationBatch:
        """
        Check the quota and start a batch.

        :param text: Source text
        :param source_language: Source language code
        :param target_languages: Requested targets, in display order
        :param usage_gate: Quota gate of the requesting client
        :param session_key: Supersedes the previous batch of the same session
        :return: Running batch
        :raises QuotaExceededException: If the gate denies the batch; no unit is created
        """
        text = self._validate_text(text)
        self._validate_languages(source_language, *target_languages)
        targets = plan_targets(source_language, target_languages)
        if not targets:
            raise NoTargetLanguagesException()

        if not await usage_gate.can_translate(len(targets)):
            stats = await usage_gate.get_usage_stats()
            raise QuotaExceededException(requested=len(targets), remaining=stats.remaining)

        batch = self.orchestrator.start_batch(
            text=text,
            source_language=source_language,
            target_languages=targets,
            session_key=session_key,
        )
        batch.add_listener(
            lambda changed_batch, index, unit: self._on_unit_update(changed_batch, unit, usage_gate)
        )
        self._finalizers[batch.batch_id] = self.background_tasks.spawn(self._finalize_batch, batch, usage_gate)
        return batch

    async def _finalize_batch(self, batch: TranslationBatch, usage_gate: IUsageGate) -> None:
        """Bookkeeping once all units are settled: usage for successes, one aggregate history entry."""
        try:
            status = await batch.wait_complete()
            if status is BatchStatus.CANCELLED:
                logger.info("batch_finalize_skipped", batch_id=batch.batch_id, reason="cancelled")
                return

            successful_count = len(batch.successful_results)
            record = build_history_record(batch)
            batch.finalized = True

            if successful_count > 0:
                await usage_gate.increment_usage(successful_count)

            if record is not None:
                async with self.session_factory() as session:
                    await HistoryRepository(session, max_items=self.max_history_items).add_to_history(record)

            logger.info(
                "batch_finalized",
                batch_id=batch.batch_id,
                successful=successful_count,
                history_written=record is not None,
            )
        finally:
            self._finalizers.pop(batch.batch_id, None)

    def _on_unit_update(self, batch: TranslationBatch, unit: TranslationUnit, usage_gate: IUsageGate) -> None:
        # Successes before finalization are counted in the batch total
        if unit.status is UnitStatus.SUCCESS and unit.retry_count > 0 and batch.finalized:
            self.background_tasks.spawn(usage_gate.increment_usage, 1)

    async def wait_for_batch(self, batch_id: str) -> TranslationBatch:
        """Wait until the batch completed and its bookkeeping ran."""
        batch = self.orchestrator.get_batch(batch_id)
        finalizer = self._finalizers.get(batch_id)
        if finalizer is not None:
            # A cancelled waiter must not take the shared finalizer down with it
            await asyncio.shield(finalizer)
        else:
            await batch.wait_complete()
        return batch

    def get_batch(self, batch_id: str) -> TranslationBatch:
        return self.orchestrator.get_batch(batch_id)

    def cancel_batch(self, batch_id: str) -> TranslationBatch:
        return self.orchestrator.cancel_batch(batch_id)

    def cancel_unit(self, batch_id: str, target_language: str) -> TranslationUnit:
        return self.orchestrator.cancel_unit(batch_id, target_language)

    async def retry_unit(self, batch_id: str, target_language: str, usage_gate: IUsageGate) -> TranslationUnit:
        """
        Retry one unit after a timeout or error.
        :raises QuotaExceededException: If the quota does not cover one more unit
        :raises RetryNotAllowedException: If the unit is not retryable
        """
        batch = self.orchestrator.get_batch(batch_id)
        batch.ensure_active()
        _, unit = batch.unit_for(target_language)
        if unit.can_retry and not await usage_gate.can_translate(1):
            stats = await usage_gate.get_usage_stats()
            raise QuotaExceededException(requested=1, remaining=stats.remaining)

        return self.orchestrator.retry_unit(batch_id, target_language)

    # ------------------------------------------------------------------
    # Single translation
    # ------------------------------------------------------------------

    async def translate_single(
        self,
        text: str,
        source_language: str,
        target_language: str,
        usage_gate: IUsageGate,
    ) -> TranslateResponse:
        """
        Translate one (source, target) pair to a settled state.

        Identical languages are passed through without touching provider or quota.

        :raises TranslationUnavailableException: On provider error or timeout
        """
        text = self._validate_text(text)
        self._validate_languages(source_language, target_language)
        if source_language == target_language:
            return TranslateResponse(translation=text)

        if not await usage_gate.can_translate(1):
            stats = await usage_gate.get_usage_stats()
            raise QuotaExceededException(requested=1, remaining=stats.remaining)

        unit = self.orchestrator.create_unit(text, source_language, target_language)
        unit.start()
        try:
            status = await unit.wait_settled()
        finally:
            if not unit.is_settled:
                unit.cancel()

        if status is UnitStatus.SUCCESS and unit.result is not None:
            await usage_gate.increment_usage(1)
            return self._to_translate_response(unit.result)

        if status is UnitStatus.TIMEOUT:
            unit.cancel()
            raise TranslationUnavailableException("Translation timed out", timed_out=True)
        raise TranslationUnavailableException()

    @staticmethod
    def _to_translate_response(result: TranslationResult) -> TranslateResponse:
        return TranslateResponse(
            translation=result.translated_text,
            pronunciation=result.pronunciation,
            meanings=result.meanings,
        )

    async def shutdown(self) -> None:
        """Cancel running batches and pending bookkeeping."""
        self.orchestrator.shutdown()
        await self.background_tasks.shutdown()
