"""
Multi-target batch orchestration.

A batch fans one source text out to every requested target language as
independent translation units that progress concurrently on the event loop.
Results are written into an index-stable array so the caller's target order
is kept regardless of completion order.
"""

import asyncio
import enum
import time
import uuid
from collections import OrderedDict
from collections.abc import Callable

import structlog

from polylingo.core.constants import (
    DEFAULT_GLOSS_TIMEOUT_SECONDS,
    DEFAULT_MAX_UNIT_RETRIES,
    DEFAULT_UNIT_TIMEOUT_SECONDS,
)
from polylingo.core.exceptions import (
    BatchClosedException,
    BatchNotFoundException,
    EmptyTextException,
    NoTargetLanguagesException,
    UnitNotFoundException,
)
from polylingo.interfaces.translator import GlossaryInterface, TranslatorInterface
from polylingo.schemas.translation_schemas import TranslationResult
from polylingo.services.translation.cancellation import CancellationToken
from polylingo.services.translation.translation_cache import TranslationCache
from polylingo.services.translation.translation_unit import TranslationUnit, UnitStatus

logger = structlog.get_logger(__name__)


class BatchStatus(str, enum.Enum):
    """Batch lifecycle status"""

    RUNNING = "running"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


BatchListener = Callable[["TranslationBatch", int, TranslationUnit], None]


def plan_targets(source_language: str, target_languages: list[str]) -> list[str]:
    """
    Drop the source language and duplicates from the requested targets, keeping order.
    :param source_language: Source language code
    :param target_languages: Requested target language codes
    :return: Target languages that get a unit
    """
    planned: list[str] = []
    for language in target_languages:
        if language != source_language and language not in planned:
            planned.append(language)
    return planned


class TranslationBatch:
    """State of one multi-target search for as long as it is tracked."""

    def __init__(
        self,
        batch_id: str,
        text: str,
        source_language: str,
        target_languages: list[str],
        session_key: str | None = None,
    ):
        self.batch_id = batch_id
        self.text = text
        self.source_language = source_language
        self.target_languages = list(target_languages)
        self.session_key = session_key
        self.created_at = time.monotonic()

        self.status = BatchStatus.RUNNING
        # Set once the batch's usage and history were recorded
        self.finalized = False
        self.token = CancellationToken()
        self.units: list[TranslationUnit] = []
        self.results: list[TranslationResult | None] = [None] * len(self.target_languages)

        self._completed = asyncio.Event()
        self._listeners: list[BatchListener] = []

    def __repr__(self):
        return f"<TranslationBatch(id={self.batch_id}, status={self.status.value}, targets={self.target_languages})>"

    @property
    def is_complete(self) -> bool:
        """Every unit is settled: success, error, cancelled, or a timeout awaiting the user."""
        return bool(self.units) and all(unit.is_settled for unit in self.units)

    @property
    def reported_status(self) -> BatchStatus:
        """Status shown to clients: a completed batch with a unit being retried reads as running."""
        if self.status is BatchStatus.COMPLETED and not self.is_complete:
            return BatchStatus.RUNNING
        return self.status

    @property
    def is_active(self) -> bool:
        return self.status is not BatchStatus.CANCELLED

    @property
    def successful_results(self) -> list[TranslationResult]:
        """Successful results in target order."""
        return [result for result in self.results if result is not None and result.is_successful]

    def add_listener(self, listener: BatchListener) -> None:
        """Listener is called with (batch, index, unit) whenever a unit changes."""
        self._listeners.append(listener)

    def attach(self, unit: TranslationUnit) -> None:
        index = len(self.units)
        self.units.append(unit)
        unit.add_listener(lambda changed, previous: self._on_unit_transition(index, changed))

    def unit_for(self, target_language: str) -> tuple[int, TranslationUnit]:
        """
        :return: (index, unit) for a target language
        :raises UnitNotFoundException: If the batch has no unit for the language
        """
        for index, unit in enumerate(self.units):
            if unit.target_language == target_language:
                return index, unit
        raise UnitNotFoundException(target_language)

    def ensure_active(self) -> None:
        if not self.is_active:
            raise BatchClosedException(self.batch_id)

    async def wait_complete(self) -> BatchStatus:
        """Barrier: returns once the batch completed or was cancelled."""
        await self._completed.wait()
        return self.status

    def cancel(self) -> None:
        """Cancel every unit and clear the results. Idempotent."""
        if self.status is BatchStatus.CANCELLED:
            return
        self.status = BatchStatus.CANCELLED
        self.token.cancel()
        self.results = [None] * len(self.target_languages)
        self._completed.set()
        logger.info("batch_cancelled", batch_id=self.batch_id)

    def _on_unit_transition(self, index: int, unit: TranslationUnit) -> None:
        if self.status is BatchStatus.CANCELLED:
            return

        self.results[index] = unit.result if unit.status is UnitStatus.SUCCESS else None

        for listener in list(self._listeners):
            listener(self, index, unit)

        if self.status is BatchStatus.RUNNING and self.is_complete:
            self.status = BatchStatus.COMPLETED
            self._completed.set()
            logger.info(
                "batch_completed",
                batch_id=self.batch_id,
                successful=len(self.successful_results),
                total=len(self.units),
            )


class BatchOrchestrator:
    """Creates, tracks and cancels translation batches."""

    def __init__(
        self,
        translator: TranslatorInterface,
        cache: TranslationCache,
        glossary: GlossaryInterface | None = None,
        timeout_seconds: float = DEFAULT_UNIT_TIMEOUT_SECONDS,
        max_retries: int = DEFAULT_MAX_UNIT_RETRIES,
        gloss_timeout_seconds: float = DEFAULT_GLOSS_TIMEOUT_SECONDS,
        max_tracked_batches: int = 256,
    ):
        self.translator = translator
        self.cache = cache
        self.glossary = glossary
        self.timeout_seconds = timeout_seconds
        self.max_retries = max_retries
        self.gloss_timeout_seconds = gloss_timeout_seconds
        self.max_tracked_batches = max_tracked_batches

        self._batches: OrderedDict[str, TranslationBatch] = OrderedDict()
        self._sessions: dict[str, str] = {}

    def __len__(self) -> int:
        return len(self._batches)

    def create_unit(
        self,
        text: str,
        source_language: str,
        target_language: str,
        parent_token: CancellationToken | None = None,
    ) -> TranslationUnit:
        """Build an unstarted unit wired to this orchestrator's collaborators."""
        return TranslationUnit(
            text=text,
            source_language=source_language,
            target_language=target_language,
            translator=self.translator,
            cache=self.cache,
            glossary=self.glossary,
            timeout_seconds=self.timeout_seconds,
            max_retries=self.max_retries,
            gloss_timeout_seconds=self.gloss_timeout_seconds,
            parent_token=parent_token,
        )

    def start_batch(
        self,
        text: str,
        source_language: str,
        target_languages: list[str],
        session_key: str | None = None,
        listener: BatchListener | None = None,
    ) -> TranslationBatch:
        """
        Start one unit per target language, all at once.

        :param text: Source text (trimmed here)
        :param source_language: Source language code
        :param target_languages: Requested targets; the source language is filtered out
        :param session_key: Starting a batch supersedes the previous batch of the same session
        :param listener: Optional partial-result listener, attached before any unit starts
        :return: The running batch
        :raises EmptyTextException: If the text is blank
        :raises NoTargetLanguagesException: If no target remains after filtering
        """
        text = text.strip()
        if not text:
            raise EmptyTextException()

        targets = plan_targets(source_language, target_languages)
        if not targets:
            raise NoTargetLanguagesException()

        if session_key is not None and session_key in self._sessions:
            previous_id = self._sessions[session_key]
            if previous_id in self._batches:
                logger.info("batch_superseded", batch_id=previous_id, session_key=session_key)
                self.cancel_batch(previous_id)

        batch = TranslationBatch(
            batch_id=uuid.uuid4().hex,
            text=text,
            source_language=source_language,
            target_languages=targets,
            session_key=session_key,
        )
        if listener is not None:
            batch.add_listener(listener)
        for target_language in targets:
            batch.attach(self.create_unit(text, source_language, target_language, parent_token=batch.token))

        self._register(batch)
        logger.info(
            "batch_started",
            batch_id=batch.batch_id,
            source_language=source_language,
            target_languages=targets,
            text_length=len(text),
        )

        for unit in batch.units:
            unit.start()

        return batch

    def get_batch(self, batch_id: str) -> TranslationBatch:
        """
        :raises BatchNotFoundException: If the batch is unknown, cancelled or evicted
        """
        batch = self._batches.get(batch_id)
        if batch is None:
            raise BatchNotFoundException(batch_id)
        return batch

    def cancel_batch(self, batch_id: str) -> TranslationBatch:
        """Cancel a batch and stop tracking it."""
        batch = self._batches.pop(batch_id, None)
        if batch is None:
            raise BatchNotFoundException(batch_id)

        if batch.session_key is not None and self._sessions.get(batch.session_key) == batch_id:
            del self._sessions[batch.session_key]
        batch.cancel()
        return batch

    def cancel_unit(self, batch_id: str, target_language: str) -> TranslationUnit:
        """Cancel one unit; its result slot is discarded, siblings are untouched."""
        batch = self.get_batch(batch_id)
        batch.ensure_active()
        _, unit = batch.unit_for(target_language)
        unit.cancel()
        return unit

    def retry_unit(self, batch_id: str, target_language: str) -> TranslationUnit:
        """
        Retry one timed-out or failed unit.
        :raises RetryNotAllowedException: If the unit is not retryable
        """
        batch = self.get_batch(batch_id)
        batch.ensure_active()
        _, unit = batch.unit_for(target_language)
        unit.retry()
        logger.info("unit_retry_started", batch_id=batch_id, target_language=target_language, retry=unit.retry_count)
        return unit

    def shutdown(self) -> None:
        """Cancel every tracked batch."""
        for batch_id in list(self._batches):
            self.cancel_batch(batch_id)

    def _register(self, batch: TranslationBatch) -> None:
        self._batches[batch.batch_id] = batch
        if batch.session_key is not None:
            self._sessions[batch.session_key] = batch.batch_id

        # Oldest finished batches go first; running batches are never evicted
        while len(self._batches) > self.max_tracked_batches:
            evictable = next(
                (candidate for candidate in self._batches.values() if candidate.status is not BatchStatus.RUNNING),
                None,
            )
            if evictable is None:
                break
            self._batches.pop(evictable.batch_id)
            if evictable.session_key is not None and self._sessions.get(evictable.session_key) == evictable.batch_id:
                del self._sessions[evictable.session_key]
