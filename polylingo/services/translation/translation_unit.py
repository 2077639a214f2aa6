"""
Per-target translation unit.

One unit owns one (source, target) pair: cache lookup, provider call with a
timeout, user-triggered retries and cancellation. All state changes go through
`dispatch()`, which drops events for stale attempts and transitions that are
not legal from the current status. That guard is what makes late provider
completions after a timeout, retry or cancellation harmless.
"""

import asyncio
import enum
from collections.abc import Callable

import structlog
from pydantic import BaseModel, ConfigDict

from polylingo.core.constants import (
    DEFAULT_GLOSS_TIMEOUT_SECONDS,
    DEFAULT_MAX_UNIT_RETRIES,
    DEFAULT_UNIT_TIMEOUT_SECONDS,
    SUCCESS_CONFIDENCE,
)
from polylingo.core.exceptions import RetryNotAllowedException
from polylingo.interfaces.translator import GlossaryInterface, ProviderError, TranslatorInterface
from polylingo.schemas.translation_schemas import Meaning, TranslationResult
from polylingo.services.translation.cancellation import CancellationToken, OperationCancelledError
from polylingo.services.translation.translation_cache import TranslationCache

logger = structlog.get_logger(__name__)

TIMEOUT_MESSAGE = "Translation timed out"


class UnitStatus(str, enum.Enum):
    """Translation unit status"""

    LOADING = "loading"
    RETRYING = "retrying"
    SUCCESS = "success"
    TIMEOUT = "timeout"
    ERROR = "error"
    CANCELLED = "cancelled"


class UnitEventType(enum.Enum):
    """Inputs of the unit state machine"""

    CACHE_HIT = "cache_hit"
    RESOLVED = "resolved"
    FAILED = "failed"
    TIMED_OUT = "timed_out"
    RETRY = "retry"
    CANCEL = "cancel"


class UnitEvent(BaseModel):
    """An event bound to the attempt that produced it."""

    type: UnitEventType
    attempt: int
    result: TranslationResult | None = None
    error: str | None = None

    model_config = ConfigDict(frozen=True)


PENDING_STATUSES = frozenset({UnitStatus.LOADING, UnitStatus.RETRYING})
RETRYABLE_STATUSES = frozenset({UnitStatus.TIMEOUT, UnitStatus.ERROR})
SETTLED_STATUSES = frozenset({UnitStatus.SUCCESS, UnitStatus.ERROR, UnitStatus.TIMEOUT, UnitStatus.CANCELLED})

_TRANSITIONS: dict[tuple[UnitStatus, UnitEventType], UnitStatus] = {}
for _pending in PENDING_STATUSES:
    _TRANSITIONS[(_pending, UnitEventType.CACHE_HIT)] = UnitStatus.SUCCESS
    _TRANSITIONS[(_pending, UnitEventType.RESOLVED)] = UnitStatus.SUCCESS
    _TRANSITIONS[(_pending, UnitEventType.FAILED)] = UnitStatus.ERROR
    _TRANSITIONS[(_pending, UnitEventType.TIMED_OUT)] = UnitStatus.TIMEOUT
for _retryable in RETRYABLE_STATUSES:
    _TRANSITIONS[(_retryable, UnitEventType.RETRY)] = UnitStatus.RETRYING
for _status in UnitStatus:
    if _status is not UnitStatus.CANCELLED:
        _TRANSITIONS[(_status, UnitEventType.CANCEL)] = UnitStatus.CANCELLED


def next_status(status: UnitStatus, event_type: UnitEventType) -> UnitStatus | None:
    """
    Pure transition function.
    :return: The next status, or None if the event is not accepted in this status
    """
    return _TRANSITIONS.get((status, event_type))


UnitListener = Callable[["TranslationUnit", UnitStatus], None]


class TranslationUnit:
    """State machine for one target language of a batch."""

    def __init__(
        self,
        text: str,
        source_language: str,
        target_language: str,
        translator: TranslatorInterface,
        cache: TranslationCache,
        glossary: GlossaryInterface | None = None,
        timeout_seconds: float = DEFAULT_UNIT_TIMEOUT_SECONDS,
        max_retries: int = DEFAULT_MAX_UNIT_RETRIES,
        gloss_timeout_seconds: float = DEFAULT_GLOSS_TIMEOUT_SECONDS,
        parent_token: CancellationToken | None = None,
    ):
        self.text = text
        self.source_language = source_language
        self.target_language = target_language
        self.translator = translator
        self.cache = cache
        self.glossary = glossary
        self.timeout_seconds = timeout_seconds
        self.max_retries = max_retries
        self.gloss_timeout_seconds = gloss_timeout_seconds

        self.status = UnitStatus.LOADING
        self.result: TranslationResult | None = None
        self.error: str | None = None
        self.retry_count = 0
        self.attempt = 0
        self.token: CancellationToken | None = None

        self._parent_token = parent_token
        self._task: asyncio.Task | None = None
        self._timer: asyncio.TimerHandle | None = None
        self._settled = asyncio.Event()
        self._listeners: list[UnitListener] = []

    def __repr__(self):
        return f"<TranslationUnit(target={self.target_language}, status={self.status.value}, retries={self.retry_count})>"

    # ------------------------------------------------------------------
    # Derived state
    # ------------------------------------------------------------------

    @property
    def is_settled(self) -> bool:
        """No automatic transition is pending (timeout waits for the user)."""
        return self.status in SETTLED_STATUSES

    @property
    def can_retry(self) -> bool:
        return self.status in RETRYABLE_STATUSES and self.retry_count < self.max_retries

    @property
    def max_retries_reached(self) -> bool:
        return self.status in RETRYABLE_STATUSES and self.retry_count >= self.max_retries

    def add_listener(self, listener: UnitListener) -> None:
        """Listener is called with (unit, previous_status) after every applied transition."""
        self._listeners.append(listener)

    async def wait_settled(self) -> UnitStatus:
        await self._settled.wait()
        return self.status

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Run the first attempt. Must be called from a running event loop."""
        if self.attempt != 0:
            raise RuntimeError(f"{self!r} already started")
        self._begin_attempt()

    def retry(self) -> None:
        """
        Start a fresh attempt after a timeout or error.
        :raises RetryNotAllowedException: If not retryable or the retry cap is reached
        """
        if self.status not in RETRYABLE_STATUSES:
            raise RetryNotAllowedException(self.target_language, f"unit is {self.status.value}")
        if self.retry_count >= self.max_retries:
            raise RetryNotAllowedException(self.target_language, "maximum retries reached")

        self.retry_count += 1
        self.dispatch(UnitEvent(type=UnitEventType.RETRY, attempt=self.attempt))
        self._begin_attempt()

    def cancel(self) -> None:
        """Cancel the unit: abort in-flight work and freeze its status."""
        if self.token is not None:
            self.token.cancel()
        else:
            self.dispatch(UnitEvent(type=UnitEventType.CANCEL, attempt=self.attempt))

    # ------------------------------------------------------------------
    # State machine
    # ------------------------------------------------------------------

    def dispatch(self, event: UnitEvent) -> bool:
        """
        Apply an event if it belongs to the current attempt and is legal in the current status.
        :return: True if the event changed the unit
        """
        if event.attempt != self.attempt:
            logger.debug("unit_event_stale", target_language=self.target_language, event=event.type.value)
            return False

        new_status = next_status(self.status, event.type)
        if new_status is None:
            logger.debug(
                "unit_event_ignored",
                target_language=self.target_language,
                status=self.status.value,
                event=event.type.value,
            )
            return False

        previous = self.status
        self.status = new_status
        self._apply_side_effects(event)
        logger.debug(
            "unit_transition",
            target_language=self.target_language,
            previous=previous.value,
            status=new_status.value,
            attempt=self.attempt,
        )

        for listener in list(self._listeners):
            listener(self, previous)
        return True

    def _apply_side_effects(self, event: UnitEvent) -> None:
        if self.status in SETTLED_STATUSES:
            self._cancel_timer()
            self._settled.set()
        else:
            self._settled.clear()

        if self.status is UnitStatus.SUCCESS:
            self.result = event.result
            self.error = None
            if event.type is UnitEventType.RESOLVED and event.result is not None:
                self.cache.store(
                    self.text,
                    self.source_language,
                    self.target_language,
                    event.result.translated_text,
                    event.result.meanings,
                )
        elif self.status is UnitStatus.ERROR:
            self.result = None
            self.error = event.error or "Translation failed"
            logger.info("unit_failed", target_language=self.target_language, attempt=self.attempt)
        elif self.status is UnitStatus.TIMEOUT:
            self.result = None
            self.error = TIMEOUT_MESSAGE
            logger.info("unit_timed_out", target_language=self.target_language, attempt=self.attempt)
        elif self.status is UnitStatus.RETRYING:
            self.result = None
            self.error = None
        elif self.status is UnitStatus.CANCELLED:
            self.result = None
            if self._task is not None and not self._task.done():
                self._task.cancel()

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    # ------------------------------------------------------------------
    # Attempts
    # ------------------------------------------------------------------

    def _begin_attempt(self) -> None:
        self.attempt += 1
        attempt = self.attempt

        # A retry supersedes whatever the previous attempt still has in flight
        if self.token is not None:
            self.token.cancel()
        if self._task is not None and not self._task.done():
            self._task.cancel()
        token = CancellationToken(parent=self._parent_token)
        self.token = token
        token.register(lambda: self.dispatch(UnitEvent(type=UnitEventType.CANCEL, attempt=attempt)))
        if token.cancelled:
            return

        self.cache.maybe_sweep()
        entry = self.cache.lookup(self.text, self.source_language, self.target_language)
        if entry is not None:
            logger.debug("unit_cache_hit", target_language=self.target_language)
            self.dispatch(
                UnitEvent(
                    type=UnitEventType.CACHE_HIT,
                    attempt=attempt,
                    result=self._build_result(entry.translation, entry.meanings),
                )
            )
            return

        loop = asyncio.get_running_loop()
        self._cancel_timer()
        self._timer = loop.call_later(
            self.timeout_seconds,
            self.dispatch,
            UnitEvent(type=UnitEventType.TIMED_OUT, attempt=attempt),
        )
        self._task = asyncio.create_task(self._run_attempt(attempt, token))

    async def _run_attempt(self, attempt: int, token: CancellationToken) -> None:
        try:
            translated = await self.translator.translate_once(self.text, self.source_language, self.target_language)
            token.raise_if_cancelled()
            meanings = await self._fetch_meanings(translated)
            token.raise_if_cancelled()
        except OperationCancelledError:
            return
        except ProviderError as e:
            self.dispatch(UnitEvent(type=UnitEventType.FAILED, attempt=attempt, error=str(e)))
            return
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.exception("unit_unexpected_error", target_language=self.target_language)
            self.dispatch(UnitEvent(type=UnitEventType.FAILED, attempt=attempt, error=str(e)))
            return

        self.dispatch(
            UnitEvent(
                type=UnitEventType.RESOLVED,
                attempt=attempt,
                result=self._build_result(translated, meanings),
            )
        )

    async def _fetch_meanings(self, translated: str) -> list[Meaning]:
        """Best-effort enrichment; never fails the translation."""
        if self.glossary is None:
            return []
        try:
            return await asyncio.wait_for(
                self.glossary.fetch_gloss_for_word(translated.lower(), self.target_language),
                timeout=self.gloss_timeout_seconds,
            )
        except asyncio.CancelledError:
            raise
        except (ProviderError, asyncio.TimeoutError) as e:
            logger.debug("gloss_lookup_skipped", target_language=self.target_language, error=str(e) or type(e).__name__)
            return []
        except Exception:
            logger.warning("gloss_lookup_failed", target_language=self.target_language, exc_info=True)
            return []

    def _build_result(self, translated: str, meanings: list[Meaning]) -> TranslationResult:
        return TranslationResult(
            source_language=self.source_language,
            target_language=self.target_language,
            source_text=self.text,
            translated_text=translated,
            meanings=list(meanings),
            confidence=SUCCESS_CONFIDENCE,
        )
