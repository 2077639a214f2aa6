"""Structured cancellation tokens passed explicitly into async work."""

from collections.abc import Callable

import structlog

logger = structlog.get_logger(__name__)


class OperationCancelledError(Exception):
    """Raised at a resumption point whose token was cancelled."""


class CancellationToken:
    """
    One-shot cancellation signal.

    A child token is cancelled together with its parent, never the other way round.
    """

    def __init__(self, parent: "CancellationToken | None" = None):
        self._cancelled = False
        self._callbacks: list[Callable[[], None]] = []
        if parent is not None:
            parent.register(self.cancel)

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def register(self, callback: Callable[[], None]) -> None:
        """
        Run callback on cancellation; immediately if already cancelled.
        :param callback: Zero-argument callable
        """
        if self._cancelled:
            callback()
        else:
            self._callbacks.append(callback)

    def cancel(self) -> None:
        """Cancel the token and notify callbacks. Idempotent."""
        if self._cancelled:
            return
        self._cancelled = True
        callbacks, self._callbacks = self._callbacks, []
        for callback in callbacks:
            try:
                callback()
            except Exception as e:
                logger.error("cancellation_callback_failed", error=str(e))

    def raise_if_cancelled(self) -> None:
        if self._cancelled:
            raise OperationCancelledError()

    def child(self) -> "CancellationToken":
        return CancellationToken(parent=self)
