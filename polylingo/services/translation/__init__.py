"""Translation engine: cache, per-target units and multi-target batches."""

from polylingo.services.translation.cancellation import CancellationToken, OperationCancelledError
from polylingo.services.translation.orchestrator import BatchOrchestrator, BatchStatus, TranslationBatch
from polylingo.services.translation.translation_cache import TranslationCache
from polylingo.services.translation.translation_service import TranslationService
from polylingo.services.translation.translation_unit import TranslationUnit, UnitStatus

__all__ = [
    "BatchOrchestrator",
    "BatchStatus",
    "CancellationToken",
    "OperationCancelledError",
    "TranslationBatch",
    "TranslationCache",
    "TranslationService",
    "TranslationUnit",
    "UnitStatus",
]
