"""
In-process translation cache keyed by the normalized (text, source, target) fingerprint.

Entries expire after a fixed TTL and are evicted lazily: on a lookup that finds
them expired, or by an opportunistic sweep. There is no size bound or LRU
eviction; memory is bounded only by traffic within one TTL window.
"""

import random
import re
import time
import urllib.parse
from collections.abc import Callable

import structlog
from pydantic import BaseModel, ConfigDict, Field

from polylingo.core.constants import DEFAULT_CACHE_SWEEP_PROBABILITY, DEFAULT_CACHE_TTL_SECONDS
from polylingo.schemas.translation_schemas import Meaning

logger = structlog.get_logger(__name__)

# Percent-encoded byte sequences left behind by providers that return URL-encoded text
_PERCENT_ENCODING = re.compile(r"%[0-9A-Fa-f]{2}")


class CacheEntry(BaseModel):
    """Immutable cached translation; an update is always a replace."""

    translation: str
    meanings: list[Meaning] = Field(default_factory=list)
    created_at: float

    model_config = ConfigDict(frozen=True)


def make_cache_key(text: str, source_language: str, target_language: str) -> str:
    """
    Build the fingerprint for a translation request.

    Case-insensitive on the source text only.
    """
    return f"{text.lower()}|{source_language}|{target_language}"


def has_encoding_artifacts(value: str) -> bool:
    return bool(_PERCENT_ENCODING.search(value))


def decode_artifacts(value: str) -> str:
    """
    Percent-decode a malformed translation.
    :raises UnicodeDecodeError: If the escaped bytes are not valid UTF-8
    """
    return urllib.parse.unquote(value, errors="strict")


class TranslationCache:
    """Time-bounded translation cache with an injected clock."""

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_CACHE_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
        sweep_probability: float = DEFAULT_CACHE_SWEEP_PROBABILITY,
        rng: random.Random | None = None,
    ):
        """
        :param ttl_seconds: Validity window of an entry
        :param clock: Zero-argument callable returning the current time in seconds
        :param sweep_probability: Chance that maybe_sweep() performs a full sweep
        :param rng: Random source for the sweep decision
        """
        self.ttl_seconds = ttl_seconds
        self.clock = clock
        self.sweep_probability = sweep_probability
        self.rng = rng or random.Random()
        self._entries: dict[str, CacheEntry] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def _is_expired(self, entry: CacheEntry, now: float) -> bool:
        return now - entry.created_at >= self.ttl_seconds

    def lookup(self, text: str, source_language: str, target_language: str) -> CacheEntry | None:
        """
        Get a valid entry for the fingerprint.

        Expired entries are evicted. Entries with percent-encoding artifacts are
        repaired in place, or evicted when they cannot be decoded.

        :return: Cache entry or None on miss
        """
        key = make_cache_key(text, source_language, target_language)
        entry = self._entries.get(key)
        if entry is None:
            return None

        if self._is_expired(entry, self.clock()):
            del self._entries[key]
            logger.debug("cache_entry_expired", source_language=source_language, target_language=target_language)
            return None

        if has_encoding_artifacts(entry.translation):
            return self._repair(key, entry)

        return entry

    def _repair(self, key: str, entry: CacheEntry) -> CacheEntry | None:
        try:
            decoded = decode_artifacts(entry.translation)
        except UnicodeDecodeError:
            self._entries.pop(key, None)
            logger.warning("cache_entry_corrupted", action="evicted")
            return None

        repaired = entry.model_copy(update={"translation": decoded})
        self._entries[key] = repaired
        logger.info("cache_entry_repaired")
        return repaired

    def store(
        self,
        text: str,
        source_language: str,
        target_language: str,
        translation: str,
        meanings: list[Meaning] | None = None,
    ) -> None:
        """Store (always overwrite) the translation for a fingerprint."""
        key = make_cache_key(text, source_language, target_language)
        self._entries[key] = CacheEntry(
            translation=translation,
            meanings=list(meanings or []),
            created_at=self.clock(),
        )

    def sweep_expired(self) -> int:
        """
        Remove every expired entry.
        :return: Number of evicted entries
        """
        now = self.clock()
        expired = [key for key, entry in self._entries.items() if self._is_expired(entry, now)]
        for key in expired:
            del self._entries[key]

        if expired:
            logger.debug("cache_swept", evicted=len(expired), remaining=len(self._entries))
        return len(expired)

    def maybe_sweep(self) -> bool:
        """
        Sweep with the configured probability to bound amortized cost.
        :return: True if a sweep ran
        """
        if self.rng.random() < self.sweep_probability:
            self.sweep_expired()
            return True
        return False

    def clear(self) -> None:
        self._entries.clear()
