"""Unit tests for TranslationCache."""

import random

import pytest

from polylingo.schemas.translation_schemas import Meaning
from polylingo.services.translation.translation_cache import (
    TranslationCache,
    decode_artifacts,
    has_encoding_artifacts,
    make_cache_key,
)


@pytest.mark.unit
class TestCacheKey:
    def test_key_is_case_insensitive_on_text_only(self):
        assert make_cache_key("Hello", "en", "ko") == make_cache_key("HELLO", "en", "ko")
        assert make_cache_key("hello", "en", "ko") != make_cache_key("hello", "en", "ja")

    def test_artifact_detection(self):
        assert has_encoding_artifacts("caf%C3%A9")
        assert not has_encoding_artifacts("100% sure")
        assert decode_artifacts("caf%C3%A9") == "café"

    def test_undecodable_artifact_raises(self):
        with pytest.raises(UnicodeDecodeError):
            decode_artifacts("%FF%FE")


@pytest.mark.unit
class TestTranslationCache:
    """Covers TTL expiry, lazy eviction and self-healing of entries."""

    def test_lookup_hits_with_different_text_case(self, cache):
        cache.store("Hello", "en", "ko", "안녕하세요", [Meaning(translation="인사")])

        entry = cache.lookup("hello", "en", "ko")

        assert entry is not None
        assert entry.translation == "안녕하세요"
        assert entry.meanings[0].translation == "인사"

    def test_lookup_misses_other_language_pair(self, cache):
        cache.store("hello", "en", "ko", "안녕하세요")

        assert cache.lookup("hello", "en", "ja") is None
        assert cache.lookup("hello", "fr", "ko") is None

    def test_entry_valid_just_before_ttl(self, cache, fake_clock):
        cache.store("hello", "en", "ko", "안녕하세요")
        fake_clock.advance(1799)

        assert cache.lookup("hello", "en", "ko") is not None

    def test_entry_expires_at_ttl_and_is_evicted(self, cache, fake_clock):
        cache.store("hello", "en", "ko", "안녕하세요")
        fake_clock.advance(1800)

        assert cache.lookup("hello", "en", "ko") is None
        assert len(cache) == 0

    def test_store_overwrites_and_resets_age(self, cache, fake_clock):
        cache.store("hello", "en", "ko", "first")
        fake_clock.advance(1000)
        cache.store("hello", "en", "ko", "second")
        fake_clock.advance(1000)

        entry = cache.lookup("hello", "en", "ko")
        assert entry is not None
        assert entry.translation == "second"
        assert len(cache) == 1

    def test_malformed_entry_is_repaired_in_place(self, cache, fake_clock):
        cache.store("coffee", "en", "fr", "caf%C3%A9")
        created_at = cache.lookup("coffee", "en", "fr").created_at

        fake_clock.advance(10)
        entry = cache.lookup("coffee", "en", "fr")

        assert entry.translation == "café"
        assert entry.created_at == created_at

    def test_repaired_entry_keeps_original_lifetime(self, cache, fake_clock):
        cache.store("coffee", "en", "fr", "caf%C3%A9")
        fake_clock.advance(1000)
        cache.lookup("coffee", "en", "fr")
        fake_clock.advance(800)

        assert cache.lookup("coffee", "en", "fr") is None

    def test_undecodable_entry_is_evicted(self, cache):
        cache.store("broken", "en", "ko", "%FF%FE")

        assert cache.lookup("broken", "en", "ko") is None
        assert len(cache) == 0

    def test_sweep_removes_only_expired_entries(self, cache, fake_clock):
        cache.store("old", "en", "ko", "오래된")
        fake_clock.advance(1000)
        cache.store("new", "en", "ko", "새로운")
        fake_clock.advance(900)

        assert cache.sweep_expired() == 1
        assert len(cache) == 1
        assert cache.lookup("new", "en", "ko") is not None

    def test_maybe_sweep_follows_probability(self, fake_clock):
        always = TranslationCache(clock=fake_clock, sweep_probability=1.0, rng=random.Random(1))
        never = TranslationCache(clock=fake_clock, sweep_probability=0.0, rng=random.Random(1))
        for cache in (always, never):
            cache.store("hello", "en", "ko", "안녕하세요")
        fake_clock.advance(1800)

        assert always.maybe_sweep() is True
        assert never.maybe_sweep() is False
        assert len(always) == 0
        assert len(never) == 1

    def test_clear(self, cache):
        cache.store("hello", "en", "ko", "안녕하세요")
        cache.clear()
        assert len(cache) == 0
