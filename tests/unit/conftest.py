"""
Unit test fixtures with SQLite and fake collaborators.

- No event_loop fixture (removed in pytest-asyncio 1.x)
- SQLite in-memory for repository and service tests
- Fake clock and scripted translator for the translation engine

Unit tests should be:
- Fast (< 5s total)
- Isolated (no external dependencies)
- Deterministic (no flakiness)
"""

import random
from unittest.mock import AsyncMock

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

import polylingo.models  # noqa: F401
from polylingo.core.database import Base
from polylingo.interfaces.translator import GlossaryInterface, TranslatorInterface
from polylingo.services.translation.orchestrator import BatchOrchestrator
from polylingo.services.translation.translation_cache import TranslationCache
from tests.fixtures import FakeClock, InMemoryUsageGate, ScriptedTranslator

# ============================================================================
# Database Fixtures (SQLite in-memory)
# ============================================================================


@pytest_asyncio.fixture(loop_scope="function")
async def unit_engine():
    """
    SQLite in-memory engine for unit tests.

    Uses StaticPool to keep the in-memory database alive during the test.
    """
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        echo=False,
        connect_args={"check_same_thread": False},
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(unit_engine):
    """Isolated database session for each unit test."""
    async with AsyncSession(unit_engine, expire_on_commit=False) as session:
        yield session


@pytest.fixture
def session_factory(unit_engine):
    """Session factory for code that opens its own sessions."""
    return async_sessionmaker(unit_engine, class_=AsyncSession, expire_on_commit=False)


# ============================================================================
# Translation Engine Fixtures
# ============================================================================


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def cache(fake_clock):
    """Cache on the fake clock that never sweeps on its own."""
    return TranslationCache(ttl_seconds=1800, clock=fake_clock, sweep_probability=0.0, rng=random.Random(7))


@pytest.fixture
def translator(sample_translations):
    return ScriptedTranslator(sample_translations)


@pytest.fixture
def orchestrator(translator, cache):
    return BatchOrchestrator(translator=translator, cache=cache, timeout_seconds=0.2, max_retries=2)


@pytest.fixture
def usage_gate():
    return InMemoryUsageGate(limit=100)


# ============================================================================
# Mock Fixtures
# ============================================================================


@pytest.fixture
def mock_translator():
    """Mock translator implementing TranslatorInterface."""
    return AsyncMock(spec=TranslatorInterface)


@pytest.fixture
def mock_glossary():
    """Mock glossary implementing GlossaryInterface."""
    return AsyncMock(spec=GlossaryInterface)
