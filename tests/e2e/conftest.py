"""
E2E test fixtures with SQLite and the FastAPI HTTP client.

E2E tests exercise the full request/response cycle:
- Real routers, dependencies and exception handlers
- Real TranslationService, orchestrator and cache
- SQLite in-memory database shared through StaticPool
- Scripted translator and in-memory usage gate instead of providers and Redis

httpx.ASGITransport does not run the lifespan, so the app state is wired here.
"""

from unittest.mock import AsyncMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from main import app
from polylingo.core.config import settings
from polylingo.core.database import Base, get_db
from polylingo.core.redis_client import get_redis
from polylingo.services.service_dependencies import get_usage_gate
from polylingo.services.translation.orchestrator import BatchOrchestrator
from polylingo.services.translation.translation_cache import TranslationCache
from polylingo.services.translation.translation_service import TranslationService
from tests.fixtures import InMemoryUsageGate, ScriptedTranslator

TEST_API_KEY = "test-api-key"


@pytest_asyncio.fixture(loop_scope="function")
async def e2e_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(e2e_engine):
    return async_sessionmaker(e2e_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
def translator(sample_translations):
    return ScriptedTranslator(sample_translations)


@pytest.fixture
def usage_gate():
    return InMemoryUsageGate(limit=10)


@pytest.fixture
def redis():
    """Redis double for the rate limiter; every request is the first of its window."""
    client = AsyncMock()
    client.incr.return_value = 1
    return client


@pytest_asyncio.fixture
async def translation_service(translator, session_factory):
    orchestrator = BatchOrchestrator(
        translator=translator,
        cache=TranslationCache(sweep_probability=0.0),
        timeout_seconds=0.2,
        max_retries=2,
    )
    service = TranslationService(orchestrator=orchestrator, session_factory=session_factory)

    yield service

    await service.shutdown()


@pytest_asyncio.fixture
async def client(monkeypatch, session_factory, translation_service, usage_gate, redis):
    """HTTP client against the app with test collaborators."""
    monkeypatch.setattr(settings, "translate_api_secret_key", TEST_API_KEY)

    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_usage_gate] = lambda: usage_gate
    app.dependency_overrides[get_redis] = lambda: redis
    app.state.translation_service = translation_service

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
        headers={"X-API-Key": TEST_API_KEY, "X-Device-Id": "phone-1"},
    ) as http_client:
        yield http_client

    app.dependency_overrides.clear()
