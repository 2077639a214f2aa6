import httpx
from fastapi import Depends, Request
from redis.asyncio import Redis

from polylingo.core.background_tasks import BackgroundTaskRegistry
from polylingo.core.config import settings
from polylingo.core.database import AsyncSessionLocal
from polylingo.core.redis_client import get_redis
from polylingo.core.security_dependencies import get_device_id
from polylingo.implementations.deepl_translator import DeepLTranslator
from polylingo.implementations.libretranslate_translator import LibreTranslateTranslator
from polylingo.implementations.mymemory_translator import MyMemoryTranslator
from polylingo.implementations.routed_translator import RoutedTranslator
from polylingo.implementations.wiktionary_glossary import WiktionaryGlossary
from polylingo.interfaces.translator import GlossaryInterface, TranslatorInterface
from polylingo.interfaces.usage_gate import IUsageGate
from polylingo.repositories.favorite_repository import IFavoriteRepository
from polylingo.repositories.history_repository import IHistoryRepository
from polylingo.repositories.repository_dependencies import get_favorite_repository, get_history_repository
from polylingo.services.domain.library_service import LibraryService
from polylingo.services.translation.orchestrator import BatchOrchestrator
from polylingo.services.translation.translation_cache import TranslationCache
from polylingo.services.translation.translation_service import TranslationService
from polylingo.services.usage.redis_usage_gate import RedisUsageGate


def create_translator(client: httpx.AsyncClient) -> TranslatorInterface:
    """
    Create the translator configured in settings.

    "deepl" uses DeepL for every language when an API key is set. Otherwise
    targets in `mymemory_languages` go to MyMemory and the rest to
    LibreTranslate, with MyMemory as fallback.

    :param client: Shared HTTP client
    :return: Translator implementing TranslatorInterface
    """
    mymemory = MyMemoryTranslator(client, base_url=settings.mymemory_base_url)

    if settings.translation_provider == "deepl" and settings.is_deepl_available:
        return RoutedTranslator(default=DeepLTranslator(api_key=settings.deepl_api_key), fallback=mymemory)

    libretranslate = LibreTranslateTranslator(client, base_url=settings.libretranslate_url)
    return RoutedTranslator(
        default=libretranslate,
        routes={language: mymemory for language in settings.mymemory_languages},
        fallback=mymemory,
    )


def create_glossary(client: httpx.AsyncClient) -> GlossaryInterface:
    """
    Create the Wiktionary glossary used for alternate meanings.
    :param client: Shared HTTP client
    :return: Glossary implementing GlossaryInterface
    """
    return WiktionaryGlossary(
        client,
        url_template=settings.wiktionary_url_template,
        max_meanings=settings.max_gloss_meanings,
    )


def create_translation_service(
    translator: TranslatorInterface,
    glossary: GlossaryInterface | None = None,
) -> TranslationService:
    """
    Create the process-wide TranslationService with its cache and orchestrator.
    :param translator: Translator used by every unit
    :param glossary: Optional glossary for meanings
    :return: TranslationService instance
    """
    cache = TranslationCache(
        ttl_seconds=settings.cache_ttl_seconds,
        sweep_probability=settings.cache_sweep_probability,
    )
    orchestrator = BatchOrchestrator(
        translator=translator,
        cache=cache,
        glossary=glossary,
        timeout_seconds=settings.unit_timeout_seconds,
        max_retries=settings.max_unit_retries,
        gloss_timeout_seconds=settings.gloss_timeout_seconds,
        max_tracked_batches=settings.max_tracked_batches,
    )
    return TranslationService(
        orchestrator=orchestrator,
        session_factory=AsyncSessionLocal,
        max_text_length=settings.max_text_length,
        max_history_items=settings.max_history_items,
        background_tasks=BackgroundTaskRegistry(),
    )


def get_translation_service(request: Request) -> TranslationService:
    """
    Get the TranslationService created on startup.

    Batches outlive single requests, so the service lives on the app state.

    :param request: FastAPI Request object
    :return: TranslationService instance
    """
    return request.app.state.translation_service


def get_usage_gate(
    device_id: str = Depends(get_device_id),
    redis: Redis = Depends(get_redis),
) -> IUsageGate:
    """
    Create the usage gate for the requesting device.
    :param device_id: Client identity from the X-Device-Id header
    :param redis: Redis client
    :return: Usage gate implementing IUsageGate
    """
    return RedisUsageGate(redis=redis, client_id=device_id, daily_limit=settings.daily_usage_limit)


def get_library_service(
    history_repo: IHistoryRepository = Depends(get_history_repository),
    favorite_repo: IFavoriteRepository = Depends(get_favorite_repository),
) -> LibraryService:
    """
    Create LibraryService instance with repository dependencies.
    :param history_repo: History repository instance
    :param favorite_repo: Favorite repository instance
    :return: LibraryService instance
    """
    return LibraryService(history_repo=history_repo, favorite_repo=favorite_repo)
