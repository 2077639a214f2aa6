from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict

from polylingo.core.constants import (
    DEFAULT_CACHE_SWEEP_PROBABILITY,
    DEFAULT_CACHE_TTL_SECONDS,
    DEFAULT_DAILY_USAGE_LIMIT,
    DEFAULT_GLOSS_TIMEOUT_SECONDS,
    DEFAULT_MAX_GLOSS_MEANINGS,
    DEFAULT_MAX_HISTORY_ITEMS,
    DEFAULT_MAX_TEXT_LENGTH,
    DEFAULT_MAX_UNIT_RETRIES,
    DEFAULT_RATE_LIMIT_MAX_REQUESTS,
    DEFAULT_RATE_LIMIT_WINDOW_SECONDS,
    DEFAULT_UNIT_TIMEOUT_SECONDS,
)


class Settings(BaseSettings):
    """Application settings"""

    app_name: str = "PolyLingo Translation API"
    debug: bool = False

    database_url: str = "sqlite+aiosqlite:///./polylingo.db"
    redis_url: str = "redis://localhost:6379/0"

    # Shared secret expected in the X-API-Key header
    translate_api_secret_key: str | None = None

    # Translation providers
    translation_provider: Literal["routed", "deepl"] = "routed"
    mymemory_base_url: str = "https://mymemory.translated.net/api/get"
    libretranslate_url: str = "https://libretranslate.de/translate"
    wiktionary_url_template: str = "https://{wiki}.wiktionary.org/api/rest_v1/page/definition/{word}"
    mymemory_languages: list[str] = ["ko"]  # Targets routed to MyMemory, the rest go to LibreTranslate
    deepl_api_key: str | None = None
    provider_request_timeout_seconds: float = 10.0

    # Translation engine
    cache_ttl_seconds: float = DEFAULT_CACHE_TTL_SECONDS
    cache_sweep_probability: float = DEFAULT_CACHE_SWEEP_PROBABILITY
    unit_timeout_seconds: float = DEFAULT_UNIT_TIMEOUT_SECONDS
    max_unit_retries: int = DEFAULT_MAX_UNIT_RETRIES
    gloss_timeout_seconds: float = DEFAULT_GLOSS_TIMEOUT_SECONDS
    max_gloss_meanings: int = DEFAULT_MAX_GLOSS_MEANINGS
    max_tracked_batches: int = 256

    # Quota & history
    daily_usage_limit: int = DEFAULT_DAILY_USAGE_LIMIT
    max_history_items: int = DEFAULT_MAX_HISTORY_ITEMS

    # Request guards
    max_text_length: int = DEFAULT_MAX_TEXT_LENGTH
    rate_limit_window_seconds: int = DEFAULT_RATE_LIMIT_WINDOW_SECONDS
    rate_limit_max_requests: int = DEFAULT_RATE_LIMIT_MAX_REQUESTS

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", case_sensitive=False, extra="ignore")

    @property
    def is_deepl_available(self) -> bool:
        """Check if the DeepL provider can be used."""
        return self.translation_provider == "deepl" and self.deepl_api_key is not None


settings = Settings()
