"""
LibreTranslate translator implementation.
"""

import httpx
import structlog

from polylingo.implementations.http_provider import HttpJsonProvider
from polylingo.interfaces.translator import ProviderError, TranslatorInterface

logger = structlog.get_logger(__name__)

LIBRETRANSLATE_PUBLIC_URL = "https://libretranslate.de/translate"


def resolve_translate_url(base_url: str) -> str:
    """
    Self-hosted instances are configured by host only; append the endpoint path for them.
    :param base_url: Configured LibreTranslate URL
    :return: URL of the translate endpoint
    """
    if "localhost" in base_url and not base_url.rstrip("/").endswith("/translate"):
        return f"{base_url.rstrip('/')}/translate"
    return base_url


class LibreTranslateTranslator(HttpJsonProvider, TranslatorInterface):
    """LibreTranslate API implementation of the translator interface."""

    provider_name = "libretranslate"

    def __init__(self, client: httpx.AsyncClient, base_url: str = LIBRETRANSLATE_PUBLIC_URL):
        super().__init__(client)
        self.url = resolve_translate_url(base_url)

    async def translate_once(self, text: str, source_language: str, target_language: str) -> str:
        """Translate text with one LibreTranslate POST request."""
        data = await self._request_json(
            "POST",
            self.url,
            json={"q": text, "source": source_language, "target": target_language, "format": "text"},
        )

        translated = data.get("translatedText") if isinstance(data, dict) else None
        if not isinstance(translated, str) or not translated.strip():
            raise ProviderError("LibreTranslate response has no translatedText")

        return translated

    async def check_availability(self) -> bool:
        """Check if LibreTranslate answers a trivial request."""
        try:
            await self.translate_once("hello", "en", "es")
            return True
        except ProviderError as e:
            logger.warning("provider_availability_check_failed", provider="libretranslate", error=str(e))
            return False
