"""
MyMemory translator implementation.

This module provides a concrete implementation of the TranslatorInterface
using the public MyMemory translation memory API.
"""

import httpx
import structlog

from polylingo.implementations.http_provider import HttpJsonProvider
from polylingo.interfaces.translator import ProviderError, TranslatorInterface

logger = structlog.get_logger(__name__)

MYMEMORY_BASE_URL = "https://mymemory.translated.net/api/get"


class MyMemoryTranslator(HttpJsonProvider, TranslatorInterface):
    """MyMemory API implementation of the translator interface."""

    provider_name = "mymemory"

    def __init__(self, client: httpx.AsyncClient, base_url: str = MYMEMORY_BASE_URL):
        """
        Initialize MyMemory translator.

        :param client: Shared async HTTP client
        :param base_url: MyMemory `get` endpoint
        """
        super().__init__(client)
        self.base_url = base_url

    async def translate_once(self, text: str, source_language: str, target_language: str) -> str:
        """Translate text with one MyMemory GET request."""
        data = await self._request_json(
            "GET",
            self.base_url,
            params={"q": text, "langpair": f"{source_language}|{target_language}"},
        )

        if not isinstance(data, dict) or str(data.get("responseStatus")) != "200":
            status = data.get("responseStatus") if isinstance(data, dict) else None
            raise ProviderError(f"MyMemory rejected the request (responseStatus={status})")

        response_data = data.get("responseData") or {}
        translated = response_data.get("translatedText") if isinstance(response_data, dict) else None
        if not isinstance(translated, str) or not translated.strip():
            raise ProviderError("MyMemory response has no translatedText")

        return translated

    async def check_availability(self) -> bool:
        """Check if MyMemory answers a trivial request."""
        try:
            await self.translate_once("hello", "en", "es")
            return True
        except ProviderError as e:
            logger.warning("provider_availability_check_failed", provider="mymemory", error=str(e))
            return False
