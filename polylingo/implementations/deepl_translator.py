"""
DeepL translator implementation.

This module provides a concrete implementation of the TranslatorInterface
using the DeepL translation service API.
"""

import asyncio

import deepl
import structlog

from polylingo.interfaces.translator import ProviderError, TranslatorInterface

logger = structlog.get_logger(__name__)

# DeepL rejects bare "EN" as target language
TARGET_LANGUAGE_OVERRIDES = {"en": "EN-US"}


class DeepLTranslator(TranslatorInterface):
    """DeepL API implementation of the translator interface."""

    def __init__(self, api_key: str):
        """
        Initialize DeepL translator.

        Blocking SDK calls run on the event loop's default executor, which is shut down with the loop.

        :param api_key: DeepL API key
        """
        if not api_key:
            raise ValueError("DeepL API key is required")

        self.client = deepl.Translator(api_key)

    async def translate_once(self, text: str, source_language: str, target_language: str) -> str:
        """Translate text using DeepL API."""
        try:
            # Run DeepL API call in thread pool to avoid blocking
            loop = asyncio.get_running_loop()
            result = await loop.run_in_executor(
                None, self._sync_translate_text, text, source_language, target_language
            )
        except deepl.DeepLException as e:
            logger.warning("deepl_translation_failed", error=str(e))
            raise ProviderError(f"DeepL translation failed: {e}", e, getattr(e, "http_status_code", None))

        if not result.text:
            raise ProviderError("DeepL returned an empty translation")
        return result.text

    def _sync_translate_text(self, text: str, source_language: str, target_language: str) -> deepl.TextResult:
        """Synchronous wrapper for DeepL translate_text call."""
        target = TARGET_LANGUAGE_OVERRIDES.get(target_language.lower(), target_language.upper())
        return self.client.translate_text(text, source_lang=source_language.upper(), target_lang=target)

    async def check_availability(self) -> bool:
        """Check if DeepL service is available."""
        try:
            loop = asyncio.get_running_loop()
            await loop.run_in_executor(None, self.client.get_usage)
            return True
        except deepl.DeepLException as e:
            logger.warning("deepl_availability_check_failed", error=str(e))
            return False
