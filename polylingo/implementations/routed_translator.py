"""
Language-routed translator.

Picks a provider per target language, with an optional fallback provider.
"""

import structlog

from polylingo.interfaces.translator import ProviderError, TranslatorInterface

logger = structlog.get_logger(__name__)


class RoutedTranslator(TranslatorInterface):
    """Dispatch each request to the provider configured for its target language."""

    def __init__(
        self,
        default: TranslatorInterface,
        routes: dict[str, TranslatorInterface] | None = None,
        fallback: TranslatorInterface | None = None,
    ):
        """
        :param default: Provider for languages without an explicit route
        :param routes: Target language code -> provider
        :param fallback: Provider tried once when the routed provider fails
        """
        self.default = default
        self.routes = {lang.lower(): provider for lang, provider in (routes or {}).items()}
        self.fallback = fallback

    def provider_for(self, target_language: str) -> TranslatorInterface:
        return self.routes.get(target_language.lower(), self.default)

    async def translate_once(self, text: str, source_language: str, target_language: str) -> str:
        """Translate with the routed provider, then the fallback if one is configured."""
        provider = self.provider_for(target_language)
        try:
            return await provider.translate_once(text, source_language, target_language)
        except ProviderError as e:
            if self.fallback is None or self.fallback is provider:
                raise
            logger.info(
                "provider_fallback",
                provider=type(provider).__name__,
                fallback=type(self.fallback).__name__,
                target_language=target_language,
                error=str(e),
            )
            return await self.fallback.translate_once(text, source_language, target_language)

    async def check_availability(self) -> bool:
        """Available when the default provider answers."""
        return await self.default.check_availability()
