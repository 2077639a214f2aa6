"""
Translator interfaces for external translation and dictionary services.

These interfaces abstract single-request provider calls, allowing different
translation providers (MyMemory, LibreTranslate, DeepL) to be used
interchangeably through dependency injection.
"""

from abc import ABC, abstractmethod

from polylingo.schemas.translation_schemas import Meaning


class TranslatorInterface(ABC):
    """Abstract interface for single-request translation providers."""

    @abstractmethod
    async def translate_once(self, text: str, source_language: str, target_language: str) -> str:
        """
        Translate text with exactly one provider request.

        Identical source/target pairs are filtered by the caller and never reach this method.

        :param text: Text to translate
        :param source_language: Source language code (e.g., 'en')
        :param target_language: Target language code (e.g., 'ko')
        :return: Translated text
        :raises ProviderError: On transport failure, non-2xx response or malformed payload
        """
        pass

    @abstractmethod
    async def check_availability(self) -> bool:
        """
        Check if translation service is available.

        :return: True if service is available, False otherwise
        """
        pass


class GlossaryInterface(ABC):
    """Abstract interface for best-effort dictionary lookups."""

    @abstractmethod
    async def fetch_gloss_for_word(self, word: str, language: str) -> list[Meaning]:
        """
        Look up alternate meanings for a word.

        :param word: Word to look up
        :param language: Language of the word
        :return: Ordered meanings, empty when the dictionary has no data
        :raises ProviderError: Only on transport failure after retries
        """
        pass


class ProviderError(Exception):
    """Exception raised when a provider call fails."""

    def __init__(self, message: str, original_error: Exception | None = None, status_code: int | None = None):
        super().__init__(message)
        self.original_error = original_error
        self.status_code = status_code
