from typing import Annotated

from markupsafe import Markup
from pydantic import AfterValidator

from polylingo.core.constants import SUPPORTED_LANGUAGES


def validate_language_code(language_code: str) -> bool:
    """Validate if language code is supported"""
    return language_code.lower() in SUPPORTED_LANGUAGES


def normalize_language_code(language_code: str) -> str:
    """
    Normalize and validate a language code.
    :param language_code: Raw language code from the client
    :return: Lowercase supported language code
    :raises ValueError: If the language is not supported
    """
    code = language_code.strip().lower()
    if code not in SUPPORTED_LANGUAGES:
        raise ValueError(f"Unsupported language '{language_code}'")
    return code


def clean_markup_text(text: str | None) -> str:
    """
    Strip HTML tags, resolve entities and collapse whitespace.
    :param text: Raw HTML fragment (e.g. a dictionary definition)
    :return: Plain text
    """
    if not text:
        return ""
    return Markup(text).striptags().strip()


def strip_text(text: str) -> str:
    """Trim surrounding whitespace from user supplied text."""
    return text.strip()


LanguageCode = Annotated[str, AfterValidator(normalize_language_code)]
StrippedText = Annotated[str, AfterValidator(strip_text)]
