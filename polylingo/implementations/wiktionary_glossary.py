"""
Wiktionary glossary implementation.

Best-effort lookup of alternate meanings via the Wiktionary REST definition endpoint.
"""

import urllib.parse

import httpx
import structlog

from polylingo.core.constants import DEFAULT_MAX_GLOSS_MEANINGS
from polylingo.core.decorators import transient_retry
from polylingo.core.validators import clean_markup_text
from polylingo.interfaces.translator import GlossaryInterface, ProviderError
from polylingo.schemas.translation_schemas import Meaning

logger = structlog.get_logger(__name__)

WIKTIONARY_URL_TEMPLATE = "https://{wiki}.wiktionary.org/api/rest_v1/page/definition/{word}"

# Definitions shorter than this are noise (stray punctuation, empty templates)
MIN_DEFINITION_LENGTH = 3


class WiktionaryGlossary(GlossaryInterface):
    """Wiktionary REST API implementation of the glossary interface."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        url_template: str = WIKTIONARY_URL_TEMPLATE,
        max_meanings: int = DEFAULT_MAX_GLOSS_MEANINGS,
    ):
        self.client = client
        self.url_template = url_template
        self.max_meanings = max_meanings

    @staticmethod
    def wiki_for(language: str) -> str:
        """Korean words are looked up on ko.wiktionary, everything else on en.wiktionary."""
        return "ko" if language.lower() == "ko" else "en"

    async def fetch_gloss_for_word(self, word: str, language: str) -> list[Meaning]:
        """Fetch up to `max_meanings` definitions for a word."""
        word = word.strip()
        if not word:
            return []

        wiki = self.wiki_for(language)
        url = self.url_template.format(wiki=wiki, word=urllib.parse.quote(word, safe=""))

        try:
            response = await self._get(url)
        except httpx.HTTPError as e:
            raise ProviderError(f"Wiktionary request failed: {e}", e)

        if not response.is_success:
            logger.debug("gloss_not_found", status_code=response.status_code, language=language)
            return []

        try:
            payload = response.json()
        except ValueError:
            return []

        return self._extract_meanings(payload, wiki)

    @transient_retry
    async def _get(self, url: str) -> httpx.Response:
        return await self.client.get(url)

    def _extract_meanings(self, payload, wiki: str) -> list[Meaning]:
        """
        Walk the definition payload in order, keeping the first usable definitions.
        :param payload: Decoded Wiktionary response
        :param wiki: Wiki section key (e.g. 'en')
        :return: Meanings in payload order
        """
        entries = payload.get(wiki) if isinstance(payload, dict) else None
        if not isinstance(entries, list):
            return []

        meanings: list[Meaning] = []
        for entry in entries:
            if not isinstance(entry, dict) or not isinstance(entry.get("definitions"), list):
                continue

            part_of_speech = entry.get("partOfSpeech") or "general"
            if not isinstance(part_of_speech, str):
                continue
            for definition in entry["definitions"]:
                raw = definition.get("definition") if isinstance(definition, dict) else definition
                text = clean_markup_text(raw if isinstance(raw, str) else None)
                if len(text) < MIN_DEFINITION_LENGTH:
                    continue

                meanings.append(Meaning(translation=text, part_of_speech=part_of_speech))
                if len(meanings) >= self.max_meanings:
                    return meanings

        return meanings
