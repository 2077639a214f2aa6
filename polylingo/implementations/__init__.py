"""
Concrete implementations of service interfaces.

This module provides production-ready implementations of the defined
interfaces: translation provider adapters and the dictionary glossary.
"""

from .deepl_translator import DeepLTranslator
from .libretranslate_translator import LibreTranslateTranslator
from .mymemory_translator import MyMemoryTranslator
from .routed_translator import RoutedTranslator
from .wiktionary_glossary import WiktionaryGlossary

__all__ = [
    "DeepLTranslator",
    "LibreTranslateTranslator",
    "MyMemoryTranslator",
    "RoutedTranslator",
    "WiktionaryGlossary",
]
