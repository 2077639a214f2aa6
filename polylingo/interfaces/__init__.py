"""
Service interfaces for dependency injection.

This module defines abstract interfaces for all external dependencies
and services, enabling clean dependency injection and easy testing.
"""

from polylingo.interfaces.translator import GlossaryInterface, ProviderError, TranslatorInterface
from polylingo.interfaces.usage_gate import IUsageGate, UsageGateError

__all__ = [
    "TranslatorInterface",
    "GlossaryInterface",
    "ProviderError",
    "IUsageGate",
    "UsageGateError",
]
