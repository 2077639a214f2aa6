"""
Test fixtures and utilities for the PolyLingo test suite.

- Factories persist ORM rows with sensible defaults
- Fakes replace providers, clocks and the usage gate with deterministic doubles
"""

from .factories import FavoriteFactory, HistoryEntryFactory
from .fakes import FakeClock, InMemoryUsageGate, ScriptedTranslator, drain

__all__ = [
    "FavoriteFactory",
    "HistoryEntryFactory",
    "FakeClock",
    "InMemoryUsageGate",
    "ScriptedTranslator",
    "drain",
]
