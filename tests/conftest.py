"""
Global test configuration and fixtures.

This module contains ONLY global, test-agnostic fixtures that are shared
across ALL test types (unit/e2e).

Test-specific fixtures are located in their respective conftest.py files:
- tests/unit/conftest.py - Unit test fixtures (SQLite, fakes, mocks)
- tests/e2e/conftest.py  - E2E test fixtures (SQLite + FastAPI HTTP client)
"""

import pytest

from tests.fixtures import FavoriteFactory, HistoryEntryFactory

# ============================================================================
# Sample Data Fixtures (No Database Dependencies)
# ============================================================================


@pytest.fixture
def sample_translations():
    """Provider answers per target language for the source word 'hello'."""
    return {
        "ko": "안녕하세요",
        "ja": "こんにちは",
        "fr": "bonjour",
        "de": "hallo",
        "es": "hola",
    }


@pytest.fixture
def sample_favorite_data():
    """Standard favorite payload for all test types."""
    return {
        "source_text": "hello",
        "translated_text": "bonjour",
        "source_language": "en",
        "target_language": "fr",
    }


# ============================================================================
# Shared Factory Fixtures (available to all test types)
# ============================================================================


@pytest.fixture
def history_entry_factory():
    """History entry factory for creating test history rows."""
    return HistoryEntryFactory


@pytest.fixture
def favorite_factory():
    """Favorite factory for creating test favorites."""
    return FavoriteFactory


# ============================================================================
# Pytest Hooks
# ============================================================================


def pytest_configure(config):
    """
    Configure pytest with custom markers.

    Markers are also declared in pyproject.toml; registering them here keeps
    IDE support working when the suite is run from a subdirectory.
    """
    config.addinivalue_line("markers", "unit: Unit tests with mocked dependencies (fast)")
    config.addinivalue_line("markers", "e2e: End-to-end tests through the HTTP API")


def pytest_collection_modifyitems(config, items):
    """
    Auto-mark tests based on their file location.
    """
    for item in items:
        test_path = str(item.fspath)

        if "/unit/" in test_path:
            item.add_marker(pytest.mark.unit)
        elif "/e2e/" in test_path:
            item.add_marker(pytest.mark.e2e)
