"""Domain services for history and favorites."""

from polylingo.services.domain.library_service import LibraryService

__all__ = [
    "LibraryService",
]
