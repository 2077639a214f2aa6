from polylingo.core.database import Base

from .favorite import Favorite
from .history_entry import HistoryEntry

__all__ = [
    "Base",
    "Favorite",
    "HistoryEntry",
]
