from polylingo.core.config import settings
from polylingo.core.database import AsyncSessionLocal, Base, engine, get_db

__all__ = [
    "settings",
    "AsyncSessionLocal",
    "Base",
    "engine",
    "get_db",
]
