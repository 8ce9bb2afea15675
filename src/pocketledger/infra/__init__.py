"""Infrastructure: database bootstrap and the SQLModel-backed store."""

from .database import create_db_engine, create_session_factory, init_database
from .storage import SQLModelKeyValueStore

__all__ = [
    "SQLModelKeyValueStore",
    "create_db_engine",
    "create_session_factory",
    "init_database",
]
