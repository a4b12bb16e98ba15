"""
Storage module for the page translation pipeline.

Submodules:
    backends: SQLite and in-memory key-value storage.
    preferences: Selected language and translation cache.
"""

from .backends import KeyValueStorage, MemoryStorage, SQLiteStorage, sqlite_connection
from .preferences import LanguagePreferenceStore

__all__ = [
    "KeyValueStorage",
    "MemoryStorage",
    "SQLiteStorage",
    "sqlite_connection",
    "LanguagePreferenceStore",
]
