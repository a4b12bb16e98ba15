"""
Durable key-value storage for the page translation pipeline.

The preference store keeps two values between sessions: the selected
language and the serialized translation cache. This module provides the
storage they live in:

    - SQLiteStorage: a single-table SQLite database on disk
    - MemoryStorage: a dictionary, for tests and throwaway sessions

Storage failures are never fatal. They are logged and the caller keeps
working with its in-memory state.

Author: Leonardo Pacciani-Mori
License: MIT
"""

import sqlite3
from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Dict, Optional

from ..config.settings import PREFERENCES_DB_PATH
from ..config.logging_config import get_logger

# Module-level logger for consistent logging.
logger = get_logger(__name__)

# Table holding one row per storage key.
KV_SCHEMA = '''
CREATE TABLE IF NOT EXISTS kv_store (
    key TEXT PRIMARY KEY,
    value TEXT,
    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
)
'''


@contextmanager
def sqlite_connection(db_path: str):
    """
    Context manager for SQLite database connections.

    Commits on successful completion, rolls back on error, and always
    closes the connection.

    Args:
        db_path: The file path to the SQLite database. The database will
            be created if it doesn't exist.

    Yields:
        Tuple[sqlite3.Connection, sqlite3.Cursor]: The connection and cursor.
    """
    conn = sqlite3.connect(db_path)
    cursor = conn.cursor()

    try:
        yield conn, cursor
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        cursor.close()
        conn.close()


class KeyValueStorage(ABC):
    """Abstract base class for the durable storage of the preference store."""

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """Return the value stored under a key, or None."""
        pass

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Store a value under a key, replacing any previous value."""
        pass


class MemoryStorage(KeyValueStorage):
    """Storage kept in a dictionary; nothing survives the process."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self.values: Dict[str, str] = dict(initial or {})
        self.write_count = 0

    def get(self, key: str) -> Optional[str]:
        return self.values.get(key)

    def set(self, key: str, value: str) -> None:
        self.values[key] = value
        self.write_count += 1


class SQLiteStorage(KeyValueStorage):
    """
    Storage kept in a SQLite database file.

    Each key is a row of the ``kv_store`` table. Writes replace the whole
    value of a key (INSERT OR REPLACE).

    Args:
        db_path: Path of the SQLite file. Defaults to PREFERENCES_DB_PATH.

    Example:
        >>> storage = SQLiteStorage("/tmp/preferences.db")
        >>> storage.set("selected_language", "hi")
        >>> storage.get("selected_language")
        'hi'
    """

    def __init__(self, db_path: str = PREFERENCES_DB_PATH):
        self.db_path = db_path
        self._initialize()

    def _initialize(self) -> None:
        try:
            with sqlite_connection(self.db_path) as (conn, cursor):
                cursor.executescript(KV_SCHEMA)
            logger.info(f"Preference storage initialized at {self.db_path}")
        except sqlite3.Error as e:
            logger.error(f"Error initializing preference storage: {str(e)}")

    def get(self, key: str) -> Optional[str]:
        try:
            with sqlite_connection(self.db_path) as (conn, cursor):
                cursor.execute("SELECT value FROM kv_store WHERE key=?", (key,))
                result = cursor.fetchone()
        except sqlite3.Error as e:
            logger.error(f"Error reading {key!r} from preference storage: {str(e)}")
            return None

        if result:
            return result[0]
        return None

    def set(self, key: str, value: str) -> None:
        try:
            with sqlite_connection(self.db_path) as (conn, cursor):
                cursor.execute(
                    """
                    INSERT OR REPLACE INTO kv_store (key, value, updated_at)
                    VALUES (?, ?, CURRENT_TIMESTAMP)
                    """,
                    (key, value)
                )
        except sqlite3.Error as e:
            logger.error(f"Error writing {key!r} to preference storage: {str(e)}")
