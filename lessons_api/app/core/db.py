"""
Storage media for the local data store.

The data store persists each logical table as one serialized value
under its own key, the way a browser keeps values in ``localStorage``.
This module provides the key/value medium underneath it:

* ``SQLiteStorage`` keeps values in a ``kv_store`` table of a SQLite
  file.  The schema is created by a small migration system that
  records applied versions in the ``migrations`` table.
* ``MemoryStorage`` keeps values in a dict and is used by tests and
  throwaway sessions.

Both expose ``get_item``, ``set_item``, ``remove_item`` and
``set_items``.  ``set_items`` writes several keys atomically, which is
what ``LocalStore.unit_of_work`` relies on to commit staged writes.
"""

import logging
import os
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Dict, Iterator, List, Mapping, Optional, Tuple

from .config import settings


MIGRATIONS: List[Tuple[int, str]] = [
    # Migration 1: key/value table holding one serialized blob per table
    (
        1,
        """
        CREATE TABLE IF NOT EXISTS kv_store (
            key TEXT PRIMARY KEY,
            value TEXT NOT NULL,
            updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        );
        """,
    ),
]


def get_database_path(db_url: Optional[str] = None) -> str:
    """Compute the path to the SQLite database file.

    If ``db_url`` (defaulting to ``settings.database_url``) is an
    absolute path, use it directly.  Otherwise resolve it relative to
    the project root.
    """
    db_url = db_url or settings.database_url
    if os.path.isabs(db_url):
        return db_url
    base_dir = Path(__file__).resolve().parent.parent.parent.parent
    return str((base_dir / db_url).resolve())


def get_connection(db_path: str) -> sqlite3.Connection:
    """Create and return a new SQLite connection with name-addressable rows."""
    conn = sqlite3.connect(db_path)
    conn.row_factory = sqlite3.Row
    return conn


@contextmanager
def get_cursor(db_path: str) -> Iterator[sqlite3.Cursor]:
    """Context manager that yields a cursor, commits and closes on exit.

    The transaction is rolled back if the block raises.
    """
    conn = get_connection(db_path)
    try:
        cursor = conn.cursor()
        yield cursor
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def init_db(db_path: str) -> None:
    """Create the database file if needed and apply pending migrations."""
    logger = logging.getLogger(__name__)
    with get_cursor(db_path) as cursor:
        cursor.execute(
            "CREATE TABLE IF NOT EXISTS migrations (version INTEGER PRIMARY KEY)"
        )
        cursor.execute("SELECT MAX(version) as version FROM migrations")
        row = cursor.fetchone()
        current_version = row["version"] if row and row["version"] is not None else 0

        for version, sql in MIGRATIONS:
            if version > current_version:
                cursor.executescript(sql)
                cursor.execute(
                    "INSERT INTO migrations (version) VALUES (?)", (version,)
                )
                logger.info("Applied storage migration %s to %s", version, db_path)
                current_version = version


class MemoryStorage:
    """Dict-backed storage medium."""

    def __init__(self, initial: Optional[Mapping[str, str]] = None) -> None:
        self._data: Dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._data[key] = value

    def set_items(self, items: Mapping[str, str]) -> None:
        self._data.update(items)

    def remove_item(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self) -> List[str]:
        return list(self._data)


class SQLiteStorage:
    """SQLite-backed storage medium.

    A fresh connection is opened per operation; values are plain
    strings and the medium does not interpret them.
    """

    def __init__(self, db_path: Optional[str] = None) -> None:
        self.db_path = get_database_path(db_path)
        init_db(self.db_path)

    def get_item(self, key: str) -> Optional[str]:
        conn = get_connection(self.db_path)
        try:
            row = conn.execute(
                "SELECT value FROM kv_store WHERE key = ?", (key,)
            ).fetchone()
            return row["value"] if row else None
        finally:
            conn.close()

    def set_item(self, key: str, value: str) -> None:
        self.set_items({key: value})

    def set_items(self, items: Mapping[str, str]) -> None:
        """Write all ``items`` in a single transaction."""
        if not items:
            return
        with get_cursor(self.db_path) as cursor:
            cursor.executemany(
                "INSERT INTO kv_store (key, value) VALUES (?, ?)"
                " ON CONFLICT(key) DO UPDATE SET value = excluded.value, updated_at = CURRENT_TIMESTAMP",
                list(items.items()),
            )

    def remove_item(self, key: str) -> None:
        with get_cursor(self.db_path) as cursor:
            cursor.execute("DELETE FROM kv_store WHERE key = ?", (key,))

    def keys(self) -> List[str]:
        conn = get_connection(self.db_path)
        try:
            rows = conn.execute("SELECT key FROM kv_store ORDER BY key").fetchall()
            return [row["key"] for row in rows]
        finally:
            conn.close()


def create_storage(backend: Optional[str] = None, db_path: Optional[str] = None):
    """Build the storage medium selected by ``settings.storage_backend``."""
    backend = (backend or settings.storage_backend).lower()
    if backend == "memory":
        return MemoryStorage()
    if backend == "sqlite":
        return SQLiteStorage(db_path)
    raise ValueError(f"Unsupported storage backend: {backend}")
