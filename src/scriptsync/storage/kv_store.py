"""Durable key-value slots for small JSON blobs."""

from __future__ import annotations

import sqlite3
import threading
from datetime import UTC, datetime
from collections.abc import Mapping
from typing import Protocol

from scriptsync.config import get_logger
from scriptsync.exceptions import DatabaseError
from scriptsync.storage.connection import DatabaseConnection

logger = get_logger(__name__)


class KeyValueStore(Protocol):
    """Byte-valued persistence used by the revision registry and preferences.

    ``get`` never raises: missing or unreadable slots read as None.
    ``set`` raises :class:`DatabaseError` when the value cannot be stored.
    ``set_many`` writes every slot or none of them.
    """

    def get(self, key: str) -> bytes | None: ...

    def set(self, key: str, value: bytes) -> None: ...

    def set_many(self, items: Mapping[str, bytes]) -> None: ...


class InMemoryKeyValueStore:
    """Process-local store, mainly for tests and one-shot tools."""

    def __init__(self) -> None:
        self._data: dict[str, bytes] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> bytes | None:
        with self._lock:
            return self._data.get(key)

    def set(self, key: str, value: bytes) -> None:
        with self._lock:
            self._data[key] = bytes(value)

    def set_many(self, items: Mapping[str, bytes]) -> None:
        with self._lock:
            self._data.update({key: bytes(value) for key, value in items.items()})


class SQLiteKeyValueStore:
    """Key-value slots stored in the ``kv_store`` table."""

    SCHEMA = """
        CREATE TABLE IF NOT EXISTS kv_store (
            key TEXT PRIMARY KEY,
            value BLOB NOT NULL,
            updated_at TEXT NOT NULL
        )
    """

    def __init__(self, connection: DatabaseConnection) -> None:
        self.connection = connection
        self.connection.execute(self.SCHEMA)

    def get(self, key: str) -> bytes | None:
        try:
            row = self.connection.execute(
                "SELECT value FROM kv_store WHERE key = ?", (key,)
            ).fetchone()
        except (sqlite3.Error, DatabaseError) as e:
            logger.warning("Could not read key-value slot", key=key, error=str(e))
            return None
        if row is None:
            return None
        value = row["value"]
        return value.encode("utf-8") if isinstance(value, str) else bytes(value)

    def set(self, key: str, value: bytes) -> None:
        self.set_many({key: value})

    def set_many(self, items: Mapping[str, bytes]) -> None:
        """Write all ``items`` in one transaction."""
        now = datetime.now(UTC).isoformat()
        try:
            with self.connection.transaction() as conn:
                conn.executemany(
                    """
                    INSERT INTO kv_store (key, value, updated_at) VALUES (?, ?, ?)
                    ON CONFLICT(key) DO UPDATE SET
                        value = excluded.value, updated_at = excluded.updated_at
                    """,
                    [(key, sqlite3.Binary(value), now) for key, value in items.items()],
                )
        except sqlite3.Error as e:
            names = ", ".join(f"'{key}'" for key in items)
            raise DatabaseError(
                message=f"Failed to write key-value slot {names}",
                hint="Check that the database is writable",
                details={"error": str(e)},
            ) from e
