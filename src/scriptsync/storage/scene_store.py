"""Scene record store backed by SQLite."""

from __future__ import annotations

import asyncio
import re
import sqlite3
import threading
from collections.abc import Callable, Generator, Mapping
from contextlib import contextmanager
from datetime import UTC, datetime
from typing import Any, Protocol

from scriptsync.config import get_logger
from scriptsync.exceptions import DatabaseError
from scriptsync.storage.connection import DatabaseConnection
from scriptsync.storage.records import SCENE_FIELDS, TIMESTAMP_FIELDS, SceneRecord

logger = get_logger(__name__)

ScenePredicate = Callable[[SceneRecord], bool]

_TABLE_NAME = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

_COLUMN_TYPES: dict[str, str] = {
    "id": "TEXT PRIMARY KEY",
    "sort_index": "INTEGER",
    "display_order": "INTEGER",
    "page_eighths": "INTEGER",
    "provenance_flags": "INTEGER NOT NULL DEFAULT 0",
}


class SceneStoreSession(Protocol):
    """Operations available inside one atomic store transaction."""

    def fetch_scenes(self, predicate: ScenePredicate | None = None) -> list[SceneRecord]: ...

    def insert_scene(self, fields: Mapping[str, Any]) -> SceneRecord: ...

    def save(self, record: SceneRecord) -> None: ...


class SceneStore(Protocol):
    """A consumer module's scene records."""

    merge_lock: asyncio.Lock

    def transaction(self) -> Any: ...


def _to_column(name: str, value: Any) -> Any:
    if name in TIMESTAMP_FIELDS and isinstance(value, datetime):
        return value.isoformat()
    return value


class _SQLiteSceneSession:
    """Store operations bound to one open transaction."""

    def __init__(self, store: SQLiteSceneStore, conn: sqlite3.Connection) -> None:
        self._store = store
        self._conn = conn

    def fetch_scenes(self, predicate: ScenePredicate | None = None) -> list[SceneRecord]:
        """Fetch records ordered by sort index, optionally filtered."""
        return self._store._fetch(self._conn, predicate)

    def insert_scene(self, fields: Mapping[str, Any]) -> SceneRecord:
        """Insert a record; fields the table lacks are dropped."""
        record = SceneRecord(fields, self._store.known_fields)
        values = record.as_dict()
        if "id" not in values:
            raise DatabaseError(
                message="Scene records require an id",
                details={"table": self._store.table},
            )
        columns = list(values)
        placeholders = ", ".join("?" for _ in columns)
        self._conn.execute(
            f"INSERT INTO {self._store.table} ({', '.join(columns)}) "  # noqa: S608
            f"VALUES ({placeholders})",
            [_to_column(name, values[name]) for name in columns],
        )
        return record

    def save(self, record: SceneRecord) -> None:
        """Write a record's dirty fields."""
        changes = record.dirty_fields
        if not changes:
            return
        assignments = ", ".join(f"{name} = ?" for name in changes)
        self._conn.execute(
            f"UPDATE {self._store.table} SET {assignments} WHERE id = ?",  # noqa: S608
            [*(_to_column(name, value) for name, value in changes.items()), record.id],
        )
        record.mark_clean()

    def delete_scene(self, scene_id: str) -> None:
        self._conn.execute(
            f"DELETE FROM {self._store.table} WHERE id = ?",  # noqa: S608
            (scene_id,),
        )


class SQLiteSceneStore:
    """Scene records for one consumer module, kept in their own table.

    The set of writable fields is read from the live table, so tables
    created by older releases with fewer columns keep working.

    ``merge_lock`` serializes reconciliation passes against this store;
    the thread lock keeps transactions from different worker threads from
    interleaving.
    """

    def __init__(
        self,
        connection: DatabaseConnection,
        table: str = "scenes",
        create: bool = True,
    ) -> None:
        if not _TABLE_NAME.match(table):
            raise DatabaseError(
                message=f"Invalid scene table name: {table!r}",
                hint="Use letters, digits and underscores only",
            )
        self.connection = connection
        self.table = table
        self.merge_lock = asyncio.Lock()
        self._write_lock = threading.RLock()
        if create:
            self.initialize()
        self.known_fields = self._discover_fields()

    def initialize(self) -> None:
        """Create the scene table if it does not exist."""
        columns = ",\n    ".join(
            f"{name} {_COLUMN_TYPES.get(name, 'TEXT')}" for name in SCENE_FIELDS
        )
        self.connection.execute(f"CREATE TABLE IF NOT EXISTS {self.table} (\n    {columns}\n)")

    def _discover_fields(self) -> frozenset[str]:
        rows = self.connection.execute(f"PRAGMA table_info({self.table})").fetchall()
        if not rows:
            raise DatabaseError(
                message=f"Scene table '{self.table}' does not exist",
                hint="Create the store with create=True or run an import first",
            )
        return frozenset(row["name"] for row in rows)

    def _fetch(
        self, conn: sqlite3.Connection, predicate: ScenePredicate | None
    ) -> list[SceneRecord]:
        order = "sort_index" if "sort_index" in self.known_fields else "rowid"
        rows = conn.execute(
            f"SELECT * FROM {self.table} ORDER BY {order}, rowid"  # noqa: S608
        ).fetchall()
        records = [SceneRecord(dict(row), self.known_fields) for row in rows]
        if predicate is None:
            return records
        return [record for record in records if predicate(record)]

    @contextmanager
    def transaction(self) -> Generator[_SQLiteSceneSession, None, None]:
        """Open an atomic session; all writes commit together or not at all."""
        with self._write_lock, self.connection.transaction() as conn:
            yield _SQLiteSceneSession(self, conn)

    def fetch_scenes(self, predicate: ScenePredicate | None = None) -> list[SceneRecord]:
        with self.connection.get_connection() as conn:
            return self._fetch(conn, predicate)

    def get_scene(self, scene_id: str) -> SceneRecord | None:
        with self.connection.get_connection() as conn:
            row = conn.execute(
                f"SELECT * FROM {self.table} WHERE id = ?",  # noqa: S608
                (scene_id,),
            ).fetchone()
        return SceneRecord(dict(row), self.known_fields) if row else None

    def mark_local_edit(self, scene_id: str, when: datetime | None = None) -> bool:
        """Record that a user edited a scene in this module.

        Returns:
            False if the scene does not exist or the table has no edit column
        """
        with self.transaction() as session:
            matches = session.fetch_scenes(lambda record: record.id == scene_id)
            if not matches:
                return False
            record = matches[0]
            if not record.set_if_present("last_local_edit", when or datetime.now(UTC)):
                return False
            session.save(record)
        logger.debug("Marked local edit", table=self.table, scene_id=scene_id)
        return True

    def delete_scenes(self, predicate: ScenePredicate | None = None) -> int:
        """Delete matching records (all when no predicate) and return the count."""
        with self.transaction() as session:
            doomed = session.fetch_scenes(predicate)
            for record in doomed:
                session.delete_scene(record.id)
        return len(doomed)

