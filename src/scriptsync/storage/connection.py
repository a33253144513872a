"""SQLite connection management with thread-local connections."""

from __future__ import annotations

import sqlite3
import threading
from collections.abc import Generator
from contextlib import contextmanager
from pathlib import Path
from typing import Any, cast

from scriptsync.config import ScriptSyncSettings, get_logger
from scriptsync.exceptions import DatabaseError

logger = get_logger(__name__)


class DatabaseConnection:
    """Manages SQLite connections for ScriptSync.

    Each thread gets its own connection so work handed to worker threads
    never shares a connection object.
    """

    def __init__(
        self,
        db_path: str | Path,
        timeout: float = 30.0,
        journal_mode: str = "WAL",
        synchronous: str = "NORMAL",
    ) -> None:
        """Initialize database connection manager.

        Args:
            db_path: Path to SQLite database file
            timeout: Seconds to wait for a lock before failing
            journal_mode: SQLite journal mode pragma value
            synchronous: SQLite synchronous pragma value
        """
        self.db_path = Path(db_path)
        self.timeout = timeout
        self.journal_mode = journal_mode
        self.synchronous = synchronous
        self._local = threading.local()
        self._connections: list[sqlite3.Connection] = []
        self._connections_lock = threading.Lock()

    @classmethod
    def from_settings(cls, settings: ScriptSyncSettings) -> DatabaseConnection:
        return cls(
            settings.database_path,
            timeout=settings.database_timeout,
            journal_mode=settings.database_journal_mode,
            synchronous=settings.database_synchronous,
        )

    def _get_connection(self) -> sqlite3.Connection:
        """Get this thread's connection, opening it on first use."""
        if getattr(self._local, "connection", None) is None:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            try:
                # Autocommit mode; transactions are opened explicitly
                conn = sqlite3.connect(
                    str(self.db_path),
                    timeout=self.timeout,
                    isolation_level=None,
                    check_same_thread=False,
                )
            except sqlite3.Error as e:
                raise DatabaseError(
                    message=f"Cannot open database: {self.db_path}",
                    hint="Check the database path and its permissions",
                    details={"error": str(e)},
                ) from e
            self._configure_connection(conn)
            self._local.connection = conn
            with self._connections_lock:
                self._connections.append(conn)

        return cast(sqlite3.Connection, self._local.connection)

    def _configure_connection(self, conn: sqlite3.Connection) -> None:
        conn.execute(f"PRAGMA journal_mode = {self.journal_mode}")
        conn.execute(f"PRAGMA synchronous = {self.synchronous}")
        conn.execute("PRAGMA foreign_keys = ON")
        conn.row_factory = sqlite3.Row

    @contextmanager
    def get_connection(self) -> Generator[sqlite3.Connection, None, None]:
        """Get a database connection in a context manager.

        Yields:
            SQLite connection object
        """
        yield self._get_connection()

    @contextmanager
    def transaction(self) -> Generator[sqlite3.Connection, None, None]:
        """Execute operations in a write transaction.

        The write lock is taken up front (``BEGIN IMMEDIATE``) so that a
        read-then-write sequence cannot interleave with another writer.

        Yields:
            SQLite connection object in transaction mode
        """
        conn = self._get_connection()
        conn.execute("BEGIN IMMEDIATE")
        try:
            yield conn
            conn.commit()
        except Exception as e:
            logger.error("Transaction failed, rolling back", error=str(e))
            conn.rollback()
            raise

    def execute(self, sql: str, parameters: tuple[Any, ...] | dict[str, Any] = ()) -> sqlite3.Cursor:
        """Execute a single SQL statement outside an explicit transaction."""
        with self.get_connection() as conn:
            return conn.execute(sql, parameters)

    def close(self) -> None:
        """Close every connection opened by this manager."""
        with self._connections_lock:
            connections, self._connections = self._connections, []
        for conn in connections:
            conn.close()
        self._local = threading.local()
