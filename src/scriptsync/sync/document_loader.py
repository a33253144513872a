"""Lookup of the screenplay behind an authoring-side revision."""

from __future__ import annotations

import hashlib
import inspect
import json
import sqlite3
from collections.abc import Awaitable
from datetime import UTC, datetime
from typing import Protocol

from pydantic import ValidationError

from scriptsync.config import get_logger
from scriptsync.exceptions import DatabaseError
from scriptsync.models.revision import RevisionColor, StoredRevision
from scriptsync.models.screenplay import ScreenplayDocument
from scriptsync.parser.fdx_converter import FDXDocumentConverter
from scriptsync.storage.connection import DatabaseConnection

logger = get_logger(__name__)


class DocumentLoader(Protocol):
    """Resolves a revision identity to its parsed screenplay.

    Implementations may be synchronous or return an awaitable; either way
    a missing revision resolves to None.
    """

    def load(
        self, revision_id: str
    ) -> ScreenplayDocument | None | Awaitable[ScreenplayDocument | None]: ...


async def resolve_document(loader: DocumentLoader, revision_id: str) -> ScreenplayDocument | None:
    """Call ``loader`` and await the result when it is awaitable."""
    document = loader.load(revision_id)
    if inspect.isawaitable(document):
        document = await document
    return document


def decode_document(data: bytes, title: str | None = None) -> ScreenplayDocument | None:
    """Decode stored revision data.

    Document JSON is tried first, FDX second.

    Returns:
        The document, or None when the data is neither format
    """
    try:
        return ScreenplayDocument.decode(data)
    except (ValidationError, ValueError, json.JSONDecodeError):
        pass
    return FDXDocumentConverter().convert(data, title=title)


class RevisionDocumentStore:
    """Authoring-side revisions kept in the ``script_revisions`` table.

    Each row holds the raw file data of one imported revision. Importing
    the same bytes twice returns the existing revision.
    """

    SCHEMA = """
        CREATE TABLE IF NOT EXISTS script_revisions (
            id TEXT PRIMARY KEY,
            file_name TEXT NOT NULL,
            color_name TEXT NOT NULL,
            file_hash TEXT NOT NULL UNIQUE,
            scene_count INTEGER NOT NULL DEFAULT 0,
            page_count INTEGER NOT NULL DEFAULT 0,
            data BLOB NOT NULL,
            imported_at TEXT NOT NULL
        )
    """

    def __init__(self, connection: DatabaseConnection) -> None:
        self.connection = connection
        self.connection.execute(self.SCHEMA)

    @staticmethod
    def _row_to_revision(row: sqlite3.Row) -> StoredRevision:
        return StoredRevision(
            id=row["id"],
            file_name=row["file_name"],
            color_name=row["color_name"],
            file_hash=row["file_hash"],
            scene_count=row["scene_count"],
            page_count=row["page_count"],
            imported_at=datetime.fromisoformat(row["imported_at"]),
        )

    def import_revision(
        self,
        file_name: str,
        data: bytes,
        color_name: str | None = None,
    ) -> StoredRevision:
        """Store a revision's file data.

        Args:
            file_name: Original file name, kept for display
            data: FDX or document JSON bytes
            color_name: Revision color; defaults to the color after the
                most recent import's

        Returns:
            The new revision, or the existing one when the same data was
            already imported

        Raises:
            DatabaseError: If the data is not a screenplay or cannot be stored
        """
        file_hash = hashlib.sha256(data).hexdigest()
        existing = self.connection.execute(
            "SELECT * FROM script_revisions WHERE file_hash = ?", (file_hash,)
        ).fetchone()
        if existing is not None:
            logger.info(
                "Revision already imported",
                revision_id=existing["id"],
                file_name=file_name,
            )
            return self._row_to_revision(existing)

        document = decode_document(data, title=file_name)
        if document is None:
            raise DatabaseError(
                message=f"Cannot import '{file_name}': not an FDX or screenplay document",
                hint="Export the script as Final Draft (.fdx) and import that file",
            )

        revision = StoredRevision(
            file_name=file_name,
            color_name=color_name or self._next_color().value,
            file_hash=file_hash,
            scene_count=len(document.scene_heading_indices()),
            page_count=document.estimated_page_count,
            imported_at=datetime.now(UTC),
        )
        try:
            with self.connection.transaction() as conn:
                conn.execute(
                    """
                    INSERT INTO script_revisions (
                        id, file_name, color_name, file_hash,
                        scene_count, page_count, data, imported_at
                    ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        revision.id,
                        revision.file_name,
                        revision.color_name,
                        file_hash,
                        revision.scene_count,
                        revision.page_count,
                        sqlite3.Binary(data),
                        revision.imported_at.isoformat(),
                    ),
                )
        except sqlite3.Error as e:
            raise DatabaseError(
                message=f"Failed to store revision '{file_name}'",
                details={"error": str(e)},
            ) from e

        logger.info(
            "Imported revision",
            revision_id=revision.id,
            file_name=file_name,
            color=revision.color_name,
            scenes=revision.scene_count,
        )
        return revision

    def _next_color(self) -> RevisionColor:
        row = self.connection.execute(
            "SELECT color_name FROM script_revisions ORDER BY imported_at DESC, rowid DESC LIMIT 1"
        ).fetchone()
        if row is None:
            return RevisionColor.WHITE
        previous = RevisionColor.from_name(row["color_name"])
        return previous.next if previous else RevisionColor.WHITE

    def list_revisions(self) -> list[StoredRevision]:
        """All stored revisions, newest first."""
        rows = self.connection.execute(
            "SELECT * FROM script_revisions ORDER BY imported_at DESC, rowid DESC"
        ).fetchall()
        return [self._row_to_revision(row) for row in rows]

    def get(self, revision_id: str) -> StoredRevision | None:
        row = self.connection.execute(
            "SELECT * FROM script_revisions WHERE id = ?", (revision_id,)
        ).fetchone()
        return self._row_to_revision(row) if row else None

    def load(self, revision_id: str) -> ScreenplayDocument | None:
        """Parse a stored revision's data, or None if it is missing or unreadable."""
        row = self.connection.execute(
            "SELECT file_name, data FROM script_revisions WHERE id = ?", (revision_id,)
        ).fetchone()
        if row is None:
            return None
        document = decode_document(bytes(row["data"]), title=row["file_name"])
        if document is None:
            logger.warning("Stored revision data is unreadable", revision_id=revision_id)
        return document


class InMemoryDocumentLoader:
    """Documents registered directly by revision id."""

    def __init__(self, documents: dict[str, ScreenplayDocument] | None = None) -> None:
        self.documents: dict[str, ScreenplayDocument] = dict(documents or {})

    def add(self, revision_id: str, document: ScreenplayDocument) -> None:
        self.documents[revision_id] = document

    def load(self, revision_id: str) -> ScreenplayDocument | None:
        return self.documents.get(revision_id)
