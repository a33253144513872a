"""Populate Breakdowns scene records straight from a screenplay draft."""

from __future__ import annotations

import asyncio
import sqlite3
from collections.abc import Callable
from datetime import UTC, datetime
from uuid import uuid4

from scriptsync.config import get_logger
from scriptsync.events import EventBus, Signal
from scriptsync.exceptions import DatabaseError, DraftNotFoundError, SaveError
from scriptsync.models.screenplay import ScreenplayDocument
from scriptsync.parser.fdx_writer import extract_scene_text, generate_scene_fdx
from scriptsync.storage.scene_store import SQLiteSceneStore
from scriptsync.sync.document_loader import DocumentLoader, resolve_document
from scriptsync.sync.preferences import ScriptSyncMode, SyncPreferenceManager
from scriptsync.utils.screenplay import ScreenplayUtils

logger = get_logger(__name__)


class BreakdownSync:
    """Creates one Breakdowns scene record per scene of a draft.

    Unlike a revision load this does not reconcile: every call inserts
    fresh records, optionally after clearing the existing ones.
    """

    def __init__(
        self,
        event_bus: EventBus | None = None,
        draft_loader: DocumentLoader | None = None,
        preferences: SyncPreferenceManager | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.event_bus = event_bus or EventBus()
        self.draft_loader = draft_loader
        self.preferences = preferences
        self.clock = clock or (lambda: datetime.now(UTC))

    def sync_mode(self, draft_id: str) -> ScriptSyncMode:
        if self.preferences is None:
            return ScriptSyncMode.AUTO
        return self.preferences.sync_mode(draft_id)

    def should_auto_sync(self, draft_id: str) -> bool:
        return self.sync_mode(draft_id) is ScriptSyncMode.AUTO

    def _write_scenes(
        self,
        document: ScreenplayDocument,
        store: SQLiteSceneStore,
        clear_existing: bool,
        breakdown_version_id: str | None,
    ) -> int:
        now = self.clock()
        scenes = document.scenes
        if not scenes:
            logger.warning(
                "Document has no scenes to sync",
                document_id=document.id,
                elements=len(document.elements),
            )

        with store.transaction() as session:
            if clear_existing:
                for record in session.fetch_scenes():
                    session.delete_scene(record.id)

            for position, scene in enumerate(scenes):
                parts = ScreenplayUtils.parse_scene_heading(scene.heading)
                fields = {
                    "id": str(uuid4()),
                    "number": scene.number,
                    "scene_slug": scene.heading,
                    "location_type": ScreenplayUtils.location_type(parts.int_ext),
                    "script_location": parts.location,
                    "time_of_day": parts.day_night,
                    "sort_index": position,
                    "display_order": position,
                    "page_eighths": scene.page_eighths,
                    "page_eighths_string": ScreenplayUtils.format_page_eighths(
                        scene.page_eighths
                    ),
                    "created_at": now,
                    "updated_at": now,
                    "imported_at": now,
                    "script_text": extract_scene_text(document, scene.element_index),
                    "script_fdx": generate_scene_fdx(
                        document, scene.element_index, scene.number
                    ),
                }
                if breakdown_version_id is not None:
                    fields["breakdown_version_id"] = breakdown_version_id
                session.insert_scene(fields)

        return len(scenes)

    async def sync_to_breakdowns(
        self,
        document: ScreenplayDocument,
        store: SQLiteSceneStore,
        clear_existing: bool = False,
        breakdown_version_id: str | None = None,
    ) -> int:
        """Create scene records for every scene in ``document``.

        Args:
            document: Draft to import
            store: Breakdowns scene store
            clear_existing: Delete the store's records first
            breakdown_version_id: Tag written on every created record

        Returns:
            Number of records created

        Raises:
            SaveError: If the store transaction fails; nothing is written
        """
        try:
            async with store.merge_lock:
                created = await asyncio.to_thread(
                    self._write_scenes, document, store, clear_existing, breakdown_version_id
                )
        except (DatabaseError, sqlite3.Error) as e:
            raise SaveError(e) from e

        logger.info(
            "Synced scenes to Breakdowns",
            created=created,
            cleared=clear_existing,
            version=breakdown_version_id,
        )
        self.event_bus.emit(Signal.BREAKDOWN_SYNC_COMPLETED, {"created": created})
        return created

    async def load_draft_to_breakdowns(
        self,
        draft_id: str,
        store: SQLiteSceneStore,
        breakdown_version_id: str | None = None,
    ) -> int:
        """Replace the Breakdowns scenes with those of a stored draft.

        Raises:
            DraftNotFoundError: If the draft cannot be loaded
            SaveError: If the store transaction fails
        """
        document = None
        if self.draft_loader is not None:
            document = await resolve_document(self.draft_loader, draft_id)
        if document is None:
            raise DraftNotFoundError(details={"draft_id": draft_id})

        return await self.sync_to_breakdowns(
            document,
            store,
            clear_existing=True,
            breakdown_version_id=breakdown_version_id,
        )

    async def load_draft_to_breakdowns_if_auto_sync(
        self,
        draft_id: str,
        store: SQLiteSceneStore,
        breakdown_version_id: str | None = None,
    ) -> int:
        """Like :meth:`load_draft_to_breakdowns` but returns 0 for manual drafts."""
        if not self.should_auto_sync(draft_id):
            logger.debug("Auto-sync disabled for draft, skipping", draft_id=draft_id)
            return 0
        return await self.load_draft_to_breakdowns(
            draft_id, store, breakdown_version_id=breakdown_version_id
        )
