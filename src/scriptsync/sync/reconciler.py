"""Reconcile incoming scene strips into a module's scene records.

Records are joined to strips by scene number. A pass runs four steps in a
fixed order against one snapshot of the existing records:

1. additions: incoming numbers with no existing record get a new record
2. removals: existing numbers missing from the incoming script are flagged
   as removed, never deleted
3. modifications: matched records take the incoming content unless they
   carry local edits, in which case a conflict is reported instead
4. reorder: every matched record moves to its incoming position

Additions and removals are computed before any record is touched so a
record modified in step 3 cannot change what steps 1 and 2 see.
"""

from __future__ import annotations

import asyncio
import sqlite3
from collections.abc import Callable, Iterable, Sequence
from datetime import UTC, datetime
from typing import Any

from scriptsync.config import get_logger
from scriptsync.exceptions import DatabaseError, SaveError
from scriptsync.models.merge import MergeConflict, MergeResult
from scriptsync.models.scene_strip import SceneStrip
from scriptsync.storage.records import CONTENT_FIELDS, SceneProvenanceFlags, SceneRecord
from scriptsync.storage.scene_store import SceneStore, SceneStoreSession
from scriptsync.utils.screenplay import ScreenplayUtils

logger = get_logger(__name__)

Clock = Callable[[], datetime]

LOCAL_CHANGE_DESCRIPTION = "Local edits exist"
INCOMING_CHANGE_DESCRIPTION = "Script content updated"


def _utc_now() -> datetime:
    return datetime.now(UTC)


def strip_content(strip: SceneStrip) -> dict[str, str]:
    """Content field values a record should hold for ``strip``."""
    return {
        "scene_slug": strip.raw_heading if strip.raw_heading is not None else strip.heading_line,
        "location_type": ScreenplayUtils.location_type(strip.int_ext),
        "script_location": strip.location,
        "time_of_day": strip.day_night,
    }


def strip_page_fields(strip: SceneStrip) -> dict[str, Any]:
    return {
        "page_number": str(strip.start_page),
        "page_eighths": strip.page_eighths,
        "page_eighths_string": ScreenplayUtils.format_page_eighths(strip.page_eighths),
    }


def group_by_number(records: Iterable[SceneRecord]) -> dict[str, list[SceneRecord]]:
    """Group records by scene number, preserving snapshot order within groups.

    Records without a number are grouped under the empty string.
    """
    groups: dict[str, list[SceneRecord]] = {}
    for record in records:
        groups.setdefault(record.number or "", []).append(record)
    return groups


def incoming_positions(strips: Sequence[SceneStrip]) -> dict[str, int]:
    """Map each incoming scene number to its 0-based document position.

    When a number repeats, its first position wins.
    """
    positions: dict[str, int] = {}
    for position, strip in enumerate(strips):
        number = strip.joinable_number
        if number is not None and number not in positions:
            positions[number] = position
    return positions


class SceneReconciler:
    """Merge engine joining incoming strips to existing records by number.

    Local edits always win: a record edited after its last import keeps its
    content and is reported as a conflict, while its page fields and
    position still follow the incoming script.
    """

    def __init__(self, clock: Clock | None = None) -> None:
        self.clock = clock or _utc_now

    def reconcile(
        self,
        strips: Sequence[SceneStrip],
        session: SceneStoreSession,
        now: datetime | None = None,
    ) -> MergeResult:
        """Run one reconciliation pass inside an open store session.

        Args:
            strips: Incoming scene strips in document order
            session: Open store transaction to read and write records through
            now: Timestamp recorded on created and modified records

        Returns:
            Summary of the changes made
        """
        now = now or self.clock()
        result = MergeResult()

        existing = session.fetch_scenes()
        existing_by_number = group_by_number(existing)
        incoming_numbers = {
            number for strip in strips if (number := strip.joinable_number) is not None
        }

        self._add_new_scenes(strips, existing_by_number, session, now, result)
        self._flag_removed_scenes(existing_by_number, incoming_numbers, result)
        self._apply_incoming_content(strips, existing_by_number, now, result)
        self._reorder(strips, existing)

        for record in existing:
            session.save(record)
        return result

    def _add_new_scenes(
        self,
        strips: Sequence[SceneStrip],
        existing_by_number: dict[str, list[SceneRecord]],
        session: SceneStoreSession,
        now: datetime,
        result: MergeResult,
    ) -> None:
        created: set[str] = set()
        for position, strip in enumerate(strips):
            number = strip.joinable_number
            # A repeated incoming number only creates one record
            if number is None or number in existing_by_number or number in created:
                continue
            created.add(number)
            fields: dict[str, Any] = {
                "id": strip.id,
                "number": number,
                **strip_content(strip),
                "sort_index": position,
                "display_order": position,
                "created_at": now,
                "updated_at": now,
                "imported_at": now,
                "provenance_flags": int(SceneProvenanceFlags.NEW_SCENE),
                **strip_page_fields(strip),
            }
            session.insert_scene(fields)
            result.scenes_added.append(strip.id)

    @staticmethod
    def _flag_removed_scenes(
        existing_by_number: dict[str, list[SceneRecord]],
        incoming_numbers: set[str],
        result: MergeResult,
    ) -> None:
        for number, records in existing_by_number.items():
            if not number.strip() or number in incoming_numbers:
                continue
            for record in records:
                record.add_provenance(SceneProvenanceFlags.REMOVED)
                result.scenes_removed.append(record.id)

    @staticmethod
    def _apply_incoming_content(
        strips: Sequence[SceneStrip],
        existing_by_number: dict[str, list[SceneRecord]],
        now: datetime,
        result: MergeResult,
    ) -> None:
        for strip in strips:
            number = strip.joinable_number
            if number is None or not existing_by_number.get(number):
                continue
            record = existing_by_number[number][0]

            if record.has_local_edits:
                result.conflicts.append(
                    MergeConflict(
                        scene_id=record.id,
                        scene_number=number,
                        local_change=LOCAL_CHANGE_DESCRIPTION,
                        incoming_change=INCOMING_CHANGE_DESCRIPTION,
                    )
                )
                result.preserved_local_edits += 1
            else:
                content = strip_content(strip)
                if any(
                    record.has_field(name) and record.get(name) != value
                    for name, value in content.items()
                ):
                    for name in CONTENT_FIELDS:
                        record.set_if_present(name, content[name])
                    record.set_if_present("updated_at", now)
                    record.add_provenance(SceneProvenanceFlags.MODIFIED)
                    if record.id not in result.scenes_modified:
                        result.scenes_modified.append(record.id)

            for name, value in strip_page_fields(strip).items():
                record.set_if_present(name, value)

    @staticmethod
    def _reorder(strips: Sequence[SceneStrip], existing: Iterable[SceneRecord]) -> None:
        positions = incoming_positions(strips)
        for record in existing:
            position = positions.get(record.number or "")
            if position is None:
                continue
            if record.get("sort_index") != position:
                record.set_if_present("sort_index", position)
                record.set_if_present("display_order", position)

    def merge_sync(self, strips: Sequence[SceneStrip], store: SceneStore) -> MergeResult:
        """Reconcile ``strips`` into ``store`` as one atomic transaction.

        Raises:
            SaveError: If the store fails to read or commit; nothing is written
        """
        now = self.clock()
        try:
            with store.transaction() as session:
                result = self.reconcile(strips, session, now=now)
        except DatabaseError as e:
            raise SaveError(e, details={"error": e.message}) from e
        except sqlite3.Error as e:
            raise SaveError(e) from e

        logger.info(
            "Merge completed",
            added=len(result.scenes_added),
            removed=len(result.scenes_removed),
            modified=len(result.scenes_modified),
            conflicts=len(result.conflicts),
        )
        return result

    async def merge(self, strips: Sequence[SceneStrip], store: SceneStore) -> MergeResult:
        """Reconcile without blocking the event loop.

        Merges against the same store are serialized by its merge lock;
        merges against different stores run independently.
        """
        async with store.merge_lock:
            return await asyncio.to_thread(self.merge_sync, list(strips), store)

