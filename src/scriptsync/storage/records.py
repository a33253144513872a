"""Schema-aware scene records.

Consumer modules evolve their scene schemas independently, so a record
only accepts writes to fields its table actually has. Writing an unknown
field is a silent no-op rather than an error.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from datetime import UTC, datetime
from enum import IntFlag
from typing import Any


class SceneProvenanceFlags(IntFlag):
    """Bits recording what the most recent sync did to a record."""

    NONE = 0
    RENUMBERED = 1 << 0
    MOVED = 1 << 1
    CONFLICT = 1 << 2
    SAFE_CHANGE = 1 << 3
    NEW_SCENE = 1 << 4
    REMOVED = 1 << 5
    MODIFIED = 1 << 6


# Fields a full scene table carries, in column order
SCENE_FIELDS: tuple[str, ...] = (
    "id",
    "number",
    "scene_slug",
    "location_type",
    "script_location",
    "time_of_day",
    "sort_index",
    "display_order",
    "page_number",
    "page_eighths",
    "page_eighths_string",
    "created_at",
    "updated_at",
    "imported_at",
    "last_local_edit",
    "provenance_flags",
    "script_text",
    "script_fdx",
    "breakdown_version_id",
)

TIMESTAMP_FIELDS = frozenset({"created_at", "updated_at", "imported_at", "last_local_edit"})

# Fields compared when deciding whether incoming script content changed
CONTENT_FIELDS: tuple[str, ...] = (
    "scene_slug",
    "location_type",
    "script_location",
    "time_of_day",
)


def to_timestamp(value: Any) -> datetime | None:
    """Convert a stored timestamp to an aware datetime (naive means UTC)."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        parsed = datetime.fromisoformat(str(value))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


class SceneRecord:
    """A scene row with checked field access and dirty tracking."""

    def __init__(
        self,
        values: Mapping[str, Any],
        known_fields: Iterable[str],
    ) -> None:
        self.known_fields = frozenset(known_fields)
        self._values: dict[str, Any] = {}
        for name, value in values.items():
            if name in self.known_fields:
                self._values[name] = to_timestamp(value) if name in TIMESTAMP_FIELDS else value
        self._dirty: set[str] = set()

    def __repr__(self) -> str:
        return f"SceneRecord(id={self.id!r}, number={self.number!r})"

    @property
    def id(self) -> str:
        return str(self._values.get("id"))

    @property
    def number(self) -> str | None:
        return self._values.get("number")

    def has_field(self, name: str) -> bool:
        return name in self.known_fields

    def get(self, name: str, default: Any = None) -> Any:
        return self._values.get(name, default)

    def set_if_present(self, name: str, value: Any) -> bool:
        """Write ``name`` when the schema has it.

        Returns:
            True if the field exists and was written
        """
        if name not in self.known_fields:
            return False
        if name in TIMESTAMP_FIELDS:
            value = to_timestamp(value)
        self._values[name] = value
        self._dirty.add(name)
        return True

    @property
    def dirty_fields(self) -> dict[str, Any]:
        return {name: self._values.get(name) for name in sorted(self._dirty)}

    def mark_clean(self) -> None:
        self._dirty.clear()

    def as_dict(self) -> dict[str, Any]:
        return dict(self._values)

    @property
    def provenance(self) -> SceneProvenanceFlags:
        return SceneProvenanceFlags(int(self._values.get("provenance_flags") or 0))

    def add_provenance(self, flag: SceneProvenanceFlags) -> None:
        """OR ``flag`` into the record's provenance, keeping other bits."""
        self.set_if_present("provenance_flags", int(self.provenance | flag))

    @property
    def is_new(self) -> bool:
        return SceneProvenanceFlags.NEW_SCENE in self.provenance

    @property
    def is_modified(self) -> bool:
        return SceneProvenanceFlags.MODIFIED in self.provenance

    @property
    def is_removed(self) -> bool:
        return SceneProvenanceFlags.REMOVED in self.provenance

    @property
    def has_local_edits(self) -> bool:
        """True when the record was edited after it was last imported."""
        imported_at = self._values.get("imported_at")
        last_local_edit = self._values.get("last_local_edit")
        if imported_at is None or last_local_edit is None:
            return False
        return bool(last_local_edit > imported_at)
