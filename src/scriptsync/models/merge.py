"""Results of reconciling an incoming script into existing scene records."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from uuid import uuid4


class ConflictResolution(str, Enum):
    """Manual resolutions a reviewer may choose for a conflict."""

    KEEP_LOCAL = "Keep Local"
    USE_INCOMING = "Use Incoming"
    KEEP_BOTH = "Keep Both"


@dataclass
class MergeConflict:
    """A scene whose local edits blocked an incoming content change.

    The automatic merge always keeps the local content and leaves
    ``resolution`` unset.
    """

    scene_id: str
    scene_number: str
    local_change: str
    incoming_change: str
    resolution: ConflictResolution | None = None
    id: str = field(default_factory=lambda: str(uuid4()))


@dataclass
class MergeResult:
    """Summary of one reconciliation pass."""

    scenes_added: list[str] = field(default_factory=list)
    scenes_removed: list[str] = field(default_factory=list)
    scenes_modified: list[str] = field(default_factory=list)
    conflicts: list[MergeConflict] = field(default_factory=list)
    preserved_local_edits: int = 0

    @property
    def has_changes(self) -> bool:
        return bool(self.scenes_added or self.scenes_removed or self.scenes_modified)

    @property
    def has_conflicts(self) -> bool:
        return bool(self.conflicts)

    @property
    def summary(self) -> str:
        """Human-readable one-line summary, e.g. ``"2 added, 1 removed"``."""
        parts = []
        if self.scenes_added:
            parts.append(f"{len(self.scenes_added)} added")
        if self.scenes_modified:
            parts.append(f"{len(self.scenes_modified)} modified")
        if self.scenes_removed:
            parts.append(f"{len(self.scenes_removed)} removed")
        if self.preserved_local_edits > 0:
            parts.append(f"{self.preserved_local_edits} local edits preserved")
        return ", ".join(parts) if parts else "No changes"

    def to_dict(self) -> dict[str, object]:
        return {
            "scenes_added": list(self.scenes_added),
            "scenes_removed": list(self.scenes_removed),
            "scenes_modified": list(self.scenes_modified),
            "conflicts": [
                {
                    "scene_id": c.scene_id,
                    "scene_number": c.scene_number,
                    "local_change": c.local_change,
                    "incoming_change": c.incoming_change,
                    "resolution": c.resolution.value if c.resolution else None,
                }
                for c in self.conflicts
            ],
            "preserved_local_edits": self.preserved_local_edits,
            "summary": self.summary,
        }
