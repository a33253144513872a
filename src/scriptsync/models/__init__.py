"""Data models for screenplays, revisions and merge results."""

from scriptsync.models.element import ScriptElement, ScriptElementType
from scriptsync.models.merge import ConflictResolution, MergeConflict, MergeResult
from scriptsync.models.revision import (
    RevisionColor,
    SentRevision,
    StoredRevision,
    SyncModule,
)
from scriptsync.models.scene_number import (
    SceneNumber,
    next_number_after,
    next_number_before,
    sorted_scene_numbers,
)
from scriptsync.models.scene_strip import SceneStrip
from scriptsync.models.screenplay import SceneSummary, ScreenplayDocument

__all__ = [
    "ConflictResolution",
    "MergeConflict",
    "MergeResult",
    "RevisionColor",
    "SceneNumber",
    "SceneStrip",
    "SceneSummary",
    "ScreenplayDocument",
    "ScriptElement",
    "ScriptElementType",
    "SentRevision",
    "StoredRevision",
    "SyncModule",
    "next_number_after",
    "next_number_before",
    "sorted_scene_numbers",
]
