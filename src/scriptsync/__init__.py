"""ScriptSync: screenplay revision sync for production modules.

ScriptSync parses Final Draft (FDX) scripts into scene strips, tracks which
script revisions have been sent to the Scheduler, Shots and Breakdowns
modules, and merges each revision into a module's scene records while
keeping local edits.
"""

from .config import ScriptSyncSettings, get_logger, get_settings
from .events import EventBus, Signal
from .exceptions import (
    DraftNotFoundError,
    RevisionNotFoundError,
    SaveError,
    ScriptSyncError,
    SyncError,
)
from .models import (
    MergeConflict,
    MergeResult,
    RevisionColor,
    SceneStrip,
    ScreenplayDocument,
    ScriptElement,
    ScriptElementType,
    SentRevision,
    StoredRevision,
    SyncModule,
)
from .pagination import scene_strips
from .parser import FDXDocumentConverter, FDXParser, FDXScene
from .sync import BreakdownSync, RevisionRegistry, SceneReconciler, SyncPreferenceManager

__version__ = "0.1.0"
__license__ = "MIT"

__all__ = [
    "BreakdownSync",
    "DraftNotFoundError",
    "EventBus",
    "FDXDocumentConverter",
    "FDXParser",
    "FDXScene",
    "MergeConflict",
    "MergeResult",
    "RevisionColor",
    "RevisionNotFoundError",
    "RevisionRegistry",
    "SaveError",
    "SceneReconciler",
    "SceneStrip",
    "ScreenplayDocument",
    "ScriptElement",
    "ScriptElementType",
    "ScriptSyncError",
    "ScriptSyncSettings",
    "SentRevision",
    "Signal",
    "StoredRevision",
    "SyncError",
    "SyncModule",
    "SyncPreferenceManager",
    "get_logger",
    "get_settings",
    "scene_strips",
]
