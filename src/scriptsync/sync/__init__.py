"""Revision registry, reconciliation and breakdown sync services."""

from scriptsync.sync.breakdown_sync import BreakdownSync
from scriptsync.sync.document_loader import (
    DocumentLoader,
    InMemoryDocumentLoader,
    RevisionDocumentStore,
    decode_document,
    resolve_document,
)
from scriptsync.sync.preferences import (
    ScriptSyncMode,
    ScriptSyncPreference,
    SyncPreferenceManager,
)
from scriptsync.sync.reconciler import SceneReconciler
from scriptsync.sync.registry import RevisionRegistry

__all__ = [
    "BreakdownSync",
    "DocumentLoader",
    "InMemoryDocumentLoader",
    "RevisionDocumentStore",
    "RevisionRegistry",
    "SceneReconciler",
    "ScriptSyncMode",
    "ScriptSyncPreference",
    "SyncPreferenceManager",
    "decode_document",
    "resolve_document",
]
