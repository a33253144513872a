"""SQLite persistence for scene records and key-value slots."""

from scriptsync.storage.connection import DatabaseConnection
from scriptsync.storage.kv_store import (
    InMemoryKeyValueStore,
    KeyValueStore,
    SQLiteKeyValueStore,
)
from scriptsync.storage.records import (
    CONTENT_FIELDS,
    SCENE_FIELDS,
    SceneProvenanceFlags,
    SceneRecord,
)
from scriptsync.storage.scene_store import (
    ScenePredicate,
    SceneStore,
    SceneStoreSession,
    SQLiteSceneStore,
)

__all__ = [
    "CONTENT_FIELDS",
    "SCENE_FIELDS",
    "DatabaseConnection",
    "InMemoryKeyValueStore",
    "KeyValueStore",
    "SQLiteKeyValueStore",
    "SQLiteSceneStore",
    "ScenePredicate",
    "SceneProvenanceFlags",
    "SceneRecord",
    "SceneStore",
    "SceneStoreSession",
]
