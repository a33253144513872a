"""Build the sync services a CLI command needs from settings."""

from __future__ import annotations

from dataclasses import dataclass, field

from scriptsync.config import ScriptSyncSettings, get_settings
from scriptsync.events import EventBus
from scriptsync.models.revision import SyncModule
from scriptsync.storage.connection import DatabaseConnection
from scriptsync.storage.kv_store import SQLiteKeyValueStore
from scriptsync.storage.scene_store import SQLiteSceneStore
from scriptsync.sync.document_loader import RevisionDocumentStore
from scriptsync.sync.registry import RevisionRegistry


def module_table(module: SyncModule) -> str:
    """Scene table owned by ``module``, e.g. ``shots_scenes``."""
    return f"{module.name.lower()}_scenes"


@dataclass
class SyncServices:
    """Services sharing one database connection."""

    connection: DatabaseConnection
    event_bus: EventBus = field(default_factory=EventBus)

    def __post_init__(self) -> None:
        self.kv_store = SQLiteKeyValueStore(self.connection)
        self.documents = RevisionDocumentStore(self.connection)
        self.registry = RevisionRegistry(
            self.kv_store,
            event_bus=self.event_bus,
            document_loader=self.documents,
        )
        self._stores: dict[SyncModule, SQLiteSceneStore] = {}

    @classmethod
    def from_settings(cls, settings: ScriptSyncSettings | None = None) -> SyncServices:
        return cls(DatabaseConnection.from_settings(settings or get_settings()))

    def scene_store(self, module: SyncModule) -> SQLiteSceneStore:
        if module not in self._stores:
            self._stores[module] = SQLiteSceneStore(self.connection, table=module_table(module))
        return self._stores[module]

    def close(self) -> None:
        self.connection.close()
