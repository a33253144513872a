"""Per-draft preferences for syncing scripts into the consumer modules."""

from __future__ import annotations

import threading
from datetime import UTC, datetime
from enum import Enum

from pydantic import BaseModel, Field, TypeAdapter, ValidationError

from scriptsync.config import get_logger
from scriptsync.storage.kv_store import KeyValueStore

logger = get_logger(__name__)


class ScriptSyncMode(str, Enum):
    """How a draft's changes reach Breakdowns and the other modules."""

    AUTO = "auto"
    MANUAL = "manual"

    @property
    def display_name(self) -> str:
        return "Auto-Sync" if self is ScriptSyncMode.AUTO else "Manual"

    @property
    def description(self) -> str:
        if self is ScriptSyncMode.AUTO:
            return "The script syncs to Breakdowns, Scheduler and Shots automatically."
        return "The script is loaded into each module by hand when ready."


class ScriptSyncPreference(BaseModel):
    """Stored sync mode for one screenplay draft."""

    id: str
    sync_mode: ScriptSyncMode
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))


_PREFERENCES_ADAPTER = TypeAdapter(list[ScriptSyncPreference])


class SyncPreferenceManager:
    """Reads and writes per-draft sync modes.

    Drafts without a stored preference use ``default_mode``.
    """

    STORAGE_KEY = "scriptSyncPreferences"

    def __init__(
        self,
        kv_store: KeyValueStore,
        default_mode: ScriptSyncMode | str = ScriptSyncMode.AUTO,
        ask_on_new_script: bool = True,
    ) -> None:
        self.kv_store = kv_store
        self.default_mode = ScriptSyncMode(default_mode)
        self.ask_on_new_script = ask_on_new_script
        self._lock = threading.Lock()
        self._preferences = self._load()

    def _load(self) -> dict[str, ScriptSyncPreference]:
        raw = self.kv_store.get(self.STORAGE_KEY)
        if not raw:
            return {}
        try:
            decoded = _PREFERENCES_ADAPTER.validate_json(raw)
        except (ValidationError, ValueError) as e:
            logger.warning("Ignoring unreadable sync preferences", error=str(e))
            return {}
        logger.debug("Loaded sync preferences", count=len(decoded))
        return {preference.id: preference for preference in decoded}

    def _save(self, preferences: dict[str, ScriptSyncPreference]) -> None:
        self.kv_store.set(
            self.STORAGE_KEY, _PREFERENCES_ADAPTER.dump_json(list(preferences.values()))
        )
        self._preferences = preferences

    @property
    def preferences(self) -> dict[str, ScriptSyncPreference]:
        return dict(self._preferences)

    def sync_mode(self, draft_id: str) -> ScriptSyncMode:
        preference = self._preferences.get(draft_id)
        return preference.sync_mode if preference else self.default_mode

    def is_auto_sync_enabled(self, draft_id: str) -> bool:
        return self.sync_mode(draft_id) is ScriptSyncMode.AUTO

    def has_preference(self, draft_id: str) -> bool:
        return draft_id in self._preferences

    def set_sync_mode(self, draft_id: str, mode: ScriptSyncMode | str) -> ScriptSyncPreference:
        """Store ``mode`` for a draft, keeping its original creation time."""
        mode = ScriptSyncMode(mode)
        with self._lock:
            preferences = dict(self._preferences)
            existing = preferences.get(draft_id)
            if existing is not None:
                preference = existing.model_copy(
                    update={"sync_mode": mode, "updated_at": datetime.now(UTC)}
                )
            else:
                preference = ScriptSyncPreference(id=draft_id, sync_mode=mode)
            preferences[draft_id] = preference
            self._save(preferences)
        logger.info("Set sync mode", draft_id=draft_id, mode=mode.value)
        return preference

    def remove_preference(self, draft_id: str) -> bool:
        """Forget a draft's preference; returns False if none was stored."""
        with self._lock:
            if draft_id not in self._preferences:
                return False
            preferences = dict(self._preferences)
            del preferences[draft_id]
            self._save(preferences)
        return True
