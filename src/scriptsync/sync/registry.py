"""Registry of sent script revisions and their per-module load state."""

from __future__ import annotations

import threading
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime
from types import MappingProxyType

from pydantic import TypeAdapter, ValidationError

from scriptsync.config import get_logger
from scriptsync.events import EventBus, Signal
from scriptsync.exceptions import RevisionNotFoundError, StoreNotConfiguredError
from scriptsync.models.merge import MergeResult
from scriptsync.models.revision import SentRevision, StoredRevision, SyncModule
from scriptsync.storage.kv_store import KeyValueStore
from scriptsync.storage.scene_store import SceneStore
from scriptsync.sync.document_loader import DocumentLoader, resolve_document
from scriptsync.sync.reconciler import SceneReconciler

logger = get_logger(__name__)

_REVISIONS_ADAPTER = TypeAdapter(list[SentRevision])
_LATEST_ADAPTER = TypeAdapter(dict[SyncModule, str])


@dataclass(frozen=True)
class _RegistryState:
    revisions: tuple[SentRevision, ...] = ()
    latest_by_module: Mapping[SyncModule, str] = field(
        default_factory=lambda: MappingProxyType({})
    )


class RevisionRegistry:
    """Tracks published revisions and which modules have loaded them.

    One registry owns the persisted slots for a project. Writers are
    serialized by a lock and every mutation is written to the key-value
    store before it becomes visible, so readers only ever see persisted
    state. Revisions are kept newest first.

    Usage:
        registry = RevisionRegistry(kv_store, event_bus, document_loader)
        sent = registry.send_revision(stored_revision)
        if registry.has_updates_available(SyncModule.SHOTS):
            result = await registry.load_revision(sent, SyncModule.SHOTS, store)
    """

    SENT_REVISIONS_KEY = "sentScriptRevisions"
    LATEST_BY_MODULE_KEY = "latestRevisionByModule"

    def __init__(
        self,
        kv_store: KeyValueStore,
        event_bus: EventBus | None = None,
        document_loader: DocumentLoader | None = None,
        reconciler: SceneReconciler | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.kv_store = kv_store
        self.event_bus = event_bus or EventBus()
        self.document_loader = document_loader
        self.clock = clock or (lambda: datetime.now(UTC))
        self.reconciler = reconciler or SceneReconciler(clock=self.clock)
        self._lock = threading.RLock()
        self._state = self._read_persisted()

    # Persistence

    def _read_persisted(self) -> _RegistryState:
        revisions: list[SentRevision] = []
        latest: dict[SyncModule, str] = {}

        raw = self.kv_store.get(self.SENT_REVISIONS_KEY)
        if raw:
            try:
                revisions = _REVISIONS_ADAPTER.validate_json(raw)
            except (ValidationError, ValueError) as e:
                logger.warning("Ignoring unreadable sent revisions", error=str(e))

        raw = self.kv_store.get(self.LATEST_BY_MODULE_KEY)
        if raw:
            try:
                latest = _LATEST_ADAPTER.validate_json(raw)
            except (ValidationError, ValueError) as e:
                logger.warning("Ignoring unreadable latest revision map", error=str(e))

        logger.debug("Loaded revision registry", revisions=len(revisions))
        return _RegistryState(tuple(revisions), MappingProxyType(dict(latest)))

    def _commit(self, state: _RegistryState) -> None:
        """Persist ``state`` and then publish it; must hold the lock.

        Both slots are written together so they never disagree on disk.
        """
        self.kv_store.set_many(
            {
                self.SENT_REVISIONS_KEY: _REVISIONS_ADAPTER.dump_json(list(state.revisions)),
                self.LATEST_BY_MODULE_KEY: _LATEST_ADAPTER.dump_json(
                    dict(state.latest_by_module)
                ),
            }
        )
        self._state = state

    def reload(self) -> None:
        """Discard in-memory state and read the persisted slots again."""
        with self._lock:
            self._state = self._read_persisted()

    # Queries

    @property
    def sent_revisions(self) -> tuple[SentRevision, ...]:
        """All sent revisions, most recently sent first."""
        return self._state.revisions

    @property
    def latest_revision_by_module(self) -> dict[SyncModule, str]:
        return dict(self._state.latest_by_module)

    def get(self, sent_id: str) -> SentRevision | None:
        return next((r for r in self._state.revisions if r.id == sent_id), None)

    def get_by_revision_id(self, revision_id: str) -> SentRevision | None:
        return next((r for r in self._state.revisions if r.revision_id == revision_id), None)

    def has_updates_available(self, module: SyncModule) -> bool:
        """Whether ``module`` has a sent revision newer than what it last loaded."""
        state = self._state
        latest_id = state.latest_by_module.get(module)
        latest = (
            next((r for r in state.revisions if r.id == latest_id), None)
            if latest_id
            else None
        )
        if latest is None:
            return bool(state.revisions)
        return any(
            not revision.is_loaded_in(module) and revision.sent_date > latest.sent_date
            for revision in state.revisions
        )

    def get_latest_unloaded_revision(self, module: SyncModule) -> SentRevision | None:
        """Most recently sent revision not yet loaded into ``module``."""
        return next((r for r in self._state.revisions if not r.is_loaded_in(module)), None)

    # Mutations

    def send_revision(self, revision: StoredRevision) -> SentRevision:
        """Publish an authoring revision to every consumer module.

        Sending a revision that was already sent resets its load state in
        every module instead of adding a second entry.

        Raises:
            DatabaseError: If the registry cannot be persisted
        """
        with self._lock:
            state = self._state
            existing = next(
                (r for r in state.revisions if r.revision_id == revision.id), None
            )
            if existing is not None:
                sent = existing.with_loads_reset()
                revisions = tuple(sent if r.id == existing.id else r for r in state.revisions)
                latest = {
                    module: sent_id
                    for module, sent_id in state.latest_by_module.items()
                    if sent_id != existing.id
                }
            else:
                sent = SentRevision(
                    revision_id=revision.id,
                    color_name=revision.color_name,
                    file_name=revision.file_name,
                    sent_date=self.clock(),
                    scene_count=revision.scene_count,
                    page_count=revision.page_count,
                )
                revisions = (sent, *state.revisions)
                latest = dict(state.latest_by_module)

            self._commit(_RegistryState(revisions, MappingProxyType(latest)))

        logger.info(
            "Revision sent",
            revision_id=revision.id,
            sent_id=sent.id,
            color=sent.color_name,
            resent=existing is not None,
        )
        self.event_bus.emit(Signal.REVISION_SENT, {"revision_id": revision.id})
        return sent

    def _mark_loaded(self, sent_id: str, module: SyncModule) -> SentRevision | None:
        with self._lock:
            state = self._state
            current = next((r for r in state.revisions if r.id == sent_id), None)
            if current is None:
                return None
            updated = current.marked_loaded(module, self.clock())
            revisions = tuple(updated if r.id == sent_id else r for r in state.revisions)
            latest = {**state.latest_by_module, module: sent_id}
            self._commit(_RegistryState(revisions, MappingProxyType(latest)))
            return updated

    async def load_revision(
        self,
        revision: SentRevision,
        module: SyncModule,
        store: SceneStore | None,
    ) -> MergeResult:
        """Merge a sent revision into a module's scene records.

        The revision is marked loaded only after the merge has committed.

        Raises:
            StoreNotConfiguredError: If no store or document loader is available
            RevisionNotFoundError: If the revision's document cannot be found
            SaveError: If the merge transaction fails
        """
        if store is None:
            raise StoreNotConfiguredError(details={"module": module.value})
        if self.document_loader is None:
            raise StoreNotConfiguredError(
                message="No document loader configured",
                hint="Pass a document loader when creating the registry",
            )

        document = await resolve_document(self.document_loader, revision.revision_id)
        if document is None:
            raise RevisionNotFoundError(
                details={"revision_id": revision.revision_id, "sent_id": revision.id}
            )

        result = await self.reconciler.merge(document.scene_strips, store)

        if self._mark_loaded(revision.id, module) is None:
            logger.warning(
                "Loaded revision is no longer registered",
                sent_id=revision.id,
                module=module.value,
            )
        logger.info(
            "Revision loaded",
            sent_id=revision.id,
            module=module.value,
            summary=result.summary,
        )
        self.event_bus.emit(
            Signal.REVISION_LOADED,
            {"module": module.value, "revision_id": revision.id},
        )
        return result
