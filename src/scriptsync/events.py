"""In-process notifications for revision and breakdown sync activity."""

from __future__ import annotations

import threading
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any

from scriptsync.config import get_logger

logger = get_logger(__name__)


class Signal(str, Enum):
    """Named notifications emitted by the sync services."""

    REVISION_SENT = "scriptRevisionSent"
    REVISION_LOADED = "scriptRevisionLoaded"
    BREAKDOWN_SYNC_COMPLETED = "screenplayBreakdownSyncCompleted"


@dataclass(frozen=True)
class Event:
    """One emitted notification."""

    signal: Signal
    payload: Mapping[str, Any]
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))


EventHandler = Callable[[Event], None]


class EventBus:
    """Synchronous pub/sub bus.

    Delivery is fire-and-forget: each current subscriber receives an event
    at most once, and a failing handler is logged without affecting the
    emitter or other subscribers.

    Usage:
        bus = EventBus()
        unsubscribe = bus.subscribe(Signal.REVISION_SENT, handler)
        bus.emit(Signal.REVISION_SENT, {"revision_id": "..."})
        unsubscribe()
    """

    def __init__(self) -> None:
        self._handlers: dict[Signal, list[EventHandler]] = {}
        self._lock = threading.Lock()

    def subscribe(self, signal: Signal, handler: EventHandler) -> Callable[[], None]:
        """Register ``handler`` for ``signal``.

        Returns:
            Callable that removes the subscription
        """
        with self._lock:
            self._handlers.setdefault(signal, []).append(handler)

        def unsubscribe() -> None:
            with self._lock:
                handlers = self._handlers.get(signal, [])
                if handler in handlers:
                    handlers.remove(handler)

        return unsubscribe

    def subscriber_count(self, signal: Signal) -> int:
        with self._lock:
            return len(self._handlers.get(signal, []))

    def emit(self, signal: Signal, payload: Mapping[str, Any] | None = None) -> Event:
        """Deliver an event to the subscribers registered right now."""
        event = Event(signal=signal, payload=dict(payload or {}))
        with self._lock:
            handlers = list(self._handlers.get(signal, []))

        for handler in handlers:
            try:
                handler(event)
            except Exception as e:
                logger.error(
                    "Event handler failed",
                    signal=signal.value,
                    handler=getattr(handler, "__qualname__", repr(handler)),
                    error=str(e),
                )
        return event
