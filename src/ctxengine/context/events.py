"""Lifecycle events emitted by the context engine."""

from collections.abc import Callable
from typing import Any

import structlog

logger = structlog.get_logger()

ANALYSIS_STARTED = "analysis_started"
ANALYSIS_COMPLETED = "analysis_completed"
ANALYSIS_ERROR = "analysis_error"
CONTEXT_CHANGED = "context_changed"
HISTORY_CLEARED = "history_cleared"
INITIALIZED = "initialized"

Listener = Callable[[Any], None]


class EventEmitter:
    """Synchronous publish/subscribe keyed by event name.

    Listener errors are logged and never reach the emitter.
    """

    def __init__(self) -> None:
        self._listeners: dict[str, list[Listener]] = {}

    def on(self, event: str, listener: Listener) -> None:
        self._listeners.setdefault(event, []).append(listener)

    def off(self, event: str, listener: Listener) -> None:
        listeners = self._listeners.get(event, [])
        if listener in listeners:
            listeners.remove(listener)

    def emit(self, event: str, payload: Any = None) -> None:
        for listener in list(self._listeners.get(event, [])):
            try:
                listener(payload)
            except Exception as e:
                logger.error("event_listener_failed", event_name=event, error=str(e))

    def listener_count(self, event: str) -> int:
        return len(self._listeners.get(event, []))
