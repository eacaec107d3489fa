"""
In-memory storage implementations.

Used by the test suite and by sessions that should not touch disk.
"""

from collections import deque
from typing import Optional

from expense_tracker.models.audit import AuditEvent
from expense_tracker.services.storage.interface import (
    AuditSinkInterface,
    SettingsStoreInterface,
)


class InMemorySettingsStore(SettingsStoreInterface):
    """Settings area held in a plain dict."""

    def __init__(self, initial: Optional[dict[str, str]] = None):
        self._values: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._values.get(key)

    def set(self, key: str, value: str) -> None:
        self._values[key] = value

    def remove(self, key: str) -> None:
        self._values.pop(key, None)


class InMemoryAuditSink(AuditSinkInterface):
    """
    Append-only trail of audit events, oldest first.

    With `max_events` set, the oldest events are dropped once the
    trail is full.
    """

    def __init__(self, max_events: Optional[int] = None):
        self._events: deque[AuditEvent] = deque(maxlen=max_events)

    @property
    def events(self) -> list[AuditEvent]:
        return list(self._events)

    def append_event(self, event: AuditEvent) -> bool:
        self._events.append(event)
        return True

    def get_recent_events(self, limit: int = 100) -> list[AuditEvent]:
        return list(reversed(self._events))[:limit]
