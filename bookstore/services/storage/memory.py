"""
In-Memory Storage Implementation

Used by tests and by anyone who wants a throwaway session.
Snapshots are deep-copied in both directions, so the caller can never
mutate what is "on disk" except through save().
"""

from typing import Optional

from bookstore.models.audit import AuditEvent
from bookstore.models.records import RecordSnapshot
from bookstore.services.storage.interface import (
    AuditStorageInterface,
    RecordStorageInterface,
    bootstrap_account,
)


class InMemoryRecordStorage(RecordStorageInterface):
    """Record storage held in a single snapshot object."""

    def __init__(self, snapshot: Optional[RecordSnapshot] = None):
        self._snapshot = snapshot.model_copy(deep=True) if snapshot else None
        self.save_count = 0

    def load(self) -> RecordSnapshot:
        if self._snapshot is None:
            return RecordSnapshot(accounts=[bootstrap_account()])
        return self._snapshot.model_copy(deep=True)

    def save(self, snapshot: RecordSnapshot) -> None:
        self._snapshot = snapshot.model_copy(deep=True)
        self.save_count += 1

    @property
    def saved(self) -> Optional[RecordSnapshot]:
        return self._snapshot


class InMemoryAuditStorage(AuditStorageInterface):
    """Audit storage held in a list."""

    def __init__(self):
        self._events: list[AuditEvent] = []

    def append_event(self, event: AuditEvent) -> bool:
        self._events.append(event)
        return True

    def get_recent_events(self, limit: Optional[int] = None) -> list[AuditEvent]:
        if limit is None:
            return list(self._events)
        return self._events[-limit:] if limit > 0 else []

    def get_events_by_actor(
        self,
        actor: Optional[str] = None,
        actor_privilege: Optional[int] = None,
    ) -> list[AuditEvent]:
        return [
            event for event in self._events
            if (actor is None or event.actor == actor)
            and (actor_privilege is None or event.actor_privilege == actor_privilege)
        ]
