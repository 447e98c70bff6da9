"""
In-memory storage backends.

Used by tests and by callers that keep their own persistence and only
need the service layer's validation and audit flow.
"""

from typing import Optional
from uuid import UUID

from tripsplit.models.audit import AuditEvent
from tripsplit.models.ledger import AnyEvent, Group
from tripsplit.storage.interface import (
    AuditStorageInterface,
    DuplicateError,
    LedgerStorageInterface,
    NotFoundError,
)


class InMemoryLedgerStorage(LedgerStorageInterface):
    """Dict-backed ledger storage."""

    def __init__(self):
        self._groups: dict[str, Group] = {}
        self._events: dict[str, list[AnyEvent]] = {}

    def _require_group(self, group_id: str) -> list[AnyEvent]:
        if group_id not in self._groups:
            raise NotFoundError(f"Group not found: {group_id}")
        return self._events[group_id]

    async def save_group(self, group: Group) -> bool:
        if group.id in self._groups:
            raise DuplicateError(f"Group already exists: {group.id}")
        self._groups[group.id] = group
        self._events[group.id] = []
        return True

    async def get_group(self, group_id: str) -> Optional[Group]:
        return self._groups.get(group_id)

    async def save_event(self, group_id: str, event: AnyEvent) -> bool:
        events = self._require_group(group_id)
        if any(e.id == event.id for e in events):
            raise DuplicateError(f"Event already exists: {event.id}")
        events.append(event)
        return True

    async def replace_event(self, group_id: str, event: AnyEvent) -> bool:
        events = self._require_group(group_id)
        for index, existing in enumerate(events):
            if existing.id == event.id:
                events[index] = event
                return True
        raise NotFoundError(f"Event not found: {event.id}")

    async def get_event(self, group_id: str, event_id: str) -> Optional[AnyEvent]:
        for event in self._events.get(group_id, []):
            if event.id == event_id:
                return event
        return None

    async def list_events(self, group_id: str) -> list[AnyEvent]:
        return list(self._require_group(group_id))


class InMemoryAuditStorage(AuditStorageInterface):
    """Append-only list of audit events."""

    def __init__(self):
        self._events: list[AuditEvent] = []

    @property
    def events(self) -> list[AuditEvent]:
        return list(self._events)

    async def append_event(self, event: AuditEvent) -> bool:
        self._events.append(event)
        return True

    async def get_events_by_correlation_id(
        self,
        correlation_id: UUID,
    ) -> list[AuditEvent]:
        return [e for e in self._events if e.correlation_id == correlation_id]

    async def get_recent_events(self, limit: int = 100) -> list[AuditEvent]:
        return list(reversed(self._events))[:limit]
