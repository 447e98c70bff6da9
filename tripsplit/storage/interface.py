"""
Abstract Storage Interface

DESIGN DECISION: The settlement engine never talks to storage directly.
The service layer reads a full snapshot of a group's events through this
interface and hands it to the pure engine functions. This allows us to:
1. Plug in local persistence or a cloud backup without touching the engine
2. Run the service against in-memory dicts in tests
3. Keep business logic decoupled from storage implementation

The interface is intentionally small: just the operations a ledger needs.
"""

from abc import ABC, abstractmethod
from typing import Optional
from uuid import UUID

from tripsplit.models.audit import AuditEvent
from tripsplit.models.ledger import AnyEvent, Group


class LedgerStorageInterface(ABC):
    """
    Abstract interface for group and event storage.

    Events are replaced wholesale on edit; they are never patched.
    """

    @abstractmethod
    async def save_group(self, group: Group) -> bool:
        """
        Save a new group.

        Raises:
            DuplicateError: If a group with the same id exists
        """
        pass

    @abstractmethod
    async def get_group(self, group_id: str) -> Optional[Group]:
        """Retrieve a group by id, or None if missing."""
        pass

    @abstractmethod
    async def save_event(self, group_id: str, event: AnyEvent) -> bool:
        """
        Append a new event to a group's ledger.

        Raises:
            NotFoundError: If the group doesn't exist
            DuplicateError: If an event with the same id exists
        """
        pass

    @abstractmethod
    async def replace_event(self, group_id: str, event: AnyEvent) -> bool:
        """
        Replace an existing event (same id) with a new record.

        Raises:
            NotFoundError: If the group or the event doesn't exist
        """
        pass

    @abstractmethod
    async def get_event(self, group_id: str, event_id: str) -> Optional[AnyEvent]:
        """Retrieve one event, or None if missing."""
        pass

    @abstractmethod
    async def list_events(self, group_id: str) -> list[AnyEvent]:
        """
        Full snapshot of a group's events in recording order.

        Raises:
            NotFoundError: If the group doesn't exist
        """
        pass


class AuditStorageInterface(ABC):
    """
    Persistence for the audit trail.

    Writes only ever append; recorded entries stay as they were.
    """

    @abstractmethod
    async def append_event(self, event: AuditEvent) -> bool:
        """
        Persist one audit event.

        Returns:
            True if logged successfully
        """
        pass

    @abstractmethod
    async def get_events_by_correlation_id(
        self,
        correlation_id: UUID,
    ) -> list[AuditEvent]:
        """Get all events for a correlation ID, in chronological order."""
        pass

    @abstractmethod
    async def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[AuditEvent]:
        """
        Latest audit events, capped at ``limit``.

        Returns:
            List of recent events (newest first)
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class NotFoundError(StorageError):
    """Entity not found in storage."""
    pass


class DuplicateError(StorageError):
    """Attempted to insert a duplicate entity."""
    pass
