"""
Storage Package

Abstract interfaces for the event store and audit log, plus in-memory
implementations. Real persistence and sync are left to the host app.
"""

from tripsplit.storage.interface import (
    AuditStorageInterface,
    DuplicateError,
    LedgerStorageInterface,
    NotFoundError,
    StorageError,
)
from tripsplit.storage.memory import InMemoryAuditStorage, InMemoryLedgerStorage

__all__ = [
    # Interfaces
    "AuditStorageInterface",
    "LedgerStorageInterface",
    # Exceptions
    "DuplicateError",
    "NotFoundError",
    "StorageError",
    # In-memory implementation
    "InMemoryAuditStorage",
    "InMemoryLedgerStorage",
]
