"""Event validation package."""

from tripsplit.validation.validator import LedgerValidator

__all__ = ["LedgerValidator"]
