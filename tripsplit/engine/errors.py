"""
Ledger error taxonomy.

Structural errors are raised at the boundary (split computation or event
creation) and block the event from being recorded. The soft ledger
imbalance condition is not an exception; see ``LedgerImbalance``.
"""

from decimal import Decimal
from typing import Optional


class LedgerError(Exception):
    """Base exception for ledger errors."""

    def __init__(self, message: str, field: Optional[str] = None):
        self.message = message
        self.field = field
        super().__init__(message)


class InvalidAmountError(LedgerError):
    """Non-positive amount on an event, or negative amount on a split."""
    pass


class OverAllocatedSplitError(LedgerError):
    """Locked split amounts exceed the expense total."""

    def __init__(self, excess: Decimal, message: str):
        self.excess = excess
        super().__init__(message, field="splits")


class SplitMismatchError(LedgerError):
    """An expense's split sum disagrees with its total."""

    def __init__(self, difference: Decimal, message: str):
        self.difference = difference
        super().__init__(message, field="splits")


class UnknownParticipantError(LedgerError):
    """A record references a participant who is not in the group."""

    def __init__(self, participant_id: str, message: str, field: Optional[str] = None):
        self.participant_id = participant_id
        super().__init__(message, field=field)


class InvalidEventError(LedgerError):
    """Any other structural problem (self-transfer, duplicate split entry)."""
    pass
