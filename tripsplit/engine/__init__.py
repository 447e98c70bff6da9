"""Settlement engine package."""

from tripsplit.engine.balances import aggregate, apply_transfers
from tripsplit.engine.errors import (
    InvalidAmountError,
    InvalidEventError,
    LedgerError,
    OverAllocatedSplitError,
    SplitMismatchError,
    UnknownParticipantError,
)
from tripsplit.engine.matcher import (
    check_ledger_balance,
    find_contributing_events,
    settle,
)
from tripsplit.engine.pipeline import calculate_settlements, total_expenses
from tripsplit.engine.split import SplitCheck, compute_split, validate_split

__all__ = [
    # Phases
    "aggregate",
    "apply_transfers",
    "calculate_settlements",
    "check_ledger_balance",
    "compute_split",
    "find_contributing_events",
    "settle",
    "total_expenses",
    "validate_split",
    "SplitCheck",
    # Exceptions
    "InvalidAmountError",
    "InvalidEventError",
    "LedgerError",
    "OverAllocatedSplitError",
    "SplitMismatchError",
    "UnknownParticipantError",
]
