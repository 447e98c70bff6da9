"""
Data Models Package

This package contains all Pydantic models used by the ledger.
All data flowing through the engine must conform to these schemas.
"""

from tripsplit.models.ledger import (
    AnyEvent,
    EventKind,
    ExpenseEvent,
    Group,
    IncomeEvent,
    LedgerEvent,
    Participant,
    Split,
    TransferEvent,
    ValidationIssue,
    ValidationResult,
    parse_event,
    parse_events,
)
from tripsplit.models.settlement import (
    BalanceRecord,
    ContributingEvent,
    CostBreakdownItem,
    ExpenseGroup,
    LedgerImbalance,
    PersonalDebt,
    SettlementInstruction,
    SettlementResult,
)
from tripsplit.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Ledger models
    "AnyEvent",
    "EventKind",
    "ExpenseEvent",
    "Group",
    "IncomeEvent",
    "LedgerEvent",
    "Participant",
    "Split",
    "TransferEvent",
    "ValidationIssue",
    "ValidationResult",
    "parse_event",
    "parse_events",
    # Settlement models
    "BalanceRecord",
    "ContributingEvent",
    "CostBreakdownItem",
    "ExpenseGroup",
    "LedgerImbalance",
    "PersonalDebt",
    "SettlementInstruction",
    "SettlementResult",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
