"""
Audit Models

Every significant ledger action is logged for audit purposes.
This provides:
1. Traceability of what was recorded and what was rejected
2. Debugging information when balances look wrong
3. A visible trail for ledger imbalance warnings

DESIGN DECISION: The audit trail only grows. Entries are never edited or removed.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Groups
    GROUP_CREATED = "group_created"

    # Splits
    SPLIT_COMPUTED = "split_computed"
    SPLIT_REJECTED = "split_rejected"

    # Ledger writes
    EVENT_RECORDED = "event_recorded"
    EVENT_REPLACED = "event_replaced"
    EVENT_REJECTED = "event_rejected"

    # Settlement
    SETTLEMENT_COMPUTED = "settlement_computed"
    LEDGER_IMBALANCE_DETECTED = "ledger_imbalance_detected"

    # System events
    SYSTEM_ERROR = "system_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    A single audit event.

    One row of the trail, tied to a group and optionally to one ledger event.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Context - what entity is this about?
    group_id: Optional[str] = Field(
        default=None,
        description="Group the event belongs to"
    )
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'expense', 'transfer', 'group')"
    )
    entity_id: Optional[str] = Field(
        default=None,
        description="ID of the entity this event relates to"
    )

    # Correlation - for tracking related events
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID to correlate related events (e.g., split + record of one expense)"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    # Error information (if applicable)
    error_code: Optional[str] = None
    error_message: Optional[str] = None

    is_user_action: bool = Field(
        default=False,
        description="Was this triggered by a user action?"
    )

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "group_id": self.group_id,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_code": self.error_code,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }


class AuditEventBuilder:
    """
    Factories for the audit events the ledger service emits.

    Usage:
        event = AuditEventBuilder.event_recorded(group_id, event_id, "expense", amount)
        event = AuditEventBuilder.settlement_computed(group_id, 2, total)
    """

    @staticmethod
    def group_created(
        group_id: str,
        name: str,
        participant_count: int,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.GROUP_CREATED,
            group_id=group_id,
            entity_type="group",
            entity_id=group_id,
            correlation_id=correlation_id,
            description=f"Group created: {name}",
            details={"participant_count": participant_count},
            is_user_action=True,
        )

    @staticmethod
    def split_computed(
        group_id: str,
        total: str,
        shares: dict[str, str],
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SPLIT_COMPUTED,
            group_id=group_id,
            entity_type="split",
            correlation_id=correlation_id,
            description=f"Split of {total} computed across {len(shares)} participants",
            details={"total": total, "shares": shares},
        )

    @staticmethod
    def split_rejected(
        group_id: str,
        error_code: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SPLIT_REJECTED,
            severity=AuditSeverity.WARNING,
            group_id=group_id,
            entity_type="split",
            correlation_id=correlation_id,
            description="Split could not be computed",
            error_code=error_code,
            error_message=error_message,
            is_user_action=True,
        )

    @staticmethod
    def event_recorded(
        group_id: str,
        event_id: str,
        kind: str,
        amount: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EVENT_RECORDED,
            group_id=group_id,
            entity_type=kind,
            entity_id=event_id,
            correlation_id=correlation_id,
            description=f"{kind.capitalize()} recorded: {amount}",
            details={"amount": amount},
            is_user_action=True,
        )

    @staticmethod
    def event_replaced(
        group_id: str,
        event_id: str,
        kind: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EVENT_REPLACED,
            group_id=group_id,
            entity_type=kind,
            entity_id=event_id,
            correlation_id=correlation_id,
            description=f"{kind.capitalize()} replaced",
            is_user_action=True,
        )

    @staticmethod
    def event_rejected(
        group_id: str,
        event_id: str,
        kind: str,
        issues: list[dict],
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EVENT_REJECTED,
            severity=AuditSeverity.WARNING,
            group_id=group_id,
            entity_type=kind,
            entity_id=event_id,
            correlation_id=correlation_id,
            description=f"{kind.capitalize()} rejected with {len(issues)} issues",
            details={"issues": issues},
            is_user_action=True,
        )

    @staticmethod
    def settlement_computed(
        group_id: str,
        instruction_count: int,
        total_expenses: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SETTLEMENT_COMPUTED,
            group_id=group_id,
            entity_type="settlement",
            correlation_id=correlation_id,
            description=f"Settlement computed: {instruction_count} payments",
            details={
                "instruction_count": instruction_count,
                "total_expenses": total_expenses,
            },
        )

    @staticmethod
    def ledger_imbalance(
        group_id: str,
        total: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LEDGER_IMBALANCE_DETECTED,
            severity=AuditSeverity.WARNING,
            group_id=group_id,
            entity_type="settlement",
            correlation_id=correlation_id,
            description=f"Net balances sum to {total} instead of zero",
            details={"total": total},
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"System error: {error_type}",
            error_message=error_message,
            details=details or {},
            correlation_id=correlation_id,
        )
