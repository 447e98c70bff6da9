"""
Audit Logger

DESIGN DECISION: Every ledger write, rejection and settlement run is logged.
This provides:
1. Traceability of what was recorded and what was refused
2. A record of ledger imbalance warnings for later data clean-up
3. Debugging capability when someone disputes a balance

The audit logger:
- Is async so a slow audit backend doesn't shape the engine's API
- Gracefully handles failures (doesn't crash the app if logging fails)
- Supports correlation IDs to trace related events
"""

import logging
from typing import Optional
from uuid import UUID, uuid4

import structlog

from tripsplit.config import get_settings
from tripsplit.models.audit import AuditEvent, AuditEventBuilder
from tripsplit.storage import AuditStorageInterface


def configure_logging() -> None:
    """Configure structlog on top of stdlib logging from settings."""
    log_settings = get_settings().logging
    logging.basicConfig(format="%(message)s", level=log_settings.level)

    renderer = (
        structlog.processors.JSONRenderer()
        if log_settings.json_output
        else structlog.dev.ConsoleRenderer()
    )
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


configure_logging()


class AuditLogger:
    """
    Central audit logging service.

    Logs events both to:
    1. Structured local log (for debugging)
    2. An audit storage backend, when one is configured
    """

    def __init__(
        self,
        storage: Optional[AuditStorageInterface] = None,
    ):
        """
        Initialize audit logger.

        Args:
            storage: Storage backend for persistence.
                    If None, only logs locally.
        """
        self._storage = storage
        self._logger = structlog.get_logger("tripsplit.audit")

    async def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Always logs locally. Persists to storage if available.

        Returns True if storage write succeeded (or no storage configured).
        """
        log_dict = event.to_log_dict()

        if event.severity.value in ("error", "critical"):
            self._logger.error("audit_event", **log_dict)
        elif event.severity.value == "warning":
            self._logger.warning("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        if self._storage:
            try:
                return await self._storage.append_event(event)
            except Exception as e:
                # Log failure but don't raise
                self._logger.error(
                    "audit_storage_failed",
                    error=str(e),
                    event_id=str(event.event_id),
                )
                return False

        return True

    async def log_group_created(
        self,
        group_id: str,
        name: str,
        participant_count: int,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log group creation."""
        await self.log(AuditEventBuilder.group_created(
            group_id=group_id,
            name=name,
            participant_count=participant_count,
            correlation_id=correlation_id,
        ))

    async def log_split_computed(
        self,
        group_id: str,
        total: str,
        shares: dict[str, str],
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a computed split."""
        await self.log(AuditEventBuilder.split_computed(
            group_id=group_id,
            total=total,
            shares=shares,
            correlation_id=correlation_id,
        ))

    async def log_split_rejected(
        self,
        group_id: str,
        error_code: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a split the calculator refused."""
        await self.log(AuditEventBuilder.split_rejected(
            group_id=group_id,
            error_code=error_code,
            error_message=error_message,
            correlation_id=correlation_id,
        ))

    async def log_event_recorded(
        self,
        group_id: str,
        event_id: str,
        kind: str,
        amount: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a recorded ledger event."""
        await self.log(AuditEventBuilder.event_recorded(
            group_id=group_id,
            event_id=event_id,
            kind=kind,
            amount=amount,
            correlation_id=correlation_id,
        ))

    async def log_event_replaced(
        self,
        group_id: str,
        event_id: str,
        kind: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log an edited (replaced) ledger event."""
        await self.log(AuditEventBuilder.event_replaced(
            group_id=group_id,
            event_id=event_id,
            kind=kind,
            correlation_id=correlation_id,
        ))

    async def log_event_rejected(
        self,
        group_id: str,
        event_id: str,
        kind: str,
        issues: list[dict],
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a ledger event blocked by validation."""
        await self.log(AuditEventBuilder.event_rejected(
            group_id=group_id,
            event_id=event_id,
            kind=kind,
            issues=issues,
            correlation_id=correlation_id,
        ))

    async def log_settlement_computed(
        self,
        group_id: str,
        instruction_count: int,
        total_expenses: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a settlement run."""
        await self.log(AuditEventBuilder.settlement_computed(
            group_id=group_id,
            instruction_count=instruction_count,
            total_expenses=total_expenses,
            correlation_id=correlation_id,
        ))

    async def log_ledger_imbalance(
        self,
        group_id: str,
        total: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a ledger whose balances don't sum to zero."""
        await self.log(AuditEventBuilder.ledger_imbalance(
            group_id=group_id,
            total=total,
            correlation_id=correlation_id,
        ))

    async def log_error(
        self,
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log an error."""
        await self.log(AuditEventBuilder.system_error(
            error_type=error_type,
            error_message=error_message,
            details=details,
            correlation_id=correlation_id,
        ))


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a user action (e.g., adding an expense)
    and pass it through all subsequent operations.
    """
    return uuid4()
