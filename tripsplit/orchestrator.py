"""
Ledger Service

This module ties the pure engine to storage and the audit trail and
defines the end-to-end flows for:
1. Recording (split -> validate -> save -> audit)
2. Settling (snapshot -> aggregate -> transfers -> match -> audit)

DESIGN DECISION: The service enforces the boundaries:
- Nothing is recorded unless it passes validation
- Rejected entries are audited and the error is re-raised to the caller
- Settlement always runs on a fresh full snapshot, never on cached balances
- A ledger imbalance is reported alongside the result, never raised
"""

from decimal import Decimal
from typing import Mapping, Optional, Sequence
from uuid import UUID, uuid4

from pydantic import ValidationError

from tripsplit.audit import AuditLogger, create_correlation_id
from tripsplit.engine.errors import InvalidAmountError, InvalidEventError, LedgerError
from tripsplit.engine.pipeline import calculate_settlements
from tripsplit.engine.split import compute_split
from tripsplit.models.ledger import (
    AnyEvent,
    ExpenseEvent,
    Group,
    IncomeEvent,
    Participant,
    Split,
    TransferEvent,
)
from tripsplit.models.money import MoneyLike, to_decimal
from tripsplit.models.settlement import CostBreakdownItem, PersonalDebt, SettlementResult
from tripsplit.reports import (
    generate_cost_breakdown,
    generate_share_text,
    local_user_debts,
)
from tripsplit.storage import (
    InMemoryAuditStorage,
    InMemoryLedgerStorage,
    LedgerStorageInterface,
    NotFoundError,
)
from tripsplit.validation import LedgerValidator


class LedgerService:
    """
    Orchestrates ledger writes and settlement runs for groups.

    Writes:
    1. Build the event (computing the split if needed)
    2. Validate against the group; errors block the write
    3. Save to storage
    4. Audit the outcome
    """

    def __init__(
        self,
        storage: Optional[LedgerStorageInterface] = None,
        validator: Optional[LedgerValidator] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._storage = storage or InMemoryLedgerStorage()
        self._validator = validator or LedgerValidator()
        self._audit_logger = audit_logger

    async def _require_group(self, group_id: str) -> Group:
        group = await self._storage.get_group(group_id)
        if group is None:
            raise NotFoundError(f"Group not found: {group_id}")
        return group

    async def create_group(
        self,
        name: str,
        participants: Sequence[Participant],
        correlation_id: Optional[UUID] = None,
    ) -> Group:
        """Create and store a new group."""
        group = Group(name=name, participants=list(participants))
        await self._storage.save_group(group)

        if self._audit_logger:
            await self._audit_logger.log_group_created(
                group_id=group.id,
                name=group.name,
                participant_count=len(group.participants),
                correlation_id=correlation_id,
            )
        return group

    async def _build(
        self,
        group: Group,
        model: type,
        correlation_id: UUID,
        **fields,
    ) -> AnyEvent:
        """
        Construct an event from caller input.

        Schema failures (sub-cent amounts, blank ids, unparseable numbers)
        are audited as rejections and re-raised as LedgerError subclasses.
        """
        fields.setdefault("id", uuid4().hex)
        try:
            return model(**fields)
        except ValidationError as e:
            issues = []
            for err in e.errors():
                loc = err["loc"]
                issues.append({
                    "field": ".".join(str(part) for part in loc) or None,
                    "type": "invalid_amount" if loc and loc[-1] == "amount" else "invalid_event",
                    "message": err["msg"],
                })

            if self._audit_logger:
                await self._audit_logger.log_event_rejected(
                    group_id=group.id,
                    event_id=fields["id"],
                    kind=model.model_fields["kind"].default,
                    issues=issues,
                    correlation_id=correlation_id,
                )

            first = issues[0]
            error_cls = InvalidAmountError if first["type"] == "invalid_amount" else InvalidEventError
            raise error_cls(first["message"], field=first["field"]) from e

    async def _record(
        self,
        group: Group,
        event: AnyEvent,
        correlation_id: UUID,
        replace: bool = False,
    ) -> AnyEvent:
        result = self._validator.validate(event, group)
        if not result.is_valid:
            if self._audit_logger:
                await self._audit_logger.log_event_rejected(
                    group_id=group.id,
                    event_id=event.id,
                    kind=event.kind,
                    issues=[
                        {"field": i.field, "type": i.issue_type, "message": i.message}
                        for i in result.errors
                    ],
                    correlation_id=correlation_id,
                )
            raise self._validator.to_error(result.errors[0], event)

        try:
            if replace:
                await self._storage.replace_event(group.id, event)
            else:
                await self._storage.save_event(group.id, event)
        except Exception as e:
            if self._audit_logger:
                await self._audit_logger.log_error(
                    error_type=type(e).__name__,
                    error_message=str(e),
                    details={"group_id": group.id, "event_id": event.id},
                    correlation_id=correlation_id,
                )
            raise

        if self._audit_logger:
            if replace:
                await self._audit_logger.log_event_replaced(
                    group_id=group.id,
                    event_id=event.id,
                    kind=event.kind,
                    correlation_id=correlation_id,
                )
            else:
                await self._audit_logger.log_event_recorded(
                    group_id=group.id,
                    event_id=event.id,
                    kind=event.kind,
                    amount=str(event.amount),
                    correlation_id=correlation_id,
                )
        return event

    async def add_expense(
        self,
        group_id: str,
        title: str,
        amount: MoneyLike,
        payer_id: str,
        participant_ids: Optional[Sequence[str]] = None,
        locked: Optional[Mapping[str, MoneyLike]] = None,
        splits: Optional[Sequence[Split]] = None,
        category: str = "other",
        correlation_id: Optional[UUID] = None,
    ) -> ExpenseEvent:
        """
        Record an expense.

        Either pass explicit ``splits`` or let the split calculator divide
        ``amount`` across ``participant_ids`` (default: everyone in the
        group), honouring any ``locked`` amounts.

        Raises:
            LedgerError subclasses when the split or the event is invalid
        """
        correlation_id = correlation_id or create_correlation_id()
        group = await self._require_group(group_id)

        if splits is None:
            ids = list(participant_ids) if participant_ids is not None else group.participant_ids
            try:
                splits = compute_split(amount, ids, locked)
            except LedgerError as e:
                if self._audit_logger:
                    await self._audit_logger.log_split_rejected(
                        group_id=group.id,
                        error_code=type(e).__name__,
                        error_message=e.message,
                        correlation_id=correlation_id,
                    )
                raise

            if self._audit_logger:
                await self._audit_logger.log_split_computed(
                    group_id=group.id,
                    total=str(to_decimal(amount)),
                    shares={s.participant_id: str(s.amount) for s in splits},
                    correlation_id=correlation_id,
                )

        event = await self._build(
            group,
            ExpenseEvent,
            correlation_id,
            title=title,
            amount=amount,
            payer_id=payer_id,
            splits=list(splits),
            category=category,
        )
        return await self._record(group, event, correlation_id)

    async def add_income(
        self,
        group_id: str,
        title: str,
        amount: MoneyLike,
        receiver_id: str,
        category: str = "other",
        correlation_id: Optional[UUID] = None,
    ) -> IncomeEvent:
        """Record a personal income. It never affects settlement."""
        correlation_id = correlation_id or create_correlation_id()
        group = await self._require_group(group_id)
        event = await self._build(
            group,
            IncomeEvent,
            correlation_id,
            title=title,
            amount=amount,
            receiver_id=receiver_id,
            category=category,
        )
        return await self._record(group, event, correlation_id)

    async def add_transfer(
        self,
        group_id: str,
        from_id: str,
        to_id: str,
        amount: MoneyLike,
        title: str = "Settlement payment",
        correlation_id: Optional[UUID] = None,
    ) -> TransferEvent:
        """Record a direct payment between two participants."""
        correlation_id = correlation_id or create_correlation_id()
        group = await self._require_group(group_id)
        event = await self._build(
            group,
            TransferEvent,
            correlation_id,
            title=title,
            amount=amount,
            from_id=from_id,
            to_id=to_id,
            category="transfer",
        )
        return await self._record(group, event, correlation_id)

    async def replace_event(
        self,
        group_id: str,
        event: AnyEvent,
        correlation_id: Optional[UUID] = None,
    ) -> AnyEvent:
        """
        Replace an existing event with an edited record (same id).

        The new record goes through the same validation as a new one.
        """
        correlation_id = correlation_id or create_correlation_id()
        group = await self._require_group(group_id)
        return await self._record(group, event, correlation_id, replace=True)

    async def get_settlements(
        self,
        group_id: str,
        epsilon: Optional[Decimal] = None,
        correlation_id: Optional[UUID] = None,
    ) -> SettlementResult:
        """Compute balances and settlement instructions for a group."""
        correlation_id = correlation_id or create_correlation_id()
        group = await self._require_group(group_id)
        events = await self._storage.list_events(group_id)

        result = calculate_settlements(group, events, epsilon=epsilon)

        if self._audit_logger:
            if result.imbalance is not None:
                await self._audit_logger.log_ledger_imbalance(
                    group_id=group.id,
                    total=str(result.imbalance.total),
                    correlation_id=correlation_id,
                )
            await self._audit_logger.log_settlement_computed(
                group_id=group.id,
                instruction_count=len(result.settlements),
                total_expenses=str(result.total_expenses),
                correlation_id=correlation_id,
            )
        return result

    async def get_cost_breakdown(self, group_id: str) -> list[CostBreakdownItem]:
        """Per-participant breakdown with exclusion and custom-split notes."""
        group = await self._require_group(group_id)
        events = await self._storage.list_events(group_id)
        result = calculate_settlements(group, events)
        return generate_cost_breakdown(group, events, result.balances)

    async def get_share_text(self, group_id: str) -> str:
        """Plain-text summary ready for the share sheet."""
        group = await self._require_group(group_id)
        events = await self._storage.list_events(group_id)
        result = calculate_settlements(group, events)
        return generate_share_text(group, events, result.settlements, result.balances)

    async def get_local_user_debts(self, group_id: str) -> list[PersonalDebt]:
        """Settlement instructions involving the local user."""
        group = await self._require_group(group_id)
        events = await self._storage.list_events(group_id)
        result = calculate_settlements(group, events)
        return local_user_debts(group, result.settlements)


def create_ledger_service(
    audit: bool = True,
) -> tuple[LedgerService, Optional[InMemoryAuditStorage]]:
    """
    Factory function wiring a service with in-memory backends.

    Args:
        audit: Whether to keep an in-memory audit trail.

    Returns:
        (ledger_service, audit_storage)
    """
    audit_storage = InMemoryAuditStorage() if audit else None
    audit_logger = AuditLogger(audit_storage) if audit else AuditLogger()
    service = LedgerService(
        storage=InMemoryLedgerStorage(),
        audit_logger=audit_logger,
    )
    return service, audit_storage
