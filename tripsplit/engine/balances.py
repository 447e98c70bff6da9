"""
Balance Aggregation

Phase 1 (``aggregate``) folds expenses into paid/consumed totals.
Phase 2 (``apply_transfers``) layers direct payments on top.

Both phases are pure: they never mutate their inputs and always start
from the full event list.
"""

from decimal import Decimal
from typing import Mapping, Sequence

import structlog

from tripsplit.models.ledger import (
    AnyEvent,
    ExpenseEvent,
    IncomeEvent,
    Participant,
    TransferEvent,
)
from tripsplit.models.settlement import BalanceRecord

logger = structlog.get_logger(__name__)

ZERO = Decimal("0.00")


def _unknown_reference(event_id: str, participant_id: str, role: str) -> None:
    logger.warning(
        "unknown_participant_reference",
        event_id=event_id,
        participant_id=participant_id,
        role=role,
    )


def aggregate(
    participants: Sequence[Participant],
    events: Sequence[AnyEvent],
) -> dict[str, BalanceRecord]:
    """
    Fold expenses into a per-participant (paid, consumed) pair.

    Every participant starts at zero so people with no activity still
    show up as settled. Income and transfers are skipped here.
    Payer or split references to unknown participants are logged and
    ignored.

    Returns:
        BalanceRecord per participant id, in participant order
    """
    paid: dict[str, Decimal] = {p.id: ZERO for p in participants}
    consumed: dict[str, Decimal] = {p.id: ZERO for p in participants}

    for event in events:
        if isinstance(event, ExpenseEvent):
            if event.payer_id in paid:
                paid[event.payer_id] += event.amount
            else:
                _unknown_reference(event.id, event.payer_id, "payer")

            for split in event.splits:
                if split.participant_id in consumed:
                    consumed[split.participant_id] += split.amount
                else:
                    _unknown_reference(event.id, split.participant_id, "split")
        elif isinstance(event, (IncomeEvent, TransferEvent)):
            continue
        else:
            raise TypeError(f"Unsupported ledger event: {type(event).__name__}")

    # Net is taken once, after the fold
    return {
        pid: BalanceRecord(
            participant_id=pid,
            total_paid=paid[pid],
            total_consumed=consumed[pid],
            net_balance=paid[pid] - consumed[pid],
        )
        for pid in paid
    }


def apply_transfers(
    balances: Mapping[str, BalanceRecord],
    events: Sequence[AnyEvent],
) -> dict[str, BalanceRecord]:
    """
    Apply direct payments to aggregated balances.

    The sender's net balance and total paid both rise by the amount,
    so "amount paid" views include money paid to settle debts.
    The receiver's net balance falls by the amount. Consumed totals
    are untouched.

    Returns a new mapping; ``balances`` is left as it was.
    """
    net_delta: dict[str, Decimal] = {pid: ZERO for pid in balances}
    paid_delta: dict[str, Decimal] = {pid: ZERO for pid in balances}

    for event in events:
        if isinstance(event, TransferEvent):
            if event.from_id in net_delta:
                net_delta[event.from_id] += event.amount
                paid_delta[event.from_id] += event.amount
            else:
                _unknown_reference(event.id, event.from_id, "transfer_sender")

            if event.to_id in net_delta:
                net_delta[event.to_id] -= event.amount
            else:
                _unknown_reference(event.id, event.to_id, "transfer_receiver")
        elif isinstance(event, (ExpenseEvent, IncomeEvent)):
            continue
        else:
            raise TypeError(f"Unsupported ledger event: {type(event).__name__}")

    return {
        pid: record.model_copy(update={
            "total_paid": record.total_paid + paid_delta[pid],
            "net_balance": record.net_balance + net_delta[pid],
        })
        for pid, record in balances.items()
    }
