"""Complete settlement run: aggregate, apply transfers, match."""

from decimal import Decimal
from typing import Optional, Sequence

from tripsplit.engine.balances import aggregate, apply_transfers
from tripsplit.engine.matcher import check_ledger_balance, settle
from tripsplit.models.ledger import AnyEvent, ExpenseEvent, Group
from tripsplit.models.settlement import SettlementResult


def total_expenses(events: Sequence[AnyEvent]) -> Decimal:
    """Sum of all expense amounts (income and transfers excluded)."""
    return sum(
        (e.amount for e in events if isinstance(e, ExpenseEvent)),
        Decimal("0.00"),
    )


def calculate_settlements(
    group: Group,
    events: Sequence[AnyEvent],
    epsilon: Optional[Decimal] = None,
) -> SettlementResult:
    """
    Run the three settlement phases over one snapshot of a group's events.

    The returned result carries a LedgerImbalance when balances don't sum
    to zero so callers can show a caveat; settlements are still computed.
    """
    raw = aggregate(group.participants, events)
    adjusted = apply_transfers(raw, events)
    settlements = settle(adjusted, events, epsilon=epsilon)

    return SettlementResult(
        group_id=group.id,
        balances=adjusted,
        settlements=settlements,
        total_expenses=total_expenses(events),
        imbalance=check_ledger_balance(adjusted, epsilon),
    )
