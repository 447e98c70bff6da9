"""
Minimum-Transaction Settlement Matcher

Reduces net balances to a short list of debtor -> creditor payments.

The matcher is greedy: it always pairs the largest remaining debtor with
the largest remaining creditor and settles the smaller of the two
amounts. Each step retires at least one side, so a run emits at most
``debtors + creditors - 1`` instructions. This is not guaranteed to be
the true minimum (that needs a subset-sum search) but it is
deterministic, which keeps settlement screens and tests stable.

All matching happens on integer cents; Decimal is restored only on the
emitted instructions.
"""

from decimal import Decimal
from typing import Mapping, Optional, Sequence

import structlog

from tripsplit.config import get_settings
from tripsplit.models.ledger import AnyEvent, ExpenseEvent
from tripsplit.models.money import from_cents, to_cents
from tripsplit.models.settlement import (
    BalanceRecord,
    ContributingEvent,
    LedgerImbalance,
    SettlementInstruction,
)

logger = structlog.get_logger(__name__)


def check_ledger_balance(
    balances: Mapping[str, BalanceRecord],
    epsilon: Optional[Decimal] = None,
) -> Optional[LedgerImbalance]:
    """
    Check that net balances sum to zero.

    Returns a LedgerImbalance when the sum is off by more than epsilon,
    None otherwise.
    """
    if epsilon is None:
        epsilon = get_settings().ledger.epsilon
    total = sum((b.net_balance for b in balances.values()), Decimal("0.00"))
    if abs(total) > epsilon:
        return LedgerImbalance(total=total, epsilon=epsilon)
    return None


def find_contributing_events(
    debtor_id: str,
    creditor_id: str,
    events: Sequence[AnyEvent],
    limit: Optional[int] = None,
) -> list[ContributingEvent]:
    """Expenses the creditor paid for in which the debtor had a non-zero share."""
    if limit is None:
        limit = get_settings().ledger.contributing_events_limit

    found = []
    for event in events:
        if len(found) >= limit:
            break
        if not isinstance(event, ExpenseEvent) or event.payer_id != creditor_id:
            continue
        share = event.share_of(debtor_id)
        if share is not None and share > 0:
            found.append(ContributingEvent(event_id=event.id, title=event.title, amount=share))
    return found


def settle(
    balances: Mapping[str, BalanceRecord],
    events: Sequence[AnyEvent],
    epsilon: Optional[Decimal] = None,
    contributing_limit: Optional[int] = None,
) -> list[SettlementInstruction]:
    """
    Produce the payments that bring every balance back to zero.

    Args:
        balances: Net positions after transfers
        events: Event snapshot, used only to explain each instruction
        epsilon: Settled tolerance (defaults to settings)
        contributing_limit: Max expenses attached per instruction

    Returns:
        Instructions in the order the greedy matcher produced them
    """
    ledger_settings = get_settings().ledger
    if epsilon is None:
        epsilon = ledger_settings.epsilon
    if contributing_limit is None:
        contributing_limit = ledger_settings.contributing_events_limit
    epsilon_cents = to_cents(epsilon)

    imbalance = check_ledger_balance(balances, epsilon)
    if imbalance is not None:
        logger.warning(
            "ledger_imbalance",
            total=str(imbalance.total),
            epsilon=str(epsilon),
        )

    # [participant_id, remaining cents]; magnitudes kept positive
    debtors: list[list] = []
    creditors: list[list] = []
    for pid, record in balances.items():
        cents = to_cents(record.net_balance)
        if cents < -epsilon_cents:
            debtors.append([pid, -cents])
        elif cents > epsilon_cents:
            creditors.append([pid, cents])

    # Stable sorts: equal balances keep participant order
    debtors.sort(key=lambda d: -d[1])
    creditors.sort(key=lambda c: -c[1])

    instructions = []
    while debtors and creditors:
        debtor, creditor = debtors[0], creditors[0]
        amount = min(debtor[1], creditor[1])

        instructions.append(SettlementInstruction(
            from_participant_id=debtor[0],
            to_participant_id=creditor[0],
            amount=from_cents(amount),
            contributing_events=find_contributing_events(
                debtor[0], creditor[0], events, contributing_limit
            ),
        ))

        debtor[1] -= amount
        creditor[1] -= amount
        if debtor[1] <= epsilon_cents:
            debtors.pop(0)
        if creditor[1] <= epsilon_cents:
            creditors.pop(0)

    return instructions
