"""
Cost breakdown and expense grouping.

Pure formatting over already computed balances; no new rules live here.
"""

from decimal import Decimal
from typing import Mapping, Optional, Sequence

from tripsplit.config import get_settings
from tripsplit.models.ledger import AnyEvent, ExpenseEvent, Group
from tripsplit.models.money import format_money
from tripsplit.models.settlement import BalanceRecord, CostBreakdownItem, ExpenseGroup

ZERO = Decimal("0.00")


def generate_cost_breakdown(
    group: Group,
    events: Sequence[AnyEvent],
    balances: Mapping[str, BalanceRecord],
    notes_limit: Optional[int] = None,
) -> list[CostBreakdownItem]:
    """
    Explain each participant's numbers.

    Notes list the expenses a participant was excluded from and the ones
    where their share differs from an equal split.
    """
    settings = get_settings().ledger
    if notes_limit is None:
        notes_limit = settings.breakdown_notes_limit

    expenses = [e for e in events if isinstance(e, ExpenseEvent)]
    items = []
    for participant in group.participants:
        notes = []
        for expense in expenses:
            share = expense.share_of(participant.id)
            if share is None or share == 0:
                notes.append(f'Excluded from "{expense.title}"')
                continue
            equal_share = expense.amount / len(expense.splits)
            if abs(share - equal_share) > settings.epsilon:
                notes.append(
                    f'Custom split in "{expense.title}" '
                    f'({format_money(share, settings.currency_symbol)})'
                )

        balance = balances.get(participant.id)
        items.append(CostBreakdownItem(
            participant=participant,
            total_paid=balance.total_paid if balance else ZERO,
            total_consumed=balance.total_consumed if balance else ZERO,
            net_balance=balance.net_balance if balance else ZERO,
            notes=notes[:notes_limit],
        ))
    return items


def group_expenses_by_similarity(events: Sequence[AnyEvent]) -> list[ExpenseGroup]:
    """
    Bucket expenses by category and the first word of their title.

    Buckets with two or more expenses are flagged ``is_group``. The
    newest bucket (by its first expense) comes first.
    """
    buckets: dict[str, ExpenseGroup] = {}
    first_seen = {}

    for expense in events:
        if not isinstance(expense, ExpenseEvent):
            continue
        words = expense.title.split()
        keyword = words[0] if words else ""
        key = f"{expense.category}_{keyword.lower()}"

        bucket = buckets.get(key)
        if bucket is None:
            buckets[key] = ExpenseGroup(
                category=expense.category,
                keyword=keyword,
                expense_ids=[expense.id],
                total_amount=expense.amount,
            )
            first_seen[key] = expense.occurred_at
        else:
            bucket.expense_ids.append(expense.id)
            bucket.total_amount += expense.amount

    for bucket in buckets.values():
        bucket.is_group = len(bucket.expense_ids) > 1

    ordered = sorted(buckets, key=lambda k: first_seen[k], reverse=True)
    return [buckets[k] for k in ordered]
