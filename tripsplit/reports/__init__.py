"""Breakdown and narrative reports package."""

from tripsplit.reports.breakdown import (
    generate_cost_breakdown,
    group_expenses_by_similarity,
)
from tripsplit.reports.narrative import generate_share_text
from tripsplit.reports.personal import local_user_debts

__all__ = [
    "generate_cost_breakdown",
    "generate_share_text",
    "group_expenses_by_similarity",
    "local_user_debts",
]
