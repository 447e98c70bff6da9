"""
Shareable settlement summary.

Produces plain text for the clipboard or a share sheet (WhatsApp, SMS).
"""

from decimal import Decimal
from typing import Mapping, Sequence

from tripsplit.config import get_settings
from tripsplit.engine.pipeline import total_expenses
from tripsplit.models.ledger import AnyEvent, Group
from tripsplit.models.money import format_money
from tripsplit.models.settlement import BalanceRecord, SettlementInstruction


def _short_name(group: Group, participant_id: str) -> str:
    participant = group.get_participant(participant_id)
    if participant is not None and participant.is_local_user:
        return "Me"
    return group.display_name(participant_id)


def generate_share_text(
    group: Group,
    events: Sequence[AnyEvent],
    settlements: Sequence[SettlementInstruction],
    balances: Mapping[str, BalanceRecord],
) -> str:
    """
    Render a group's totals and settlement plan as plain text.

    Sections: header with date, total spent, per-person paid/share,
    the local user's status, then numbered settlement instructions
    (or an all-settled note).
    """
    settings = get_settings().ledger
    symbol = settings.currency_symbol
    epsilon = settings.epsilon

    def money(value: Decimal) -> str:
        return format_money(value, symbol)

    lines = [
        f"✈️ *{group.name}*",
        f"📅 {group.created_at.strftime(settings.date_format)}",
        "",
        "💰 *Summary*",
        f"Total Spent: {money(total_expenses(events))}",
        "",
        "📊 *Per Person Breakdown*",
    ]

    for participant in group.participants:
        balance = balances.get(participant.id)
        if balance is None:
            continue
        label = f"{participant.name} (Me)" if participant.is_local_user else participant.name
        lines.append(
            f"{label}: Paid {money(balance.total_paid)}, "
            f"Share {money(balance.total_consumed)}"
        )
    lines.append("")

    me = group.local_user
    my_balance = balances.get(me.id) if me else None
    if my_balance is not None:
        lines.append("📊 *Your Status (Me)*")
        lines.append(f"Total Paid: {money(my_balance.total_paid)}")
        lines.append(f"Actual Share: {money(my_balance.total_consumed)}")
        if my_balance.is_creditor(epsilon):
            lines.append(f"✅ You get back: {money(my_balance.net_balance)}")
        elif my_balance.is_debtor(epsilon):
            lines.append(f"⚠️ You owe: {money(-my_balance.net_balance)}")
        else:
            lines.append("✓ You're all settled!")
        lines.append("")

    if settlements:
        lines.append("🔄 *Final Settlement*")
        for number, instruction in enumerate(settlements, start=1):
            from_name = _short_name(group, instruction.from_participant_id)
            to_name = _short_name(group, instruction.to_participant_id)
            lines.append(f"{number}. {from_name} ➡️ {to_name}: {money(instruction.amount)}")
            titles = [
                c.title for c in instruction.contributing_events[:settings.share_text_expense_limit]
            ]
            if titles:
                lines.append(f"   (For: {', '.join(titles)})")
    else:
        lines.append("✅ *All Settled!*")
        lines.append("No pending settlements.")

    return "\n".join(lines) + "\n"
