"""
Split Calculator

Turns an expense total plus a set of manually locked amounts into a
per-participant share list. Unlocked participants share the remainder
evenly; the last unlocked participant absorbs the rounding residue so
the shares always add up to the total exactly.
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Mapping, NamedTuple, Optional, Sequence

from tripsplit.config import get_settings
from tripsplit.engine.errors import (
    InvalidAmountError,
    InvalidEventError,
    OverAllocatedSplitError,
    SplitMismatchError,
    UnknownParticipantError,
)
from tripsplit.models.ledger import Split
from tripsplit.models.money import (
    CENT,
    MoneyLike,
    format_money,
    from_cents,
    quantize_money,
    to_cents,
    to_decimal,
)


class SplitCheck(NamedTuple):
    """Outcome of checking a split list against its expense total."""
    valid: bool
    difference: Decimal


def _even_share(remainder_cents: int, count: int) -> int:
    share = int((Decimal(remainder_cents) / count).quantize(Decimal("1"), rounding=ROUND_HALF_UP))
    # Rounding every share up must leave the last one non-negative.
    if share * (count - 1) > remainder_cents:
        share = remainder_cents // count
    return share


def _exact_cents(value: MoneyLike, field: str) -> int:
    """Convert to cents, refusing anything that is not a whole number of cents."""
    try:
        amount = to_decimal(value)
    except (InvalidOperation, TypeError, ValueError) as e:
        raise InvalidAmountError(f"{value!r} is not a valid amount", field=field) from e
    if not amount.is_finite() or amount != amount.quantize(CENT):
        raise InvalidAmountError(
            f"Amount {value} has more than two decimal places",
            field=field,
        )
    return to_cents(amount)


def compute_split(
    total: MoneyLike,
    participants: Sequence[str],
    locked: Optional[Mapping[str, MoneyLike]] = None,
) -> list[Split]:
    """
    Compute per-participant shares for an expense.

    Args:
        total: Expense total, must be positive
        participants: Participant ids taking part, in display order
        locked: Manually fixed amounts for a subset of ``participants``

    Returns:
        One Split per participant, in the order given, summing to ``total``

    Raises:
        InvalidAmountError: total is not positive, or an amount is negative or
            not a whole number of cents
        InvalidEventError: a participant id appears twice
        UnknownParticipantError: a locked id is not among ``participants``
        OverAllocatedSplitError: locked amounts alone exceed the total
        SplitMismatchError: everyone is locked and the amounts fall short
    """
    symbol = get_settings().ledger.currency_symbol
    total_cents = _exact_cents(total, "amount")
    if total_cents <= 0:
        raise InvalidAmountError("Amount must be greater than zero", field="amount")

    if len(set(participants)) != len(participants):
        raise InvalidEventError("A participant is listed more than once", field="splits")

    locked = locked or {}
    locked_cents: dict[str, int] = {}
    for participant_id, amount in locked.items():
        if participant_id not in participants:
            raise UnknownParticipantError(
                participant_id,
                f"Locked amount given for {participant_id}, who is not part of this split",
                field="splits",
            )
        cents = _exact_cents(amount, "splits")
        if cents < 0:
            raise InvalidAmountError(
                f"Split amount for {participant_id} cannot be negative",
                field="splits",
            )
        locked_cents[participant_id] = cents

    locked_total = sum(locked_cents.values())
    if locked_total > total_cents:
        excess = from_cents(locked_total - total_cents)
        raise OverAllocatedSplitError(
            excess,
            f"Split exceeds total by {format_money(excess, symbol)}",
        )

    remainder = total_cents - locked_total
    unlocked = [p for p in participants if p not in locked_cents]

    if not unlocked:
        if remainder != 0:
            shortfall = from_cents(remainder)
            raise SplitMismatchError(
                -shortfall,
                f"Split is short of total by {format_money(shortfall, symbol)}",
            )
        return [Split(participant_id=p, amount=from_cents(locked_cents[p])) for p in participants]

    share = _even_share(remainder, len(unlocked))
    last_share = remainder - share * (len(unlocked) - 1)
    last_unlocked = unlocked[-1]

    splits = []
    for participant_id in participants:
        if participant_id in locked_cents:
            cents = locked_cents[participant_id]
        elif participant_id == last_unlocked:
            cents = last_share
        else:
            cents = share
        splits.append(Split(participant_id=participant_id, amount=from_cents(cents)))
    return splits


def validate_split(
    total: MoneyLike,
    splits: Sequence[Split],
    epsilon: Optional[Decimal] = None,
) -> SplitCheck:
    """
    Check that splits add up to the total.

    ``difference`` is signed: positive when the splits exceed the total,
    negative when they fall short.
    """
    if epsilon is None:
        epsilon = get_settings().ledger.epsilon
    split_sum = sum((quantize_money(s.amount) for s in splits), Decimal("0.00"))
    difference = split_sum - quantize_money(total)
    return SplitCheck(valid=abs(difference) <= epsilon, difference=difference)
