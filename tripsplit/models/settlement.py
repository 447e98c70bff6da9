"""
Derived Settlement Models

Nothing here is stored. Every model is recomputed from the full event
list on each run so that balances can never drift from the ledger.
"""

from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from tripsplit.models.ledger import Participant
from tripsplit.models.money import DEFAULT_EPSILON


class BalanceRecord(BaseModel):
    """
    A participant's position in the group.

    Positive net balance: the participant is owed money (creditor).
    Negative net balance: the participant owes money (debtor).

    ``net_balance`` is kept as its own field because transfers move the
    receiver's net balance without touching paid or consumed.
    """
    model_config = ConfigDict(frozen=True)

    participant_id: str
    total_paid: Decimal = Decimal("0.00")
    total_consumed: Decimal = Decimal("0.00")
    net_balance: Decimal = Decimal("0.00")

    def is_settled(self, epsilon: Decimal = DEFAULT_EPSILON) -> bool:
        return abs(self.net_balance) <= epsilon

    def is_creditor(self, epsilon: Decimal = DEFAULT_EPSILON) -> bool:
        return self.net_balance > epsilon

    def is_debtor(self, epsilon: Decimal = DEFAULT_EPSILON) -> bool:
        return self.net_balance < -epsilon


class ContributingEvent(BaseModel):
    """An expense that explains part of a settlement instruction."""
    model_config = ConfigDict(frozen=True)

    event_id: str
    title: str
    amount: Decimal = Field(..., description="The debtor's share of the expense")


class SettlementInstruction(BaseModel):
    """One recommended payment from a debtor to a creditor."""
    model_config = ConfigDict(frozen=True)

    from_participant_id: str
    to_participant_id: str
    amount: Decimal = Field(..., gt=0)
    contributing_events: list[ContributingEvent] = Field(default_factory=list)


class LedgerImbalance(BaseModel):
    """
    Soft warning: net balances don't sum to zero.

    This points at upstream data faults (for example a split that
    references a participant who is not in the group). It is reported,
    never raised, and settlement still runs on the residual balances.
    """
    model_config = ConfigDict(frozen=True)

    total: Decimal = Field(..., description="Sum of all net balances")
    epsilon: Decimal

    @property
    def message(self) -> str:
        return (
            f"Net balances sum to {self.total} instead of zero; "
            "some records may reference missing participants"
        )


class SettlementResult(BaseModel):
    """Output of the full settlement pipeline for one group."""

    group_id: str
    balances: dict[str, BalanceRecord] = Field(default_factory=dict)
    settlements: list[SettlementInstruction] = Field(default_factory=list)
    total_expenses: Decimal = Decimal("0.00")
    imbalance: Optional[LedgerImbalance] = None

    @property
    def is_settled(self) -> bool:
        return not self.settlements


class CostBreakdownItem(BaseModel):
    """Per-participant explanation of how their numbers came about."""

    participant: Participant
    total_paid: Decimal = Decimal("0.00")
    total_consumed: Decimal = Decimal("0.00")
    net_balance: Decimal = Decimal("0.00")
    notes: list[str] = Field(default_factory=list)


class ExpenseGroup(BaseModel):
    """Similar expenses bucketed together for compact display."""

    category: str
    keyword: str
    expense_ids: list[str] = Field(default_factory=list)
    total_amount: Decimal = Decimal("0.00")
    is_group: bool = False


class PersonalDebt(BaseModel):
    """
    A settlement instruction seen from the local user's side.

    ``lent`` means the local user is to receive money,
    ``borrowed`` means the local user has to pay.
    """

    id: str
    direction: str = Field(..., pattern="^(lent|borrowed)$")
    counterpart_id: str
    counterpart_name: str
    amount: Decimal
    description: str
    group_id: str
