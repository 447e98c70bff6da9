"""
Core Ledger Models

These models describe what a group records: who is in it, and the
expenses, incomes and transfers between them.

DESIGN DECISION: Ledger events are immutable once recorded.
An edit replaces the whole record under the same id, it never mutates
an event in place. Balances are always re-derived from the full list.

Events are a tagged union on ``kind``. Raw dicts coming from an event
store are parsed into the matching variant by pydantic.
"""

from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Annotated, Literal, Optional, Union
from uuid import uuid4

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    TypeAdapter,
    field_validator,
    model_validator,
)


def _new_id() -> str:
    return uuid4().hex


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


Money = Annotated[Decimal, Field(decimal_places=2)]


# =============================================================================
# ENUMS
# =============================================================================

class EventKind(str, Enum):
    """Discriminator values for ledger events."""
    EXPENSE = "expense"
    INCOME = "income"
    TRANSFER = "transfer"


# =============================================================================
# PARTICIPANTS AND GROUPS
# =============================================================================

class Participant(BaseModel):
    """
    A member of one group.

    Participants live as long as the group does; removing a member
    mid-ledger is not supported.
    """
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    id: str = Field(
        default_factory=_new_id,
        min_length=1,
        description="Stable participant id"
    )
    name: str = Field(
        ...,
        min_length=1,
        max_length=100,
        description="Display name"
    )
    is_local_user: bool = Field(
        default=False,
        description="True for the person viewing the ledger"
    )


class Group(BaseModel):
    """A shared ledger (a trip, a flat, an outing)."""
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    id: str = Field(default_factory=_new_id, min_length=1)
    name: str = Field(
        ...,
        min_length=1,
        max_length=200,
    )
    participants: list[Participant] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=_utcnow)
    archived: bool = False

    @model_validator(mode='after')
    def validate_unique_participants(self) -> 'Group':
        seen = set()
        for participant in self.participants:
            if participant.id in seen:
                raise ValueError(f"Duplicate participant id: {participant.id}")
            seen.add(participant.id)
        return self

    @property
    def participant_ids(self) -> list[str]:
        return [p.id for p in self.participants]

    @property
    def local_user(self) -> Optional[Participant]:
        return next((p for p in self.participants if p.is_local_user), None)

    def get_participant(self, participant_id: str) -> Optional[Participant]:
        return next((p for p in self.participants if p.id == participant_id), None)

    def display_name(self, participant_id: str) -> str:
        participant = self.get_participant(participant_id)
        if participant is None:
            return "Unknown Participant"
        return participant.name


# =============================================================================
# LEDGER EVENTS
# =============================================================================

class Split(BaseModel):
    """
    One participant's share of an expense.

    A zero amount means the participant was excluded from the expense.
    Sign checks live in the validator so they surface as field-level
    issues rather than parse failures.
    """
    model_config = ConfigDict(frozen=True)

    participant_id: str = Field(..., min_length=1)
    amount: Money


class _EventBase(BaseModel):
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    id: str = Field(default_factory=_new_id, min_length=1)
    title: str = Field(
        default="",
        max_length=200,
        description="Short label shown in breakdowns"
    )
    amount: Money = Field(
        ...,
        description="Event amount; must be positive (checked by the validator)"
    )
    category: str = Field(default="other", max_length=50)
    occurred_at: datetime = Field(default_factory=_utcnow)

    @field_validator('occurred_at')
    @classmethod
    def assume_utc(cls, v: datetime) -> datetime:
        # Stored timestamps without an offset are UTC
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v


class ExpenseEvent(_EventBase):
    """One participant pays, several consume."""
    kind: Literal["expense"] = "expense"
    payer_id: str = Field(..., min_length=1)
    splits: list[Split] = Field(default_factory=list)

    @property
    def split_total(self) -> Decimal:
        return sum((s.amount for s in self.splits), Decimal("0"))

    def share_of(self, participant_id: str) -> Optional[Decimal]:
        """Amount consumed by a participant, or None if they have no split."""
        for split in self.splits:
            if split.participant_id == participant_id:
                return split.amount
        return None


class IncomeEvent(_EventBase):
    """Personal inflow to one participant. Never shared."""
    kind: Literal["income"] = "income"
    receiver_id: str = Field(..., min_length=1)


class TransferEvent(_EventBase):
    """A direct payment between two participants that retires debt."""
    kind: Literal["transfer"] = "transfer"
    from_id: str = Field(..., min_length=1)
    to_id: str = Field(..., min_length=1)


AnyEvent = Union[ExpenseEvent, IncomeEvent, TransferEvent]

LedgerEvent = Annotated[AnyEvent, Field(discriminator="kind")]

_event_adapter = TypeAdapter(LedgerEvent)
_event_list_adapter = TypeAdapter(list[LedgerEvent])


def parse_event(data: dict) -> AnyEvent:
    """Parse a raw record into the matching event variant."""
    return _event_adapter.validate_python(data)


def parse_events(data: list[dict]) -> list[AnyEvent]:
    return _event_list_adapter.validate_python(data)


# =============================================================================
# VALIDATION MODELS
# =============================================================================

class ValidationIssue(BaseModel):
    """A single validation issue found on an event."""

    field: str = Field(
        ...,
        description="Field with the issue"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'invalid_amount', 'split_mismatch')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )
    severity: str = Field(
        ...,
        pattern="^(error|warning|info)$",
        description="Issue severity"
    )
    suggested_fix: Optional[str] = Field(
        default=None,
        description="Suggested fix if available"
    )


class ValidationResult(BaseModel):
    """
    Result of validating one ledger event against its group.

    Errors block the event from being recorded.
    Warnings don't block but should be shown.
    """

    event_id: str
    validated_at: datetime = Field(default_factory=_utcnow)
    is_valid: bool
    issues: list[ValidationIssue] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)

    @property
    def has_errors(self) -> bool:
        """Check if there are any error-level issues."""
        return any(issue.severity == "error" for issue in self.issues)

    @property
    def error_count(self) -> int:
        """Count error-level issues."""
        return sum(1 for issue in self.issues if issue.severity == "error")

    @property
    def errors(self) -> list[ValidationIssue]:
        return [issue for issue in self.issues if issue.severity == "error"]
