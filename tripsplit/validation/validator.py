"""
Ledger Event Validation

Checks a new or edited event against its group before it is recorded.

ERRORS block the event:
- non-positive amounts, negative split amounts
- split totals that disagree with the expense amount
- references to participants outside the group
- transfers to oneself, participants listed twice in one expense

WARNINGS are shown but don't block:
- unusually large amounts
- expenses whose only consumer is the payer

IMPORTANT: Validation NEVER silently fixes issues.
It reports them so the user can correct the entry.
"""

from decimal import Decimal
from typing import Optional

from tripsplit.config import get_settings
from tripsplit.engine.errors import (
    InvalidAmountError,
    InvalidEventError,
    LedgerError,
    SplitMismatchError,
    UnknownParticipantError,
)
from tripsplit.engine.split import validate_split
from tripsplit.models.ledger import (
    AnyEvent,
    ExpenseEvent,
    Group,
    IncomeEvent,
    TransferEvent,
    ValidationIssue,
    ValidationResult,
)
from tripsplit.models.money import format_money


class LedgerValidator:
    """Validates ledger events against the group they belong to."""

    def __init__(self, epsilon: Optional[Decimal] = None):
        self._settings = get_settings().ledger
        self._epsilon = epsilon if epsilon is not None else self._settings.epsilon

    def _money(self, value: Decimal) -> str:
        return format_money(value, self._settings.currency_symbol)

    def _check_participant(
        self,
        group: Group,
        participant_id: str,
        field: str,
    ) -> list[ValidationIssue]:
        if group.get_participant(participant_id) is not None:
            return []
        return [ValidationIssue(
            field=field,
            issue_type="unknown_participant",
            message=f"'{participant_id}' is not a member of {group.name}",
            severity="error",
            suggested_fix="Pick someone from the group's participant list",
        )]

    def _check_amount(self, event: AnyEvent) -> list[ValidationIssue]:
        issues = []
        if event.amount <= 0:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="invalid_amount",
                message="Amount must be greater than zero",
                severity="error",
                suggested_fix="Enter a positive amount",
            ))
        elif event.amount > self._settings.max_event_amount:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="suspicious_value",
                message=f"Amount ({self._money(event.amount)}) seems unusually high",
                severity="warning",
                suggested_fix="Please verify this amount is correct",
            ))
        return issues

    def _validate_expense(
        self,
        event: ExpenseEvent,
        group: Group,
    ) -> list[ValidationIssue]:
        issues = self._check_participant(group, event.payer_id, "payer_id")

        seen = set()
        for index, split in enumerate(event.splits):
            field = f"splits[{index}]"
            issues.extend(self._check_participant(group, split.participant_id, field))

            if split.participant_id in seen:
                issues.append(ValidationIssue(
                    field=field,
                    issue_type="duplicate_participant",
                    message=f"{group.display_name(split.participant_id)} appears more than once",
                    severity="error",
                    suggested_fix="Combine the entries into one share",
                ))
            seen.add(split.participant_id)

            if split.amount < 0:
                issues.append(ValidationIssue(
                    field=f"{field}.amount",
                    issue_type="invalid_amount",
                    message="Split amount cannot be negative",
                    severity="error",
                    suggested_fix="Use 0 to exclude someone from this expense",
                ))

        if event.amount > 0:
            check = validate_split(event.amount, event.splits, self._epsilon)
            if not check.valid:
                if check.difference > 0:
                    message = f"Split exceeds total by {self._money(check.difference)}"
                else:
                    message = f"Split is short of total by {self._money(-check.difference)}"
                issues.append(ValidationIssue(
                    field="splits",
                    issue_type="split_mismatch",
                    message=message,
                    severity="error",
                    suggested_fix="Adjust the shares so they add up to the amount",
                ))

        consumers = [s.participant_id for s in event.splits if s.amount > 0]
        if consumers == [event.payer_id]:
            issues.append(ValidationIssue(
                field="splits",
                issue_type="no_shared_effect",
                message="Only the payer shares this expense, so nobody owes anything for it",
                severity="warning",
            ))

        return issues

    def validate(self, event: AnyEvent, group: Group) -> ValidationResult:
        """
        Validate a single event.

        Returns:
            ValidationResult with all issues found
        """
        issues = self._check_amount(event)

        if isinstance(event, ExpenseEvent):
            issues.extend(self._validate_expense(event, group))
        elif isinstance(event, IncomeEvent):
            issues.extend(self._check_participant(group, event.receiver_id, "receiver_id"))
        elif isinstance(event, TransferEvent):
            issues.extend(self._check_participant(group, event.from_id, "from_id"))
            issues.extend(self._check_participant(group, event.to_id, "to_id"))
            if event.from_id == event.to_id:
                issues.append(ValidationIssue(
                    field="to_id",
                    issue_type="self_transfer",
                    message="A transfer needs two different people",
                    severity="error",
                    suggested_fix="Choose a different recipient",
                ))
        else:
            raise TypeError(f"Unsupported ledger event: {type(event).__name__}")

        warnings = [i.message for i in issues if i.severity == "warning"]
        return ValidationResult(
            event_id=event.id,
            is_valid=not any(i.severity == "error" for i in issues),
            issues=issues,
            warnings=warnings,
        )

    def ensure_valid(self, event: AnyEvent, group: Group) -> ValidationResult:
        """
        Validate and raise on the first error.

        Raises:
            InvalidAmountError, SplitMismatchError, UnknownParticipantError
            or InvalidEventError depending on the first error issue
        """
        result = self.validate(event, group)
        if result.is_valid:
            return result
        raise self.to_error(result.errors[0], event)

    def to_error(self, issue: ValidationIssue, event: AnyEvent) -> LedgerError:
        """Map a validation issue onto the matching exception."""
        if issue.issue_type == "invalid_amount":
            return InvalidAmountError(issue.message, field=issue.field)
        if issue.issue_type == "split_mismatch" and isinstance(event, ExpenseEvent):
            check = validate_split(event.amount, event.splits, self._epsilon)
            return SplitMismatchError(check.difference, issue.message)
        if issue.issue_type == "unknown_participant":
            participant_id = getattr(event, issue.field.split("[")[0], None)
            if isinstance(event, ExpenseEvent) and issue.field.startswith("splits["):
                index = int(issue.field[len("splits["):-1])
                participant_id = event.splits[index].participant_id
            return UnknownParticipantError(str(participant_id), issue.message, field=issue.field)
        return InvalidEventError(issue.message, field=issue.field)

    def get_user_friendly_summary(self, result: ValidationResult) -> str:
        """
        Generate a user-friendly summary of validation results.

        This is what the entry form shows next to the fields.
        """
        if result.is_valid and not result.warnings:
            return "✅ All checks passed!"

        lines = []

        if not result.is_valid:
            lines.append("❌ This entry can't be saved yet:")
            for issue in result.errors:
                lines.append(f"   • {issue.message}")
                if issue.suggested_fix:
                    lines.append(f"     💡 {issue.suggested_fix}")

        if result.warnings:
            if lines:
                lines.append("")
            lines.append("⚠️ Please verify the following:")
            for warning in result.warnings:
                lines.append(f"   • {warning}")

        return "\n".join(lines)
