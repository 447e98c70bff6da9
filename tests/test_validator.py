"""Tests for ledger event validation."""

from decimal import Decimal

import pytest

from tripsplit.engine.errors import (
    InvalidAmountError,
    InvalidEventError,
    SplitMismatchError,
    UnknownParticipantError,
)
from tripsplit.models.ledger import (
    ExpenseEvent,
    IncomeEvent,
    Split,
    TransferEvent,
)
from tripsplit.validation import LedgerValidator


@pytest.fixture
def validator():
    return LedgerValidator()


def expense(amount, splits, payer="a"):
    return ExpenseEvent(
        title="Lunch",
        amount=Decimal(amount),
        payer_id=payer,
        splits=[Split(participant_id=pid, amount=Decimal(value)) for pid, value in splits],
    )


class TestExpenseValidation:
    """Tests for expense checks."""

    def test_valid_expense(self, validator, group, dinner):
        """Test a well-formed expense passes."""
        result = validator.validate(dinner, group)
        assert result.is_valid is True
        assert result.has_errors is False
        assert result.event_id == "e1"

    def test_non_positive_amount(self, validator, group):
        """Test zero amounts are errors."""
        result = validator.validate(expense("0", [("a", "0")]), group)
        assert result.is_valid is False
        assert result.errors[0].issue_type == "invalid_amount"
        assert result.errors[0].field == "amount"

    def test_negative_split(self, validator, group):
        """Test negative split amounts are errors."""
        result = validator.validate(expense("10", [("a", "15"), ("b", "-5")]), group)
        types = [i.issue_type for i in result.errors]
        assert "invalid_amount" in types

    def test_split_exceeds_total(self, validator, group):
        """Test the field-level message for an over-allocated split."""
        result = validator.validate(expense("100", [("a", "60"), ("b", "50")]), group)
        mismatch = [i for i in result.errors if i.issue_type == "split_mismatch"]
        assert mismatch[0].message == "Split exceeds total by ₹10.00"

    def test_split_short_of_total(self, validator, group):
        result = validator.validate(expense("100", [("a", "60"), ("b", "30")]), group)
        mismatch = [i for i in result.errors if i.issue_type == "split_mismatch"]
        assert mismatch[0].message == "Split is short of total by ₹10.00"

    def test_one_cent_drift_tolerated(self, validator, group):
        result = validator.validate(expense("10", [("a", "3.33"), ("b", "6.66")]), group)
        assert result.is_valid is True

    def test_unknown_payer(self, validator, group):
        result = validator.validate(expense("10", [("a", "10")], payer="zed"), group)
        assert result.errors[0].issue_type == "unknown_participant"
        assert result.errors[0].field == "payer_id"

    def test_duplicate_split_participant(self, validator, group):
        result = validator.validate(expense("10", [("a", "5"), ("a", "5")]), group)
        assert [i.issue_type for i in result.errors] == ["duplicate_participant"]

    def test_payer_only_consumer_warns(self, validator, group):
        """Test a self-only expense passes with a warning."""
        result = validator.validate(expense("10", [("a", "10"), ("b", "0")]), group)
        assert result.is_valid is True
        assert len(result.warnings) == 1

    def test_large_amount_warns(self, validator, group):
        result = validator.validate(
            expense("2000000", [("a", "1000000"), ("b", "1000000")]), group
        )
        assert result.is_valid is True
        assert any("unusually high" in w for w in result.warnings)


class TestOtherEvents:
    """Tests for income and transfer checks."""

    def test_self_transfer(self, validator, group):
        transfer = TransferEvent(amount=Decimal("5.00"), from_id="a", to_id="a")
        result = validator.validate(transfer, group)
        assert [i.issue_type for i in result.errors] == ["self_transfer"]

    def test_transfer_unknown_receiver(self, validator, group):
        transfer = TransferEvent(amount=Decimal("5.00"), from_id="a", to_id="zed")
        result = validator.validate(transfer, group)
        assert result.errors[0].field == "to_id"

    def test_income_valid(self, validator, group):
        income = IncomeEvent(amount=Decimal("5.00"), receiver_id="c")
        assert validator.validate(income, group).is_valid is True

    def test_negative_income(self, validator, group):
        income = IncomeEvent(amount=Decimal("-5.00"), receiver_id="c")
        assert validator.validate(income, group).errors[0].issue_type == "invalid_amount"


class TestEnsureValid:
    """Tests for the raising entry point."""

    def test_returns_result_when_valid(self, validator, group, dinner):
        assert validator.ensure_valid(dinner, group).is_valid is True

    def test_invalid_amount(self, validator, group):
        with pytest.raises(InvalidAmountError):
            validator.ensure_valid(IncomeEvent(amount=Decimal("0"), receiver_id="a"), group)

    def test_split_mismatch(self, validator, group):
        with pytest.raises(SplitMismatchError) as exc:
            validator.ensure_valid(expense("100", [("a", "60"), ("b", "50")]), group)
        assert exc.value.difference == Decimal("10.00")

    def test_unknown_split_participant(self, validator, group):
        with pytest.raises(UnknownParticipantError) as exc:
            validator.ensure_valid(expense("10", [("a", "5"), ("zed", "5")]), group)
        assert exc.value.participant_id == "zed"
        assert exc.value.field == "splits[1]"

    def test_self_transfer(self, validator, group):
        with pytest.raises(InvalidEventError):
            validator.ensure_valid(
                TransferEvent(amount=Decimal("5.00"), from_id="b", to_id="b"), group
            )


class TestSummary:
    """Tests for the user-facing summary."""

    def test_all_clear(self, validator, group, dinner):
        summary = validator.get_user_friendly_summary(validator.validate(dinner, group))
        assert summary.startswith("✅")

    def test_errors_listed(self, validator, group):
        result = validator.validate(expense("100", [("a", "60"), ("b", "50")]), group)
        summary = validator.get_user_friendly_summary(result)
        assert "Split exceeds total by ₹10.00" in summary
        assert "can't be saved" in summary
