"""Tests for the split calculator."""

from decimal import Decimal

import pytest

from tripsplit.engine.errors import (
    InvalidAmountError,
    InvalidEventError,
    OverAllocatedSplitError,
    SplitMismatchError,
    UnknownParticipantError,
)
from tripsplit.engine.split import compute_split, validate_split
from tripsplit.models.ledger import Split


def amounts(splits):
    return {s.participant_id: s.amount for s in splits}


class TestComputeSplit:
    """Tests for compute_split."""

    def test_even_split(self):
        """Test a total that divides evenly."""
        splits = compute_split(Decimal("90.00"), ["a", "b"])
        assert amounts(splits) == {"a": Decimal("45.00"), "b": Decimal("45.00")}

    def test_rounding_is_conserved(self):
        """Test 100 over three people sums to exactly 100."""
        splits = compute_split(Decimal("100.00"), ["a", "b", "c"])
        assert sum(s.amount for s in splits) == Decimal("100.00")
        assert sorted(s.amount for s in splits) == [
            Decimal("33.33"), Decimal("33.33"), Decimal("33.34"),
        ]

    def test_last_unlocked_absorbs_residue(self):
        """Test the residual cent lands on the last unlocked participant."""
        splits = compute_split(Decimal("100.00"), ["a", "b", "c"])
        assert splits[-1].participant_id == "c"
        assert splits[-1].amount == Decimal("33.34")

    def test_round_half_up_share(self):
        """Test shares round half-up and the last share is reduced."""
        splits = compute_split(Decimal("0.05"), ["a", "b"])
        assert amounts(splits) == {"a": Decimal("0.03"), "b": Decimal("0.02")}

    def test_tiny_remainder_never_goes_negative(self):
        """Test a few cents spread over many people stay non-negative."""
        people = [f"p{i}" for i in range(10)]
        splits = compute_split(Decimal("0.07"), people)
        assert all(s.amount >= 0 for s in splits)
        assert sum(s.amount for s in splits) == Decimal("0.07")

    def test_locked_amounts_are_respected(self):
        """Test remainder is split among unlocked participants only."""
        splits = compute_split(
            Decimal("100.00"), ["a", "b", "c"], {"a": Decimal("40.00")}
        )
        assert amounts(splits) == {
            "a": Decimal("40.00"),
            "b": Decimal("30.00"),
            "c": Decimal("30.00"),
        }

    def test_preserves_participant_order(self):
        """Test output order follows the input order."""
        splits = compute_split(Decimal("10.00"), ["c", "a", "b"], {"a": Decimal("1.00")})
        assert [s.participant_id for s in splits] == ["c", "a", "b"]

    def test_accepts_floats_and_strings(self):
        """Test loose numeric inputs are converted without float noise."""
        splits = compute_split(10.1, ["a", "b"], {"a": "5.05"})
        assert amounts(splits) == {"a": Decimal("5.05"), "b": Decimal("5.05")}

    def test_all_locked_exact(self):
        """Test everyone locked with matching total."""
        splits = compute_split(
            Decimal("50.00"), ["a", "b"], {"a": Decimal("20.00"), "b": Decimal("30.00")}
        )
        assert amounts(splits) == {"a": Decimal("20.00"), "b": Decimal("30.00")}

    def test_locked_zero_excludes_participant(self):
        """Test a zero lock keeps the participant with a zero share."""
        splits = compute_split(Decimal("60.00"), ["a", "b", "c"], {"c": 0})
        assert amounts(splits)["c"] == Decimal("0.00")
        assert amounts(splits)["a"] == Decimal("30.00")


class TestComputeSplitErrors:
    """Tests for compute_split error conditions."""

    def test_over_allocated(self):
        """Test locked amounts above the total are rejected."""
        with pytest.raises(OverAllocatedSplitError, match="Split exceeds total by ₹20.00") as exc:
            compute_split(
                Decimal("100.00"), ["a", "b"], {"a": Decimal("70.00"), "b": Decimal("50.00")}
            )
        assert exc.value.excess == Decimal("20.00")

    @pytest.mark.parametrize("total", [Decimal("0"), Decimal("-5.00")])
    def test_non_positive_total(self, total):
        """Test the total must be positive."""
        with pytest.raises(InvalidAmountError):
            compute_split(total, ["a", "b"])

    def test_negative_locked_amount(self):
        """Test negative locked amounts are rejected."""
        with pytest.raises(InvalidAmountError):
            compute_split(Decimal("10.00"), ["a", "b"], {"a": Decimal("-1.00")})

    def test_locked_unknown_participant(self):
        """Test locks must refer to participants in the split."""
        with pytest.raises(UnknownParticipantError) as exc:
            compute_split(Decimal("10.00"), ["a", "b"], {"z": Decimal("1.00")})
        assert exc.value.participant_id == "z"

    def test_all_locked_short_of_total(self):
        """Test everyone locked but short of the total is not accepted silently."""
        with pytest.raises(SplitMismatchError, match="short of total by ₹10.00") as exc:
            compute_split(
                Decimal("60.00"), ["a", "b"], {"a": Decimal("20.00"), "b": Decimal("30.00")}
            )
        assert exc.value.difference == Decimal("-10.00")

    def test_sub_cent_total(self):
        """Test totals finer than a cent are refused, not rounded."""
        with pytest.raises(InvalidAmountError, match="more than two decimal places") as exc:
            compute_split("10.005", ["a", "b"])
        assert exc.value.field == "amount"

    def test_sub_cent_locked_amount(self):
        with pytest.raises(InvalidAmountError) as exc:
            compute_split(Decimal("20.00"), ["a", "b"], {"a": Decimal("10.005")})
        assert exc.value.field == "splits"

    def test_unparseable_total(self):
        with pytest.raises(InvalidAmountError, match="not a valid amount"):
            compute_split("ten", ["a", "b"])

    def test_trailing_zeros_accepted(self):
        """Test extra zero digits are still whole cents."""
        splits = compute_split("10.000", ["a", "b"])
        assert amounts(splits) == {"a": Decimal("5.00"), "b": Decimal("5.00")}

    def test_duplicate_participant(self):
        """Test a participant listed twice is rejected."""
        with pytest.raises(InvalidEventError):
            compute_split(Decimal("10.00"), ["a", "a"])


class TestValidateSplit:
    """Tests for validate_split."""

    def test_exact_match(self):
        check = validate_split(
            Decimal("10.00"),
            [Split(participant_id="a", amount=Decimal("5.00")),
             Split(participant_id="b", amount=Decimal("5.00"))],
        )
        assert check.valid is True
        assert check.difference == Decimal("0.00")

    def test_within_one_cent(self):
        """Test a one-cent difference is tolerated."""
        check = validate_split(
            Decimal("10.00"),
            [Split(participant_id="a", amount=Decimal("3.33")),
             Split(participant_id="b", amount=Decimal("6.66"))],
        )
        assert check.valid is True
        assert check.difference == Decimal("-0.01")

    def test_over_total(self):
        check = validate_split(
            Decimal("10.00"),
            [Split(participant_id="a", amount=Decimal("8.00")),
             Split(participant_id="b", amount=Decimal("5.00"))],
        )
        assert check.valid is False
        assert check.difference == Decimal("3.00")
