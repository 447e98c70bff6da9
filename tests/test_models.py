"""
Tests for tripsplit models, settings and audit logging

Test strategy:
1. Unit tests for individual components (models, money helpers)
2. Audit logging with in-memory storage
3. No external services in tests
"""

import asyncio
from decimal import Decimal

import pytest

from tripsplit.audit import AuditLogger, create_correlation_id
from tripsplit.config import get_settings, validate_all_settings
from tripsplit.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)
from tripsplit.models.ledger import (
    ExpenseEvent,
    Group,
    IncomeEvent,
    Participant,
    TransferEvent,
    parse_event,
    parse_events,
)
from tripsplit.models.money import format_money, from_cents, quantize_money, to_cents
from tripsplit.models.settlement import BalanceRecord
from tripsplit.storage import InMemoryAuditStorage


class TestMoney:
    """Tests for money helpers."""

    def test_quantize_half_up(self):
        assert quantize_money("0.125") == Decimal("0.13")
        assert quantize_money(Decimal("2.5")) == Decimal("2.50")

    def test_cents_conversion(self):
        assert to_cents(Decimal("100.00")) == 10000
        assert to_cents(-55) == -5500
        assert from_cents(3334) == Decimal("33.34")

    def test_float_input(self):
        """Test floats are converted via their string form."""
        assert to_cents(0.1) == 10

    def test_format(self):
        assert format_money(Decimal("1250")) == "₹1,250.00"
        assert format_money(Decimal("3"), "$") == "$3.00"


class TestLedgerModels:
    """Tests for ledger event models."""

    def test_parse_discriminated_events(self):
        """Test raw records parse into the right variant."""
        events = parse_events([
            {"kind": "expense", "amount": "30.00", "payer_id": "a",
             "splits": [{"participant_id": "a", "amount": "30.00"}]},
            {"kind": "income", "amount": "10", "receiver_id": "a"},
            {"kind": "transfer", "amount": 5.5, "from_id": "a", "to_id": "b"},
        ])
        assert isinstance(events[0], ExpenseEvent)
        assert isinstance(events[1], IncomeEvent)
        assert isinstance(events[2], TransferEvent)
        assert events[2].amount == Decimal("5.5")

    def test_unknown_kind_rejected(self):
        with pytest.raises(ValueError):
            parse_event({"kind": "refund", "amount": "1.00"})

    def test_events_are_immutable(self, dinner):
        with pytest.raises(ValueError):
            dinner.amount = Decimal("1.00")

    def test_sub_cent_amount_rejected(self):
        """Test amounts carry at most two decimal places."""
        with pytest.raises(ValueError):
            IncomeEvent(amount=Decimal("1.005"), receiver_id="a")

    def test_share_of(self, dinner, snacks):
        assert dinner.share_of("c") == Decimal("100.00")
        assert snacks.share_of("c") is None
        assert snacks.split_total == Decimal("90.00")

    def test_group_helpers(self, group):
        assert group.local_user.id == "a"
        assert group.participant_ids == ["a", "b", "c"]
        assert group.display_name("zzz") == "Unknown Participant"

    def test_group_rejects_duplicate_participants(self):
        with pytest.raises(ValueError, match="Duplicate participant id"):
            Group(name="Dupes", participants=[
                Participant(id="a", name="A"),
                Participant(id="a", name="A again"),
            ])

    def test_participant_name_stripped(self):
        assert Participant(name="  Bob  ").name == "Bob"


class TestBalanceRecord:
    """Tests for BalanceRecord helpers."""

    def test_classification(self):
        creditor = BalanceRecord(participant_id="a", net_balance=Decimal("5.00"))
        debtor = BalanceRecord(participant_id="b", net_balance=Decimal("-5.00"))
        settled = BalanceRecord(participant_id="c", net_balance=Decimal("0.01"))
        assert creditor.is_creditor() and not creditor.is_debtor()
        assert debtor.is_debtor() and not debtor.is_settled()
        assert settled.is_settled()


class TestSettings:
    """Tests for configuration."""

    def test_defaults(self):
        ledger = get_settings().ledger
        assert ledger.epsilon == Decimal("0.01")
        assert ledger.currency_symbol == "₹"
        assert ledger.contributing_events_limit == 5

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("LEDGER_CURRENCY_SYMBOL", "$")
        assert get_settings().ledger.currency_symbol == "$"

    def test_validate_all_settings(self):
        results = validate_all_settings()
        assert results["ledger"] is True
        assert results["logging"] is True


class TestAuditModels:
    """Tests for audit models and the audit logger."""

    def test_audit_event_to_log_dict(self):
        event = AuditEventBuilder.event_recorded(
            group_id="g1", event_id="e1", kind="expense", amount="300.00"
        )
        log_dict = event.to_log_dict()
        assert log_dict["event_type"] == "event_recorded"
        assert log_dict["entity_id"] == "e1"
        assert log_dict["details"]["amount"] == "300.00"
        assert event.is_user_action is True

    def test_imbalance_is_warning(self):
        event = AuditEventBuilder.ledger_imbalance(group_id="g1", total="30.00")
        assert event.event_type == AuditEventType.LEDGER_IMBALANCE_DETECTED
        assert event.severity == AuditSeverity.WARNING

    def test_logger_persists_events(self):
        storage = InMemoryAuditStorage()
        logger = AuditLogger(storage)
        correlation_id = create_correlation_id()

        async def flow():
            await logger.log_settlement_computed(
                group_id="g1", instruction_count=2, total_expenses="390.00",
                correlation_id=correlation_id,
            )
            return await storage.get_events_by_correlation_id(correlation_id)

        events = asyncio.run(flow())
        assert len(events) == 1
        assert events[0].details["instruction_count"] == 2

    def test_logger_survives_storage_failure(self):
        """Test a failing audit backend doesn't raise."""

        class BrokenStorage(InMemoryAuditStorage):
            async def append_event(self, event: AuditEvent) -> bool:
                raise RuntimeError("disk full")

        logger = AuditLogger(BrokenStorage())
        ok = asyncio.run(logger.log_error("boom", "something failed"))
        assert ok is None

        result = asyncio.run(logger.log(AuditEventBuilder.system_error("boom", "failed")))
        assert result is False


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
