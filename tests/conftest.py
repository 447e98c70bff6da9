from decimal import Decimal

import pytest

from tripsplit.models.ledger import (
    ExpenseEvent,
    Group,
    Participant,
    Split,
    TransferEvent,
)


def D(value: str) -> Decimal:
    return Decimal(value)


@pytest.fixture
def alice():
    return Participant(id="a", name="Alice", is_local_user=True)


@pytest.fixture
def bob():
    return Participant(id="b", name="Bob")


@pytest.fixture
def carol():
    return Participant(id="c", name="Carol")


@pytest.fixture
def group(alice, bob, carol):
    return Group(id="g1", name="Goa Trip", participants=[alice, bob, carol])


@pytest.fixture
def dinner():
    """A pays 300, split equally among A, B, C."""
    return ExpenseEvent(
        id="e1",
        title="Dinner",
        amount=D("300.00"),
        payer_id="a",
        splits=[
            Split(participant_id="a", amount=D("100.00")),
            Split(participant_id="b", amount=D("100.00")),
            Split(participant_id="c", amount=D("100.00")),
        ],
        category="food",
    )


@pytest.fixture
def snacks():
    """B pays 90, split equally among A, B."""
    return ExpenseEvent(
        id="e2",
        title="Snacks",
        amount=D("90.00"),
        payer_id="b",
        splits=[
            Split(participant_id="a", amount=D("45.00")),
            Split(participant_id="b", amount=D("45.00")),
        ],
        category="food",
    )


@pytest.fixture
def scenario_events(dinner, snacks):
    return [dinner, snacks]


@pytest.fixture
def payback():
    """B transfers 55 to A."""
    return TransferEvent(id="t1", title="Payback", amount=D("55.00"), from_id="b", to_id="a")
