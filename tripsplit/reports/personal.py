"""Settlement instructions seen from the local user's side."""

from typing import Sequence

from tripsplit.models.ledger import Group
from tripsplit.models.settlement import PersonalDebt, SettlementInstruction


def local_user_debts(
    group: Group,
    settlements: Sequence[SettlementInstruction],
) -> list[PersonalDebt]:
    """
    Pick out the instructions that involve the local user.

    Each becomes a ``lent`` entry (money coming to the local user) or a
    ``borrowed`` entry (money the local user has to pay). Groups without
    a local user yield nothing.
    """
    me = group.local_user
    if me is None:
        return []

    debts = []
    for instruction in settlements:
        if instruction.to_participant_id == me.id:
            direction = "lent"
            counterpart_id = instruction.from_participant_id
        elif instruction.from_participant_id == me.id:
            direction = "borrowed"
            counterpart_id = instruction.to_participant_id
        else:
            continue

        debts.append(PersonalDebt(
            id=f"group_settlement_{group.id}_{instruction.from_participant_id}_{instruction.to_participant_id}",
            direction=direction,
            counterpart_id=counterpart_id,
            counterpart_name=group.display_name(counterpart_id),
            amount=instruction.amount,
            description=f"Settlement: {group.name}",
            group_id=group.id,
        ))
    return debts
