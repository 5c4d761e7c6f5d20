# backend/splitease/domain/settlement.py
from __future__ import annotations

from typing import Iterable, Tuple

from splitease.domain.balances import counterparty_balances
from splitease.domain.errors import AlreadySettled, Result, UnknownMember
from splitease.domain.models import MemberBalance, PairwiseBalance
from splitease.domain.money import Money


def propose_settlement(
    balance: PairwiseBalance, payer_id: str, payee_id: str
) -> Result[Money]:
    """
    Amount that would settle the balance between payer and payee: the
    absolute net. Fails with AlreadySettled when the net is exactly zero.
    """
    if payer_id == payee_id or not (balance.involves(payer_id) and balance.involves(payee_id)):
        return Result.fail(
            UnknownMember(
                f"balance is between {balance.member_a} and {balance.member_b}, "
                f"not {payer_id} and {payee_id}"
            )
        )
    if balance.net_amount.is_zero():
        return Result.fail(AlreadySettled(f"{payer_id} and {payee_id} are settled up"))
    return Result.ok(abs(balance.net_amount))


def settlement_options(
    balances: Iterable[PairwiseBalance], member_id: str
) -> Tuple[MemberBalance, ...]:
    """
    Counterparties member_id could settle with, each with the absolute amount
    outstanding. An empty tuple means there is nothing to settle.
    """
    return tuple(
        MemberBalance(member_id=mb.member_id, net_amount=abs(mb.net_amount))
        for mb in counterparty_balances(balances, member_id)
        if not mb.net_amount.is_zero()
    )
