# backend/splitease/domain/balances.py
from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from splitease.domain.models import (
    BalanceLedgerEntry,
    GroupBalanceSummary,
    LedgerSource,
    MemberBalance,
    ModelValidationError,
    PairwiseBalance,
    SplitResult,
)
from splitease.domain.money import DEFAULT_CURRENCY, Money, sum_money

logger = logging.getLogger(__name__)


def ledger_entries_for_split(split_result: SplitResult) -> Tuple[BalanceLedgerEntry, ...]:
    """
    Expense ledger entries for a stored split: every beneficiary other than
    the payer owes the payer their share. The payer's own share and zero
    shares produce no entry.
    """
    payer = split_result.paid_by_id
    return tuple(
        BalanceLedgerEntry(
            from_member=s.member_id,
            to_member=payer,
            amount=s.share,
            source_kind=LedgerSource.EXPENSE,
        )
        for s in split_result.shares
        if s.member_id != payer and not s.share.is_zero()
    )


def settlement_entry(payer_id: str, payee_id: str, amount: Money) -> BalanceLedgerEntry:
    """payer_id paid payee_id `amount` to settle up."""
    return BalanceLedgerEntry(
        from_member=payer_id,
        to_member=payee_id,
        amount=amount,
        source_kind=LedgerSource.SETTLEMENT,
    )


def _signed_contribution(entry: BalanceLedgerEntry, member_a: str) -> Money:
    # positive = member_a is owed more
    owed_to_a = entry.to_member == member_a
    if entry.source_kind is LedgerSource.SETTLEMENT:
        owed_to_a = not owed_to_a
    return entry.amount if owed_to_a else -entry.amount


def aggregate(
    entries: Iterable[BalanceLedgerEntry],
    *,
    currency: str = DEFAULT_CURRENCY,
) -> Tuple[PairwiseBalance, ...]:
    """
    Fold ledger entries into one net balance per unordered pair of members.

    Recomputed from scratch on every call; the result does not depend on entry
    order. Pairs are oriented so member_a < member_b and returned sorted.
    Pairs whose history cancels out are kept with a zero net.
    """
    nets: Dict[Tuple[str, str], Money] = {}
    count = 0
    for entry in entries:
        if entry.amount.currency != currency:
            raise ModelValidationError(
                f"ledger entry in {entry.amount.currency}, expected {currency}"
            )
        a, b = sorted((entry.from_member, entry.to_member))
        current = nets.get((a, b), Money.zero(currency))
        nets[(a, b)] = current + _signed_contribution(entry, a)
        count += 1

    logger.debug("aggregated %d ledger entries into %d pairs", count, len(nets))
    return tuple(
        PairwiseBalance(member_a=a, member_b=b, net_amount=net)
        for (a, b), net in sorted(nets.items())
    )


def group_summary(
    balances: Iterable[PairwiseBalance],
    group_membership: Sequence[str],
    *,
    viewer_id: Optional[str] = None,
    currency: str = DEFAULT_CURRENCY,
) -> GroupBalanceSummary:
    """
    Per-member net for one group, in membership order.

    Only pairs with both members in the group count. overall_net is the
    viewer's own net when viewer_id is given (the group header figure),
    otherwise the sum of all per-member nets, which is zero for a closed group.
    """
    members = list(dict.fromkeys(group_membership))
    if viewer_id is not None and viewer_id not in members:
        raise ModelValidationError(f"viewer {viewer_id} is not a member of this group")

    nets: Dict[str, Money] = {m: Money.zero(currency) for m in members}
    for bal in balances:
        if bal.member_a in nets and bal.member_b in nets:
            nets[bal.member_a] = nets[bal.member_a] + bal.net_amount
            nets[bal.member_b] = nets[bal.member_b] - bal.net_amount

    per_member = tuple(MemberBalance(member_id=m, net_amount=nets[m]) for m in members)
    if viewer_id is not None:
        overall = nets[viewer_id]
    else:
        overall = sum_money(nets.values(), currency)
    return GroupBalanceSummary(per_member=per_member, overall_net=overall)


def balance_between(
    balances: Iterable[PairwiseBalance],
    member_id: str,
    other_id: str,
    *,
    currency: str = DEFAULT_CURRENCY,
) -> PairwiseBalance:
    """
    The balance between two members seen from member_id's side.
    Zero when the two share no history.
    """
    for bal in balances:
        if bal.involves(member_id) and bal.involves(other_id):
            return bal.oriented(member_id)
    return PairwiseBalance(member_a=member_id, member_b=other_id, net_amount=Money.zero(currency))


def counterparty_balances(
    balances: Iterable[PairwiseBalance], viewer_id: str
) -> Tuple[MemberBalance, ...]:
    """
    Everyone the viewer has history with and the net from the viewer's side:
    positive means they owe the viewer, negative means the viewer owes them.
    """
    out: List[MemberBalance] = []
    for bal in balances:
        if bal.involves(viewer_id):
            mine = bal.oriented(viewer_id)
            out.append(MemberBalance(member_id=mine.member_b, net_amount=mine.net_amount))
    return tuple(out)


def balance_text(net: Money, *, symbol: str = "₹") -> str:
    """
    Text for one counterparty row, net seen from the viewer's side.
    """
    if net.cents > 0:
        return f"owes you {abs(net).format(symbol)}"
    if net.cents < 0:
        return f"you owe {abs(net).format(symbol)}"
    return "Settled up"


def summary_text(net: Money, *, symbol: str = "₹") -> str:
    """Headline text for the viewer's overall position."""
    if net.cents > 0:
        return f"You are owed {abs(net).format(symbol)}"
    if net.cents < 0:
        return f"You owe {abs(net).format(symbol)}"
    return "Settled up"
