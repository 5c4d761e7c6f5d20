# backend/splitease/domain/split_logic.py
from __future__ import annotations

from typing import Callable, Dict, List, Sequence, Tuple

from splitease.domain.errors import (
    InvalidAmount,
    InvalidRatio,
    MissingShare,
    NoParticipants,
)
from splitease.domain.models import MemberShare, ParticipantInput, SplitMethod
from splitease.domain.money import Money, sum_money

DEFAULT_RATIO = 1

Shares = Tuple[MemberShare, ...]


def _included(participants: Sequence[ParticipantInput]) -> List[ParticipantInput]:
    included = [p for p in participants if p.included]
    if not included:
        raise NoParticipants("include at least one member in the split")
    return included


def _pair(included: Sequence[ParticipantInput], amounts: Sequence[Money]) -> Shares:
    return tuple(
        MemberShare(member_id=p.member_id, share=amount)
        for p, amount in zip(included, amounts, strict=True)
    )


def split_equal(total: Money, participants: Sequence[ParticipantInput]) -> Shares:
    """
    Equal split over the included participants, in the order given.
    Remainder cents go to the first participants.
    """
    included = _included(participants)
    return _pair(included, total.equal_split(len(included)))


def resolve_ratio(p: ParticipantInput) -> int:
    ratio = DEFAULT_RATIO if p.ratio is None else p.ratio
    if not isinstance(ratio, int) or isinstance(ratio, bool) or ratio <= 0:
        raise InvalidRatio(f"ratio for member {p.member_id} must be a positive integer, got {ratio!r}")
    return ratio


def split_ratio(total: Money, participants: Sequence[ParticipantInput]) -> Shares:
    """
    Split proportionally to each included participant's ratio (default 1).
    """
    included = _included(participants)
    ratios = [resolve_ratio(p) for p in included]
    return _pair(included, total.proportional_split(ratios))


def split_custom(total: Money, participants: Sequence[ParticipantInput]) -> Shares:
    """
    Pass explicit shares through untouched; reconciliation against the
    total is the validator's job.
    """
    included = _included(participants)
    amounts: List[Money] = []
    for p in included:
        if p.custom_share is None:
            raise MissingShare(f"no amount entered for member {p.member_id}")
        if p.custom_share.cents < 0:
            raise InvalidAmount(f"amount for member {p.member_id} must be >= 0")
        if p.custom_share.currency != total.currency:
            raise InvalidAmount(f"amount for member {p.member_id} is not in {total.currency}")
        amounts.append(p.custom_share)
    return _pair(included, amounts)


_STRATEGIES: Dict[SplitMethod, Callable[[Money, Sequence[ParticipantInput]], Shares]] = {
    SplitMethod.EQUAL: split_equal,
    SplitMethod.RATIO: split_ratio,
    SplitMethod.CUSTOM: split_custom,
}


def compute_shares(
    method: SplitMethod, total: Money, participants: Sequence[ParticipantInput]
) -> Shares:
    """
    Compute per-member shares for one expense.

    participants should already be in roster order; excluded participants are
    skipped and get no entry. Raises a SplitError subclass on bad input.
    """
    try:
        strategy = _STRATEGIES[SplitMethod(method)]
    except ValueError as e:
        raise ValueError(f"unsupported split method: {method!r}") from e
    return strategy(total, participants)


def remaining_amount(total: Money, participants: Sequence[ParticipantInput]) -> Money:
    """
    Amount still unallocated in a Custom split: total minus the custom shares
    entered so far for included participants. Negative when over-allocated.
    """
    allocated = sum_money(
        (p.custom_share for p in participants if p.included and p.custom_share is not None),
        total.currency,
    )
    return total - allocated
