# backend/splitease/domain/engine.py
from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from splitease.domain.errors import (
    DuplicateMember,
    InvalidAmount,
    Result,
    SplitError,
    UnknownMember,
)
from splitease.domain.models import (
    ExpenseRequest,
    Member,
    ModelValidationError,
    ParticipantInput,
    SplitMethod,
    SplitResult,
)
from splitease.domain.money import DEFAULT_CURRENCY, Money
from splitease.domain.split_logic import compute_shares, resolve_ratio
from splitease.domain.validation import validate

logger = logging.getLogger(__name__)


def _resolve_participants(
    request: ExpenseRequest, roster: Sequence[Member]
) -> List[ParticipantInput]:
    """
    Check every referenced id against the roster and return the participants
    re-ordered to roster order. Roster members absent from the request are
    treated as excluded.
    """
    roster_order = {m.id: idx for idx, m in enumerate(roster)}
    if len(roster_order) != len(roster):
        raise DuplicateMember("roster member ids must be unique")

    if request.paid_by_id not in roster_order:
        raise UnknownMember(f"payer is not a member of this roster: {request.paid_by_id}")

    seen: set[str] = set()
    for p in request.participants:
        if p.member_id in seen:
            raise DuplicateMember(f"member listed twice in split: {p.member_id}")
        seen.add(p.member_id)
        if p.member_id not in roster_order:
            raise UnknownMember(f"split references unknown member id: {p.member_id}")

    return sorted(request.participants, key=lambda p: roster_order[p.member_id])


def create_split(
    request: ExpenseRequest,
    roster: Sequence[Member],
    *,
    allow_payer_excluded: bool = True,
) -> Result[SplitResult]:
    """
    Turn an expense form submission into a validated SplitResult.

    Steps: resolve participants against the roster, compute shares for the
    chosen method, validate, return. Pure and deterministic: the same request
    and roster always give an identical result. Editing an expense is just
    another create_split call with the edited request.
    """
    if request.total.cents < 0:
        error = InvalidAmount(f"expense total must be >= 0, got {request.total}")
        logger.info("split rejected (%s): %s", error.code, error)
        return Result.fail(error)

    try:
        participants = _resolve_participants(request, roster)
        shares = compute_shares(request.split_method, request.total, participants)
    except SplitError as e:
        logger.info("split rejected (%s): %s", e.code, e)
        return Result.fail(e)

    ratios = ()
    if request.split_method is SplitMethod.RATIO:
        ratios = tuple((p.member_id, resolve_ratio(p)) for p in participants if p.included)

    result = SplitResult(
        expense_total=request.total,
        shares=shares,
        split_method=request.split_method,
        paid_by_id=request.paid_by_id,
        description=request.description,
        ratios=ratios,
    )

    outcome = validate(result, request.total, allow_payer_excluded=allow_payer_excluded)
    if not outcome.is_ok:
        logger.info("split rejected (%s): %s", outcome.error.code, outcome.error)
        return outcome

    logger.debug(
        "computed %s split of %s over %d members",
        request.split_method.value,
        request.total,
        len(shares),
    )
    return outcome


def to_payload(
    split_result: SplitResult,
    roster: Sequence[Member],
    *,
    group_id: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Shape a SplitResult into the expense create/update REST body:

      Equal  -> participantIds, only when not every roster member is included
      Ratio  -> ratios: [{userId, ratio}]
      Custom -> splits: [{userId, share}]
    """
    payload: Dict[str, Any] = {
        "description": split_result.description,
        "amount": split_result.expense_total.to_number(),
        "paidById": split_result.paid_by_id,
        "splittingType": split_result.split_method.value,
    }
    if group_id is not None:
        payload["groupId"] = group_id

    method = split_result.split_method
    if method is SplitMethod.EQUAL:
        if len(split_result.shares) != len(roster):
            payload["participantIds"] = list(split_result.member_ids)
    elif method is SplitMethod.RATIO:
        payload["ratios"] = [{"userId": mid, "ratio": ratio} for mid, ratio in split_result.ratios]
    else:
        payload["splits"] = [
            {"userId": s.member_id, "share": s.share.to_number()} for s in split_result.shares
        ]
    return payload


def _participants_over_roster(
    roster: Sequence[Member], selected: Mapping[str, Dict[str, Any]]
) -> Tuple[ParticipantInput, ...]:
    """
    One ParticipantInput per roster member (included iff selected), followed by
    any selected ids the roster does not know so the engine can reject them.
    """
    roster_ids = [m.id for m in roster]
    participants = [
        ParticipantInput(member_id=mid, included=mid in selected, **selected.get(mid, {}))
        for mid in roster_ids
    ]
    participants.extend(
        ParticipantInput(member_id=mid, included=True, **fields)
        for mid, fields in selected.items()
        if mid not in roster_ids
    )
    return tuple(participants)


def _entry_fields(entry: object, fields: Sequence[str], label: str) -> List[Any]:
    if not isinstance(entry, Mapping):
        raise ModelValidationError(f"{label} entries must be objects")
    try:
        return [entry[f] for f in fields]
    except KeyError as e:
        raise ModelValidationError(f"{label} entry missing field: {e.args[0]}") from e


def _select_unique(
    pairs: Sequence[Tuple[str, Dict[str, Any]]], label: str
) -> Dict[str, Dict[str, Any]]:
    selected: Dict[str, Dict[str, Any]] = {}
    for mid, fields in pairs:
        if mid in selected:
            raise ModelValidationError(f"{label} lists member twice: {mid}")
        selected[mid] = fields
    return selected


def _custom_splits(
    splits: Sequence[Mapping[str, Any]], currency: str, label: str
) -> Dict[str, Dict[str, Any]]:
    pairs = []
    for s in splits:
        user_id, share = _entry_fields(s, ("userId", "share"), label)
        pairs.append((user_id, {"custom_share": Money.from_decimal(share, currency)}))
    return _select_unique(pairs, label)


def request_from_payload(
    payload: Mapping[str, Any],
    roster: Sequence[Member],
    *,
    currency: str = DEFAULT_CURRENCY,
) -> ExpenseRequest:
    """
    Rebuild an ExpenseRequest from a REST expense body (the inverse of
    to_payload). Feeding the result back into create_split re-derives the
    stored shares.
    """
    try:
        amount = payload["amount"]
        paid_by_id = payload["paidById"]
        method = SplitMethod(payload["splittingType"])
    except KeyError as e:
        raise ModelValidationError(f"missing field: {e.args[0]}") from e
    except ValueError as e:
        raise ModelValidationError(f"unknown splittingType: {payload.get('splittingType')!r}") from e

    total = Money.from_decimal(amount, currency)
    if total.cents < 0:
        raise InvalidAmount(f"expense amount must be >= 0, got {amount!r}")

    if method is SplitMethod.EQUAL:
        ids = payload.get("participantIds")
        if ids is None:
            ids = [m.id for m in roster]
        selected = _select_unique([(mid, {}) for mid in ids], "participantIds")
    elif method is SplitMethod.RATIO:
        pairs = []
        for r in payload.get("ratios", []):
            (user_id,) = _entry_fields(r, ("userId",), "ratios")
            pairs.append((user_id, {"ratio": r.get("ratio")}))
        selected = _select_unique(pairs, "ratios")
    else:
        selected = _custom_splits(payload.get("splits", []), currency, "splits")

    return ExpenseRequest(
        total=total,
        paid_by_id=paid_by_id,
        split_method=method,
        participants=_participants_over_roster(roster, selected),
        description=payload.get("description", "") or "",
    )


def request_for_edit(
    description: str,
    total: Money,
    paid_by_id: str,
    existing_splits: Sequence[Mapping[str, Any]],
    roster: Sequence[Member],
) -> ExpenseRequest:
    """
    Pre-fill an edit from a stored expense's splits ([{userId, share}]).

    Edits always start as a Custom split: members with a stored split are
    included with that share, everyone else on the roster is excluded.
    """
    selected = _custom_splits(existing_splits, total.currency, "splits")
    return ExpenseRequest(
        total=total,
        paid_by_id=paid_by_id,
        split_method=SplitMethod.CUSTOM,
        participants=_participants_over_roster(roster, selected),
        description=description,
    )
