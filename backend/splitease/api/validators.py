from __future__ import annotations

from typing import Any, List, Tuple

from splitease.domain.errors import InvalidAmount
from splitease.domain.models import (
    BalanceLedgerEntry,
    ExpenseRequest,
    LedgerSource,
    Member,
    ModelValidationError,
    ParticipantInput,
    SplitMethod,
)
from splitease.domain.money import Money


class ApiValidationError(ValueError):
    """Raised when request payload validation fails."""


def _require_str(value: object, message: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ApiValidationError(message)
    return value


def parse_amount(value: object, field: str, currency: str) -> Money:
    """
    Amounts arrive as form strings ("12.50") or JSON numbers.
    Both are parsed strictly: at most 2 decimal places, nothing is rounded.
    """
    if isinstance(value, str):
        return Money.parse(value, currency)
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        money = Money.from_decimal(value, currency, exact=True)
        if money.cents < 0:
            raise InvalidAmount(f"'{field}' must be >= 0")
        return money
    raise ApiValidationError(f"'{field}' must be a decimal string or number.")


def parse_roster(raw_members: object) -> List[Member]:
    if not isinstance(raw_members, list) or not raw_members:
        raise ApiValidationError("'members' must be a non-empty list.")

    roster: List[Member] = []
    for idx, raw in enumerate(raw_members):
        if not isinstance(raw, dict):
            raise ApiValidationError(f"Member at index {idx} must be an object.")
        member_id = _require_str(raw.get("id"), f"Member at index {idx} must include a non-empty 'id'.")
        username = _require_str(
            raw.get("username"), f"Member at index {idx} must include a non-empty 'username'."
        )
        roster.append(Member(id=member_id, display_name=username.strip()))
    return roster


def parse_participants(raw_participants: object, currency: str) -> Tuple[ParticipantInput, ...]:
    if not isinstance(raw_participants, list):
        raise ApiValidationError("'participants' must be a list.")

    parsed: List[ParticipantInput] = []
    for idx, raw in enumerate(raw_participants):
        if not isinstance(raw, dict):
            raise ApiValidationError(f"Participant at index {idx} must be an object.")
        member_id = _require_str(
            raw.get("memberId"), f"Participant at index {idx} must include a non-empty 'memberId'."
        )

        included = raw.get("included", True)
        if not isinstance(included, bool):
            raise ApiValidationError(f"Participant at index {idx}: 'included' must be a boolean.")

        ratio = raw.get("ratio")
        if ratio is not None and (not isinstance(ratio, int) or isinstance(ratio, bool)):
            raise ApiValidationError(f"Participant at index {idx}: 'ratio' must be an integer.")

        custom_share = None
        if raw.get("customShare") is not None:
            custom_share = parse_amount(raw["customShare"], "customShare", currency)

        parsed.append(
            ParticipantInput(
                member_id=member_id,
                included=included,
                ratio=ratio,
                custom_share=custom_share,
            )
        )
    return tuple(parsed)


def parse_split_method(raw: object) -> SplitMethod:
    try:
        return SplitMethod(raw)
    except ValueError as e:
        allowed = ", ".join(m.value for m in SplitMethod)
        raise ApiValidationError(f"'splittingType' must be one of: {allowed}.") from e


def parse_expense_request(data: dict, currency: str) -> Tuple[ExpenseRequest, List[Member]]:
    """
    Body of POST /api/splits:
      {description?, amount, paidById, splittingType, members, participants}
    """
    for field in ("amount", "paidById", "splittingType", "members", "participants"):
        if field not in data:
            raise ApiValidationError(f"Missing field: {field}")

    roster = parse_roster(data["members"])
    description = data.get("description") or ""
    if not isinstance(description, str):
        raise ApiValidationError("'description' must be a string.")

    request = ExpenseRequest(
        total=parse_amount(data["amount"], "amount", currency),
        paid_by_id=_require_str(data["paidById"], "'paidById' must be a non-empty string."),
        split_method=parse_split_method(data["splittingType"]),
        participants=parse_participants(data["participants"], currency),
        description=description.strip(),
    )
    return request, roster


def parse_ledger_entries(raw_entries: object, currency: str) -> List[BalanceLedgerEntry]:
    if not isinstance(raw_entries, list):
        raise ApiValidationError("'entries' must be a list.")

    entries: List[BalanceLedgerEntry] = []
    for idx, raw in enumerate(raw_entries):
        if not isinstance(raw, dict):
            raise ApiValidationError(f"Entry at index {idx} must be an object.")
        from_member = _require_str(raw.get("from"), f"Entry at index {idx} must include 'from'.")
        to_member = _require_str(raw.get("to"), f"Entry at index {idx} must include 'to'.")
        if "amount" not in raw:
            raise ApiValidationError(f"Entry at index {idx} must include 'amount'.")
        amount = parse_amount(raw["amount"], "amount", currency)
        try:
            kind = LedgerSource(raw.get("kind"))
        except ValueError as e:
            raise ApiValidationError(
                f"Entry at index {idx}: 'kind' must be 'Expense' or 'Settlement'."
            ) from e

        try:
            entries.append(
                BalanceLedgerEntry(
                    from_member=from_member,
                    to_member=to_member,
                    amount=amount,
                    source_kind=kind,
                )
            )
        except ModelValidationError as e:
            raise ApiValidationError(f"Entry at index {idx}: {e}") from e
    return entries


def parse_unique_member_ids(raw_ids: object, field: str) -> List[str]:
    if not isinstance(raw_ids, list) or not raw_ids:
        raise ApiValidationError(f"'{field}' must be a non-empty list of member ids.")

    member_ids: List[str] = []
    seen: set[str] = set()
    for mid in raw_ids:
        if not isinstance(mid, str) or not mid.strip():
            raise ApiValidationError("Each member id must be a non-empty string.")
        if mid in seen:
            raise ApiValidationError("Member ids must be unique.")
        seen.add(mid)
        member_ids.append(mid)
    return member_ids


def parse_member_id(data: dict, field: str) -> str:
    return _require_str(data.get(field), f"'{field}' must be a non-empty string.")


def require_json_object(data: Any) -> dict:
    if not isinstance(data, dict):
        raise ApiValidationError("Request body must be a JSON object.")
    return data
