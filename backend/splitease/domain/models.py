# backend/splitease/domain/models.py
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

from splitease.domain.money import Money


class ModelValidationError(ValueError):
    """Raised when domain models are constructed with structurally bad data."""


def _require_id(value: object, label: str) -> None:
    if not isinstance(value, str) or not value.strip():
        raise ModelValidationError(f"{label} must be a non-empty string")


def _require_money(value: object, label: str) -> None:
    if not isinstance(value, Money):
        raise ModelValidationError(f"{label} must be Money")


class SplitMethod(str, Enum):
    """Split methods; values match the REST `splittingType` field."""
    EQUAL = "Equal"
    RATIO = "Ratio"
    CUSTOM = "Custom"


class LedgerSource(str, Enum):
    EXPENSE = "Expense"
    SETTLEMENT = "Settlement"


@dataclass(frozen=True)
class Member:
    """
    One person on a group roster. Owned by the caller; the engine never
    creates or deletes members.
    """
    id: str
    display_name: str

    def __post_init__(self) -> None:
        _require_id(self.id, "Member.id")
        _require_id(self.display_name, "Member.display_name")


@dataclass(frozen=True)
class ParticipantInput:
    """
    Per-member form state for one expense: include toggle, ratio field and
    custom amount field. Which of ratio/custom_share matters depends on the
    split method.
    """
    member_id: str
    included: bool = True
    ratio: Optional[int] = None
    custom_share: Optional[Money] = None

    def __post_init__(self) -> None:
        _require_id(self.member_id, "ParticipantInput.member_id")
        if not isinstance(self.included, bool):
            raise ModelValidationError("ParticipantInput.included must be a bool")
        if self.custom_share is not None:
            _require_money(self.custom_share, "ParticipantInput.custom_share")


@dataclass(frozen=True)
class ExpenseRequest:
    """
    A create/edit action as collected from the expense form.
    Built per action, consumed once by the engine, then discarded.
    """
    total: Money
    paid_by_id: str
    split_method: SplitMethod
    participants: Tuple[ParticipantInput, ...]
    description: str = ""

    def __post_init__(self) -> None:
        _require_money(self.total, "ExpenseRequest.total")
        _require_id(self.paid_by_id, "ExpenseRequest.paid_by_id")
        if not isinstance(self.split_method, SplitMethod):
            raise ModelValidationError("ExpenseRequest.split_method must be a SplitMethod")
        if not isinstance(self.participants, tuple):
            # keep the request hashable and immutable
            object.__setattr__(self, "participants", tuple(self.participants))
        for p in self.participants:
            if not isinstance(p, ParticipantInput):
                raise ModelValidationError("participants must be ParticipantInput objects")

    @property
    def included(self) -> Tuple[ParticipantInput, ...]:
        return tuple(p for p in self.participants if p.included)


@dataclass(frozen=True)
class MemberShare:
    member_id: str
    share: Money

    def __post_init__(self) -> None:
        _require_id(self.member_id, "MemberShare.member_id")
        _require_money(self.share, "MemberShare.share")


@dataclass(frozen=True)
class SplitResult:
    """
    Output of the split engine, ready to be persisted by the caller.

    shares follows roster order and holds exactly one entry per included
    participant; their sum equals expense_total.
    ratios is only populated for Ratio splits: ((member_id, ratio), ...).
    """
    expense_total: Money
    shares: Tuple[MemberShare, ...]
    split_method: SplitMethod
    paid_by_id: str
    description: str = ""
    ratios: Tuple[Tuple[str, int], ...] = ()

    def __post_init__(self) -> None:
        _require_money(self.expense_total, "SplitResult.expense_total")
        if not isinstance(self.shares, tuple):
            raise ModelValidationError("SplitResult.shares must be a tuple")
        seen = set()
        for s in self.shares:
            if not isinstance(s, MemberShare):
                raise ModelValidationError("SplitResult.shares must hold MemberShare objects")
            if s.member_id in seen:
                raise ModelValidationError(f"duplicate share for member: {s.member_id}")
            seen.add(s.member_id)

    @property
    def member_ids(self) -> Tuple[str, ...]:
        return tuple(s.member_id for s in self.shares)

    def share_of(self, member_id: str) -> Optional[Money]:
        for s in self.shares:
            if s.member_id == member_id:
                return s.share
        return None


@dataclass(frozen=True)
class BalanceLedgerEntry:
    """
    One append-only balance fact.

    Expense: from_member owes to_member `amount` more.
    Settlement: from_member paid to_member `amount`, reducing that debt.
    """
    from_member: str
    to_member: str
    amount: Money
    source_kind: LedgerSource

    def __post_init__(self) -> None:
        _require_id(self.from_member, "BalanceLedgerEntry.from_member")
        _require_id(self.to_member, "BalanceLedgerEntry.to_member")
        if self.from_member == self.to_member:
            raise ModelValidationError("ledger entry must be between two different members")
        _require_money(self.amount, "BalanceLedgerEntry.amount")
        if self.amount.cents < 0:
            raise ModelValidationError("ledger entry amount must be >= 0")
        if not isinstance(self.source_kind, LedgerSource):
            raise ModelValidationError("BalanceLedgerEntry.source_kind must be a LedgerSource")


@dataclass(frozen=True)
class PairwiseBalance:
    """
    Net balance between two members. Positive net_amount means member_a is
    owed by member_b; negative means member_a owes member_b.
    """
    member_a: str
    member_b: str
    net_amount: Money

    def __post_init__(self) -> None:
        _require_id(self.member_a, "PairwiseBalance.member_a")
        _require_id(self.member_b, "PairwiseBalance.member_b")
        if self.member_a == self.member_b:
            raise ModelValidationError("balance must be between two different members")
        _require_money(self.net_amount, "PairwiseBalance.net_amount")

    def involves(self, member_id: str) -> bool:
        return member_id in (self.member_a, self.member_b)

    def counterparty(self, member_id: str) -> str:
        if member_id == self.member_a:
            return self.member_b
        if member_id == self.member_b:
            return self.member_a
        raise ModelValidationError(f"member {member_id} is not part of this balance")

    def oriented(self, member_id: str) -> "PairwiseBalance":
        """Same balance seen from member_id's side (member_id becomes member_a)."""
        if member_id == self.member_a:
            return self
        if member_id == self.member_b:
            return PairwiseBalance(self.member_b, self.member_a, -self.net_amount)
        raise ModelValidationError(f"member {member_id} is not part of this balance")


@dataclass(frozen=True)
class MemberBalance:
    member_id: str
    net_amount: Money


@dataclass(frozen=True)
class GroupBalanceSummary:
    per_member: Tuple[MemberBalance, ...]
    overall_net: Money

    def net_of(self, member_id: str) -> Optional[Money]:
        for mb in self.per_member:
            if mb.member_id == member_id:
                return mb.net_amount
        return None
