# backend/splitease/domain/errors.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, Optional, TypeVar

T = TypeVar("T")


class SplitError(ValueError):
    """
    Base class for expected, caller-recoverable domain failures.

    Each subclass carries a stable `code` the HTTP layer (or any other caller)
    can switch on without parsing the message.
    """
    code = "split_error"


class InvalidAmount(SplitError):
    code = "invalid_amount"


class NoParticipants(SplitError):
    code = "no_participants"


class InvalidRatio(SplitError):
    code = "invalid_ratio"


class MissingShare(SplitError):
    code = "missing_share"


class UnknownMember(SplitError):
    code = "unknown_member"


class DuplicateMember(SplitError):
    code = "duplicate_member"


class PayerNotIncluded(SplitError):
    code = "payer_not_included"


class ReconciliationMismatch(SplitError):
    code = "reconciliation_mismatch"

    def __init__(self, message: str, *, shares_total_cents: int, expense_total_cents: int):
        super().__init__(message)
        self.shares_total_cents = shares_total_cents
        self.expense_total_cents = expense_total_cents


class AlreadySettled(SplitError):
    code = "already_settled"


@dataclass(frozen=True)
class Result(Generic[T]):
    """
    Tagged success/failure returned by the public engine operations.

    Exactly one of `value` / `error` is meaningful; check `is_ok` first.
    """
    value: Optional[T] = None
    error: Optional[SplitError] = None

    @classmethod
    def ok(cls, value: T) -> "Result[T]":
        return cls(value=value)

    @classmethod
    def fail(cls, error: SplitError) -> "Result[T]":
        if not isinstance(error, SplitError):
            raise TypeError("Result.fail expects a SplitError")
        return cls(error=error)

    @property
    def is_ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> T:
        """Return the value, re-raising the carried error on failure."""
        if self.error is not None:
            raise self.error
        return self.value  # type: ignore[return-value]
