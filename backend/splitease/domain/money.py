# backend/splitease/domain/money.py
from __future__ import annotations

import re
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Iterable, List, Sequence

from splitease.domain.errors import InvalidAmount

DEFAULT_CURRENCY = "INR"


class MoneyError(ValueError):
    """Raised on internal money invariant violations (programming errors)."""


# User-facing amount strings:
# - plain non-negative decimal, "." separator only
# - at most 2 fractional digits
# - no sign, no thousands separators, no currency symbol
_AMOUNT_RE = re.compile(r"^\s*(\d{1,9})(?:\.(\d{1,2}))?\s*$", re.ASCII)

MAX_ABS_CENTS = 10_000_000_00  # 10,000,000.00 safety bound


@dataclass(frozen=True, order=False)
class Money:
    """
    Money value object using integer minor units (paise/cents, scale 2).
    No floats anywhere; parsing is the only lossy step and it is explicit.
    """
    cents: int
    currency: str = DEFAULT_CURRENCY

    def __post_init__(self) -> None:
        if not isinstance(self.cents, int) or isinstance(self.cents, bool):
            raise MoneyError("Money.cents must be an int")
        if not isinstance(self.currency, str) or not self.currency.strip():
            raise MoneyError("Money.currency must be a non-empty string")

    @classmethod
    def zero(cls, currency: str = DEFAULT_CURRENCY) -> "Money":
        return cls(0, currency)

    @classmethod
    def parse(cls, text: str, currency: str = DEFAULT_CURRENCY) -> "Money":
        """
        Parse a form-entered amount into Money.

        Accepts "12", "12.3", "12.34". Rejects negatives, "12.345", "1,234",
        blanks and anything non-numeric with InvalidAmount.
        """
        if not isinstance(text, str):
            raise InvalidAmount("amount must be a string")
        m = _AMOUNT_RE.match(text)
        if not m:
            raise InvalidAmount(f"invalid amount: {text!r}")

        whole, frac = m.group(1), m.group(2) or ""
        cents = int(whole) * 100 + int(frac.ljust(2, "0"))
        if cents > MAX_ABS_CENTS:
            raise InvalidAmount("amount exceeds safety limit")
        return cls(cents, currency)

    @classmethod
    def from_decimal(
        cls,
        value: object,
        currency: str = DEFAULT_CURRENCY,
        *,
        rounding=ROUND_HALF_UP,
        exact: bool = False,
    ) -> "Money":
        """
        Convert a decimal-like value (REST numbers, Decimal, str) to Money with
        explicit rounding to the minor unit.

        Examples:
          33.33 -> 3333
          "12.345" -> 1235 (half-up)

        With exact=True nothing is rounded: more than 2 fractional digits
        raises InvalidAmount, as Money.parse does for strings.
        """
        if isinstance(value, bool):
            raise InvalidAmount(f"invalid decimal value: {value!r}")
        try:
            d = value if isinstance(value, Decimal) else Decimal(str(value).strip())
        except (InvalidOperation, ValueError) as e:
            raise InvalidAmount(f"invalid decimal value: {value!r}") from e
        if not d.is_finite():
            raise InvalidAmount(f"invalid decimal value: {value!r}")
        # bound first so quantize never overflows the decimal context
        if abs(d) * 100 > MAX_ABS_CENTS:
            raise InvalidAmount("amount exceeds safety limit")
        if exact and d != d.quantize(Decimal("0.01")):
            raise InvalidAmount(f"amount has more than 2 decimal places: {value!r}")

        cents = int((d * 100).quantize(Decimal("1"), rounding=rounding))
        if abs(cents) > MAX_ABS_CENTS:
            raise InvalidAmount("amount exceeds safety limit")
        return cls(cents, currency)

    # -- arithmetic -----------------------------------------------------

    def _check_same_currency(self, other: "Money") -> None:
        if not isinstance(other, Money):
            raise MoneyError("operand must be Money")
        if other.currency != self.currency:
            raise MoneyError(f"currency mismatch: {self.currency} vs {other.currency}")

    def add(self, other: "Money") -> "Money":
        self._check_same_currency(other)
        return Money(self.cents + other.cents, self.currency)

    def subtract(self, other: "Money") -> "Money":
        self._check_same_currency(other)
        return Money(self.cents - other.cents, self.currency)

    def negate(self) -> "Money":
        return Money(-self.cents, self.currency)

    def is_zero(self) -> bool:
        return self.cents == 0

    def compare(self, other: "Money") -> int:
        """Return -1, 0 or 1."""
        self._check_same_currency(other)
        return (self.cents > other.cents) - (self.cents < other.cents)

    __add__ = add
    __sub__ = subtract
    __neg__ = negate

    def __abs__(self) -> "Money":
        return Money(abs(self.cents), self.currency)

    def __lt__(self, other: "Money") -> bool:
        return self.compare(other) < 0

    def __le__(self, other: "Money") -> bool:
        return self.compare(other) <= 0

    def __gt__(self, other: "Money") -> bool:
        return self.compare(other) > 0

    def __ge__(self, other: "Money") -> bool:
        return self.compare(other) >= 0

    # -- distribution ---------------------------------------------------

    def equal_split(self, n: int) -> List["Money"]:
        """
        Split into n parts:

          base = cents // n
          remainder = cents % n
          first 'remainder' parts get base + 1, rest get base
        """
        if not isinstance(n, int) or n < 1:
            raise MoneyError("equal_split needs n >= 1")
        if self.cents < 0:
            raise MoneyError("cannot split a negative amount")

        base, remainder = divmod(self.cents, n)
        parts = [base + 1 if i < remainder else base for i in range(n)]
        return self._to_parts(parts)

    def proportional_split(self, weights: Sequence[int]) -> List["Money"]:
        """
        Split proportionally to integer weights.

        Each part is floor(cents * w / sum(w)); the cents lost to flooring are
        handed out one at a time to the earliest indices.
        """
        if not weights:
            raise MoneyError("proportional_split needs at least one weight")
        for w in weights:
            if not isinstance(w, int) or isinstance(w, bool) or w < 0:
                raise MoneyError("weights must be non-negative ints")
        total_weight = sum(weights)
        if total_weight == 0:
            raise MoneyError("weights must not all be zero")
        if self.cents < 0:
            raise MoneyError("cannot split a negative amount")

        parts = [self.cents * w // total_weight for w in weights]
        remainder = self.cents - sum(parts)
        for i in range(remainder):
            parts[i] += 1
        return self._to_parts(parts)

    def _to_parts(self, parts: List[int]) -> List["Money"]:
        # Safety: ensure penny-perfect sum
        if sum(parts) != self.cents:
            raise MoneyError("internal error: split does not sum to total")
        return [Money(p, self.currency) for p in parts]

    # -- conversion -----------------------------------------------------

    @property
    def amount(self) -> Decimal:
        return Decimal(self.cents) / Decimal(100)

    def to_decimal_str(self) -> str:
        """Plain decimal string like "33.34" or "-5.00"."""
        sign = "-" if self.cents < 0 else ""
        whole, frac = divmod(abs(self.cents), 100)
        return f"{sign}{whole}.{frac:02d}"

    def to_number(self) -> float:
        """Value as a JSON number for the REST payload (2-decimal exact repr)."""
        return float(self.to_decimal_str())

    def format(self, symbol: str = "₹") -> str:
        """
        Format as a display string like "₹12.34".
        """
        sign = "-" if self.cents < 0 else ""
        return f"{sign}{symbol}{abs(self).to_decimal_str()}"

    def __str__(self) -> str:
        return self.to_decimal_str()


def sum_money(values: Iterable[Money], currency: str = DEFAULT_CURRENCY) -> Money:
    """
    Sum Money values with currency checks.
    """
    total = Money.zero(currency)
    for v in values:
        total = total + v
    return total
