# backend/tests/test_money.py
import random
from decimal import Decimal

import pytest

from splitease.domain.errors import InvalidAmount
from splitease.domain.money import Money, MoneyError, sum_money


def test_parse_basic_formats():
    assert Money.parse("12").cents == 1200
    assert Money.parse("12.3").cents == 1230
    assert Money.parse("12.34").cents == 1234
    assert Money.parse(" 5.5 ").cents == 550
    assert Money.parse("0").cents == 0


def test_parse_rejects_invalid_tokens():
    for bad in ["", "  ", "abc", "-1", "-12.34", "12.345", "1,234", "12,34", "$12", "12.", ".5", "1e3"]:
        with pytest.raises(InvalidAmount):
            Money.parse(bad)


def test_parse_rejects_non_string():
    with pytest.raises(InvalidAmount):
        Money.parse(12)  # type: ignore[arg-type]


def test_from_decimal_rounds_half_up_explicitly():
    assert Money.from_decimal(33.33).cents == 3333
    assert Money.from_decimal("12.345").cents == 1235
    assert Money.from_decimal(Decimal("0.005")).cents == 1
    assert Money.from_decimal(100).cents == 10000


def test_from_decimal_rejects_garbage():
    for bad in ["abc", "", True, float("nan")]:
        with pytest.raises(InvalidAmount):
            Money.from_decimal(bad)


def test_cents_must_be_int():
    with pytest.raises(MoneyError):
        Money(1.5)  # type: ignore[arg-type]
    with pytest.raises(MoneyError):
        Money(True)


def test_decimal_string_and_format():
    assert Money(3334).to_decimal_str() == "33.34"
    assert Money(5).to_decimal_str() == "0.05"
    assert Money(-500).to_decimal_str() == "-5.00"
    assert Money(1234).format() == "₹12.34"
    assert Money(-99).format("$") == "-$0.99"
    assert Money(1234).amount == Decimal("12.34")
    assert Money(3333).to_number() == 33.33


def test_arithmetic_and_compare():
    a, b = Money(1000), Money(250)
    assert a.add(b) == Money(1250)
    assert a - b == Money(750)
    assert b.subtract(a) == Money(-750)
    assert -a == Money(-1000)
    assert abs(Money(-3)) == Money(3)
    assert Money(0).is_zero()
    assert a.compare(b) == 1
    assert b.compare(a) == -1
    assert a.compare(Money(1000)) == 0
    assert b < a and a >= b


def test_currency_mismatch_raises():
    with pytest.raises(MoneyError):
        Money(100, "INR") + Money(100, "USD")


def test_sum_money():
    assert sum_money([Money(1), Money(2), Money(3)]) == Money(6)
    assert sum_money([]) == Money(0)


def test_equal_split_remainder_to_first():
    parts = Money(10000).equal_split(3)
    assert [p.cents for p in parts] == [3334, 3333, 3333]

    parts = Money(103).equal_split(4)
    assert [p.cents for p in parts] == [26, 26, 26, 25]


def test_equal_split_sums_exactly_and_stays_within_one_cent():
    for cents in range(0, 250):
        for n in range(1, 8):
            parts = [p.cents for p in Money(cents).equal_split(n)]
            assert len(parts) == n
            assert sum(parts) == cents
            assert all(cents // n <= p <= cents // n + 1 for p in parts)
            # extras sit at the front
            assert parts == sorted(parts, reverse=True)


def test_equal_split_zero_total_is_all_zeros():
    assert [p.cents for p in Money(0).equal_split(3)] == [0, 0, 0]


def test_equal_split_rejects_bad_n_and_negative_amount():
    with pytest.raises(MoneyError):
        Money(100).equal_split(0)
    with pytest.raises(MoneyError):
        Money(-100).equal_split(2)


def test_proportional_split_exact_ratios():
    parts = Money(30000).proportional_split([1, 2])
    assert [p.cents for p in parts] == [10000, 20000]


def test_proportional_split_remainder_to_first():
    assert [p.cents for p in Money(100).proportional_split([1, 1, 1])] == [34, 33, 33]
    assert [p.cents for p in Money(5).proportional_split([0, 1])] == [0, 5]


def test_proportional_split_sums_exactly():
    rng = random.Random(1234)
    for _ in range(500):
        cents = rng.randint(0, 1_000_000)
        weights = [rng.randint(1, 9) for _ in range(rng.randint(1, 6))]
        parts = [p.cents for p in Money(cents).proportional_split(weights)]
        assert sum(parts) == cents
        assert all(p >= 0 for p in parts)


def test_proportional_split_monotone_in_own_weight():
    rng = random.Random(99)
    for _ in range(300):
        cents = rng.randint(0, 5000)
        weights = [rng.randint(1, 5) for _ in range(rng.randint(1, 5))]
        idx = rng.randrange(len(weights))
        before = Money(cents).proportional_split(weights)[idx].cents

        bumped = list(weights)
        bumped[idx] += 1
        after = Money(cents).proportional_split(bumped)[idx].cents
        assert after >= before


def test_proportional_split_rejects_bad_weights():
    with pytest.raises(MoneyError):
        Money(100).proportional_split([])
    with pytest.raises(MoneyError):
        Money(100).proportional_split([0, 0])
    with pytest.raises(MoneyError):
        Money(100).proportional_split([1, -1])
    with pytest.raises(MoneyError):
        Money(-100).proportional_split([1, 1])


def test_parse_rejects_non_ascii_digits():
    for bad in ["١٢.٣٤", "１２", "12.٣"]:
        with pytest.raises(InvalidAmount):
            Money.parse(bad)


def test_from_decimal_huge_values_are_invalid_amounts():
    for huge in [1e30, "1e30", Decimal("9" * 40), -1e30]:
        with pytest.raises(InvalidAmount):
            Money.from_decimal(huge)


def test_from_decimal_exact_refuses_to_round():
    assert Money.from_decimal(10.5, exact=True).cents == 1050
    assert Money.from_decimal(Decimal("10.500"), exact=True).cents == 1050
    for bad in [10.005, "0.001", Decimal("1.234")]:
        with pytest.raises(InvalidAmount):
            Money.from_decimal(bad, exact=True)
