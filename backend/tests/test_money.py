"""Tests for fundbook.core.money."""

from decimal import Decimal

import pytest

from fundbook.core.errors import FundbookError, MoneyArithmeticError
from fundbook.core.money import Money, RoundingMode, money, sum_money


class TestConstruction:
    def test_from_str_int_decimal(self):
        assert Money("1.5") == Money(Decimal("1.5"))
        assert Money(2) == Decimal("2")

    def test_float_rejected(self):
        with pytest.raises(TypeError, match="float"):
            Money(0.1)

    def test_invalid_string(self):
        with pytest.raises(MoneyArithmeticError):
            Money("abc")

    def test_money_helper(self):
        assert money("10") == Money(10)


class TestArithmetic:
    def test_add_is_exact(self):
        assert Money("0.1").add("0.2") == Money("0.3")

    def test_subtract(self):
        assert Money(100).subtract("0.000001") == Money("99.999999")

    def test_operators(self):
        assert Money(5) + Money(3) == Money(8)
        assert 10 - Money(4) == Money(6)
        assert -Money(2) == Money(-2)

    def test_percentage(self):
        assert Money(75000).percentage(20) == Money(15000)

    def test_divide_by_zero(self):
        with pytest.raises(MoneyArithmeticError, match="Division by zero") as exc_info:
            Money(1).divide(0)
        assert isinstance(exc_info.value, ArithmeticError)
        assert isinstance(exc_info.value, FundbookError)

    def test_division_keeps_precision_until_rounded(self):
        third = Money(1).divide(3)
        assert third.multiply(3) != Money(1)
        assert third.round() == Money("0.333333")

    def test_sum_money_empty(self):
        assert sum_money([]) == Money(0)

    def test_builtin_sum(self):
        assert sum([Money(1), Money(2)]) == Money(3)


class TestRounding:
    def test_half_even_default(self):
        assert Money("0.0000005").round() == Money("0.000000")
        assert Money("0.0000015").round() == Money("0.000002")

    def test_half_up(self):
        assert Money("0.0000005").round(rounding_mode=RoundingMode.HALF_UP) == Money("0.000001")

    def test_custom_places(self):
        assert Money("12.345").round(2) == Money("12.34")

    def test_unknown_mode(self):
        with pytest.raises(MoneyArithmeticError, match="rounding mode"):
            Money(1).round(rounding_mode="SIDEWAYS")


class TestPredicates:
    def test_signs(self):
        assert Money(0).is_zero()
        assert Money("-0.01").is_negative()
        assert Money("0.01").is_positive()
        assert Money(-3).abs() == Money(3)

    def test_ordering(self):
        assert Money(1) < Money(2)
        assert Money(2) >= 2
        assert max(Money(1), Money(5), Money(3)) == Money(5)

    def test_str_is_fixed_scale(self):
        assert str(Money("1.5")) == "1.500000"
        assert repr(Money("1.5")) == "Money('1.5')"

    def test_hashable(self):
        assert len({Money("1.0"), Money("1.00")}) == 1
