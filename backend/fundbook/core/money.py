"""
Money handling utilities.

All NAV, ownership and fee arithmetic goes through Money, which wraps
decimal.Decimal and refuses binary floats. Rounding defaults to banker's
rounding (HALF_EVEN) at a fixed scale of six decimal places.
"""

import decimal
from decimal import Decimal
from enum import Enum
from functools import total_ordering
from typing import Iterable, Union

from fundbook.core.config import settings
from fundbook.core.errors import MoneyArithmeticError


class RoundingMode(str, Enum):
    """Rounding modes for money calculations."""

    HALF_UP = "HALF_UP"
    HALF_DOWN = "HALF_DOWN"
    HALF_EVEN = "HALF_EVEN"  # Banker's rounding
    UP = "UP"
    DOWN = "DOWN"


_DECIMAL_ROUNDING = {
    RoundingMode.HALF_UP: decimal.ROUND_HALF_UP,
    RoundingMode.HALF_DOWN: decimal.ROUND_HALF_DOWN,
    RoundingMode.HALF_EVEN: decimal.ROUND_HALF_EVEN,
    RoundingMode.UP: decimal.ROUND_UP,
    RoundingMode.DOWN: decimal.ROUND_DOWN,
}

DEFAULT_ROUNDING_MODE = RoundingMode.HALF_EVEN
MONEY_DECIMAL_PLACES = settings.MONEY_DECIMAL_PLACES

# Wide enough that intermediate products/quotients never round before the final quantize
MONEY_CONTEXT = decimal.Context(
    prec=38,
    rounding=decimal.ROUND_HALF_EVEN,
    traps=[decimal.InvalidOperation, decimal.DivisionByZero, decimal.Overflow],
)

MoneyLike = Union["Money", Decimal, int, str]


def _to_decimal(value: MoneyLike) -> Decimal:
    if isinstance(value, Money):
        return value.to_decimal()
    if isinstance(value, float):
        raise TypeError("Money does not accept float values; pass a str or Decimal instead")
    if isinstance(value, Decimal):
        return value
    if isinstance(value, (int, str)):
        try:
            return Decimal(value)
        except decimal.InvalidOperation as exc:
            raise MoneyArithmeticError(f"Invalid money value: {value!r}") from exc
    raise TypeError(f"Unsupported money value type: {type(value).__name__}")


def _resolve_rounding(mode: Union[RoundingMode, str]) -> str:
    try:
        return _DECIMAL_ROUNDING[RoundingMode(mode)]
    except (ValueError, KeyError):
        raise MoneyArithmeticError(
            f"Unsupported rounding mode: {mode}", {"rounding_mode": str(mode)}
        )


@total_ordering
class Money:
    """Immutable arbitrary-precision decimal amount."""

    __slots__ = ("_value",)

    def __init__(self, value: MoneyLike = 0):
        self._value = _to_decimal(value)

    def add(self, other: MoneyLike) -> "Money":
        return Money(MONEY_CONTEXT.add(self._value, _to_decimal(other)))

    def subtract(self, other: MoneyLike) -> "Money":
        return Money(MONEY_CONTEXT.subtract(self._value, _to_decimal(other)))

    def multiply(self, factor: MoneyLike) -> "Money":
        return Money(MONEY_CONTEXT.multiply(self._value, _to_decimal(factor)))

    def divide(self, divisor: MoneyLike) -> "Money":
        """Divide by divisor. Raises MoneyArithmeticError when divisor is zero."""
        d = _to_decimal(divisor)
        if d.is_zero():
            raise MoneyArithmeticError(
                "Division by zero", {"dividend": str(self._value)}
            )
        return Money(MONEY_CONTEXT.divide(self._value, d))

    def percentage(self, percent: MoneyLike) -> "Money":
        """Return percent% of this amount, e.g. Money(200).percentage(20) == 40."""
        return self.multiply(percent).divide(100)

    def round(
        self,
        decimal_places: int = MONEY_DECIMAL_PLACES,
        rounding_mode: Union[RoundingMode, str] = DEFAULT_ROUNDING_MODE,
    ) -> "Money":
        rounding = _resolve_rounding(rounding_mode)
        exponent = Decimal(1).scaleb(-decimal_places)
        return Money(self._value.quantize(exponent, rounding=rounding, context=MONEY_CONTEXT))

    def abs(self) -> "Money":
        return Money(abs(self._value))

    def is_zero(self) -> bool:
        return self._value.is_zero()

    def is_negative(self) -> bool:
        return self._value < 0

    def is_positive(self) -> bool:
        return self._value > 0

    def to_decimal(self) -> Decimal:
        return self._value

    # Operators

    def __add__(self, other: MoneyLike) -> "Money":
        return self.add(other)

    def __radd__(self, other: MoneyLike) -> "Money":
        # Lets sum() start from int 0
        return Money(other).add(self)

    def __sub__(self, other: MoneyLike) -> "Money":
        return self.subtract(other)

    def __rsub__(self, other: MoneyLike) -> "Money":
        return Money(other).subtract(self)

    def __neg__(self) -> "Money":
        return Money(-self._value)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, float):
            return NotImplemented
        try:
            return self._value == _to_decimal(other)  # type: ignore[arg-type]
        except TypeError:
            return NotImplemented

    def __lt__(self, other: MoneyLike) -> bool:
        return self._value < _to_decimal(other)

    def __hash__(self) -> int:
        return hash(self._value)

    def __str__(self) -> str:
        return format(self.round().to_decimal(), "f")

    def __repr__(self) -> str:
        return f"Money('{self._value}')"


def money(value: MoneyLike) -> Money:
    """Create Money from a Decimal, int, str or Money."""
    return Money(value)


def sum_money(values: Iterable[MoneyLike]) -> Money:
    """Sum money values exactly; an empty iterable sums to zero."""
    total = Money(0)
    for value in values:
        total = total.add(value)
    return total
