# conditionalmarkets/core/decimalmath.py

import numbers
from decimal import (
    Context, Decimal, InvalidOperation, Overflow,
    MAX_EMAX, MIN_EMIN, ROUND_HALF_EVEN, ROUND_HALF_UP,
)
from typing import Iterable, Optional, Union

from conditionalmarkets.core.errors import DomainError, InvalidInputError

DEFAULT_PRECISION = 50
PROBABILITY_DECIMAL_PLACES = 4

ZERO = Decimal("0")
ONE = Decimal("1")

Number = Union[Decimal, int, float, str]


def make_context(precision: int = DEFAULT_PRECISION) -> Context:
    """
    Build a fresh arithmetic context.

    Args:
        precision: Significant digits kept by every operation

    Returns:
        A new Context with banker's rounding for intermediate results and
        the widest exponent range the decimal module allows, so exp() of a
        large negative argument underflows towards zero instead of trapping.
    """
    if precision < 1:
        raise ValueError("precision must be positive")
    return Context(prec=precision, rounding=ROUND_HALF_EVEN,
                   Emax=MAX_EMAX, Emin=MIN_EMIN)


def _ctx(context: Optional[Context]) -> Context:
    return context if context is not None else make_context()


def to_decimal(value: Number) -> Decimal:
    """
    Convert a caller-supplied number to a finite Decimal.

    Floats go through str() so 0.1 becomes Decimal('0.1') rather than its
    binary expansion.
    """
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, bool):
        raise InvalidInputError(f"Expected a number, got {value!r}")
    elif isinstance(value, numbers.Integral):
        result = Decimal(int(value))
    elif isinstance(value, numbers.Real):
        result = Decimal(str(float(value)))
    elif isinstance(value, str):
        try:
            result = Decimal(value.strip())
        except InvalidOperation as err:
            raise InvalidInputError(f"Not a decimal number: {value!r}") from err
    else:
        raise InvalidInputError(f"Expected a number, got {type(value).__name__}")

    if not result.is_finite():
        raise InvalidInputError(f"Expected a finite number, got {value!r}")
    return result


def add(a: Number, b: Number, context: Optional[Context] = None) -> Decimal:
    return _ctx(context).add(to_decimal(a), to_decimal(b))


def sub(a: Number, b: Number, context: Optional[Context] = None) -> Decimal:
    return _ctx(context).subtract(to_decimal(a), to_decimal(b))


def mul(a: Number, b: Number, context: Optional[Context] = None) -> Decimal:
    return _ctx(context).multiply(to_decimal(a), to_decimal(b))


def div(a: Number, b: Number, context: Optional[Context] = None) -> Decimal:
    """Divide a by b. Raises DomainError when b is zero."""
    divisor = to_decimal(b)
    if divisor.is_zero():
        raise DomainError("Division by zero")
    return _ctx(context).divide(to_decimal(a), divisor)


def neg(a: Number, context: Optional[Context] = None) -> Decimal:
    return _ctx(context).minus(to_decimal(a))


def absolute(a: Number, context: Optional[Context] = None) -> Decimal:
    return _ctx(context).abs(to_decimal(a))


def ln(a: Number, context: Optional[Context] = None) -> Decimal:
    """Natural logarithm. Raises DomainError for arguments <= 0."""
    x = to_decimal(a)
    if x <= ZERO:
        raise DomainError(f"Logarithm of non-positive number: {x}")
    return _ctx(context).ln(x)


def exp(a: Number, context: Optional[Context] = None) -> Decimal:
    """Exponential. Raises DomainError when the result overflows."""
    try:
        return _ctx(context).exp(to_decimal(a))
    except Overflow as err:
        raise DomainError(f"Exponential overflow for argument {a}") from err


def compare(a: Number, b: Number) -> int:
    """Return -1, 0 or 1 as a is less than, equal to or greater than b."""
    x, y = to_decimal(a), to_decimal(b)
    if x < y:
        return -1
    if x > y:
        return 1
    return 0


def round_to(a: Number, places: int = PROBABILITY_DECIMAL_PLACES) -> Decimal:
    """
    Round to a fixed number of decimal places, half away from zero.

    Args:
        a: Value to round
        places: Digits kept after the decimal point (default 4)

    Returns:
        The rounded Decimal, with exactly `places` fractional digits
    """
    if places < 0:
        raise ValueError("places must be non-negative")
    x = to_decimal(a)
    # quantize needs room for every integer digit plus the kept fraction
    digits = max(DEFAULT_PRECISION, x.adjusted() + places + 2)
    context = Context(prec=digits, rounding=ROUND_HALF_UP,
                      Emax=MAX_EMAX, Emin=MIN_EMIN)
    return x.quantize(Decimal(1).scaleb(-places), context=context)


def ordered_sum(values: Iterable[Number], context: Optional[Context] = None) -> Decimal:
    """Sum values strictly left to right so results reproduce bit for bit."""
    ctx = _ctx(context)
    total = ZERO
    for value in values:
        total = ctx.add(total, to_decimal(value))
    return total
