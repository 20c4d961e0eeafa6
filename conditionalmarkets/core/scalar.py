# conditionalmarkets/core/scalar.py

from decimal import Context, Decimal
from typing import Optional

from conditionalmarkets.core.decimalmath import (
    Number, ONE, ZERO, add, div, make_context, mul, sub, to_decimal,
)
from conditionalmarkets.core.errors import InvalidInputError
from conditionalmarkets.core.markets import Market


def _require_scalar(market: Market) -> None:
    if not market.is_scalar:
        raise InvalidInputError(f"Market {market.key!r} is not a scalar market")


def probability_to_value(market: Market, probability: Number,
                         context: Optional[Context] = None) -> Decimal:
    """
    Map the first outcome's probability onto the market's value range.

    Args:
        market: A scalar market
        probability: Probability in [0, 1]
        context: Arithmetic context (defaults to a fresh one)

    Returns:
        lower_bound + probability * (upper_bound - lower_bound)
    """
    _require_scalar(market)
    p = to_decimal(probability)
    if not ZERO <= p <= ONE:
        raise InvalidInputError(f"Probability {p} outside [0, 1]")
    context = context if context is not None else make_context()
    span = sub(market.upper_bound, market.lower_bound, context)
    return add(market.lower_bound, mul(p, span, context), context)


def value_to_probability(market: Market, value: Number,
                         context: Optional[Context] = None) -> Decimal:
    """Inverse of probability_to_value; the value must lie within the bounds."""
    _require_scalar(market)
    x = to_decimal(value)
    if not market.lower_bound <= x <= market.upper_bound:
        raise InvalidInputError(
            f"Value {x} outside [{market.lower_bound}, {market.upper_bound}]")
    context = context if context is not None else make_context()
    span = sub(market.upper_bound, market.lower_bound, context)
    return div(sub(x, market.lower_bound, context), span, context)
