# conditionalmarkets/core/formatting.py

from decimal import Decimal
from typing import Optional, Sequence, Tuple

import numpy as np

from conditionalmarkets.core.decimalmath import (
    Number, PROBABILITY_DECIMAL_PLACES, absolute, mul, round_to, sub, to_decimal,
)
from conditionalmarkets.core.errors import InvalidInputError

HUNDRED = Decimal("100")
SIGNIFICANT_CHANGE = Decimal("0.01")


def format_probability(probability: Optional[Number], places: int = 2) -> str:
    """Render a probability as a percentage, e.g. 0.33333 -> '33.33%'."""
    if probability is None:
        return "-"
    return f"{round_to(mul(probability, HUNDRED), places)}%"


def calc_probability_changes(before: Sequence[Number],
                             after: Sequence[Number],
                             places: int = PROBABILITY_DECIMAL_PLACES) -> Tuple[Decimal, ...]:
    """Change of each outcome probability in percentage points, rounded."""
    if len(before) != len(after):
        raise InvalidInputError(
            f"Cannot compare {len(before)} probabilities with {len(after)}")
    return tuple(
        round_to(mul(sub(a, b), HUNDRED), places)
        for b, a in zip(before, after)
    )


def is_significant_change(change: Number, threshold: Number = SIGNIFICANT_CHANGE) -> bool:
    return absolute(change) > to_decimal(threshold)


def to_float_array(probabilities: Optional[Sequence[Number]], length: int = 0) -> np.ndarray:
    """
    Float64 copy of a probability vector for charting.

    An unavailable market (None) becomes `length` NaNs.
    """
    if probabilities is None:
        return np.full(length, np.nan, dtype=np.float64)
    return np.array([float(to_decimal(p)) for p in probabilities], dtype=np.float64)
