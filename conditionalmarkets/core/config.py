# conditionalmarkets/core/config.py

from dataclasses import dataclass
from decimal import Context, Decimal

from conditionalmarkets.core.decimalmath import (
    DEFAULT_PRECISION, PROBABILITY_DECIMAL_PLACES, make_context, to_decimal,
)


@dataclass(frozen=True)
class EngineConfig:
    """
    Numeric settings shared by every stage of the probability pipeline.

    precision is the number of significant digits carried through ln/exp
    and the normalizing divisions. probability_decimal_places and
    significant_change_threshold only affect display helpers.
    """
    precision: int = DEFAULT_PRECISION
    probability_decimal_places: int = PROBABILITY_DECIMAL_PLACES
    significant_change_threshold: Decimal = Decimal("0.01")

    def __post_init__(self):
        if self.precision < 1:
            raise ValueError("precision must be positive")
        if self.probability_decimal_places < 0:
            raise ValueError("probability_decimal_places must be non-negative")
        threshold = to_decimal(self.significant_change_threshold)
        if threshold < 0:
            raise ValueError("significant_change_threshold must be non-negative")
        object.__setattr__(self, "significant_change_threshold", threshold)

    def context(self) -> Context:
        """Fresh arithmetic context for one pipeline run."""
        return make_context(self.precision)


DEFAULT_CONFIG = EngineConfig()
