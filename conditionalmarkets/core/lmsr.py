# conditionalmarkets/core/lmsr.py
"""
LMSR marginal prices for atomic positions.

The market maker holds a balance of every position token. With
b = funding / ln(N), the unnormalized probability of position i is

    exp(-balance_i / b) = exp(-inv_b * balance_i)

For a funding-consistent state these already sum to 1; anything that
perturbs them (conditioning, a staged trade) renormalizes afterwards.
"""

from dataclasses import dataclass
from decimal import Context, Decimal
from typing import Optional, Sequence, Tuple

import numpy as np
from loguru import logger
from scipy.special import softmax

from conditionalmarkets.core.decimalmath import (
    Number, ZERO, div, exp, ln, make_context, mul, neg, to_decimal,
)
from conditionalmarkets.core.errors import DomainError, InvalidStateError
from conditionalmarkets.core.markets import Position


@dataclass(frozen=True)
class LMSRState:
    """Immutable snapshot of market-maker funding and position balances."""
    funding: Decimal
    position_balances: Tuple[Decimal, ...]

    def __post_init__(self):
        funding = to_decimal(self.funding)
        if funding <= ZERO:
            raise DomainError(f"Funding must be positive, got {funding}")
        balances = tuple(to_decimal(b) for b in self.position_balances)
        if not balances:
            raise InvalidStateError("Position balances must not be empty")
        negative = [i for i, b in enumerate(balances) if b < ZERO]
        if negative:
            raise InvalidStateError(f"Negative balances at positions {negative}")
        object.__setattr__(self, "funding", funding)
        object.__setattr__(self, "position_balances", balances)

    @property
    def position_count(self) -> int:
        return len(self.position_balances)


def calc_inv_b(funding: Number, position_count: int,
               context: Optional[Context] = None) -> Decimal:
    """
    Inverse liquidity parameter ln(N) / funding.

    Args:
        funding: Market maker funding, strictly positive
        position_count: Number of atomic positions N, at least 1
        context: Arithmetic context (defaults to a fresh one)

    Returns:
        inv_b as a Decimal
    """
    if position_count < 1:
        raise InvalidStateError("At least one position is required")
    funding = to_decimal(funding)
    if funding <= ZERO:
        raise DomainError(f"Funding must be positive, got {funding}")
    context = context if context is not None else make_context()
    return div(ln(position_count, context), funding, context)


def calc_position_probabilities(state: LMSRState,
                                context: Optional[Context] = None) -> Tuple[Decimal, ...]:
    """Unnormalized position probabilities exp(-inv_b * balance), in position order."""
    context = context if context is not None else make_context()
    inv_b = calc_inv_b(state.funding, state.position_count, context)
    probabilities = tuple(
        exp(neg(mul(inv_b, balance, context), context), context)
        for balance in state.position_balances
    )
    logger.debug("Computed {} position probabilities with inv_b={}",
                 len(probabilities), inv_b)
    return probabilities


def check_position_count(state: LMSRState, positions: Sequence[Position]) -> None:
    """Raise InvalidStateError unless there is exactly one balance per position."""
    if state.position_count != len(positions):
        raise InvalidStateError(
            f"Got {state.position_count} position balances for {len(positions)} positions")


def approximate_position_probabilities(state: LMSRState) -> np.ndarray:
    """
    Normalized position probabilities in float64.

    Uses a max-shifted softmax, so it stays finite for balances far beyond
    what exp() in float64 can represent. Meant for fast cross-checks, not
    for values shown to traders.
    """
    n = state.position_count
    funding = float(state.funding)
    balances = np.array([float(b) for b in state.position_balances], dtype=np.float64)
    return softmax(-np.log(n) / funding * balances)
