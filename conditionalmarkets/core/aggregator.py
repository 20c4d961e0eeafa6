# conditionalmarkets/core/aggregator.py

from decimal import Context, Decimal
from typing import Dict, List, Optional, Sequence, Tuple

from loguru import logger

from conditionalmarkets.core.decimalmath import ZERO, make_context, to_decimal
from conditionalmarkets.core.errors import InvalidStateError
from conditionalmarkets.core.markets import Market, Position
from conditionalmarkets.core.selections import MarketSelection, conditioning_outcomes

# A market whose conditioning leaves no probability mass.
UNAVAILABLE = None

MarketProbabilities = Dict[int, Optional[Tuple[Decimal, ...]]]


def calc_market_probabilities(markets: Sequence[Market],
                              positions: Sequence[Position],
                              position_probabilities: Sequence[Decimal],
                              selections: Optional[Sequence[MarketSelection]] = None,
                              context: Optional[Context] = None) -> MarketProbabilities:
    """
    Project position probabilities onto each market's outcomes.

    For every market, positions that contradict a Conditioning selection on
    some other market are skipped. The remaining mass is bucketed by the
    position's outcome in the market and divided by the remaining total, so
    each market's outcome probabilities sum to 1. Sums run in ascending
    position index.

    Args:
        markets: All markets, in market order
        positions: All positions
        position_probabilities: One (possibly unnormalized) probability per
            position, aligned with position indices
        selections: One selection per market, or None for plain marginals
        context: Arithmetic context (defaults to a fresh one)

    Returns:
        {market_index: outcome probabilities}, with UNAVAILABLE for a market
        whose conditioning set has zero total mass
    """
    if len(position_probabilities) != len(positions):
        raise InvalidStateError(
            f"Got {len(position_probabilities)} probabilities for {len(positions)} positions")
    context = context if context is not None else make_context()
    conditions = conditioning_outcomes(markets, selections)
    probabilities = [to_decimal(p) for p in position_probabilities]
    ordered_positions = sorted(positions, key=lambda p: p.index)

    result: MarketProbabilities = {}
    for market in markets:
        active = {m: o for m, o in conditions.items() if m != market.index}
        sums: List[Decimal] = [ZERO] * market.outcome_count
        total = ZERO
        for position in ordered_positions:
            if not position.is_consistent_with(active):
                continue
            p = probabilities[position.index]
            outcome_index = position.outcome_index(market.index)
            sums[outcome_index] = context.add(sums[outcome_index], p)
            total = context.add(total, p)

        if total.is_zero():
            logger.warning("No probability mass left for market {} under conditions {}",
                           market.key, active)
            result[market.index] = UNAVAILABLE
        else:
            result[market.index] = tuple(context.divide(s, total) for s in sums)
    return result
