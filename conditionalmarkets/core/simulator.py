# conditionalmarkets/core/simulator.py

from decimal import Context, Decimal
from typing import Optional, Sequence, Tuple

from loguru import logger

from conditionalmarkets.core.aggregator import MarketProbabilities, calc_market_probabilities
from conditionalmarkets.core.decimalmath import (
    Number, ONE, div, exp, ln, make_context, mul, ordered_sum, to_decimal,
)
from conditionalmarkets.core.errors import DomainError, InvalidInputError
from conditionalmarkets.core.lmsr import LMSRState, calc_inv_b, calc_position_probabilities
from conditionalmarkets.core.markets import Market, Position
from conditionalmarkets.core.selections import MarketSelection


def _check_amounts(staged_amounts: Sequence[Number], position_count: int) -> Tuple[Decimal, ...]:
    if len(staged_amounts) != position_count:
        raise InvalidInputError(
            f"Got {len(staged_amounts)} staged amounts for {position_count} positions")
    return tuple(to_decimal(a) for a in staged_amounts)


def _staged_weights(position_probabilities: Sequence[Decimal],
                    amounts: Sequence[Decimal],
                    inv_b: Decimal,
                    context: Context) -> Tuple[Decimal, ...]:
    return tuple(
        mul(p, exp(mul(amount, inv_b, context), context), context)
        for p, amount in zip(position_probabilities, amounts)
    )


def calc_position_probabilities_after_trade(position_probabilities: Sequence[Number],
                                            staged_amounts: Sequence[Number],
                                            inv_b: Number,
                                            context: Optional[Context] = None) -> Tuple[Decimal, ...]:
    """
    Reweight position probabilities by exp(amount * inv_b) and renormalize.

    A positive amount means the trade buys that position from the market
    maker, which raises its probability.

    Raises:
        InvalidInputError: if the amounts do not line up with the probabilities
        DomainError: if every reweighted probability is zero
    """
    context = context if context is not None else make_context()
    amounts = _check_amounts(staged_amounts, len(position_probabilities))
    probabilities = [to_decimal(p) for p in position_probabilities]
    weights = _staged_weights(probabilities, amounts, to_decimal(inv_b), context)

    total = ordered_sum(weights, context)
    if total.is_zero():
        raise DomainError("Staged trade leaves no probability mass to normalize")
    normalizer = div(ONE, total, context)
    return tuple(mul(w, normalizer, context) for w in weights)


def simulate_staged_trade(markets: Sequence[Market],
                          positions: Sequence[Position],
                          position_probabilities: Sequence[Number],
                          staged_amounts: Sequence[Number],
                          inv_b: Number,
                          selections: Optional[Sequence[MarketSelection]] = None,
                          context: Optional[Context] = None) -> MarketProbabilities:
    """Market probabilities as they would be after the staged trade, state untouched."""
    context = context if context is not None else make_context()
    adjusted = calc_position_probabilities_after_trade(
        position_probabilities, staged_amounts, inv_b, context)
    logger.debug("Simulated staged trade over {} positions", len(adjusted))
    return calc_market_probabilities(markets, positions, adjusted, selections, context)


def calc_net_cost(state: LMSRState,
                  staged_amounts: Sequence[Number],
                  context: Optional[Context] = None) -> Decimal:
    """
    Collateral the market maker charges for the staged trade.

    Args:
        state: Current LMSR state
        staged_amounts: Signed outcome-token amounts per position, positive
            for tokens bought from the market maker
        context: Arithmetic context (defaults to a fresh one)

    Returns:
        C(after) - C(before) = ln(Σ q_i * exp(amount_i * inv_b)) / inv_b,
        where q are the normalized position probabilities. Negative when
        the trade sells tokens back.
    """
    context = context if context is not None else make_context()
    amounts = _check_amounts(staged_amounts, state.position_count)
    inv_b = calc_inv_b(state.funding, state.position_count, context)
    if inv_b.is_zero():
        # a single position always pays out, so it trades at par
        return ordered_sum(amounts, context)

    raw = calc_position_probabilities(state, context)
    raw_total = ordered_sum(raw, context)
    weights = _staged_weights(raw, amounts, inv_b, context)
    ratio = div(ordered_sum(weights, context), raw_total, context)
    if ratio.is_zero():
        raise DomainError("Staged trade leaves no probability mass to price")
    return div(ln(ratio, context), inv_b, context)
