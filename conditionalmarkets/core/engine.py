# conditionalmarkets/core/engine.py
"""
The full probability pipeline as one pure function.

Callers capture an EngineSnapshot (LMSR state, selections, staged trade)
once per refresh and pass it to recompute(). Nothing is cached between
calls; a stale report is simply dropped by the caller.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, Optional, Sequence, Tuple

from loguru import logger

from conditionalmarkets.core.aggregator import MarketProbabilities, calc_market_probabilities
from conditionalmarkets.core.config import DEFAULT_CONFIG, EngineConfig
from conditionalmarkets.core.decimalmath import Number, to_decimal
from conditionalmarkets.core.formatting import calc_probability_changes, is_significant_change
from conditionalmarkets.core.lmsr import (
    LMSRState, calc_inv_b, calc_position_probabilities, check_position_count,
)
from conditionalmarkets.core.markets import MarketSystem
from conditionalmarkets.core.selections import MarketSelection
from conditionalmarkets.core.simulator import calc_net_cost, simulate_staged_trade


@dataclass(frozen=True)
class EngineSnapshot:
    """Everything one recompute() needs, captured at the same moment."""
    state: LMSRState
    selections: Optional[Tuple[MarketSelection, ...]] = None
    staged_trade_amounts: Optional[Tuple[Decimal, ...]] = None

    def __post_init__(self):
        if self.selections is not None:
            object.__setattr__(self, "selections", tuple(self.selections))
        if self.staged_trade_amounts is not None:
            object.__setattr__(self, "staged_trade_amounts",
                               tuple(to_decimal(a) for a in self.staged_trade_amounts))


@dataclass(frozen=True)
class ProbabilityReport:
    inv_b: Decimal
    position_probabilities: Tuple[Decimal, ...]
    market_probabilities: MarketProbabilities
    # only set when the snapshot carried staged trade amounts
    market_probabilities_after_staged_trade: Optional[MarketProbabilities] = None
    net_cost: Optional[Decimal] = None

    def changes(self, config: EngineConfig = DEFAULT_CONFIG
                ) -> Dict[int, Optional[Tuple[Tuple[Decimal, bool], ...]]]:
        """
        Per-outcome shift caused by the staged trade.

        Returns:
            {market_index: ((change_in_percentage_points, is_significant), ...)}
            with None for markets unavailable before or after the trade.
            Empty when no trade was staged.
        """
        if self.market_probabilities_after_staged_trade is None:
            return {}
        result = {}
        for index, before in self.market_probabilities.items():
            after = self.market_probabilities_after_staged_trade.get(index)
            if before is None or after is None:
                result[index] = None
                continue
            deltas = calc_probability_changes(before, after, config.probability_decimal_places)
            result[index] = tuple(
                (delta, is_significant_change(delta, config.significant_change_threshold))
                for delta in deltas
            )
        return result


def recompute(system: MarketSystem,
              snapshot: EngineSnapshot,
              config: EngineConfig = DEFAULT_CONFIG) -> ProbabilityReport:
    """
    Run LMSR pricing, aggregation and the optional staged-trade simulation.

    Args:
        system: Loaded markets and positions
        snapshot: State, selections and staged amounts captured together
        config: Numeric settings

    Returns:
        A ProbabilityReport for the snapshot

    Raises:
        DomainError, InvalidStateError, InvalidInputError: on invalid input;
            no partial report is returned
    """
    context = config.context()
    state = snapshot.state
    check_position_count(state, system.positions)

    inv_b = calc_inv_b(state.funding, state.position_count, context)
    position_probabilities = calc_position_probabilities(state, context)
    market_probabilities = calc_market_probabilities(
        system.markets, system.positions, position_probabilities,
        snapshot.selections, context)

    after_trade = None
    net_cost = None
    if snapshot.staged_trade_amounts is not None:
        after_trade = simulate_staged_trade(
            system.markets, system.positions, position_probabilities,
            snapshot.staged_trade_amounts, inv_b, snapshot.selections, context)
        net_cost = calc_net_cost(state, snapshot.staged_trade_amounts, context)

    logger.debug("Recomputed probabilities for {} markets (staged trade: {})",
                 len(market_probabilities), after_trade is not None)
    return ProbabilityReport(
        inv_b=inv_b,
        position_probabilities=position_probabilities,
        market_probabilities=market_probabilities,
        market_probabilities_after_staged_trade=after_trade,
        net_cost=net_cost,
    )


def recompute_from_raw(system: MarketSystem,
                       funding: Number,
                       position_balances: Sequence[Number],
                       selections: Optional[Sequence[MarketSelection]] = None,
                       staged_trade_amounts: Optional[Sequence[Number]] = None,
                       config: EngineConfig = DEFAULT_CONFIG) -> ProbabilityReport:
    """Convenience wrapper taking the chain-state reader's raw values."""
    snapshot = EngineSnapshot(
        state=LMSRState(funding=funding, position_balances=tuple(position_balances)),
        selections=None if selections is None else tuple(selections),
        staged_trade_amounts=None if staged_trade_amounts is None else tuple(staged_trade_amounts),
    )
    return recompute(system, snapshot, config)
