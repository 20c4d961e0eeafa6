# conditionalmarkets/core/markets.py

from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Mapping, Optional, Sequence, Tuple

import numpy as np
from loguru import logger

from conditionalmarkets.core.decimalmath import to_decimal
from conditionalmarkets.core.errors import InvalidStateError


@dataclass(frozen=True)
class Outcome:
    """One outcome slot of a market."""
    title: str
    short: str
    market_index: int
    index: int
    # dense indices of every position that picks this outcome
    position_indices: Tuple[int, ...] = ()


@dataclass(frozen=True)
class Market:
    """
    One independent trading dimension.

    Categorical markets have no bounds. Scalar markets carry lower_bound and
    upper_bound; their first outcome is the one whose probability maps onto
    the value range (see scalar.py).
    """
    key: str
    index: int
    outcomes: Tuple[Outcome, ...]
    title: str = ""
    lower_bound: Optional[Decimal] = None
    upper_bound: Optional[Decimal] = None
    unit: str = ""

    @property
    def is_scalar(self) -> bool:
        return self.lower_bound is not None and self.upper_bound is not None

    @property
    def outcome_count(self) -> int:
        return len(self.outcomes)


@dataclass(frozen=True)
class Position:
    """
    One cell of the cross product of outcomes across all markets.

    outcomes holds (market_index, outcome_index) pairs in ascending market
    order, so outcomes[m][1] is the outcome this position picks in market m.
    """
    id: str
    index: int
    outcomes: Tuple[Tuple[int, int], ...]

    def outcome_index(self, market_index: int) -> int:
        return self.outcomes[market_index][1]

    def is_consistent_with(self, conditions: Mapping[int, int]) -> bool:
        """True when the position picks conditions[m] in every conditioned market m."""
        return all(self.outcome_index(m) == o for m, o in conditions.items())


@dataclass(frozen=True)
class MarketSystem:
    """Markets and the positions generated from them, loaded once."""
    markets: Tuple[Market, ...]
    positions: Tuple[Position, ...]

    @property
    def position_count(self) -> int:
        return len(self.positions)


def generate_positions(outcome_counts: Sequence[int]) -> Tuple[Position, ...]:
    """
    Enumerate every combination of outcomes, one per market.

    Args:
        outcome_counts: Number of outcomes of each market, in market order

    Returns:
        Positions indexed 0..N-1 where market 0's outcome varies fastest,
        e.g. for two binary markets A and B: A0B0, A1B0, A0B1, A1B1
    """
    if not outcome_counts:
        raise InvalidStateError("At least one market is required")
    if any(count < 1 for count in outcome_counts):
        raise InvalidStateError(f"Every market needs an outcome: {list(outcome_counts)}")

    positions = []
    # ndindex varies its last axis fastest, so walk the markets in reverse
    for index, cell in enumerate(np.ndindex(*reversed(outcome_counts))):
        pairs = tuple((m, int(o)) for m, o in enumerate(reversed(cell)))
        position_id = "&".join(f"{m}:{o}" for m, o in pairs)
        positions.append(Position(id=position_id, index=index, outcomes=pairs))
    return tuple(positions)


def _load_bounds(definition: Mapping[str, Any]) -> Tuple[Optional[Decimal], Optional[Decimal]]:
    lower = definition.get("lower_bound")
    upper = definition.get("upper_bound")
    if lower is None and upper is None:
        return None, None
    if lower is None or upper is None:
        raise InvalidStateError(
            f"Scalar market {definition.get('key')!r} needs both lower_bound and upper_bound")
    lower, upper = to_decimal(lower), to_decimal(upper)
    if lower >= upper:
        raise InvalidStateError(
            f"Scalar market {definition.get('key')!r} has lower_bound {lower} >= upper_bound {upper}")
    return lower, upper


def load_markets(definitions: Sequence[Mapping[str, Any]],
                 expected_position_count: Optional[int] = None) -> MarketSystem:
    """
    Build markets, outcomes and positions from plain market definitions.

    Each definition is a mapping with a "key", a list of "outcomes" (each a
    mapping with "title" and optionally "short"), and optionally "title",
    "unit", "lower_bound" and "upper_bound".

    Args:
        definitions: Market definitions, in market order
        expected_position_count: Atomic outcome slot count reported by the
            market maker, checked against the generated position count

    Returns:
        The loaded MarketSystem

    Raises:
        InvalidStateError: if the definitions cannot describe a valid system
    """
    if not definitions:
        raise InvalidStateError("At least one market is required")

    outcome_counts = []
    for market_index, definition in enumerate(definitions):
        if "key" not in definition:
            raise InvalidStateError(f"Market {market_index} has no key")
        outcomes = definition.get("outcomes") or []
        if not outcomes:
            raise InvalidStateError(f"Market {definition['key']!r} has no outcomes")
        if any("title" not in raw for raw in outcomes):
            raise InvalidStateError(f"Market {definition['key']!r} has an outcome without a title")
        outcome_counts.append(len(outcomes))

    positions = generate_positions(outcome_counts)
    if expected_position_count is not None and expected_position_count != len(positions):
        raise InvalidStateError(
            f"Mismatch in counted atomic outcome slots {len(positions)} "
            f"and reported value {expected_position_count}")

    markets = []
    for market_index, definition in enumerate(definitions):
        lower, upper = _load_bounds(definition)
        outcomes = tuple(
            Outcome(
                title=raw["title"],
                short=raw.get("short", raw["title"]),
                market_index=market_index,
                index=outcome_index,
                position_indices=tuple(
                    p.index for p in positions
                    if p.outcome_index(market_index) == outcome_index
                ),
            )
            for outcome_index, raw in enumerate(definition["outcomes"])
        )
        markets.append(Market(
            key=definition["key"],
            index=market_index,
            outcomes=outcomes,
            title=definition.get("title", ""),
            lower_bound=lower,
            upper_bound=upper,
            unit=definition.get("unit", ""),
        ))

    logger.debug("Loaded {} markets with {} positions", len(markets), len(positions))
    return MarketSystem(markets=tuple(markets), positions=positions)
