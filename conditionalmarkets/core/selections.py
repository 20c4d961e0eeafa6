# conditionalmarkets/core/selections.py

from dataclasses import dataclass
from typing import Dict, Optional, Sequence, Tuple, Union

from conditionalmarkets.core.errors import InvalidInputError
from conditionalmarkets.core.markets import Market

NO_SELECTION = -1


@dataclass(frozen=True)
class Unselected:
    """No outcome chosen; the market contributes no restriction."""
    pass


@dataclass(frozen=True)
class Fixed:
    """An outcome is picked for trading but other markets are not conditioned on it."""
    outcome_index: int


@dataclass(frozen=True)
class Conditioning:
    """The market is assumed to resolve to outcome_index when pricing the others."""
    outcome_index: int


MarketSelection = Union[Unselected, Fixed, Conditioning]

UNSELECTED = Unselected()


def selection_from_raw(selected_outcome_index: int, is_assumed: bool) -> MarketSelection:
    """
    Convert the selection-store shape into a MarketSelection.

    selected_outcome_index is -1 when nothing is selected. Assuming a market
    without selecting one of its outcomes is rejected.
    """
    if selected_outcome_index == NO_SELECTION:
        if is_assumed:
            raise InvalidInputError("A market cannot be assumed without a selected outcome")
        return UNSELECTED
    if selected_outcome_index < 0:
        raise InvalidInputError(f"Invalid outcome index {selected_outcome_index}")
    if is_assumed:
        return Conditioning(selected_outcome_index)
    return Fixed(selected_outcome_index)


def to_raw(selection: MarketSelection) -> Tuple[int, bool]:
    """Inverse of selection_from_raw."""
    if isinstance(selection, Conditioning):
        return selection.outcome_index, True
    if isinstance(selection, Fixed):
        return selection.outcome_index, False
    return NO_SELECTION, False


def reset_selections(markets: Sequence[Market]) -> Tuple[MarketSelection, ...]:
    """One Unselected entry per market."""
    return tuple(UNSELECTED for _ in markets)


def conditioning_outcomes(markets: Sequence[Market],
                          selections: Optional[Sequence[MarketSelection]]) -> Dict[int, int]:
    """
    Map market index to assumed outcome index for every conditioning market.

    Args:
        markets: All markets, in market order
        selections: One selection per market, or None for no conditioning

    Returns:
        {market_index: outcome_index} for markets whose selection is Conditioning

    Raises:
        InvalidInputError: if the selections do not line up with the markets
    """
    if selections is None:
        return {}
    if len(selections) != len(markets):
        raise InvalidInputError(
            f"Got {len(selections)} selections for {len(markets)} markets")

    conditions = {}
    for market, selection in zip(markets, selections):
        if isinstance(selection, (Fixed, Conditioning)):
            if not 0 <= selection.outcome_index < market.outcome_count:
                raise InvalidInputError(
                    f"Outcome index {selection.outcome_index} out of range "
                    f"for market {market.key!r}")
            if isinstance(selection, Conditioning):
                conditions[market.index] = selection.outcome_index
        elif not isinstance(selection, Unselected):
            raise InvalidInputError(f"Unknown selection {selection!r}")
    return conditions
