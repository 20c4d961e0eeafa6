# tests/test_aggregator.py

import pytest
import numpy as np
from decimal import Decimal
from conditionalmarkets.core.aggregator import UNAVAILABLE, calc_market_probabilities
from conditionalmarkets.core.decimalmath import make_context
from conditionalmarkets.core.errors import InvalidInputError, InvalidStateError
from conditionalmarkets.core.lmsr import LMSRState, calc_position_probabilities
from conditionalmarkets.core.markets import load_markets
from conditionalmarkets.core.selections import UNSELECTED, Conditioning, Fixed

def as_floats(probabilities):
    return [float(p) for p in probabilities]

@pytest.fixture
def correlated_probabilities():
    """A and B tend to agree: p = [1, 0.25, 0.25, 1] for A0B0, A1B0, A0B1, A1B1."""
    state = LMSRState(funding=100, position_balances=(0, 100, 100, 0))
    return calc_position_probabilities(state)

def test_binary_market_normalized(binary_system):
    """Weights [0.5, 1] become [1/3, 2/3]."""
    result = calc_market_probabilities(
        binary_system.markets, binary_system.positions, [Decimal('0.5'), Decimal(1)])
    assert np.allclose(as_floats(result[0]), [1 / 3, 2 / 3])

def test_unconditioned_marginals(two_market_system, correlated_probabilities):
    result = calc_market_probabilities(
        two_market_system.markets, two_market_system.positions, correlated_probabilities)
    assert np.allclose(as_floats(result[0]), [0.5, 0.5])
    assert np.allclose(as_floats(result[1]), [0.5, 0.5])

def test_conditioning_on_other_market(two_market_system, correlated_probabilities):
    """Assuming B0 leaves only positions 0 and 1, renormalized."""
    selections = [UNSELECTED, Conditioning(0)]
    result = calc_market_probabilities(
        two_market_system.markets, two_market_system.positions,
        correlated_probabilities, selections)
    ctx = make_context()
    p0, p1 = correlated_probabilities[0], correlated_probabilities[1]
    mass = ctx.add(p0, p1)
    assert result[0] == (ctx.divide(p0, mass), ctx.divide(p1, mass))
    assert np.allclose(as_floats(result[0]), [0.8, 0.2])
    # a market never conditions itself
    assert np.allclose(as_floats(result[1]), [0.5, 0.5])

def test_conditioning_on_second_outcome(two_market_system, correlated_probabilities):
    selections = [UNSELECTED, Conditioning(1)]
    result = calc_market_probabilities(
        two_market_system.markets, two_market_system.positions,
        correlated_probabilities, selections)
    assert np.allclose(as_floats(result[0]), [0.2, 0.8])

def test_fixed_selection_does_not_condition(two_market_system, correlated_probabilities):
    selections = [UNSELECTED, Fixed(0)]
    result = calc_market_probabilities(
        two_market_system.markets, two_market_system.positions,
        correlated_probabilities, selections)
    assert np.allclose(as_floats(result[0]), [0.5, 0.5])

def test_both_markets_conditioning(two_market_system, correlated_probabilities):
    selections = [Conditioning(1), Conditioning(0)]
    result = calc_market_probabilities(
        two_market_system.markets, two_market_system.positions,
        correlated_probabilities, selections)
    assert np.allclose(as_floats(result[0]), [0.8, 0.2])
    # B conditioned on A1: positions 1 and 3
    assert np.allclose(as_floats(result[1]), [0.2, 0.8])

def test_zero_mass_is_unavailable(two_market_system, log_messages):
    """No mass under the assumption means the market is unavailable, not divided by zero."""
    probabilities = [Decimal(0), Decimal(0), Decimal(1), Decimal(1)]
    result = calc_market_probabilities(
        two_market_system.markets, two_market_system.positions,
        probabilities, [UNSELECTED, Conditioning(0)])
    assert result[0] is UNAVAILABLE
    assert result[1] == (Decimal(0), Decimal(1))
    assert any(r["level"].name == "WARNING" for r in log_messages)

def test_empty_outcome_gets_zero(two_market_system):
    probabilities = [Decimal(0), Decimal(1), Decimal(0), Decimal(1)]
    result = calc_market_probabilities(
        two_market_system.markets, two_market_system.positions, probabilities)
    assert result[0] == (Decimal(0), Decimal(1))

def test_sum_to_one_random_states():
    """Unconditioned outcome probabilities of every market sum to one."""
    system = load_markets([
        {"key": "A", "outcomes": [{"title": "a0"}, {"title": "a1"}]},
        {"key": "B", "outcomes": [{"title": "b0"}, {"title": "b1"}, {"title": "b2"}]},
        {"key": "C", "outcomes": [{"title": "c0"}, {"title": "c1"}]},
    ])
    rng = np.random.default_rng(42)
    for _ in range(5):
        balances = [int(x) for x in rng.integers(0, 500, size=system.position_count)]
        state = LMSRState(funding=200, position_balances=balances)
        result = calc_market_probabilities(
            system.markets, system.positions, calc_position_probabilities(state))
        for probabilities in result.values():
            assert abs(sum(probabilities) - 1) < Decimal('1e-9')

def test_idempotent(two_market_system, correlated_probabilities):
    args = (two_market_system.markets, two_market_system.positions,
            correlated_probabilities, [UNSELECTED, Conditioning(0)])
    assert calc_market_probabilities(*args) == calc_market_probabilities(*args)

def test_length_mismatch(two_market_system):
    with pytest.raises(InvalidStateError):
        calc_market_probabilities(
            two_market_system.markets, two_market_system.positions, [Decimal(1)] * 3)

def test_bad_selections(two_market_system, correlated_probabilities):
    with pytest.raises(InvalidInputError):
        calc_market_probabilities(
            two_market_system.markets, two_market_system.positions,
            correlated_probabilities, [UNSELECTED])
