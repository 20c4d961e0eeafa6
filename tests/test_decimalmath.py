# tests/test_decimalmath.py

import pytest
import numpy as np
from decimal import Decimal
from conditionalmarkets.core.errors import DomainError, InvalidInputError
from conditionalmarkets.core.decimalmath import (
    absolute, add, compare, div, exp, ln, make_context, mul, neg,
    ordered_sum, round_to, sub, to_decimal,
)

def test_to_decimal_conversions():
    """Floats go through str, numpy scalars are accepted."""
    assert to_decimal(0.1) == Decimal('0.1')
    assert to_decimal(5) == Decimal(5)
    assert to_decimal(" 2.50 ") == Decimal('2.50')
    assert to_decimal(np.int64(7)) == Decimal(7)
    assert to_decimal(np.float64(0.25)) == Decimal('0.25')

@pytest.mark.parametrize("value", [True, "abc", float("nan"), float("inf"), None, [1]])
def test_to_decimal_rejects_non_numbers(value):
    with pytest.raises(InvalidInputError):
        to_decimal(value)

def test_basic_arithmetic():
    assert add(1, "0.5") == Decimal('1.5')
    assert sub(1, "0.25") == Decimal('0.75')
    assert mul("1.5", 4) == Decimal('6.0')
    assert div(1, 4) == Decimal('0.25')
    assert neg(3) == Decimal(-3)
    assert absolute(-3) == Decimal(3)

def test_division_by_zero():
    with pytest.raises(DomainError):
        div(1, 0)

@pytest.mark.parametrize("value", [0, -1, "-0.0001"])
def test_ln_of_non_positive(value):
    with pytest.raises(DomainError):
        ln(value)

def test_ln_exp_inverse():
    """exp(ln(2)) gives 2 back to well beyond double precision."""
    ctx = make_context(60)
    result = exp(ln(2, ctx), ctx)
    assert abs(result - 2) < Decimal('1e-50')

def test_exp_of_large_negative_stays_positive():
    assert exp(-100000) > 0

def test_exp_overflow():
    with pytest.raises(DomainError):
        exp(Decimal('1e30'))

def test_precision_is_configurable():
    low = div(1, 3, make_context(5))
    high = div(1, 3, make_context(40))
    assert low == Decimal('0.33333')
    assert len(high.as_tuple().digits) == 40

def test_make_context_rejects_bad_precision():
    with pytest.raises(ValueError):
        make_context(0)

def test_compare():
    assert compare(1, 2) == -1
    assert compare("2.0", 2) == 0
    assert compare(3, 2) == 1

def test_round_half_away_from_zero():
    assert round_to(Decimal('0.00005')) == Decimal('0.0001')
    assert round_to(Decimal('-0.00005')) == Decimal('-0.0001')
    assert round_to(Decimal('0.00004999')) == Decimal('0.0000')
    assert round_to(Decimal('1.235'), 2) == Decimal('1.24')
    assert str(round_to(Decimal('0.5'))) == '0.5000'

def test_round_large_number():
    """Rounding keeps every integer digit even past the default precision."""
    big = Decimal('1' * 60 + '.55')
    assert round_to(big, 1) == Decimal('1' * 60 + '.6')

def test_ordered_sum():
    assert ordered_sum([]) == 0
    assert ordered_sum(["0.1", "0.2", 0.3]) == Decimal('0.6')
