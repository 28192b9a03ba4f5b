# Purpose: Tests for the clean/dirty price functions, their derivatives and the
# closed-form yield estimate.

import numpy as np
import pytest

from gilts.pricing import (
    accrued_amount,
    clean_price,
    clean_price_derivative,
    dirty_price,
    dirty_price_derivative,
    estimated_yield_to_maturity,
)

# coupon, face, frequency, periods, days to next coupon, days in period
TS28 = (4.5, 100.0, 2, 7, 80, 182)
TG25 = (0.625, 100.0, 2, 1, 79, 182)


def _args(fixture, y):
    C, F, n, m, tn, tb = fixture
    return C, y, F, n, m, tn, tb


@pytest.mark.parametrize("m", [1, 3, 20])
def test_par_bond_on_coupon_date_prices_at_face(m):
    # A full period ahead and yield equal to coupon: both prices are par
    assert clean_price(4.5, 0.045, 100.0, 2, m, 182, 182) == pytest.approx(100.0)
    assert dirty_price(4.5, 0.045, 100.0, 2, m, 182, 182) == pytest.approx(100.0)


@pytest.mark.parametrize("fixture", [TS28, TG25])
@pytest.mark.parametrize("price_fn", [clean_price, dirty_price])
def test_price_decreases_as_yield_rises(fixture, price_fn):
    prices = [price_fn(*_args(fixture, y)) for y in np.linspace(0.001, 0.15, 40)]
    assert all(a > b for a, b in zip(prices, prices[1:]))


@pytest.mark.parametrize("fixture", [TS28, TG25])
@pytest.mark.parametrize(
    "price_fn, derivative_fn",
    [(clean_price, clean_price_derivative), (dirty_price, dirty_price_derivative)],
)
@pytest.mark.parametrize("y", [0.01, 0.04, 0.09])
def test_derivative_matches_finite_difference(fixture, price_fn, derivative_fn, y):
    h = 1e-6
    numeric = (price_fn(*_args(fixture, y + h)) - price_fn(*_args(fixture, y - h))) / (2 * h)
    assert derivative_fn(*_args(fixture, y)) == pytest.approx(numeric, rel=1e-4)
    assert derivative_fn(*_args(fixture, y)) < 0


def test_dirty_exceeds_clean_inside_a_period():
    y = 0.042
    assert dirty_price(*_args(TS28, y)) > clean_price(*_args(TS28, y))


def test_accrued_amount():
    assert accrued_amount(4.5, 100.0, 102, 182) == pytest.approx(102 / 182 * 2.25)
    assert accrued_amount(4.5, 100.0, 0, 182) == 0.0
    assert accrued_amount(4.5, 200.0, 91, 182, n=2) == pytest.approx(2.25)


def test_estimated_yield_to_maturity():
    assert estimated_yield_to_maturity(5.0, 100.0, 100.0, 10) == pytest.approx(5.0)
    # Below par: pull to par adds to the running yield
    assert estimated_yield_to_maturity(0.625, 100.0, 99.28, 79 / 365) == pytest.approx(3.9658, abs=1e-3)


def test_estimated_yield_falls_back_to_coupon_at_maturity():
    assert estimated_yield_to_maturity(4.5, 100.0, 101.0, 0) == 4.5
