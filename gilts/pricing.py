# pricing.py
# Purpose: Clean and dirty price functions (with their yield derivatives) for a
#          gilt with an irregular first period, plus the closed-form estimate
#          that seeds the solver.
#
# Notation shared by every function:
#   C   annual coupon rate, percent (e.g. 4.5)
#   y   annual yield, decimal (e.g. 0.045)
#   F   face value
#   n   coupon payments per year
#   m   coupon payments remaining to maturity
#   tn  days from settlement to the next coupon
#   tb  days in the current coupon period

from __future__ import annotations

import numpy as np

__all__ = [
    "clean_price",
    "clean_price_derivative",
    "dirty_price",
    "dirty_price_derivative",
    "accrued_amount",
    "estimated_yield_to_maturity",
]


def _split_first_period(C: float, F: float, n: int, m: int, tn: int, tb: int):
    """Redemption amount and whole coupon count for the clean price.

    When settlement falls inside a coupon period the fraction ``tn / tb`` of the
    next coupon is folded into the redemption payment and that coupon drops
    out of the whole-period sum.
    """
    cp = C / 100 / n * F
    r = tn / tb
    mp = F
    k = m
    if r > 0:
        mp += cp * r
        k -= 1
    return cp, r, mp, k


def clean_price(C: float, y: float, F: float, n: int, m: int, tn: int, tb: int) -> float:
    """Clean price when cash flows fall at unequal intervals."""
    cp, r, mp, k = _split_first_period(C, F, n, m, tn, tb)
    v = 1 + y / n
    j = np.arange(1, k + 1, dtype=float)
    return float(mp / v ** (k + r) + np.sum(cp / v ** j))


def clean_price_derivative(C: float, y: float, F: float, n: int, m: int, tn: int, tb: int) -> float:
    """d(clean_price)/dy."""
    cp, r, mp, k = _split_first_period(C, F, n, m, tn, tb)
    v = 1 + y / n
    j = np.arange(1, k + 1, dtype=float)
    redemption = -mp * (k + r) / n / v ** (k + r + 1)
    coupons = np.sum(-cp * j / n / v ** (j + 1))
    return float(redemption + coupons)


def _dirty_terms(C: float, y: float, F: float, n: int, m: int):
    c = C / 100 * F / n
    v = 1 + y / n
    j = np.arange(1, m + 1, dtype=float)
    coupons = np.sum(c / v ** (j - 1))
    redemption = F / v ** (m - 1)
    return c, v, j, coupons, redemption


def dirty_price(C: float, y: float, F: float, n: int, m: int, tn: int, tb: int) -> float:
    """Present value of every remaining cash flow, discounted to settlement."""
    _, v, _, coupons, redemption = _dirty_terms(C, y, F, n, m)
    r = tn / tb
    return float((coupons + redemption) / v ** r)


def dirty_price_derivative(C: float, y: float, F: float, n: int, m: int, tn: int, tb: int) -> float:
    """d(dirty_price)/dy."""
    c, v, j, coupons, redemption = _dirty_terms(C, y, F, n, m)
    r = tn / tb
    d_coupons = np.sum(-(j - 1) / n * c / v ** j)
    d_redemption = -(m - 1) / n * F / v ** m
    return float(-r / n / v ** (r + 1) * (coupons + redemption) + (d_coupons + d_redemption) / v ** r)


def accrued_amount(C: float, F: float, accrued_days: int, period_days: int, n: int = 2) -> float:
    """Interest earned by the seller since the last coupon."""
    return accrued_days / period_days * C / n / 100 * F


def estimated_yield_to_maturity(C: float, F: float, P: float, years: float) -> float:
    """Rough yield (percent): coupon plus amortised pull to par over the mean of face and price."""
    if years <= 0:
        return C
    cp = C / 100 * F
    y = (cp + (F - P) / years) / ((F + P) / 2)
    return y * 100
