# schedule.py
# Purpose: Derive a gilt's coupon schedule (previous/next coupon dates, day
#          counts and remaining coupon periods) from settlement and maturity.

from __future__ import annotations

import math
from datetime import date
from typing import Tuple

from dateutil.relativedelta import relativedelta

from core.config import COUPON_FREQUENCY

from .errors import BondError, ErrorKind
from .models import CouponSchedule

__all__ = ["maturity_years", "coupon_dates", "coupon_periods", "derive_schedule"]


def maturity_years(settlement: date, maturity: date) -> Tuple[int, int]:
    """Split the settlement → maturity span into whole years and leftover days."""
    if maturity < settlement:
        raise BondError(
            ErrorKind.MATURITY_DATE_BEFORE_SETTLEMENT,
            detail=f"{maturity.isoformat()} < {settlement.isoformat()}",
        )

    years = maturity.year - settlement.year
    start = settlement + relativedelta(year=maturity.year)
    if start > maturity:
        years -= 1
        start = start - relativedelta(years=1)

    return years, (maturity - start).days


def coupon_dates(settlement: date, maturity: date, frequency: int = COUPON_FREQUENCY) -> Tuple[date, date]:
    """Return ``(prev, next)`` coupon dates with ``prev <= settlement < next``.

    Coupons fall on the maturity month/day and every ``12 / frequency`` months
    before it.
    """
    months = 12 // frequency
    # Offsets are taken from the maturity date so each candidate is clamped once
    base = (settlement.year - maturity.year) * 12
    candidates = [
        maturity + relativedelta(months=base + months * k) for k in range(-frequency - 1, frequency + 1)
    ]

    prev = max(c for c in candidates if c <= settlement)
    nxt = min(c for c in candidates if c > settlement)
    return prev, nxt


def coupon_periods(years: int, days: int, frequency: int = COUPON_FREQUENCY) -> int:
    """Remaining coupon payments to maturity.

    Leftover days are converted on a 365-day year regardless of the day-count
    basis used elsewhere.
    """
    # TODO: distinguish 30/360 from actual/actual once a non-gilt source needs it.
    return years * frequency + int(math.ceil(days / 365.0 * frequency))


def derive_schedule(settlement: date, maturity: date, frequency: int = COUPON_FREQUENCY) -> CouponSchedule:
    years, days = maturity_years(settlement, maturity)
    prev, nxt = coupon_dates(settlement, maturity, frequency)

    return CouponSchedule(
        prev_coupon_date=prev,
        next_coupon_date=nxt,
        remaining_days=(nxt - settlement).days,
        accrued_days=(settlement - prev).days,
        coupon_period_days=(nxt - prev).days,
        coupon_periods=coupon_periods(years, days, frequency),
        maturity_years=years,
        maturity_days=days,
    )
