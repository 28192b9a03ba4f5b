# completion.py
# Purpose: Bond completion state machine. Takes a parsed bond through
#          PARSED -> SCHEDULE_DERIVED -> SOLVED -> COMPLETE; each step is a pure
#          function returning a new Bond or raising BondError.

from __future__ import annotations

import logging
from typing import Optional

from core.config import COUPON_FREQUENCY

from .errors import BondError, ErrorKind
from .models import Bond, BondState
from .pricing import estimated_yield_to_maturity
from .schedule import derive_schedule
from .solver import PriceKind, SolverConfig, price_from_yield, solve_yield

__all__ = ["validate", "derive", "solve", "finalise", "complete_bond"]

logger = logging.getLogger(__name__)


def _require_state(bond: Bond, state: BondState) -> None:
    if bond.state is not state:
        raise ValueError(f"expected a {state.name} bond, got {bond.state.name}")


def validate(bond: Optional[Bond]) -> Bond:
    """Check the preconditions for completing *bond*; returns it unchanged."""
    if bond is None:
        raise BondError(ErrorKind.NIL_BOND)
    if bond.settlement_date is None:
        raise BondError(ErrorKind.INVALID_SETTLEMENT_DATE, field="settlement_date")
    if bond.maturity_date is None:
        raise BondError(ErrorKind.INVALID_MATURITY_DATE, field="maturity_date")
    if bond.coupon is None or bond.coupon <= 0:
        raise BondError(ErrorKind.INVALID_COUPON, field="coupon")
    if bond.face_price is None or bond.face_price <= 0:
        raise BondError(ErrorKind.INVALID_FACE_PRICE, field="face_price")

    checks = (
        (bond.clean_price, ErrorKind.INVALID_CLEAN_PRICE, "clean_price"),
        (bond.dirty_price, ErrorKind.INVALID_DIRTY_PRICE, "dirty_price"),
        (bond.yield_to_maturity, ErrorKind.INVALID_YIELD_TO_MATURITY, "yield_to_maturity"),
    )
    for value, kind, name in checks:
        if value is not None and value < 0:
            raise BondError(kind, field=name)

    # Either a price or a yield is needed to calculate the other
    if bond.clean_price is None and bond.dirty_price is None and bond.yield_to_maturity is None:
        raise BondError(ErrorKind.MISSING_PRICE_AND_YIELD)
    return bond


def derive(bond: Bond) -> Bond:
    """PARSED -> SCHEDULE_DERIVED. Bonds already past PARSED keep their schedule."""
    if bond.state is not BondState.PARSED:
        return bond
    validate(bond)
    schedule = derive_schedule(bond.settlement_date, bond.maturity_date, COUPON_FREQUENCY)
    logger.debug(
        f"{bond.isin or bond.ticker}: prev={schedule.prev_coupon_date} next={schedule.next_coupon_date} "
        f"periods={schedule.coupon_periods}"
    )
    return bond.advance(BondState.SCHEDULE_DERIVED, schedule=schedule)


def solve(bond: Bond, config: SolverConfig) -> Bond:
    """SCHEDULE_DERIVED -> SOLVED: fill in the yield when only a price is known."""
    _require_state(bond, BondState.SCHEDULE_DERIVED)
    if bond.yield_to_maturity is not None:
        return bond.advance(BondState.SOLVED)

    s = bond.schedule
    if bond.dirty_price is not None:
        kind, price = PriceKind.DIRTY, bond.dirty_price
    else:
        kind, price = PriceKind.CLEAN, bond.clean_price

    guess = estimated_yield_to_maturity(
        bond.coupon,
        bond.face_price,
        price,
        s.maturity_years + s.maturity_days / 365.0,
    )
    ytm = solve_yield(
        kind,
        bond.coupon,
        bond.face_price,
        price,
        COUPON_FREQUENCY,
        s.coupon_periods,
        s.remaining_days,
        s.coupon_period_days,
        guess,
        config,
    )
    logger.debug(f"{bond.isin or bond.ticker}: {kind.value} {price} -> ytm {ytm:.6f}% (guess {guess:.6f}%)")
    return bond.advance(BondState.SOLVED, yield_to_maturity=ytm)


def finalise(bond: Bond) -> Bond:
    """SOLVED -> COMPLETE: fill missing prices through the accrued interest relation."""
    _require_state(bond, BondState.SOLVED)
    s = bond.schedule
    clean, dirty = bond.clean_price, bond.dirty_price

    if clean is None and dirty is None:
        dirty = price_from_yield(
            PriceKind.DIRTY,
            bond.coupon,
            bond.yield_to_maturity,
            bond.face_price,
            COUPON_FREQUENCY,
            s.coupon_periods,
            s.remaining_days,
            s.coupon_period_days,
        )

    accrued = bond.accrued_amount
    if clean is None:
        clean = dirty - accrued
    elif dirty is None:
        dirty = clean + accrued

    return bond.advance(BondState.COMPLETE, clean_price=clean, dirty_price=dirty)


def complete_bond(bond: Optional[Bond], config: Optional[SolverConfig] = None) -> Bond:
    """Run *bond* through the remaining states. A COMPLETE bond is returned as is."""
    if bond is None:
        raise BondError(ErrorKind.NIL_BOND)
    if bond.state is BondState.COMPLETE:
        return bond
    if config is None:
        config = SolverConfig.from_settings()

    if bond.state is BondState.PARSED:
        bond = derive(bond)
    if bond.state is BondState.SCHEDULE_DERIVED:
        bond = solve(bond, config)
    return finalise(bond)
