# models.py
# Purpose: Typed domain models for gilts: bond records, derived coupon schedules,
#          row failures and collected batches.

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from core.config import COUPON_FREQUENCY, DEFAULT_FACE_PRICE

from .errors import BondError

__all__ = [
    "BondType",
    "BondState",
    "Bond",
    "CouponSchedule",
    "RowFailure",
    "CollectedBatch",
    "new_uk_gilt",
]


class BondType(Enum):
    UK_GILT = "UK Gilt"


class BondState(Enum):
    """Lifecycle of a bond through the completion state machine."""

    PARSED = 1
    SCHEDULE_DERIVED = 2
    SOLVED = 3
    COMPLETE = 4


@dataclass(frozen=True)
class CouponSchedule:
    prev_coupon_date: date
    next_coupon_date: date
    remaining_days: int
    accrued_days: int
    coupon_period_days: int
    coupon_periods: int
    maturity_years: int
    maturity_days: int


@dataclass(frozen=True)
class Bond:
    """One instrument on one observation date.

    Prices and yield are in percent of face / percent per annum. ``None`` means
    "not known yet"; the completion functions fill the gaps and advance
    ``state``.
    """

    source: str = ""
    settlement_date: Optional[date] = None
    bond_type: BondType = BondType.UK_GILT
    isin: Optional[str] = None
    ticker: Optional[str] = None
    desc: Optional[str] = None
    face_price: float = DEFAULT_FACE_PRICE
    coupon: Optional[float] = None
    maturity_date: Optional[date] = None
    clean_price: Optional[float] = None
    dirty_price: Optional[float] = None
    yield_to_maturity: Optional[float] = None
    schedule: Optional[CouponSchedule] = None
    state: BondState = BondState.PARSED

    # Convenience accessors over the derived schedule

    @property
    def prev_coupon_date(self) -> Optional[date]:
        return self.schedule.prev_coupon_date if self.schedule else None

    @property
    def next_coupon_date(self) -> Optional[date]:
        return self.schedule.next_coupon_date if self.schedule else None

    @property
    def remaining_days(self) -> Optional[int]:
        return self.schedule.remaining_days if self.schedule else None

    @property
    def accrued_days(self) -> Optional[int]:
        return self.schedule.accrued_days if self.schedule else None

    @property
    def coupon_period_days(self) -> Optional[int]:
        return self.schedule.coupon_period_days if self.schedule else None

    @property
    def coupon_periods(self) -> Optional[int]:
        return self.schedule.coupon_periods if self.schedule else None

    @property
    def maturity_years(self) -> Optional[int]:
        return self.schedule.maturity_years if self.schedule else None

    @property
    def maturity_days(self) -> Optional[int]:
        return self.schedule.maturity_days if self.schedule else None

    @property
    def accrued_amount(self) -> Optional[float]:
        """Accrued interest per ``face_price`` of nominal."""
        if self.schedule is None or self.coupon is None:
            return None
        s = self.schedule
        return (
            s.accrued_days / s.coupon_period_days
            * self.coupon / COUPON_FREQUENCY / 100
            * self.face_price
        )

    @property
    def is_complete(self) -> bool:
        return self.state is BondState.COMPLETE

    def advance(self, state: BondState, **changes: Any) -> "Bond":
        """Return a copy moved to *state* with *changes* applied."""
        return replace(self, state=state, **changes)

    def to_record(self) -> Dict[str, Any]:
        """Flatten into the column layout used for columnar output."""
        return {
            "Type": self.bond_type.value,
            "Source": self.source,
            "ISIN": self.isin or "",
            "Ticker": self.ticker or "",
            "Desc": self.desc or "",
            "FacePrice": self.face_price,
            "Coupon": self.coupon,
            "SettlementDate": self.settlement_date,
            "PrevCouponDate": self.prev_coupon_date,
            "NextCouponDate": self.next_coupon_date,
            "RemainingDays": self.remaining_days,
            "AccruedDays": self.accrued_days,
            "CouponPeriodDays": self.coupon_period_days,
            "CouponPeriods": self.coupon_periods,
            "MaturityDate": self.maturity_date,
            "MaturityYears": self.maturity_years,
            "MaturityDays": self.maturity_days,
            "CleanPrice": self.clean_price,
            "DirtyPrice": self.dirty_price,
            "AccruedAmount": self.accrued_amount,
            "YieldToMaturity": self.yield_to_maturity,
        }


def new_uk_gilt(source: str, settlement_date: Optional[date]) -> Bond:
    return Bond(source=source, settlement_date=settlement_date)


@dataclass(frozen=True)
class RowFailure:
    """A row that could not be turned into a complete bond."""

    row_index: int
    row: Tuple[str, ...]
    error: BondError
    bond: Optional[Bond] = None  # best-effort parse, for debugging


@dataclass(frozen=True)
class CollectedBatch:
    """Result of one collection run: one source, one settlement date.

    Immutable once returned by the collector.
    """

    source: str
    settlement_date: date
    bonds: Tuple[Bond, ...] = ()
    failures: Tuple[RowFailure, ...] = ()
    skipped: int = 0

    @property
    def ok(self) -> bool:
        return len(self.bonds) > 0
