# errors.py
# Purpose: Closed error taxonomy for the gilts pipeline. Every failure mode is a
#          distinct ErrorKind; BondError carries the kind plus optional context.

from __future__ import annotations

from enum import Enum
from typing import Optional

__all__ = ["ErrorKind", "BondError"]


class ErrorKind(Enum):
    """Every distinguishable failure of the pipeline, with its message."""

    # Field-level
    INVALID_TICKER = "invalid ticker"
    INVALID_ISIN = "invalid ISIN"
    INVALID_DESC = "invalid description"
    INVALID_COUPON = "invalid coupon"
    INVALID_CLEAN_PRICE = "invalid clean price"
    INVALID_DIRTY_PRICE = "invalid dirty price"
    INVALID_YIELD_TO_MATURITY = "invalid yield to maturity"
    INVALID_MATURITY_DATE = "invalid maturity date"
    INVALID_SETTLEMENT_DATE = "invalid settlement date"
    INVALID_FACE_PRICE = "invalid face price"

    # Structural
    MATURITY_DATE_BEFORE_SETTLEMENT = "maturity date is before settlement date"
    MISSING_PRICE_AND_YIELD = "missing price and yield"
    MISSING_SETTLEMENT_DATE = "missing settlement date"
    NIL_BOND = "bond is nil"
    INVALID_ROW = "invalid row"

    # Numeric
    DERIVATIVE_TOO_SMALL = "Newton-Raphson failed (derivative is too small)"
    NO_CONVERGENCE = "Newton-Raphson failed to converge within max iterations"

    # Batch-level
    UNSUPPORTED_BOND = "unsupported bond"
    DATA_UNAVAILABLE = "data unavailable"

    @property
    def code(self) -> str:
        return self.name


class BondError(Exception):
    """Error raised by any stage of the pipeline.

    Two errors compare equal when they have the same kind; the context
    (field, row index, detail) is informational only.
    """

    def __init__(
        self,
        kind: ErrorKind,
        *,
        field: Optional[str] = None,
        row_index: Optional[int] = None,
        detail: Optional[str] = None,
    ) -> None:
        self.kind = kind
        self.field = field
        self.row_index = row_index
        self.detail = detail
        super().__init__(self._format())

    def _format(self) -> str:
        msg = self.kind.value
        context = []
        if self.field:
            context.append(f"field={self.field}")
        if self.row_index is not None:
            context.append(f"row={self.row_index}")
        if context:
            msg = f"{msg} ({', '.join(context)})"
        if self.detail:
            msg = f"{msg}: {self.detail}"
        return msg

    def with_row(self, row_index: int) -> "BondError":
        """Return a copy of this error tagged with *row_index*."""
        return BondError(self.kind, field=self.field, row_index=row_index, detail=self.detail)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, BondError):
            return self.kind is other.kind
        if isinstance(other, ErrorKind):
            return self.kind is other
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self.kind)

    def __reduce__(self):
        return (_rebuild_error, (self.kind, self.field, self.row_index, self.detail))


def _rebuild_error(kind, field, row_index, detail):
    return BondError(kind, field=field, row_index=row_index, detail=detail)
