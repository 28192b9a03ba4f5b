# parsing.py
# Purpose: Turn one raw source row into a provisional Bond, collecting field
#          diagnostics instead of stopping at the first bad cell.

from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass, field, replace
from datetime import date, datetime
from typing import List, Optional, Sequence, Tuple

from core.config import MATURITY_DATE_FORMAT, UNSUPPORTED_DESC_MARKERS

from .errors import BondError, ErrorKind
from .models import Bond, new_uk_gilt
from .sources import RowLayout

__all__ = [
    "FieldDiagnostic",
    "FieldDiagnostics",
    "ParsedRow",
    "parse_coupon_percentage",
    "parse_price",
    "parse_maturity_date",
    "parse_row",
]

logger = logging.getLogger(__name__)

# Leading coupon token of a gilt description, e.g. "0 5/8%", "4.25%", "3½%", "2%"
_COUPON_RE = re.compile(r"^(\d+(?:\s+\d+/\d+)?|\d+/\d+|\d+(?:\.\d+)?|\d+[¼½¾])%")

_GLYPH_FRACTIONS = {
    "¼": " 1/4",
    "½": " 1/2",
    "¾": " 3/4",
}

_CURRENCY_PREFIXES = ("Â£", "£")


@dataclass(frozen=True)
class FieldDiagnostic:
    kind: ErrorKind
    field: str
    detail: Optional[str] = None

    def to_error(self, row_index: Optional[int] = None) -> BondError:
        return BondError(self.kind, field=self.field, row_index=row_index, detail=self.detail)


@dataclass
class FieldDiagnostics:
    """Collects zero or more field problems for one row; the first one wins."""

    items: List[FieldDiagnostic] = field(default_factory=list)

    def record(self, kind: ErrorKind, field_name: str, detail: Optional[str] = None) -> None:
        self.items.append(FieldDiagnostic(kind, field_name, detail))

    @property
    def ok(self) -> bool:
        return not self.items

    @property
    def first(self) -> Optional[FieldDiagnostic]:
        return self.items[0] if self.items else None

    def raise_first(self, row_index: Optional[int] = None) -> None:
        if self.items:
            raise self.items[0].to_error(row_index)

    def __len__(self) -> int:
        return len(self.items)


@dataclass(frozen=True)
class ParsedRow:
    """Best-effort bond for a row plus everything that was wrong with it."""

    bond: Bond
    diagnostics: FieldDiagnostics
    row_index: Optional[int] = None

    @property
    def ok(self) -> bool:
        return self.diagnostics.ok

    @property
    def error(self) -> Optional[BondError]:
        first = self.diagnostics.first
        return first.to_error(self.row_index) if first else None


def _parse_fraction(text: str) -> float:
    num, den = text.split("/")
    denominator = int(den)
    if denominator == 0:
        raise BondError(ErrorKind.INVALID_COUPON, field="coupon", detail=f"zero denominator in '{text}'")
    return int(num) / denominator


def parse_coupon_percentage(desc: str) -> float:
    """Parse the coupon rate from a gilt description.

    Accepted forms::

        0 5/8% Treasury Gilt 2025
        2% Treasury Gilt 2025
        4.25% Treasury Gilt 2055
        3½% Treasury Gilt 2025
    """
    match = _COUPON_RE.match(desc or "")
    if match is None:
        raise BondError(ErrorKind.INVALID_COUPON, field="coupon", detail=f"no coupon in '{desc}'")

    token = match.group(1)
    glyph = token[-1]
    if glyph in _GLYPH_FRACTIONS:
        token = token[:-1] + _GLYPH_FRACTIONS[glyph]

    if "/" not in token:
        return float(token)

    parts = token.split()
    if len(parts) == 2:
        return int(parts[0]) + _parse_fraction(parts[1])
    return _parse_fraction(parts[0])


def _parse_number(text: str, kind: ErrorKind, field_name: str) -> float:
    s = (text or "").strip()
    for prefix in _CURRENCY_PREFIXES:
        if s.startswith(prefix):
            s = s[len(prefix):]
            break
    s = s.removesuffix("%").strip()
    try:
        value = float(s)
    except ValueError:
        raise BondError(kind, field=field_name, detail=f"not a number: '{text}'") from None
    if not math.isfinite(value) or value < 0:
        raise BondError(kind, field=field_name, detail=f"out of range: '{text}'")
    return value


def parse_price(text: str, kind: ErrorKind, field_name: str = "price") -> Optional[float]:
    """Parse a price or yield cell. Blank or zero means "not quoted" and reads as ``None``."""
    if not (text or "").strip():
        return None
    value = _parse_number(text, kind, field_name)
    return value if value > 0 else None


def parse_maturity_date(text: str) -> date:
    try:
        return datetime.strptime((text or "").strip(), MATURITY_DATE_FORMAT).date()
    except ValueError:
        raise BondError(
            ErrorKind.INVALID_MATURITY_DATE, field="maturity_date", detail=f"unparsable date '{text}'"
        ) from None


def is_unsupported(desc: str) -> bool:
    lowered = desc.lower()
    return any(marker in lowered for marker in UNSUPPORTED_DESC_MARKERS)


def _try(diagnostics: FieldDiagnostics, fn, *args):
    try:
        return fn(*args)
    except BondError as e:
        diagnostics.record(e.kind, e.field or "", e.detail)
        return None


def parse_row(
    row: Sequence[str],
    settlement_date: Optional[date],
    layout: RowLayout,
    row_index: Optional[int] = None,
) -> ParsedRow:
    """Parse one row into a provisional bond.

    Raises ``BondError(INVALID_ROW)`` for rows that are not data rows and
    ``BondError(UNSUPPORTED_BOND)`` for index-linked instruments. Every other
    problem is recorded in the returned diagnostics while parsing continues.
    """
    if not layout.is_data_row(row):
        raise BondError(ErrorKind.INVALID_ROW, row_index=row_index)

    desc = layout.cell(row, "desc").strip()
    if is_unsupported(desc):
        raise BondError(ErrorKind.UNSUPPORTED_BOND, row_index=row_index, detail=desc)

    diagnostics = FieldDiagnostics()
    bond = new_uk_gilt(layout.source, settlement_date)
    changes = {"desc": desc or None}

    if layout.has("isin"):
        isin = layout.cell(row, "isin").strip()
        if not isin:
            diagnostics.record(ErrorKind.INVALID_ISIN, "isin")
        changes["isin"] = isin or None

    if layout.has("ticker"):
        ticker = layout.cell(row, "ticker").strip()
        if not ticker:
            diagnostics.record(ErrorKind.INVALID_TICKER, "ticker")
        changes["ticker"] = ticker or None

    if not desc:
        diagnostics.record(ErrorKind.INVALID_DESC, "desc")

    if layout.has("coupon"):
        changes["coupon"] = _try(
            diagnostics, _parse_number, layout.cell(row, "coupon"), ErrorKind.INVALID_COUPON, "coupon"
        )
    else:
        changes["coupon"] = _try(diagnostics, parse_coupon_percentage, desc)

    price_fields: Tuple[Tuple[str, ErrorKind], ...] = (
        ("clean_price", ErrorKind.INVALID_CLEAN_PRICE),
        ("dirty_price", ErrorKind.INVALID_DIRTY_PRICE),
        ("yield_to_maturity", ErrorKind.INVALID_YIELD_TO_MATURITY),
    )
    for name, kind in price_fields:
        if layout.has(name):
            changes[name] = _try(diagnostics, parse_price, layout.cell(row, name), kind, name)

    if layout.has("maturity_date"):
        changes["maturity_date"] = _try(diagnostics, parse_maturity_date, layout.cell(row, "maturity_date"))

    bond = replace(bond, **changes)
    if not diagnostics.ok:
        logger.debug(f"Row {row_index}: {len(diagnostics)} field problem(s), first: {diagnostics.first}")
    return ParsedRow(bond=bond, diagnostics=diagnostics, row_index=row_index)
