# sources.py
# Purpose: Column layouts of the supported source documents and the rules that
#          tell data rows apart from header/footer rows.

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Dict, Optional, Sequence

from core.config import (
    GILT_ISIN_PREFIX,
    SOURCE_DIVIDEND_DATA,
    SOURCE_DMO,
    SOURCE_LAYOUTS,
)
from core.settings_loader import get_source_layouts

from .errors import BondError, ErrorKind

__all__ = ["RowLayout", "get_layout", "dmo_layout", "dividend_data_layout", "check_source_date"]

logger = logging.getLogger(__name__)

FIELDS = (
    "isin",
    "ticker",
    "desc",
    "coupon",
    "clean_price",
    "dirty_price",
    "yield_to_maturity",
    "maturity_date",
)


@dataclass(frozen=True)
class RowLayout:
    """Where each field lives in a source row.

    ``columns`` maps field name to cell index; fields without a column are not
    supplied by the source (e.g. DMO encodes the coupon in the description).
    """

    source: str
    columns: Dict[str, int] = field(default_factory=dict)
    identity_field: str = "isin"
    identity_prefix: Optional[str] = None
    min_cells: int = 1

    def has(self, name: str) -> bool:
        return name in self.columns

    def cell(self, row: Sequence[str], name: str) -> str:
        """Raw text of field *name*; missing cells read as empty."""
        idx = self.columns.get(name)
        if idx is None or idx >= len(row) or row[idx] is None:
            return ""
        return str(row[idx])

    def is_data_row(self, row: Sequence[str]) -> bool:
        if not row or len(row) < self.min_cells:
            return False
        if self.identity_prefix is None:
            return True
        return self.cell(row, self.identity_field).strip().startswith(self.identity_prefix)


def _build_layout(source: str, columns: Dict[str, int]) -> RowLayout:
    unknown = set(columns) - set(FIELDS)
    if unknown:
        raise ValueError(f"Unknown fields in layout for {source}: {sorted(unknown)}")
    cols = {k: int(v) for k, v in columns.items()}
    if "isin" in cols:
        # ISIN-keyed sources (DMO) mark data rows with the GB prefix
        return RowLayout(
            source=source,
            columns=cols,
            identity_field="isin",
            identity_prefix=GILT_ISIN_PREFIX,
            min_cells=1,
        )
    return RowLayout(
        source=source,
        columns=cols,
        identity_field="ticker",
        identity_prefix=None,
        min_cells=max(cols.values()) + 1,
    )


def get_layout(source: str) -> RowLayout:
    """Return the layout for *source*, applying settings.yaml overrides."""
    if source not in SOURCE_LAYOUTS:
        raise KeyError(f"Unknown source: {source}")
    columns = dict(SOURCE_LAYOUTS[source])
    overrides = get_source_layouts().get(source)
    if overrides:
        logger.debug(f"Applying column overrides for {source}: {overrides}")
        columns = dict(overrides)
    return _build_layout(source, columns)


def dmo_layout() -> RowLayout:
    return get_layout(SOURCE_DMO)


def dividend_data_layout() -> RowLayout:
    return get_layout(SOURCE_DIVIDEND_DATA)


def check_source_date(published: Optional[date], settlement_date: date) -> None:
    """Ensure a source's own publication date matches the batch settlement date.

    Sources that stamp their page ("Last updated: ...") may not have refreshed
    yet; stale data is reported as unavailable rather than mislabelled.
    """
    if published is None:
        raise BondError(ErrorKind.MISSING_SETTLEMENT_DATE)
    if published != settlement_date:
        raise BondError(
            ErrorKind.DATA_UNAVAILABLE,
            detail=f"source published {published.isoformat()}, wanted {settlement_date.isoformat()}",
        )
