# export.py
# Purpose: Turn a collected batch into pandas frames and write them under the
#          dated output layout (base/YYYY/MM/DD/<source>.csv).

from __future__ import annotations

import logging
import os
from datetime import date
from pathlib import Path
from typing import Iterable, List

import pandas as pd

from core.config import ERROR_COL, ROW_COL, ROW_INDEX_COL, SOURCE_COL
from core.io_lock import to_csv_locked

from .models import Bond, CollectedBatch, RowFailure

__all__ = ["BOND_COLUMNS", "bonds_to_frame", "failures_to_frame", "output_path", "store_to_path"]

logger = logging.getLogger(__name__)

BOND_COLUMNS: List[str] = list(Bond().to_record().keys())

FAILURE_COLUMNS: List[str] = [SOURCE_COL, ROW_INDEX_COL, ERROR_COL, "Field", "Detail", ROW_COL]


def bonds_to_frame(bonds: Iterable[Bond]) -> pd.DataFrame:
    """One row per completed bond, columns in :data:`BOND_COLUMNS` order."""
    records = [b.to_record() for b in bonds]
    df = pd.DataFrame.from_records(records, columns=BOND_COLUMNS)
    for col in ("SettlementDate", "PrevCouponDate", "NextCouponDate", "MaturityDate"):
        df[col] = pd.to_datetime(df[col])
    return df


def failures_to_frame(failures: Iterable[RowFailure], source: str = "") -> pd.DataFrame:
    records = [
        {
            SOURCE_COL: source,
            ROW_INDEX_COL: f.row_index,
            ERROR_COL: f.error.kind.code,
            "Field": f.error.field or "",
            "Detail": f.error.detail or "",
            ROW_COL: "|".join(f.row),
        }
        for f in failures
    ]
    return pd.DataFrame.from_records(records, columns=FAILURE_COLUMNS)


def output_path(base: str | os.PathLike, settlement_date: date, source: str, suffix: str = "csv") -> Path:
    """``base/YYYY/MM/DD/<source>.<suffix>``."""
    return (
        Path(base)
        / f"{settlement_date.year:04d}"
        / f"{settlement_date.month:02d}"
        / f"{settlement_date.day:02d}"
        / f"{source}.{suffix}"
    )


def store_to_path(batch: CollectedBatch, base: str | os.PathLike) -> Path:
    """Write the batch's bonds (and failures, if any) under *base*; returns the bonds path."""
    path = output_path(base, batch.settlement_date, batch.source)
    to_csv_locked(bonds_to_frame(batch.bonds), str(path), index=False)
    logger.info(f"Wrote {len(batch.bonds)} bond(s) to {path}")

    if batch.failures:
        failures_path = output_path(base, batch.settlement_date, batch.source, "failures.csv")
        to_csv_locked(failures_to_frame(batch.failures, batch.source), str(failures_path), index=False)
        logger.info(f"Wrote {len(batch.failures)} failure(s) to {failures_path}")

    return path
