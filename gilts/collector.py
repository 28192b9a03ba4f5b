# collector.py
# Purpose: Apply parse -> complete to every row of a source document and
#          partition the outcome into completed bonds and row failures.

from __future__ import annotations

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from datetime import date
from typing import Iterable, List, Optional, Sequence, Tuple

from core.settings_loader import get_collection_settings

from .completion import complete_bond
from .errors import BondError, ErrorKind
from .models import Bond, CollectedBatch, RowFailure
from .parsing import parse_row
from .solver import SolverConfig
from .sources import RowLayout, get_layout

__all__ = ["RowOutcome", "BondCollector", "collect"]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RowOutcome:
    """What happened to one row: a bond, a failure, or nothing (skipped / not data)."""

    row_index: int
    bond: Optional[Bond] = None
    failure: Optional[RowFailure] = None
    skipped: bool = False


class _BatchBuilder:
    """Append-only accumulator shared by the workers of one run."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self.bonds: List[Bond] = []
        self.failures: List[RowFailure] = []
        self.skipped = 0

    def add(self, outcome: RowOutcome) -> None:
        with self._lock:
            if outcome.bond is not None:
                self.bonds.append(outcome.bond)
            elif outcome.failure is not None:
                self.failures.append(outcome.failure)
            elif outcome.skipped:
                self.skipped += 1


class BondCollector:
    """Collects bonds from rows already extracted from one source document.

    Parameters
    ----------
    source
        Source identifier (``"DMO"``, ``"DividendData"``); selects the column
        layout unless *layout* is given.
    solver_config
        Newton-Raphson policy; defaults to settings.yaml -> solver.
    workers
        ``1`` processes rows in order on the calling thread. Larger values
        spread rows over a thread pool; bonds and failures may then come back
        in any order.
    """

    def __init__(
        self,
        source: str,
        layout: Optional[RowLayout] = None,
        solver_config: Optional[SolverConfig] = None,
        workers: Optional[int] = None,
    ) -> None:
        self.source = source
        self.layout = layout or get_layout(source)
        self.solver_config = solver_config or SolverConfig.from_settings()
        if workers is None:
            workers = int(get_collection_settings().get("workers", 1))
        if workers < 1:
            raise ValueError(f"workers must be at least 1, got {workers}")
        self.workers = workers

    def process_row(self, row: Sequence[str], row_index: int, settlement_date: date) -> RowOutcome:
        """Parse and complete one row. Never raises for row-level problems."""
        cells: Tuple[str, ...] = tuple("" if c is None else str(c) for c in row)
        try:
            parsed = parse_row(cells, settlement_date, self.layout, row_index)
        except BondError as e:
            if e.kind is ErrorKind.UNSUPPORTED_BOND:
                logger.info(f"Row {row_index}: skipping unsupported bond '{e.detail}'")
                return RowOutcome(row_index, skipped=True)
            # Header, footer and blank rows
            return RowOutcome(row_index)

        if not parsed.ok:
            failure = RowFailure(row_index, cells, parsed.error, parsed.bond)
            logger.warning(f"Row {row_index}: {failure.error}")
            return RowOutcome(row_index, failure=failure)

        try:
            bond = complete_bond(parsed.bond, self.solver_config)
        except BondError as e:
            failure = RowFailure(row_index, cells, e.with_row(row_index), parsed.bond)
            logger.warning(f"Row {row_index} ({parsed.bond.isin or parsed.bond.ticker}): {failure.error}")
            return RowOutcome(row_index, failure=failure)

        return RowOutcome(row_index, bond=bond)

    def collect(self, rows: Iterable[Sequence[str]], settlement_date: date) -> CollectedBatch:
        """Process every row; raise ``BondError(DATA_UNAVAILABLE)`` if none produced a bond.

        DATA_UNAVAILABLE is the only error that comes from the rows themselves.
        ``BondError(MISSING_SETTLEMENT_DATE)`` is raised up front when the caller
        passes no settlement date, before any row is read.
        """
        if settlement_date is None:
            raise BondError(ErrorKind.MISSING_SETTLEMENT_DATE)
        builder = _BatchBuilder()
        indexed = list(enumerate(rows))

        if self.workers == 1:
            for idx, row in indexed:
                builder.add(self.process_row(row, idx, settlement_date))
        else:
            def _work(idx: int, row: Sequence[str]) -> None:
                builder.add(self.process_row(row, idx, settlement_date))

            with ThreadPoolExecutor(max_workers=self.workers) as pool:
                futures = [pool.submit(_work, idx, row) for idx, row in indexed]
                for future in futures:
                    future.result()

        logger.info(
            f"{self.source} {settlement_date.isoformat()}: {len(indexed)} row(s), "
            f"{len(builder.bonds)} bond(s), {len(builder.failures)} failure(s), {builder.skipped} skipped"
        )

        if not builder.bonds:
            raise BondError(
                ErrorKind.DATA_UNAVAILABLE,
                detail=f"no usable bonds from {self.source} for {settlement_date.isoformat()}",
            )

        return CollectedBatch(
            source=self.source,
            settlement_date=settlement_date,
            bonds=tuple(builder.bonds),
            failures=tuple(builder.failures),
            skipped=builder.skipped,
        )


def collect(
    rows: Iterable[Sequence[str]],
    settlement_date: date,
    source: str,
    *,
    solver_config: Optional[SolverConfig] = None,
    workers: Optional[int] = None,
) -> CollectedBatch:
    """One-shot convenience wrapper around :class:`BondCollector`."""
    return BondCollector(source, solver_config=solver_config, workers=workers).collect(rows, settlement_date)
