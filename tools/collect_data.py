# Purpose: Collect one day of gilt prices from a source document that has
# already been downloaded and flattened into rows (CSV or .xlsx, no header),
# then write the completed bonds under <destination>/YYYY/MM/DD/<source>.csv.
#
# Usage:
#   python tools/collect_data.py rows.csv Data --source DMO --settlement-date 2025-03-20

from __future__ import annotations

import argparse
import logging
import logging.config
import os
import sys
from datetime import date, datetime
from typing import List, Optional

# Ensure project root is on sys.path so `gilts` and `core` import when run as a script
_THIS_DIR = os.path.abspath(os.path.dirname(__file__))
_PROJECT_ROOT = os.path.abspath(os.path.join(_THIS_DIR, ".."))
if _PROJECT_ROOT not in sys.path:
    sys.path.insert(0, _PROJECT_ROOT)

from core.config import (  # noqa: E402
    DATED_SOURCES,
    LOG_DIR,
    LOGGING_CONFIG,
    SETTLEMENT_DATE_FORMAT,
    SOURCE_DMO,
    SOURCE_LAYOUTS,
)
from core.data_utils import read_rows_robustly  # noqa: E402
from core.settings_loader import get_app_config, get_collection_settings  # noqa: E402
from gilts.collector import BondCollector  # noqa: E402
from gilts.errors import BondError, ErrorKind  # noqa: E402
from gilts.export import store_to_path  # noqa: E402
from gilts.sources import check_source_date  # noqa: E402

logger = logging.getLogger(__name__)


def _parse_date(text: str) -> date:
    try:
        return datetime.strptime(text, SETTLEMENT_DATE_FORMAT).date()
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected YYYY-MM-DD, got '{text}'") from None


def _build_arg_parser() -> argparse.ArgumentParser:
    collection = get_collection_settings()
    parser = argparse.ArgumentParser(description="Collect gilt prices from a source document into a dated output tree")
    parser.add_argument("rows", help="Path to the source rows (.csv or .xlsx, no header row)")
    parser.add_argument(
        "destination",
        nargs="?",
        default=None,
        help="Output base directory (default: settings.yaml app_config.data_folder)",
    )
    parser.add_argument(
        "--source",
        choices=sorted(SOURCE_LAYOUTS),
        default=collection.get("source", SOURCE_DMO),
        help="Source the rows were taken from (default: %(default)s)",
    )
    parser.add_argument(
        "--settlement-date",
        type=_parse_date,
        default=None,
        help="Settlement date YYYY-MM-DD (default: today)",
    )
    parser.add_argument(
        "--published-date",
        type=_parse_date,
        default=None,
        help="Date the source says it was last updated; required for sources that stamp one",
    )
    parser.add_argument("--workers", type=int, default=None, help="Worker threads (default: settings.yaml)")
    return parser


def _setup_logging() -> None:
    os.makedirs(LOG_DIR, exist_ok=True)
    logging.config.dictConfig(LOGGING_CONFIG)


def main(argv: Optional[List[str]] = None) -> int:
    args = _build_arg_parser().parse_args(argv)

    settlement_date = args.settlement_date or date.today()
    destination = args.destination or get_app_config().get("data_folder") or "Data"
    if not os.path.isabs(destination):
        destination = os.path.join(os.getcwd(), destination)

    logger.info(f"Collecting {args.source} for {settlement_date.isoformat()} from {args.rows}")

    rows = read_rows_robustly(args.rows)
    if rows is None:
        logger.error(f"Could not read rows from {args.rows}")
        return 1

    try:
        if args.source in DATED_SOURCES:
            check_source_date(args.published_date, settlement_date)
        collector = BondCollector(args.source, workers=args.workers)
        batch = collector.collect(rows, settlement_date)
        path = store_to_path(batch, destination)
    except BondError as e:
        if e.kind is ErrorKind.DATA_UNAVAILABLE:
            logger.error(f"Data unavailable: {e}")
        else:
            logger.error(f"Collection failed: {e}")
        return 1
    except Exception as e:
        logger.error(f"Unexpected error collecting {args.source}: {e}", exc_info=True)
        return 1

    if batch.failures:
        logger.warning(f"{len(batch.failures)} row(s) not collected, details in {path.with_suffix('.failures.csv')}")

    print(path)
    return 0


if __name__ == "__main__":  # pragma: no cover
    _setup_logging()
    raise SystemExit(main())
