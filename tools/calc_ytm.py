# Purpose: Single-bond calculator. Given a coupon, maturity and one of clean
# price, dirty price or yield, completes the bond and prints its details.
#
# Usage:
#   python tools/calc_ytm.py --coupon 4.5 --cleanprice 100.9 --maturitydate 2028-06-07

from __future__ import annotations

import argparse
import logging
import os
import sys
from datetime import date, datetime
from typing import List, Optional

# Ensure project root is on sys.path so `gilts` and `core` import when run as a script
_THIS_DIR = os.path.abspath(os.path.dirname(__file__))
_PROJECT_ROOT = os.path.abspath(os.path.join(_THIS_DIR, ".."))
if _PROJECT_ROOT not in sys.path:
    sys.path.insert(0, _PROJECT_ROOT)

from core.config import DEFAULT_FACE_PRICE, SETTLEMENT_DATE_FORMAT  # noqa: E402
from gilts.completion import complete_bond  # noqa: E402
from gilts.errors import BondError  # noqa: E402
from gilts.models import Bond  # noqa: E402

logger = logging.getLogger(__name__)

CLI_SOURCE = "CLI"


def _parse_date(text: str) -> date:
    try:
        return datetime.strptime(text, SETTLEMENT_DATE_FORMAT).date()
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected YYYY-MM-DD, got '{text}'") from None


def _coupon(text: str) -> float:
    try:
        value = float(text)
    except ValueError:
        raise argparse.ArgumentTypeError(f"coupon must be a number, got '{text}'") from None
    if not 0 < value <= 100:
        raise argparse.ArgumentTypeError(f"coupon must be in (0, 100], got {value}")
    return value


def _non_negative(text: str) -> float:
    try:
        value = float(text)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected a number, got '{text}'") from None
    if value < 0:
        raise argparse.ArgumentTypeError(f"must not be negative, got {value}")
    return value


def _build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Calculate yield to maturity or prices for a single gilt")
    parser.add_argument("--coupon", type=_coupon, required=True, help="Annual coupon rate in percent, e.g. 4.5")
    parser.add_argument(
        "--facevalue", type=_non_negative, default=DEFAULT_FACE_PRICE, help="Face value (default: %(default)s)"
    )
    parser.add_argument("--cleanprice", type=_non_negative, default=None, help="Clean price")
    parser.add_argument("--dirtyprice", type=_non_negative, default=None, help="Dirty price")
    parser.add_argument("--ytm", type=_non_negative, default=None, help="Yield to maturity in percent")
    parser.add_argument(
        "--settlementdate", type=_parse_date, default=None, help="Settlement date YYYY-MM-DD (default: today)"
    )
    parser.add_argument("--maturitydate", type=_parse_date, required=True, help="Maturity date YYYY-MM-DD")
    return parser


def _fmt(value: Optional[float], digits: int = 4) -> str:
    return "n/a" if value is None else f"{value:.{digits}f}"


def format_bond_details(bond: Bond) -> str:
    lines = [
        "Bond Details",
        "------------",
        f"Coupon:              {bond.coupon:.3f}%",
        f"Face value:          {bond.face_price:.2f}",
        f"Settlement date:     {bond.settlement_date.isoformat()}",
        f"Maturity date:       {bond.maturity_date.isoformat()}",
        f"Previous coupon:     {bond.prev_coupon_date.isoformat()}",
        f"Next coupon:         {bond.next_coupon_date.isoformat()}",
        f"Accrued days:        {bond.accrued_days} of {bond.coupon_period_days}",
        f"Coupon periods:      {bond.coupon_periods}",
        f"Clean price:         {_fmt(bond.clean_price)}",
        f"Dirty price:         {_fmt(bond.dirty_price)}",
        f"Accrued amount:      {_fmt(bond.accrued_amount)}",
        f"Yield to maturity:   {_fmt(bond.yield_to_maturity)}%",
    ]
    return "\n".join(lines)


def main(argv: Optional[List[str]] = None) -> int:
    args = _build_arg_parser().parse_args(argv)

    bond = Bond(
        source=CLI_SOURCE,
        settlement_date=args.settlementdate or date.today(),
        coupon=args.coupon,
        face_price=args.facevalue,
        maturity_date=args.maturitydate,
        # Zero reads as "not given", as it does for source rows
        clean_price=args.cleanprice or None,
        dirty_price=args.dirtyprice or None,
        yield_to_maturity=args.ytm or None,
    )

    try:
        bond = complete_bond(bond)
    except BondError as e:
        logger.error(f"Could not complete bond: {e}")
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(format_bond_details(bond))
    return 0


if __name__ == "__main__":  # pragma: no cover
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(message)s")
    raise SystemExit(main())
