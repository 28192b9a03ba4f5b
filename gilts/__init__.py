"""gilts – UK government bond analytics pipeline.

Raw rows from a published price list go in; complete bond records come out.
The package is split into small stages:

* `sources`     – column layouts of the supported source documents
* `parsing`     – one row -> provisional bond plus field diagnostics
* `schedule`    – previous/next coupon dates and remaining periods
* `pricing`     – clean/dirty price functions and their derivatives
* `solver`      – Newton-Raphson yield solver
* `completion`  – PARSED -> SCHEDULE_DERIVED -> SOLVED -> COMPLETE
* `collector`   – apply the pipeline to a whole document
* `export`      – pandas frames and the dated output layout

Typical use::

    from gilts import collect
    batch = collect(rows, date(2025, 3, 20), "DMO")
"""

from .errors import BondError, ErrorKind
from .models import Bond, BondState, BondType, CollectedBatch, CouponSchedule, RowFailure, new_uk_gilt
from .parsing import parse_row
from .schedule import derive_schedule
from .solver import PriceKind, SolverConfig, price_from_yield, solve_yield
from .completion import complete_bond
from .collector import BondCollector, collect

__all__ = [
    "BondError",
    "ErrorKind",
    "Bond",
    "BondState",
    "BondType",
    "CollectedBatch",
    "CouponSchedule",
    "RowFailure",
    "new_uk_gilt",
    "parse_row",
    "derive_schedule",
    "PriceKind",
    "SolverConfig",
    "price_from_yield",
    "solve_yield",
    "complete_bond",
    "BondCollector",
    "collect",
]
