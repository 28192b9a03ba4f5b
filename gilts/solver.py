# solver.py
# Purpose: Newton-Raphson yield solver over the clean and dirty price functions,
#          plus the forward (yield → price) path that needs no root-finding.

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import Callable

from core.config import (
    DEFAULT_MAX_ITERATIONS,
    DEFAULT_TOLERANCE,
    DERIVATIVE_FLOOR,
)
from core.settings_loader import get_solver_settings

from . import pricing
from .errors import BondError, ErrorKind

__all__ = [
    "PriceKind",
    "SolverConfig",
    "SolverResult",
    "newton_raphson",
    "solve_yield",
    "price_from_yield",
]

logger = logging.getLogger(__name__)


class PriceKind(Enum):
    CLEAN = "clean"
    DIRTY = "dirty"


_PRICE_FUNCTIONS = {
    PriceKind.CLEAN: (pricing.clean_price, pricing.clean_price_derivative),
    PriceKind.DIRTY: (pricing.dirty_price, pricing.dirty_price_derivative),
}


@dataclass(frozen=True)
class SolverConfig:
    """Convergence policy for Newton-Raphson; supplied by the caller."""

    tolerance: float = DEFAULT_TOLERANCE
    max_iterations: int = DEFAULT_MAX_ITERATIONS
    derivative_floor: float = DERIVATIVE_FLOOR

    def __post_init__(self) -> None:
        if self.tolerance <= 0:
            raise ValueError(f"tolerance must be positive, got {self.tolerance}")
        if self.max_iterations < 1:
            raise ValueError(f"max_iterations must be at least 1, got {self.max_iterations}")

    @classmethod
    def from_settings(cls) -> "SolverConfig":
        """Build from settings.yaml -> solver, falling back to the defaults."""
        s = get_solver_settings()
        return cls(
            tolerance=float(s.get("tolerance", DEFAULT_TOLERANCE)),
            max_iterations=int(s.get("max_iterations", DEFAULT_MAX_ITERATIONS)),
            derivative_floor=float(s.get("derivative_floor", DERIVATIVE_FLOOR)),
        )


@dataclass(frozen=True)
class SolverResult:
    value: float
    iterations: int
    residual: float


def _evaluate(fn: Callable[[float], float], x: float, what: str) -> float:
    """``fn(x)``, with float overflow and non-finite results reported as NO_CONVERGENCE."""
    try:
        value = fn(x)
    except (OverflowError, ZeroDivisionError) as e:
        raise BondError(ErrorKind.NO_CONVERGENCE, detail=f"{what} out of range at x={x}: {e}") from e
    if not math.isfinite(value):
        raise BondError(ErrorKind.NO_CONVERGENCE, detail=f"{what} is {value} at x={x}")
    return value


def newton_raphson(
    f: Callable[[float], float],
    df: Callable[[float], float],
    target: float,
    guess: float,
    config: SolverConfig,
    *,
    domain: Callable[[float], bool] = lambda x: True,
) -> SolverResult:
    """Find ``x`` with ``|f(x) - target| < tolerance``.

    Raises ``BondError(DERIVATIVE_TOO_SMALL)`` when the slope collapses below
    the floor and ``BondError(NO_CONVERGENCE)`` when the iteration budget runs
    out, the iterate leaves *domain*, or the price function overflows.
    """
    x = guess
    residual = math.inf
    for i in range(config.max_iterations):
        if not domain(x) or not math.isfinite(x):
            raise BondError(ErrorKind.NO_CONVERGENCE, detail=f"iterate left the domain at step {i}: {x}")

        residual = _evaluate(f, x, "price") - target
        if abs(residual) < config.tolerance:
            logger.debug(f"Newton-Raphson converged in {i} step(s): x={x:.10f} residual={residual:.3e}")
            return SolverResult(value=x, iterations=i, residual=residual)

        slope = _evaluate(df, x, "slope")
        if not abs(slope) >= config.derivative_floor:
            raise BondError(ErrorKind.DERIVATIVE_TOO_SMALL, detail=f"|f'(x)|={abs(slope):.3e} at x={x}")

        x = x - residual / slope

    raise BondError(
        ErrorKind.NO_CONVERGENCE,
        detail=f"{config.max_iterations} iterations, last residual {residual:.3e}",
    )


def solve_yield(
    kind: PriceKind,
    C: float,
    F: float,
    P: float,
    n: int,
    m: int,
    tn: int,
    tb: int,
    guess: float,
    config: SolverConfig,
) -> float:
    """Yield (percent) that reprices to *P* under the *kind* price function.

    *guess* is a percentage, as returned by
    :func:`gilts.pricing.estimated_yield_to_maturity`.
    """
    price_fn, derivative_fn = _PRICE_FUNCTIONS[kind]

    result = newton_raphson(
        lambda y: price_fn(C, y, F, n, m, tn, tb),
        lambda y: derivative_fn(C, y, F, n, m, tn, tb),
        P,
        guess / 100,
        config,
        domain=lambda y: 1 + y / n > 0,
    )
    return result.value * 100


def price_from_yield(kind: PriceKind, C: float, y: float, F: float, n: int, m: int, tn: int, tb: int) -> float:
    """Forward pricing with *y* in percent."""
    price_fn, _ = _PRICE_FUNCTIONS[kind]
    try:
        price = price_fn(C, y / 100, F, n, m, tn, tb)
    except (OverflowError, ZeroDivisionError) as e:
        raise BondError(ErrorKind.INVALID_YIELD_TO_MATURITY, field="yield_to_maturity", detail=str(e)) from e
    if not math.isfinite(price):
        raise BondError(ErrorKind.INVALID_YIELD_TO_MATURITY, field="yield_to_maturity", detail=f"price is {price}")
    return price
