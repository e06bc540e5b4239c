"""folio.backtest

Portfolio backtest engine.

Normalizer -> Simulator -> Metrics, one direction, no shared state.
"""

from .engine import BacktestResult, run_backtest
from .metrics import Metrics, aggregate
from .normalizer import normalize, renormalize_allocations
from .simulator import simulate
from .types import (
    Allocation,
    BacktestParams,
    DrawdownPeriod,
    MonthlyReturn,
    PerformancePoint,
    PricePoint,
    RebalanceFrequency,
    YearlyReturn,
)

__all__ = [
    "Allocation",
    "BacktestParams",
    "BacktestResult",
    "DrawdownPeriod",
    "Metrics",
    "MonthlyReturn",
    "PerformancePoint",
    "PricePoint",
    "RebalanceFrequency",
    "YearlyReturn",
    "aggregate",
    "normalize",
    "renormalize_allocations",
    "run_backtest",
    "simulate",
]
