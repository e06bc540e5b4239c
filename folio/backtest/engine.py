"""folio.backtest.engine

Backtest entry point.

One call, one pure pipeline:
- normalizer checks the request
- simulator walks the calendar and values the holdings
- metrics turns the value series into statistics

No state survives the call. Persisting or serving the result is the
caller's business; `to_dict` and `summary_row` exist for that.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Mapping, Sequence
from dataclasses import asdict, dataclass
from datetime import date
from enum import Enum
from typing import Any

from folio.backtest.metrics import (
    CALENDAR_DAYS_PER_YEAR,
    RISK_FREE_RATE,
    TRADING_DAYS_PER_YEAR,
    Metrics,
    aggregate,
)
from folio.backtest.normalizer import ALLOCATION_TOLERANCE, normalize
from folio.backtest.simulator import simulate
from folio.backtest.types import Allocation, BacktestParams, PerformancePoint, PricePoint

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class BacktestResult:
    params: BacktestParams
    allocations: tuple[Allocation, ...]
    performance: list[PerformancePoint]
    metrics: Metrics

    @property
    def final_value(self) -> float:
        return self.metrics.final_value

    def to_dict(self) -> dict[str, Any]:
        """JSON-ready dict. Dates become ISO strings; infinities stay floats."""

        m = self.metrics
        out: dict[str, Any] = {
            "portfolio_id": self.params.portfolio_id,
            "start_date": self.params.start_date.isoformat(),
            "end_date": self.params.end_date.isoformat(),
            "initial_investment": self.params.initial_investment,
            "rebalance_frequency": str(self.params.rebalance_frequency),
            "allocations": [_plain(a) for a in self.allocations],
        }
        out.update(_plain(m))
        out["risk_grade"] = _plain(m.risk_grade)
        out["performance"] = [_plain(p) for p in self.performance]
        return out

    def summary_row(self) -> dict[str, Any]:
        """Flat record for the backtest history table."""

        m = self.metrics
        return {
            "portfolio_id": self.params.portfolio_id,
            "start_date": self.params.start_date.isoformat(),
            "end_date": self.params.end_date.isoformat(),
            "initial_investment": self.params.initial_investment,
            "total_return": m.total_return,
            "annualized_return": m.annualized_return,
            "volatility": m.volatility,
            "sharpe_ratio": m.sharpe_ratio,
            "max_drawdown": m.max_drawdown,
            "best_year": m.best_year,
            "worst_year": m.worst_year,
            "positive_months": m.positive_months,
            "negative_months": m.negative_months,
        }


def _plain(obj: Any) -> Any:
    if hasattr(obj, "__dataclass_fields__"):
        return _plain(asdict(obj))
    if isinstance(obj, dict):
        return {k: _plain(v) for k, v in obj.items()}
    if isinstance(obj, list | tuple):
        return [_plain(v) for v in obj]
    if isinstance(obj, date):
        return obj.isoformat()
    if isinstance(obj, Enum):
        return obj.value
    if isinstance(obj, float) and not math.isfinite(obj):
        return None
    return obj


def run_backtest(
    allocations: Sequence[Allocation],
    prices: Mapping[str, Sequence[PricePoint]],
    params: BacktestParams,
    *,
    risk_free_rate: float = RISK_FREE_RATE,
    trading_days_per_year: int = TRADING_DAYS_PER_YEAR,
    calendar_days_per_year: int = CALENDAR_DAYS_PER_YEAR,
    tolerance: float = ALLOCATION_TOLERANCE,
) -> BacktestResult:
    """Validate, simulate, aggregate.

    Raises:
        ValidationError: malformed request.
        MissingDataError: an allocated asset has no prices.
    """

    req = normalize(allocations, prices, params, tolerance=tolerance)
    p = req.params

    logger.info(
        "backtest_started",
        extra={
            "portfolio_id": p.portfolio_id,
            "start_date": p.start_date.isoformat(),
            "end_date": p.end_date.isoformat(),
            "assets": len(req.allocations),
            "rebalance_frequency": str(p.rebalance_frequency),
        },
    )

    points = simulate(
        allocations=req.allocations,
        prices=req.prices,
        start=p.start_date,
        end=p.end_date,
        initial_investment=p.initial_investment,
        rebalance_frequency=p.rebalance_frequency,
    )
    metrics = aggregate(
        points,
        p.initial_investment,
        risk_free_rate=risk_free_rate,
        trading_days_per_year=trading_days_per_year,
        calendar_days_per_year=calendar_days_per_year,
    )

    logger.info(
        "backtest_finished",
        extra={
            "portfolio_id": p.portfolio_id,
            "total_days": metrics.total_days,
            "final_value": metrics.final_value,
            "total_return": metrics.total_return,
        },
    )
    return BacktestResult(params=p, allocations=req.allocations, performance=points, metrics=metrics)
