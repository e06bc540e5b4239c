"""folio.backtest.metrics

Risk/return statistics over a calendar-day value series.

Conventions (kept for output compatibility, not statistical purity):
- annualisation of returns uses a 365-day year and the number of points
- annualisation of volatility uses sqrt(252) on calendar-day returns
- standard deviations are population (ddof=0)
- the first point's daily return is excluded from every daily statistic

Nothing here raises for degenerate input. Empty or flat series give 0s.
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass, field

import numpy as np

from folio.backtest.drawdown import drawdown_periods, max_drawdown
from folio.backtest.periods import month_extreme, monthly_breakdown, yearly_breakdown
from folio.backtest.types import DrawdownPeriod, MonthExtreme, MonthlyReturn, PerformancePoint, YearlyReturn

RISK_FREE_RATE = 0.02
TRADING_DAYS_PER_YEAR = 252
CALENDAR_DAYS_PER_YEAR = 365


@dataclass(frozen=True, slots=True)
class RiskGrade:
    grade: str
    description: str


@dataclass(frozen=True, slots=True)
class Metrics:
    final_value: float
    total_days: int
    total_return: float
    annualized_return: float
    volatility: float
    sharpe_ratio: float
    sortino_ratio: float
    calmar_ratio: float
    max_drawdown: float
    downside_deviation: float
    gain_to_loss_ratio: float
    uptime_percentage: float
    recovery_factor: float
    average_drawdown_duration: float
    max_drawdown_duration: int
    positive_months: int
    negative_months: int
    win_rate: float
    best_month: MonthExtreme
    worst_month: MonthExtreme
    best_year: float | None
    worst_year: float | None
    month_returns: list[float] = field(default_factory=list)
    monthly_returns: list[MonthlyReturn] = field(default_factory=list)
    yearly_returns: list[YearlyReturn] = field(default_factory=list)
    drawdown_periods: list[DrawdownPeriod] = field(default_factory=list)

    @property
    def risk_grade(self) -> RiskGrade:
        return risk_grade(self.sharpe_ratio)


def daily_returns(points: Sequence[PerformancePoint]) -> np.ndarray:
    """Day-over-day returns, first point excluded."""

    return np.array([p.daily_return for p in points[1:]], dtype=np.float64)


def annualized_return(total_return: float, total_days: int, *, days_per_year: int = CALENDAR_DAYS_PER_YEAR) -> float:
    if total_days <= 0:
        return 0.0
    base = 1.0 + total_return
    if base < 0.0:
        return -1.0
    return float(base ** (days_per_year / total_days) - 1.0)


def volatility(returns: np.ndarray, *, periods_per_year: int = TRADING_DAYS_PER_YEAR) -> float:
    r = returns.astype(np.float64)
    if r.size == 0:
        return 0.0
    return float(np.std(r)) * math.sqrt(periods_per_year)


def downside_deviation(returns: np.ndarray, *, periods_per_year: int = TRADING_DAYS_PER_YEAR) -> float:
    """Annualised population std of the negative returns only."""

    neg = returns[returns < 0.0]
    if neg.size == 0:
        return 0.0
    return float(np.std(neg)) * math.sqrt(periods_per_year)


def gain_to_loss_ratio(returns: np.ndarray) -> float:
    gains = returns[returns > 0.0]
    losses = returns[returns < 0.0]
    if losses.size == 0:
        return math.inf if gains.size > 0 else 0.0
    if gains.size == 0:
        return 0.0
    return float(np.mean(gains)) / abs(float(np.mean(losses)))


def _ratio(excess: float, risk: float) -> float:
    if risk == 0.0:
        return 0.0
    return excess / risk


def risk_grade(sharpe: float) -> RiskGrade:
    if sharpe >= 2.0:
        return RiskGrade("A+", "Excellent")
    if sharpe >= 1.5:
        return RiskGrade("A", "Very Good")
    if sharpe >= 1.0:
        return RiskGrade("B+", "Good")
    if sharpe >= 0.5:
        return RiskGrade("B", "Fair")
    if sharpe >= 0.0:
        return RiskGrade("C", "Poor")
    return RiskGrade("D", "Very Poor")


def aggregate(
    points: Sequence[PerformancePoint],
    initial_investment: float,
    *,
    risk_free_rate: float = RISK_FREE_RATE,
    trading_days_per_year: int = TRADING_DAYS_PER_YEAR,
    calendar_days_per_year: int = CALENDAR_DAYS_PER_YEAR,
) -> Metrics:
    total_days = len(points)
    final_value = points[-1].value if points else float(initial_investment)
    total_return = (final_value - initial_investment) / initial_investment
    ann = annualized_return(total_return, total_days, days_per_year=calendar_days_per_year)

    r = daily_returns(points)
    vol = volatility(r, periods_per_year=trading_days_per_year)
    down = downside_deviation(r, periods_per_year=trading_days_per_year)
    mdd = max_drawdown(points)

    periods = drawdown_periods(points)
    durations = [d.duration for d in periods]

    # measured from the first point, which differs from the investment only
    # when some asset had no price on the first day
    first_value = points[0].value if points else 0.0
    series_return = (final_value - first_value) / first_value if first_value else 0.0

    monthly = monthly_breakdown(points)
    yearly = yearly_breakdown(points)
    month_rets = [m.ret for m in monthly[1:]]
    year_rets = [y.ret for y in yearly[1:]]
    positive = sum(1 for x in month_rets if x > 0.0)
    negative = sum(1 for x in month_rets if x < 0.0)

    return Metrics(
        final_value=float(final_value),
        total_days=total_days,
        total_return=float(total_return),
        annualized_return=ann,
        volatility=vol,
        sharpe_ratio=_ratio(ann - risk_free_rate, vol),
        sortino_ratio=_ratio(ann - risk_free_rate, down),
        calmar_ratio=abs(ann / mdd) if mdd != 0.0 else 0.0,
        max_drawdown=mdd,
        downside_deviation=down,
        gain_to_loss_ratio=gain_to_loss_ratio(r),
        uptime_percentage=float(np.count_nonzero(r > 0.0)) / r.size if r.size else 0.0,
        recovery_factor=series_return / mdd if mdd > 0.0 else 0.0,
        average_drawdown_duration=float(np.mean(durations)) if durations else 0.0,
        max_drawdown_duration=max(durations) if durations else 0,
        positive_months=positive,
        negative_months=negative,
        win_rate=positive / len(month_rets) if month_rets else 0.0,
        best_month=month_extreme(points, month_rets, best=True),
        worst_month=month_extreme(points, month_rets, best=False),
        best_year=max(year_rets) if year_rets else None,
        worst_year=min(year_rets) if year_rets else None,
        month_returns=month_rets,
        monthly_returns=monthly,
        yearly_returns=yearly,
        drawdown_periods=periods,
    )
