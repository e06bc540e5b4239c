"""folio.backtest.types

Lightweight dataclasses for the engine.

Pydantic models own IO boundaries (see `folio.backtest.io`); these keep the
day-by-day loop lean. Every record is created fresh per run and never
mutated afterwards.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from enum import StrEnum


class RebalanceFrequency(StrEnum):
    NEVER = "NEVER"
    MONTHLY = "MONTHLY"
    QUARTERLY = "QUARTERLY"
    ANNUALLY = "ANNUALLY"

    @property
    def interval_days(self) -> int | None:
        """Fixed day modulus used as the rebalance schedule. None for NEVER."""

        return _INTERVAL_DAYS[self]


_INTERVAL_DAYS: dict[RebalanceFrequency, int | None] = {
    RebalanceFrequency.NEVER: None,
    RebalanceFrequency.MONTHLY: 30,
    RebalanceFrequency.QUARTERLY: 90,
    RebalanceFrequency.ANNUALLY: 365,
}


@dataclass(frozen=True, slots=True)
class Allocation:
    asset_id: str
    percentage: float  # (0, 100]

    @property
    def weight(self) -> float:
        return self.percentage / 100.0


@dataclass(frozen=True, slots=True)
class PricePoint:
    date: date
    close_price: float


@dataclass(frozen=True, slots=True)
class PerformancePoint:
    date: date
    value: float
    daily_return: float
    cumulative_return: float


@dataclass(frozen=True, slots=True)
class DrawdownPeriod:
    start_date: date  # date of the peak the decline is measured from
    end_date: date
    peak_value: float
    trough_value: float
    drawdown_percentage: float
    duration: int  # days
    recovered: bool
    recovery_date: date | None = None


@dataclass(frozen=True, slots=True)
class MonthlyReturn:
    year: int
    month: int
    ret: float
    value: float  # last value in the month
    days_in_month: int  # points observed, not days in the calendar month

    @property
    def label(self) -> str:
        return f"{self.year:04d}-{self.month:02d}"


@dataclass(frozen=True, slots=True)
class YearlyReturn:
    year: int
    ret: float
    value: float
    days_in_year: int


@dataclass(frozen=True, slots=True)
class MonthExtreme:
    """Best or worst month. `date` is approximate, see `periods.month_extreme`."""

    date: date | None
    ret: float


@dataclass(frozen=True, slots=True)
class BacktestParams:
    start_date: date
    end_date: date
    initial_investment: float = 10000.0
    rebalance_frequency: RebalanceFrequency = RebalanceFrequency.ANNUALLY
    portfolio_id: str = ""
