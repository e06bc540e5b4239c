"""folio.backtest.periods

Calendar month / year breakdowns.

A period's return runs from the last value of the previous period to the
last value of this one. The first period has no previous boundary, so its
return is 0 in the breakdown tables and it is left out of the win/loss
statistics.
"""

from __future__ import annotations

import math
from collections.abc import Callable, Sequence
from typing import Any

from folio.backtest.types import MonthExtreme, MonthlyReturn, PerformancePoint, YearlyReturn


def _group(
    points: Sequence[PerformancePoint], key: Callable[[PerformancePoint], Any]
) -> list[tuple[Any, list[PerformancePoint]]]:
    groups: dict[Any, list[PerformancePoint]] = {}
    for p in points:
        groups.setdefault(key(p), []).append(p)
    return sorted(groups.items(), key=lambda kv: kv[0])


def _change(prev: float, curr: float) -> float:
    if prev == 0.0:
        return 0.0
    return (curr - prev) / prev


def monthly_breakdown(points: Sequence[PerformancePoint]) -> list[MonthlyReturn]:
    out: list[MonthlyReturn] = []
    prev_value: float | None = None
    for (year, month), group in _group(points, lambda p: (p.date.year, p.date.month)):
        last = group[-1].value
        out.append(
            MonthlyReturn(
                year=year,
                month=month,
                ret=0.0 if prev_value is None else _change(prev_value, last),
                value=last,
                days_in_month=len(group),
            )
        )
        prev_value = last
    return out


def yearly_breakdown(points: Sequence[PerformancePoint]) -> list[YearlyReturn]:
    out: list[YearlyReturn] = []
    prev_value: float | None = None
    for year, group in _group(points, lambda p: p.date.year):
        last = group[-1].value
        out.append(
            YearlyReturn(
                year=year,
                ret=0.0 if prev_value is None else _change(prev_value, last),
                value=last,
                days_in_year=len(group),
            )
        )
        prev_value = last
    return out


def month_extreme(points: Sequence[PerformancePoint], month_returns: Sequence[float], *, best: bool) -> MonthExtreme:
    """Best (or worst) month-over-month return with an approximate date.

    The date is the point at `floor(len(points) * (rank + 1) / len(month_returns))`
    where `rank` is the month's position in `month_returns`; it lands near the
    end of that month but is not tied to the calendar. Past the end of the
    series the date is None.
    """

    if not month_returns:
        return MonthExtreme(date=None, ret=0.0)

    target = max(month_returns) if best else min(month_returns)
    rank = list(month_returns).index(target)
    idx = math.floor(len(points) * (rank + 1) / len(month_returns))
    on = points[idx].date if 0 <= idx < len(points) else None
    return MonthExtreme(date=on, ret=target)
