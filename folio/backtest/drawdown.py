"""folio.backtest.drawdown

Peak-to-trough analysis of a value series.

A drawdown period starts at the peak it is measured from and ends at the
first point that sets a new all-time high. If the series ends below its
peak, the last period stays open.
"""

from __future__ import annotations

from collections.abc import Sequence

import numpy as np

from folio.backtest.types import DrawdownPeriod, PerformancePoint


def max_drawdown(points: Sequence[PerformancePoint]) -> float:
    """Largest `(peak - value) / peak` over the series, as a positive fraction."""

    dd = drawdown_series(points)
    if dd.size == 0:
        return 0.0
    return float(max(dd.max(), 0.0))


def drawdown_series(points: Sequence[PerformancePoint]) -> np.ndarray:
    """Per-point drawdown from the running peak (0 at new highs)."""

    values = np.array([p.value for p in points], dtype=np.float64)
    if values.size == 0:
        return values
    peak = np.maximum.accumulate(values)
    return np.divide(peak - values, peak, out=np.zeros_like(values), where=peak > 0.0)


def drawdown_periods(points: Sequence[PerformancePoint]) -> list[DrawdownPeriod]:
    if not points:
        return []

    periods: list[DrawdownPeriod] = []
    peak = points[0].value
    peak_idx = 0
    in_drawdown = False
    trough = peak

    for i in range(1, len(points)):
        p = points[i]
        if p.value > peak:
            if in_drawdown:
                periods.append(
                    DrawdownPeriod(
                        start_date=points[peak_idx].date,
                        end_date=p.date,
                        peak_value=peak,
                        trough_value=trough,
                        drawdown_percentage=_depth(peak, trough),
                        duration=i - peak_idx,
                        recovered=True,
                        recovery_date=p.date,
                    )
                )
                in_drawdown = False
            peak = p.value
            peak_idx = i
        elif p.value < peak:
            if not in_drawdown:
                in_drawdown = True
                trough = p.value
            elif p.value < trough:
                trough = p.value

    if in_drawdown:
        periods.append(
            DrawdownPeriod(
                start_date=points[peak_idx].date,
                end_date=points[-1].date,
                peak_value=peak,
                trough_value=trough,
                drawdown_percentage=_depth(peak, trough),
                duration=len(points) - peak_idx,
                recovered=False,
            )
        )

    return periods


def _depth(peak: float, trough: float) -> float:
    if peak <= 0.0:
        return 0.0
    return (peak - trough) / peak
