from __future__ import annotations

import logging
import sys
from collections.abc import Callable, Iterator, Sequence
from datetime import date, timedelta
from pathlib import Path

import pytest

# pytest may run without installing the project; ensure repo root is importable.
REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from folio.backtest.types import PerformancePoint, PricePoint  # noqa: E402


@pytest.fixture(autouse=True)
def _restore_root_logger() -> Iterator[None]:
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture()
def make_series() -> Callable[..., list[PricePoint]]:
    """Consecutive-day closes starting at `start`."""

    def _make(closes: Sequence[float], start: date = date(2024, 1, 1)) -> list[PricePoint]:
        return [PricePoint(date=start + timedelta(days=i), close_price=float(c)) for i, c in enumerate(closes)]

    return _make


@pytest.fixture()
def make_points() -> Callable[..., list[PerformancePoint]]:
    """Performance points for a value path, returns derived the simulator's way."""

    def _make(values: Sequence[float], start: date = date(2024, 1, 1)) -> list[PerformancePoint]:
        out: list[PerformancePoint] = []
        base = float(values[0])
        for i, v in enumerate(values):
            daily = 0.0 if i == 0 else (v - values[i - 1]) / values[i - 1]
            out.append(
                PerformancePoint(
                    date=start + timedelta(days=i),
                    value=float(v),
                    daily_return=daily,
                    cumulative_return=(v - base) / base,
                )
            )
        return out

    return _make
