"""folio.backtest.pricing

Close-price lookup for any calendar day.

Resolution order:
- exact date
- most recent earlier close (carry forward across weekends, holidays, gaps)
- earliest later close, only when nothing earlier exists

A series with at least one point therefore resolves every day. Stale prices
are the cost of a calendar-day series.
"""

from __future__ import annotations

from bisect import bisect_left
from collections.abc import Iterable, Mapping, Sequence
from datetime import date

from folio.backtest.types import PricePoint


class PriceIndex:
    """Read-only, date-sorted view over one asset's closes."""

    __slots__ = ("_dates", "_closes")

    def __init__(self, points: Iterable[PricePoint]):
        # sorted() is stable: for duplicate dates the first occurrence wins
        ordered = sorted(points, key=lambda p: p.date)
        self._dates: list[date] = [p.date for p in ordered]
        self._closes: list[float] = [float(p.close_price) for p in ordered]

    def __len__(self) -> int:
        return len(self._dates)

    @property
    def first_date(self) -> date | None:
        return self._dates[0] if self._dates else None

    @property
    def last_date(self) -> date | None:
        return self._dates[-1] if self._dates else None

    def resolve(self, on: date) -> float | None:
        if not self._dates:
            return None

        i = bisect_left(self._dates, on)
        if i < len(self._dates) and self._dates[i] == on:
            return self._closes[i]
        if i > 0:
            return self._closes[i - 1]
        return self._closes[0]


def build_indexes(prices: Mapping[str, Sequence[PricePoint]], asset_ids: Iterable[str]) -> dict[str, PriceIndex]:
    return {asset_id: PriceIndex(prices.get(asset_id) or ()) for asset_id in asset_ids}


def resolve_price(points: Sequence[PricePoint], on: date) -> float | None:
    """One-off lookup. Build a `PriceIndex` when resolving many days."""

    return PriceIndex(points).resolve(on)
