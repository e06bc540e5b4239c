"""folio.backtest.simulator

Daily valuation over calendar days.

Intentionally simple:
- buy target weights on the first day at the resolved close
- hold share counts, let weights drift
- on a fixed day modulus, sell everything and rebuy target weights
- value every calendar day, weekends included, at carried-forward closes

No transaction costs, no taxes, no fractional-share limits, no cash drag.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from datetime import date

from folio.backtest.pricing import PriceIndex, build_indexes
from folio.backtest.types import Allocation, PerformancePoint, PricePoint, RebalanceFrequency
from folio.core.time import calendar_days, days_between

logger = logging.getLogger(__name__)

Holdings = dict[str, float]


@dataclass(frozen=True, slots=True)
class RebalanceEvent:
    date: date
    offset: int  # days since start
    value: float  # portfolio value just before rebalancing
    shares: dict[str, float] = field(default_factory=dict)  # holdings right after


@dataclass(frozen=True, slots=True)
class SimResult:
    points: list[PerformancePoint]
    initial_shares: dict[str, float]
    rebalances: list[RebalanceEvent]


def date_range(start: date, end: date) -> list[date]:
    return calendar_days(start, end)


def should_rebalance(current: date, start: date, frequency: RebalanceFrequency | str) -> bool:
    """Fixed-modulus schedule: every 30/90/365 days from `start`.

    Not calendar month/quarter/year boundaries. Day 0 matches; the caller
    skips it.
    """

    interval = RebalanceFrequency(frequency).interval_days
    if interval is None:
        return False
    return days_between(start, current) % interval == 0


def _price(index: PriceIndex | None, on: date) -> float | None:
    if index is None:
        return None
    p = index.resolve(on)
    if p is None or p <= 0.0:
        return None
    return p


def initial_shares(
    allocations: Sequence[Allocation],
    indexes: Mapping[str, PriceIndex],
    initial_investment: float,
    on: date,
) -> Holdings:
    shares: Holdings = {}
    for a in allocations:
        price = _price(indexes.get(a.asset_id), on)
        if price is None:
            # contributes nothing until a rebalance finds a price
            logger.warning("initial_price_missing", extra={"asset_id": a.asset_id, "date": on.isoformat()})
            continue
        amount = a.weight * initial_investment
        shares[a.asset_id] = amount / price
        logger.debug(
            "initial_purchase",
            extra={"asset_id": a.asset_id, "amount": amount, "price": price, "shares": shares[a.asset_id]},
        )
    return shares


def portfolio_value(shares: Mapping[str, float], indexes: Mapping[str, PriceIndex], on: date) -> float:
    total = 0.0
    for asset_id, count in shares.items():
        price = _price(indexes.get(asset_id), on)
        if price is not None:
            total += count * price
    return total


def rebalance_shares(
    allocations: Sequence[Allocation],
    indexes: Mapping[str, PriceIndex],
    value: float,
    shares: Holdings,
    on: date,
) -> None:
    """Reset `shares` in place to target weights of `value` at today's closes.

    Assets without a resolvable price keep their current count.
    """

    for a in allocations:
        price = _price(indexes.get(a.asset_id), on)
        if price is not None:
            shares[a.asset_id] = (a.weight * value) / price


def run_simulation(
    *,
    allocations: Sequence[Allocation],
    prices: Mapping[str, Sequence[PricePoint]],
    start: date,
    end: date,
    initial_investment: float,
    rebalance_frequency: RebalanceFrequency | str = RebalanceFrequency.NEVER,
) -> SimResult:
    frequency = RebalanceFrequency(rebalance_frequency)
    dates = date_range(start, end)
    if not dates:
        return SimResult(points=[], initial_shares={}, rebalances=[])

    indexes = build_indexes(prices, (a.asset_id for a in allocations))
    shares = initial_shares(allocations, indexes, initial_investment, dates[0])
    opening = dict(shares)

    points: list[PerformancePoint] = []
    rebalances: list[RebalanceEvent] = []
    previous = float(initial_investment)

    for i, day in enumerate(dates):
        if i > 0 and should_rebalance(day, dates[0], frequency):
            before = portfolio_value(shares, indexes, day)
            rebalance_shares(allocations, indexes, before, shares, day)
            rebalances.append(RebalanceEvent(date=day, offset=i, value=before, shares=dict(shares)))
            logger.debug("rebalance", extra={"date": day.isoformat(), "offset": i, "value": before})

        value = portfolio_value(shares, indexes, day)

        if i == 0 or previous == 0.0:
            daily = 0.0
        else:
            daily = (value - previous) / previous
        cumulative = (value - initial_investment) / initial_investment

        points.append(PerformancePoint(date=day, value=value, daily_return=daily, cumulative_return=cumulative))
        previous = value

    return SimResult(points=points, initial_shares=opening, rebalances=rebalances)


def simulate(
    *,
    allocations: Sequence[Allocation],
    prices: Mapping[str, Sequence[PricePoint]],
    start: date,
    end: date,
    initial_investment: float,
    rebalance_frequency: RebalanceFrequency | str = RebalanceFrequency.NEVER,
) -> list[PerformancePoint]:
    return run_simulation(
        allocations=allocations,
        prices=prices,
        start=start,
        end=end,
        initial_investment=initial_investment,
        rebalance_frequency=rebalance_frequency,
    ).points
