"""folio.backtest.normalizer

Input checks that run once, before the calendar walk.

Weights are checked here and nowhere else: between rebalances they drift on
purpose.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass

from folio.backtest.types import Allocation, BacktestParams, PricePoint
from folio.core.exceptions import MissingDataError, ValidationError

logger = logging.getLogger(__name__)

ALLOCATION_TOLERANCE = 0.01  # percentage points


@dataclass(frozen=True, slots=True)
class NormalizedInput:
    allocations: tuple[Allocation, ...]
    prices: Mapping[str, Sequence[PricePoint]]
    params: BacktestParams


def normalize(
    allocations: Sequence[Allocation],
    prices: Mapping[str, Sequence[PricePoint]],
    params: BacktestParams,
    *,
    tolerance: float = ALLOCATION_TOLERANCE,
) -> NormalizedInput:
    """Validate a backtest request.

    Raises:
        ValidationError: empty allocations, a duplicated asset, a weight
            outside (0, 100], weights not summing to 100 (within
            `tolerance`), non-positive investment, or `start_date >= end_date`.
        MissingDataError: an allocated asset has no price series or an
            empty one.
    """

    if not allocations:
        raise ValidationError("Portfolio must have at least one allocation")

    seen: set[str] = set()
    for a in allocations:
        if a.asset_id in seen:
            raise ValidationError(f"Asset {a.asset_id} is allocated more than once")
        seen.add(a.asset_id)
        if not 0.0 < a.percentage <= 100.0:
            raise ValidationError(f"Allocation for {a.asset_id} must be in (0, 100], got {a.percentage}")

    total = sum(float(a.percentage) for a in allocations)
    if abs(total - 100.0) > tolerance:
        raise ValidationError(f"Portfolio allocations must sum to 100%, got {total}")

    if params.initial_investment <= 0:
        raise ValidationError("Initial investment must be greater than 0")

    if params.start_date >= params.end_date:
        raise ValidationError("Start date must be before end date")

    for a in allocations:
        series = prices.get(a.asset_id)
        if not series:
            raise MissingDataError(a.asset_id)

    return NormalizedInput(allocations=tuple(allocations), prices=prices, params=params)


def renormalize_allocations(
    allocations: Sequence[Allocation],
    prices: Mapping[str, Sequence[PricePoint]],
) -> list[Allocation]:
    """Drop assets without price data and rescale the rest to 100%.

    This is the caller's job, not the engine's: `normalize` never drops an
    asset on its own.

    Raises:
        MissingDataError: no allocated asset has any price data.
    """

    available = [a for a in allocations if prices.get(a.asset_id)]
    if not available:
        asset_id = allocations[0].asset_id if allocations else ""
        raise MissingDataError(asset_id, "No price data available for any assets in the selected date range")

    if len(available) < len(allocations):
        logger.warning(
            "allocations_renormalized",
            extra={
                "assets_with_data": len(available),
                "total_assets": len(allocations),
                "dropped": [a.asset_id for a in allocations if a not in available],
            },
        )

    total = sum(float(a.percentage) for a in available)
    if total <= 0:
        raise ValidationError("Allocations with price data carry no weight")
    return [Allocation(asset_id=a.asset_id, percentage=(a.percentage / total) * 100.0) for a in available]
