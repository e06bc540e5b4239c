"""folio.backtest.io

Lightweight IO helpers for backtesting.

CSV schema (one file per asset, `<asset_id>.csv`):
- required: date (ISO), close or close_price
- anything else is ignored

Portfolio YAML:
    id: core-satellite          # optional
    name: Core/Satellite
    rebalance_frequency: QUARTERLY   # optional
    allocations:
      - {asset_id: VWCE, percentage: 80}
      - {asset_id: AGGH, percentage: 20}

Shape is validated here, with pydantic. The engine trusts what it gets.
"""

from __future__ import annotations

import csv
import logging
from collections.abc import Iterable
from pathlib import Path

import yaml
from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError

from folio.backtest.types import Allocation, PricePoint, RebalanceFrequency
from folio.core.exceptions import DataLoadError
from folio.core.time import parse_date

logger = logging.getLogger(__name__)

_CLOSE_COLUMNS = ("close", "close_price", "adjusted_close")


class AllocationIn(BaseModel):
    asset_id: str = Field(min_length=1)
    percentage: float = Field(gt=0.0, le=100.0)


class PortfolioFile(BaseModel):
    id: str = ""
    name: str = ""
    rebalance_frequency: RebalanceFrequency | None = None
    allocations: list[AllocationIn] = Field(min_length=1)

    def to_allocations(self) -> list[Allocation]:
        return [Allocation(asset_id=a.asset_id, percentage=a.percentage) for a in self.allocations]


def load_portfolio(path: str | Path) -> PortfolioFile:
    p = Path(path)
    if not p.exists():
        raise DataLoadError(f"Portfolio file not found: {p}")
    try:
        raw = yaml.safe_load(p.read_text(encoding="utf-8-sig")) or {}
        return PortfolioFile.model_validate(raw)
    except (yaml.YAMLError, PydanticValidationError, UnicodeDecodeError) as e:
        raise DataLoadError(f"Invalid portfolio file {p}: {e}") from e


def load_prices_csv(path: str | Path) -> list[PricePoint]:
    p = Path(path)
    try:
        out = _read_price_rows(p)
    except UnicodeDecodeError as e:
        raise DataLoadError(f"{p}: not valid UTF-8: {e}") from e

    out.sort(key=lambda pt: pt.date)
    return out


def _read_price_rows(p: Path) -> list[PricePoint]:
    with p.open("r", encoding="utf-8-sig", newline="") as f:
        reader = csv.DictReader(f)
        fields = [c.strip() for c in (reader.fieldnames or [])]
        close_col = next((c for c in _CLOSE_COLUMNS if c in fields), None)
        if "date" not in fields or close_col is None:
            raise DataLoadError(f"CSV missing required columns (date, close): {p}")

        out: list[PricePoint] = []
        for lineno, row in enumerate(reader, start=2):
            row = {k.strip(): (v.strip() if isinstance(v, str) else "") for k, v in row.items() if k is not None}
            raw_close = row.get(close_col, "")
            if raw_close == "":
                continue
            try:
                out.append(PricePoint(date=parse_date(row["date"]), close_price=float(raw_close)))
            except ValueError as e:
                raise DataLoadError(f"{p}:{lineno}: {e}") from e
    return out


def load_price_dir(directory: str | Path, asset_ids: Iterable[str]) -> dict[str, list[PricePoint]]:
    """Load `<asset_id>.csv` for each asset. Missing files are skipped with a warning."""

    root = Path(directory)
    out: dict[str, list[PricePoint]] = {}
    for asset_id in asset_ids:
        fp = root / f"{asset_id}.csv"
        if not fp.exists():
            logger.warning("price_file_missing", extra={"asset_id": asset_id, "path": str(fp)})
            continue
        out[asset_id] = load_prices_csv(fp)
    return out
