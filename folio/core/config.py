"""folio.core.config

Two config surfaces only:
1) `config/default.yaml` (or any YAML passed to the CLI)
2) Environment variables, `FOLIO_` prefix, `__` for nesting

The engine itself never reads config. The CLI does, then passes plain values.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings

from folio.core.exceptions import ConfigError

RebalanceName = Literal["NEVER", "MONTHLY", "QUARTERLY", "ANNUALLY"]


class BacktestSettings(BaseModel):
    risk_free_rate: float = 0.02
    trading_days_per_year: int = 252
    calendar_days_per_year: int = 365
    allocation_tolerance: float = 0.01
    initial_investment: float = 10000.0
    rebalance_frequency: RebalanceName = "ANNUALLY"

    @field_validator("initial_investment")
    @classmethod
    def investment_must_be_positive(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("initial_investment must be > 0")
        return v

    @field_validator("allocation_tolerance")
    @classmethod
    def tolerance_cannot_be_negative(cls, v: float) -> float:
        if v < 0:
            raise ValueError("allocation_tolerance must be >= 0")
        return v

    @field_validator("trading_days_per_year", "calendar_days_per_year")
    @classmethod
    def year_length_must_be_positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("days per year must be >= 1")
        return v


class LoggingConfig(BaseModel):
    level: str = "INFO"
    json_output: bool = False


class Config(BaseSettings):
    """Root configuration. Single source of truth."""

    data_dir: Path = Path("data/prices")

    backtest: BacktestSettings = Field(default_factory=BacktestSettings)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = {"env_prefix": "FOLIO_", "env_nested_delimiter": "__"}

    @classmethod
    def from_yaml(cls, path: Path) -> Config:
        if not path.exists():
            raise ConfigError(f"Config file not found: {path}")

        try:
            raw = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Config file is not valid YAML: {path}: {e}") from e

        if not isinstance(raw, dict):
            raise ConfigError(f"Config file must contain a mapping: {path}")

        try:
            return cls(**raw)
        except ValidationError as e:
            raise ConfigError(f"Invalid config in {path}: {e}") from e

    @classmethod
    def from_repo_defaults(cls, repo_root: Path | None = None) -> Config:
        root = repo_root or Path.cwd()
        return cls.from_yaml(root / "config" / "default.yaml")
