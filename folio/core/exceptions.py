"""folio.core.exceptions

Errors are part of the interface.

Everything raised here happens before a simulation starts. Once the
calendar walk begins, nothing raises.
"""

from __future__ import annotations


class FolioError(Exception):
    """Base exception for folio."""


class ConfigError(FolioError):
    """Configuration is missing, invalid, or inconsistent."""


class ValidationError(FolioError):
    """Backtest input is malformed or inconsistent."""


class MissingDataError(FolioError):
    """An allocated asset has no price data at all."""

    def __init__(self, asset_id: str, message: str | None = None):
        self.asset_id = asset_id
        super().__init__(message or f"No price data found for asset {asset_id}")


class DataLoadError(FolioError):
    """Price or portfolio file could not be read or parsed."""
