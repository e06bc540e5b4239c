"""folio.core

Core primitives.

Nothing in here knows what a portfolio is.
"""

from .config import Config
from .exceptions import ConfigError, DataLoadError, FolioError, MissingDataError, ValidationError
from .time import calendar_days, parse_date

__all__ = [
    "Config",
    "ConfigError",
    "DataLoadError",
    "FolioError",
    "MissingDataError",
    "ValidationError",
    "calendar_days",
    "parse_date",
]
