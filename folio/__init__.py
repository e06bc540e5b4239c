"""folio: historical portfolio backtesting.

Replays daily closes against a target allocation and derives the
risk/return statistics people actually look at before buying an ETF mix.
"""

from __future__ import annotations

__all__ = ["__version__"]

__version__ = "1.0.0"
