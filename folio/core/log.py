"""folio.core.log

Logging setup for the CLI.

Library modules only ever call `logging.getLogger(__name__)` and emit
snake_case event names with `extra=` fields. Handlers are installed here,
once, by whoever owns the process.
"""

from __future__ import annotations

import json
import logging
import sys
from typing import Any

from folio.core.config import LoggingConfig

# Attributes every LogRecord carries; anything else came in through `extra=`.
_RESERVED = frozenset(vars(logging.LogRecord("", 0, "", 0, "", (), None))) | {"message", "asctime"}


def _extras(record: logging.LogRecord) -> dict[str, Any]:
    return {k: v for k, v in vars(record).items() if k not in _RESERVED and not k.startswith("_")}


class JsonFormatter(logging.Formatter):
    """One JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": self.formatTime(record, "%Y-%m-%dT%H:%M:%S"),
            "level": record.levelname,
            "logger": record.name,
            "event": record.getMessage(),
        }
        payload.update(_extras(record))
        if record.exc_info:
            payload["exc"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str, sort_keys=True)


class KeyValueFormatter(logging.Formatter):
    """`LEVEL logger event key=value ...`"""

    def format(self, record: logging.LogRecord) -> str:
        base = f"{record.levelname:<7} {record.name} {record.getMessage()}"
        fields = " ".join(f"{k}={v}" for k, v in sorted(_extras(record).items()))
        line = f"{base} {fields}" if fields else base
        if record.exc_info:
            line = f"{line}\n{self.formatException(record.exc_info)}"
        return line


def configure_logging(cfg: LoggingConfig | None = None) -> logging.Logger:
    cfg = cfg or LoggingConfig()

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(JsonFormatter() if cfg.json_output else KeyValueFormatter())

    root = logging.getLogger()
    for h in list(root.handlers):
        root.removeHandler(h)
    root.addHandler(handler)
    root.setLevel(cfg.level.upper())
    return root
