from __future__ import annotations

from pathlib import Path

import pytest

from folio.core.config import Config
from folio.core.exceptions import ConfigError


def test_config_defaults() -> None:
    cfg = Config()
    assert cfg.backtest.risk_free_rate == 0.02
    assert cfg.backtest.initial_investment == 10000.0
    assert cfg.backtest.rebalance_frequency == "ANNUALLY"
    assert cfg.logging.level == "INFO"


def test_repo_default_yaml_loads() -> None:
    repo_root = Path(__file__).resolve().parents[2]
    cfg = Config.from_repo_defaults(repo_root)
    assert cfg.backtest.trading_days_per_year == 252
    assert cfg.backtest.allocation_tolerance == 0.01


def test_config_loads_from_yaml(tmp_path: Path) -> None:
    fp = tmp_path / "c.yaml"
    fp.write_text("backtest:\n  risk_free_rate: 0.035\n  rebalance_frequency: MONTHLY\n", encoding="utf-8")

    cfg = Config.from_yaml(fp)

    assert cfg.backtest.risk_free_rate == 0.035
    assert cfg.backtest.rebalance_frequency == "MONTHLY"
    assert cfg.backtest.calendar_days_per_year == 365


def test_config_env_override(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("FOLIO_BACKTEST__RISK_FREE_RATE", "0.01")
    monkeypatch.setenv("FOLIO_LOGGING__JSON_OUTPUT", "true")
    cfg = Config()
    assert cfg.backtest.risk_free_rate == 0.01
    assert cfg.logging.json_output is True


def test_config_from_yaml_raises_if_missing(tmp_path: Path) -> None:
    with pytest.raises(ConfigError):
        Config.from_yaml(tmp_path / "missing.yaml")


@pytest.mark.parametrize(
    "body",
    [
        "backtest:\n  initial_investment: 0\n",
        "backtest:\n  allocation_tolerance: -1\n",
        "backtest:\n  rebalance_frequency: WEEKLY\n",
        "- just\n- a list\n",
    ],
)
def test_config_from_yaml_rejects_invalid(tmp_path: Path, body: str) -> None:
    fp = tmp_path / "c.yaml"
    fp.write_text(body, encoding="utf-8")
    with pytest.raises(ConfigError):
        Config.from_yaml(fp)
