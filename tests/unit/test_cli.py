from __future__ import annotations

import json
from datetime import date, timedelta
from pathlib import Path

import pytest

from folio.cli import build_parser, main


def _scaffold(tmp_path: Path, *, with_b: bool = True) -> Path:
    prices = tmp_path / "prices"
    prices.mkdir()
    start = date(2024, 1, 1)
    rows_a = ["date,close"] + [f"{start + timedelta(days=i)},{100 + i}" for i in range(60) if i % 7 not in (5, 6)]
    (prices / "A.csv").write_text("\n".join(rows_a) + "\n", encoding="utf-8")
    if with_b:
        rows_b = ["date,close_price"] + [f"{start + timedelta(days=i)},50" for i in range(60)]
        (prices / "B.csv").write_text("\n".join(rows_b) + "\n", encoding="utf-8")

    (tmp_path / "portfolio.yaml").write_text(
        "id: p-cli\nname: CLI test\nallocations:\n  - {asset_id: A, percentage: 60}\n  - {asset_id: B, percentage: 40}\n",
        encoding="utf-8",
    )
    return tmp_path


def _args(root: Path, *extra: str) -> list[str]:
    return [
        "backtest",
        "--portfolio",
        str(root / "portfolio.yaml"),
        "--prices",
        str(root / "prices"),
        "--start",
        "2024-01-01",
        "--end",
        "2024-02-29",
        *extra,
    ]


def test_cli_help_lists_backtest(capsys: pytest.CaptureFixture[str]) -> None:
    rc = main([])
    assert rc == 2
    assert "backtest" in capsys.readouterr().out


def test_cli_version(capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["--version"]) == 0
    assert capsys.readouterr().out.startswith("folio v")


def test_parser_rebalance_choices() -> None:
    args = build_parser().parse_args(
        ["backtest", "--portfolio", "p.yaml", "--start", "2024-01-01", "--end", "2024-02-01", "--rebalance", "MONTHLY"]
    )
    assert args.rebalance == "MONTHLY"
    with pytest.raises(SystemExit):
        build_parser().parse_args(
            ["backtest", "--portfolio", "p.yaml", "--start", "2024-01-01", "--end", "2024-02-01", "--rebalance", "DAILY"]
        )


def test_cli_backtest_json_summary(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    root = _scaffold(tmp_path)
    monkeypatch.chdir(root)

    rc = main(_args(root, "--json", "--investment", "1000", "--rebalance", "MONTHLY"))

    assert rc == 0
    out = json.loads(capsys.readouterr().out)
    assert out["portfolio_id"] == "p-cli"
    assert out["initial_investment"] == 1000.0
    assert out["data_completeness"] == 1.0
    assert out["total_return"] > 0.0
    assert out["final_value"] > 1000.0


def test_cli_backtest_text_summary_and_output_file(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    root = _scaffold(tmp_path)
    monkeypatch.chdir(root)
    out_file = root / "out" / "result.json"

    rc = main(_args(root, "--output", str(out_file)))

    assert rc == 0
    text = capsys.readouterr().out
    assert "folio backtest: p-cli" in text
    assert "max drawdown" in text

    payload = json.loads(out_file.read_text(encoding="utf-8"))
    assert len(payload["performance"]) == 60
    assert payload["rebalance_frequency"] == "ANNUALLY"
    assert payload["performance"][5]["value"] == payload["performance"][4]["value"]  # Saturday


def test_cli_backtest_renormalizes_when_an_asset_has_no_file(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    root = _scaffold(tmp_path, with_b=False)
    monkeypatch.chdir(root)

    rc = main(_args(root, "--json"))

    assert rc == 0
    out = json.loads(capsys.readouterr().out)
    assert out["data_completeness"] == 0.5


def test_cli_backtest_rejects_inverted_dates(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    root = _scaffold(tmp_path)
    monkeypatch.chdir(root)
    args = _args(root)
    args[args.index("--start") + 1] = "2024-03-01"

    assert main(args) == 2
    assert "Start date must be before end date" in capsys.readouterr().err


def test_cli_backtest_rejects_bad_date(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    root = _scaffold(tmp_path)
    monkeypatch.chdir(root)
    args = _args(root)
    args[args.index("--end") + 1] = "not-a-date"

    assert main(args) == 2
    assert "invalid date" in capsys.readouterr().err


def test_cli_backtest_reports_unreadable_portfolio(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    root = _scaffold(tmp_path)
    monkeypatch.chdir(root)
    (root / "portfolio.yaml").write_bytes(b"name: \xff\nallocations:\n  - {asset_id: A, percentage: 100}\n")

    assert main(_args(root)) == 2
    err = capsys.readouterr().err
    assert "Invalid portfolio file" in err
    assert "invalid date" not in err


def test_cli_backtest_output_file_is_strict_json(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    root = _scaffold(tmp_path)
    monkeypatch.chdir(root)
    (root / "portfolio.yaml").write_text("id: up\nallocations:\n  - {asset_id: A, percentage: 100}\n", encoding="utf-8")
    out_file = root / "result.json"

    assert main(_args(root, "--output", str(out_file))) == 0

    def _reject(token: str) -> float:
        raise ValueError(token)

    payload = json.loads(out_file.read_text(encoding="utf-8"), parse_constant=_reject)
    assert payload["gain_to_loss_ratio"] is None


def test_cli_backtest_missing_config(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    root = _scaffold(tmp_path)
    rc = main(["--config", str(root / "missing.yaml"), *_args(root)])
    assert rc == 2
    assert "Config file not found" in capsys.readouterr().err
