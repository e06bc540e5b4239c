"""folio.cli

Command line interface entry point for folio.

Design constraints:
- argparse-based.
- Lazy imports: do not import numpy or pydantic at parse time.
"""

from __future__ import annotations

import argparse
import json
import sys
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

EPILOG = "Past performance is a replay, not a forecast."

REBALANCE_CHOICES = ["NEVER", "MONTHLY", "QUARTERLY", "ANNUALLY"]


@dataclass(frozen=True)
class CliContext:
    repo_root: Path


def _repo_root_from_cwd() -> Path:
    return Path.cwd()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="folio",
        description="Backtest a target-weight portfolio against historical daily closes.",
        epilog=EPILOG,
    )
    parser.add_argument(
        "--version",
        action="store_true",
        help="Print version and exit.",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Config YAML (default: config/default.yaml if present).",
    )

    sub = parser.add_subparsers(dest="command")

    p_bt = sub.add_parser("backtest", help="Run one backtest and print its metrics")
    p_bt.add_argument("--portfolio", required=True, help="Portfolio YAML file.")
    p_bt.add_argument("--prices", default=None, help="Directory of <asset_id>.csv files (default: data_dir).")
    p_bt.add_argument("--start", required=True, help="Start date, YYYY-MM-DD.")
    p_bt.add_argument("--end", required=True, help="End date, YYYY-MM-DD.")
    p_bt.add_argument("--investment", type=float, default=None, help="Initial investment.")
    p_bt.add_argument("--rebalance", choices=REBALANCE_CHOICES, default=None)
    p_bt.add_argument("--json", action="store_true", help="Print the summary as JSON.")
    p_bt.add_argument("--output", default=None, help="Write the full result (incl. daily series) as JSON.")

    return parser


def _print_version() -> None:
    from folio import __version__

    print(f"folio v{__version__}")


def _load_config(ctx: CliContext, args: argparse.Namespace):
    from folio.core.config import Config

    if args.config:
        return Config.from_yaml(Path(args.config))
    default = ctx.repo_root / "config" / "default.yaml"
    return Config.from_yaml(default) if default.exists() else Config()


def _cmd_backtest(ctx: CliContext, args: argparse.Namespace) -> int:
    # Lazy imports
    from folio.backtest.engine import run_backtest
    from folio.backtest.io import load_portfolio, load_price_dir
    from folio.backtest.normalizer import renormalize_allocations
    from folio.backtest.types import BacktestParams, RebalanceFrequency
    from folio.core.exceptions import FolioError
    from folio.core.log import configure_logging
    from folio.core.time import parse_date

    try:
        config = _load_config(ctx, args)
    except FolioError as e:
        print(f"error: {e}", file=sys.stderr)
        return 2

    try:
        start_date = parse_date(args.start)
        end_date = parse_date(args.end)
    except ValueError as e:
        print(f"error: invalid date: {e}", file=sys.stderr)
        return 2

    configure_logging(config.logging)
    bt = config.backtest

    try:
        portfolio = load_portfolio(args.portfolio)
        allocations = portfolio.to_allocations()

        prices_dir = Path(args.prices) if args.prices else config.data_dir
        prices = load_price_dir(prices_dir, (a.asset_id for a in allocations))
        usable = renormalize_allocations(allocations, prices)

        frequency = args.rebalance or portfolio.rebalance_frequency or bt.rebalance_frequency
        params = BacktestParams(
            start_date=start_date,
            end_date=end_date,
            initial_investment=args.investment if args.investment is not None else bt.initial_investment,
            rebalance_frequency=RebalanceFrequency(frequency),
            portfolio_id=portfolio.id or portfolio.name or Path(args.portfolio).stem,
        )
        result = run_backtest(
            usable,
            prices,
            params,
            risk_free_rate=bt.risk_free_rate,
            trading_days_per_year=bt.trading_days_per_year,
            calendar_days_per_year=bt.calendar_days_per_year,
            tolerance=bt.allocation_tolerance,
        )
    except FolioError as e:
        print(f"error: {e}", file=sys.stderr)
        return 2

    completeness = len(usable) / len(allocations)

    if args.output:
        out_path = Path(args.output)
        out_path.parent.mkdir(parents=True, exist_ok=True)
        payload = result.to_dict()
        payload["data_completeness"] = completeness
        out_path.write_text(json.dumps(payload, indent=2, allow_nan=False), encoding="utf-8")

    summary = result.summary_row()
    summary["final_value"] = result.final_value
    summary["data_completeness"] = completeness

    if args.json:
        print(json.dumps(summary, indent=2))
        return 0

    m = result.metrics
    grade = m.risk_grade
    print(f"folio backtest: {params.portfolio_id}")
    print(f"- period: {params.start_date} .. {params.end_date} ({m.total_days} days)")
    print(f"- rebalance: {params.rebalance_frequency}")
    print(f"- assets: {len(usable)}/{len(allocations)} with data")
    print(f"- initial: {params.initial_investment:,.2f}")
    print(f"- final: {m.final_value:,.2f}")
    print(f"- total return: {m.total_return:.2%}")
    print(f"- annualized return: {m.annualized_return:.2%}")
    print(f"- volatility: {m.volatility:.2%}")
    print(f"- sharpe: {m.sharpe_ratio:.2f} ({grade.grade} {grade.description})")
    print(f"- sortino: {m.sortino_ratio:.2f}")
    print(f"- calmar: {m.calmar_ratio:.2f}")
    print(f"- max drawdown: {m.max_drawdown:.2%}")
    print(f"- win rate: {m.win_rate:.2%} ({m.positive_months} up / {m.negative_months} down)")
    if m.best_month.date is not None:
        print(f"- best month: {m.best_month.ret:.2%} (~{m.best_month.date})")
    if m.worst_month.date is not None:
        print(f"- worst month: {m.worst_month.ret:.2%} (~{m.worst_month.date})")
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.version:
        _print_version()
        return 0

    if not args.command:
        parser.print_help()
        return 2

    ctx = CliContext(repo_root=_repo_root_from_cwd())

    dispatch: dict[str, Callable[[CliContext, argparse.Namespace], int]] = {
        "backtest": _cmd_backtest,
    }

    fn = dispatch.get(str(args.command))
    if fn is None:
        print(f"Unknown command: {args.command}", file=sys.stderr)
        return 2

    return int(fn(ctx, args))


if __name__ == "__main__":
    raise SystemExit(main())
