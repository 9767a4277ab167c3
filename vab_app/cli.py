"""Command line entry point for running backtests and listing symbols."""

import argparse
import sys
from typing import Any, Optional

import orjson

from .engine import BacktestEngine
from .errors import FetchError, InvalidInputError
from .logging.config import configure_logging
from .sources.binance import BinanceBarSource


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="vab",
        description="Backtest the value area re-entry signal on Binance spot pairs"
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        type=str.upper,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Logging level (default: WARNING)"
    )
    parser.add_argument("--log-json", action="store_true", help="Emit logs as JSON")

    subparsers = parser.add_subparsers(dest="command", required=True)

    run = subparsers.add_parser("run", help="Run a backtest and print the report as JSON")
    run.add_argument("symbols", nargs="+", help="Trading pairs, e.g. BTCUSDT ETHUSDT")
    run.add_argument("--start", required=True, help="First day (YYYY-MM-DD)")
    run.add_argument("--end", required=True, help="Last day (YYYY-MM-DD)")
    run.add_argument("--target-fraction", type=float, help="Value area volume share in (0, 1]")
    run.add_argument("--price-precision", type=int, help="Decimal places for price buckets")
    run.add_argument(
        "--entry-policy",
        choices=["reentry_cross", "consecutive_closes"],
        help="Entry detection rule"
    )
    run.add_argument("--workers", type=int, help="Concurrent cells (requests stay globally paced)")
    run.add_argument("--config-dir", help="Directory containing symbols.yaml")
    run.add_argument("--summary-only", action="store_true", help="Print only per-symbol statistics")

    symbols = subparsers.add_parser("symbols", help="List tradable symbols")
    symbols.add_argument("--quote", default="USDT", help="Quote asset (default: USDT)")

    return parser


def overrides_from_args(args: argparse.Namespace) -> dict[str, Any]:
    """Translate CLI flags into per-run configuration overrides."""
    overrides: dict[str, Any] = {}
    if args.target_fraction is not None:
        overrides.setdefault("value_area", {})["target_fraction"] = args.target_fraction
    if args.price_precision is not None:
        overrides.setdefault("value_area", {})["price_precision"] = args.price_precision
    if args.entry_policy is not None:
        overrides.setdefault("signal", {})["entry_policy"] = args.entry_policy
    if args.workers is not None:
        overrides.setdefault("batch", {})["max_workers"] = args.workers
    return overrides


def _print_json(data: Any) -> None:
    sys.stdout.write(orjson.dumps(data, option=orjson.OPT_INDENT_2).decode("utf-8"))
    sys.stdout.write("\n")
    sys.stdout.flush()


def main(argv: Optional[list[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(level=args.log_level, format_json=args.log_json)

    try:
        if args.command == "symbols":
            _print_json(BinanceBarSource().list_symbols(args.quote))
            return 0

        engine = BacktestEngine(config_dir=args.config_dir, overrides=overrides_from_args(args))
        report = engine.run(args.symbols, args.start, args.end)

    except InvalidInputError as e:
        print(f"error: {e}", file=sys.stderr)
        return 2
    except FetchError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1

    _print_json(report.summary() if args.summary_only else report.to_dict())
    return 0


if __name__ == "__main__":
    sys.exit(main())
