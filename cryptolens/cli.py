"""
Cryptolens Command Line

Fetches klines (or generates a synthetic series), runs the analysis pipeline
and prints the narrative summary or the raw analysis as JSON.

Usage:
    cryptolens analyze BTCUSDT --interval 4h
    cryptolens analyze DEMO --synthetic --seed 7 --json
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from typing import Optional

import structlog

from cryptolens.config import get_settings
from cryptolens.data.binance_client import BinanceClient
from cryptolens.data.synthetic import generate_synthetic_candles
from cryptolens.engines.analysis_engine import AnalysisEngine
from cryptolens.engines.summary_engine import SummaryEngine
from cryptolens.exceptions import CryptolensError
from cryptolens.models import Candle, TimeInterval, validate_series
from cryptolens.observability import configure_logging
from cryptolens.utils.formatters import format_open_time, format_volume

log = structlog.get_logger("cryptolens.cli")


def build_parser() -> argparse.ArgumentParser:
    settings = get_settings()
    parser = argparse.ArgumentParser(prog="cryptolens", description="Crypto technical analysis")
    parser.add_argument("--log-level", default=None, help="Override CRYPTOLENS_LOG_LEVEL")
    sub = parser.add_subparsers(dest="command", required=True)

    analyze = sub.add_parser("analyze", help="Analyze one symbol")
    analyze.add_argument("symbol", help="Exchange symbol, e.g. BTCUSDT")
    analyze.add_argument(
        "--interval", default=settings.default_interval,
        choices=[i.value for i in TimeInterval],
    )
    analyze.add_argument("--limit", type=int, default=settings.kline_limit)
    analyze.add_argument("--synthetic", action="store_true", help="Use a generated series")
    analyze.add_argument("--seed", type=int, default=None, help="Seed for --synthetic")
    analyze.add_argument("--no-overlaps", action="store_true", help="Suppress overlapping patterns")
    analyze.add_argument("--json", action="store_true", help="Print the full analysis as JSON")
    return parser


def _load_candles(args: argparse.Namespace) -> list[Candle]:
    if args.synthetic:
        return generate_synthetic_candles(args.limit, seed=args.seed)
    return asyncio.run(BinanceClient().get_klines(args.symbol, args.interval, args.limit))


def run_analyze(args: argparse.Namespace) -> int:
    candles = _load_candles(args)
    validate_series(candles)

    analysis = AnalysisEngine().analyze(candles, suppress_overlapping=args.no_overlaps)
    if args.json:
        print(analysis.model_dump_json(indent=2))
        return 0

    summary = SummaryEngine().summarize(analysis, candles, args.symbol.upper(), args.interval)
    if summary is None:
        print(f"Not enough data: {len(candles)} candles")
        return 1

    print(f"{summary.symbol} [{summary.interval}] {summary.direction.value.upper()} "
          f"confidence={summary.confidence}% risk={summary.risk_level.value}")
    last = candles[-1]
    print(f"Last candle {format_open_time(last.open_time)} UTC, volume {format_volume(last.volume)}")
    for point in summary.key_points:
        print(f"  - {point}")
    print()
    print(summary.narrative)
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(level=args.log_level)

    try:
        if args.command == "analyze":
            return run_analyze(args)
    except CryptolensError as e:
        log.error("cli.failed", command=args.command, error=str(e))
        return 2
    return 1


if __name__ == "__main__":
    sys.exit(main())
