#!/usr/bin/env python3
"""
Compute chart indicators from the command line.

Examples:
    chart-indicators --list
    chart-indicators --input candles.json --indicators SMA20 RSI MACD
    chart-indicators --symbol INFY --timeframe 1d --limit 500 --json
"""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from ..continuous.data_types import CandleSeries
from ..display.colors import Colors, pane_color
from ..display.formatters import format_series, series_to_dict
from ..engines.calculations import compute_indicators
from ..engines.registry import IndicatorRegistry, get_registry
from ..errors import IndicatorError
from ..logging_config import log_exception, setup_logging

logger = logging.getLogger(__name__)


def load_candles(path: str) -> CandleSeries:
    """Read a JSON file holding a candle list or {"candles": [...]}."""
    payload = json.loads(Path(path).read_text(encoding="utf-8"))
    if isinstance(payload, dict):
        payload = payload.get("candles")
    if not isinstance(payload, list):
        raise ValueError(f"{path}: expected a list of candles or {{\"candles\": [...]}}")
    return CandleSeries.from_dicts(payload)


async def fetch_candles(symbol: str, timeframe: str, limit: int) -> CandleSeries:
    # aiohttp is only needed when fetching
    from ..engines.data_fetcher import ChartDataFetcher

    async with ChartDataFetcher() as fetcher:
        return await fetcher.get_candles(symbol, timeframe, limit=limit)


def print_catalog(registry: IndicatorRegistry) -> None:
    print(f"{Colors.BOLD}Available indicators{Colors.RESET}")
    for definition in registry.definitions():
        color = pane_color(definition.pane)
        warmup = registry.warmup_period(definition.indicator_id)
        print(
            f"  {color}{definition.indicator_id:<8}{Colors.RESET} "
            f"{definition.label:<28} {Colors.DIM}{definition.pane:<10} warm-up {warmup}{Colors.RESET}"
        )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Compute technical indicators over OHLCV candles")
    source = parser.add_mutually_exclusive_group()
    source.add_argument("--input", "-i", help="JSON file with candles")
    source.add_argument("--symbol", "-s", help="Fetch candles for this symbol from the chart API")
    parser.add_argument("--timeframe", "-t", default="1d", help="Candle timeframe (default: 1d)")
    parser.add_argument(
        "--limit", type=int, default=1000, help="Number of candles to fetch (default: 1000)"
    )
    parser.add_argument(
        "--indicators",
        nargs="+",
        metavar="ID",
        help="Indicator ids to compute (default: all registered)",
    )
    parser.add_argument("--list", action="store_true", help="List available indicators and exit")
    parser.add_argument("--json", action="store_true", help="Print JSON instead of text")
    parser.add_argument(
        "--tail", type=int, default=5, help="Points per indicator in text output (0 = all)"
    )
    parser.add_argument(
        "--log-level", default=None, help="Log level (default: LOG_LEVEL env or INFO)"
    )
    return parser


def run(args: argparse.Namespace, registry: Optional[IndicatorRegistry] = None) -> int:
    registry = registry or get_registry()

    if args.list:
        print_catalog(registry)
        return 0

    if args.input:
        candles = load_candles(args.input)
    elif args.symbol:
        candles = asyncio.run(fetch_candles(args.symbol, args.timeframe, args.limit))
    else:
        print(f"{Colors.RED}Either --input or --symbol is required{Colors.RESET}", file=sys.stderr)
        return 2

    ids: List[str] = args.indicators or registry.ids()
    results = compute_indicators(candles, ids, registry=registry)

    if args.json:
        output: Dict[str, Any] = {
            "candles": len(candles),
            "indicators": {key: series_to_dict(series) for key, series in results.items()},
        }
        print(json.dumps(output, indent=2))
        return 0

    print(f"{Colors.BOLD}{len(candles)} candles{Colors.RESET}")
    for key, series in results.items():
        print()
        for line in format_series(registry.get(key), series, tail=args.tail):
            print(line)
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)
    setup_logging(level=args.log_level)

    try:
        return run(args)
    except KeyboardInterrupt:
        print(f"\n{Colors.YELLOW}Cancelled.{Colors.RESET}")
        return 130
    except (IndicatorError, ValueError, OSError) as e:
        log_exception(logger, e, "Failed", level=logging.DEBUG)
        print(f"{Colors.RED}Error: {e}{Colors.RESET}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
