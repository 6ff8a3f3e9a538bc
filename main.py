#!/usr/bin/env python3
"""
Crypto Backtest CLI: backtest | list-pairs
Usage:
  python main.py backtest [--config config.yaml] [--symbols BTCUSDT ETHUSDT] [--csv-dir data/]
  python main.py list-pairs [--limit 30]
"""

from __future__ import annotations
import argparse
import logging
import sys
from pathlib import Path

# Project root
ROOT = Path(__file__).resolve().parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from crypto_backtest.core.config import load_config, ensure_valid_config
from crypto_backtest.core.errors import InvalidStrategyConfigError
from crypto_backtest.core.logger import setup_logging
from crypto_backtest.backtesting.engine import BacktestEngine
from crypto_backtest.data.binance import BinanceMarketData
from crypto_backtest.data.candles import load_candles_dir
from crypto_backtest.reports.exporter import export_results, format_summary


def run_backtest(args: argparse.Namespace) -> int:
    """Validate config, load candles (CSV dir or Binance), run the batch, print and export."""
    config = load_config(args.config, ROOT)
    if args.symbols:
        config.symbols = [s.upper() for s in args.symbols]
    if args.output_dir:
        config.output_dir = args.output_dir
    if args.format:
        config.export_format = args.format
    setup_logging(config.log_level, config.log_dir, config.log_file)
    logger = logging.getLogger("crypto_backtest")

    try:
        ensure_valid_config(config)
    except InvalidStrategyConfigError as e:
        print("Invalid configuration:")
        for msg in e.errors:
            print(f"  - {msg}")
        return 1

    if args.csv_dir:
        data, errors = load_candles_dir(args.csv_dir)
        if config.symbols:
            wanted = set(config.symbols)
            data = {s: df for s, df in data.items() if s in wanted}
            errors = {s: msg for s, msg in errors.items() if s in wanted}
    else:
        provider = BinanceMarketData(config.binance_api_key, config.binance_api_secret)
        symbols = config.symbols or provider.top_symbols(config.top_n)
        logger.info("Fetching %d symbols, %s candles over %d days", len(symbols), config.timeframe, config.backtest_days)
        data, errors = provider.fetch_many(symbols, config.timeframe, config.backtest_days)

    if not data and not errors:
        logger.error("No candle data to backtest")
        return 1

    engine = BacktestEngine.from_config(config)
    batch = engine.run(data, errors)

    print()
    print(format_summary(batch.metrics))
    if batch.metrics.top_performers:
        print("\nTop performers:")
        for n, p in enumerate(batch.metrics.top_performers[:10], start=1):
            print(f"  {n:>2}. {p.symbol:<14} {p.total_return:>8.2f}%  trades={p.trades}  win={p.win_rate:.1f}%")
    if batch.skipped:
        print(f"\nSkipped ({len(batch.skipped)}): {', '.join(batch.skipped)}")
    if batch.failed:
        print(f"Failed ({len(batch.failed)}): {', '.join(batch.failed)}")

    for path in export_results(batch, config.output_dir, config.export_format):
        logger.debug("Wrote %s", path)
    return 0


def run_list_pairs(args: argparse.Namespace) -> int:
    """Print the most liquid USDT futures pairs."""
    config = load_config(args.config, ROOT)
    setup_logging(config.log_level, config.log_dir, config.log_file)
    provider = BinanceMarketData(config.binance_api_key, config.binance_api_secret)
    for n, symbol in enumerate(provider.top_symbols(args.limit), start=1):
        print(f"{n:>3}. {symbol}")
    return 0


def main() -> int:
    parser = argparse.ArgumentParser(description="Crypto Backtest CLI")
    sub = parser.add_subparsers(dest="mode", required=True)

    bt = sub.add_parser("backtest", help="Backtest the configured strategy over many symbols")
    bt.add_argument("--config", type=Path, default=None, help="Path to config.yaml")
    bt.add_argument("--symbols", nargs="+", default=None, help="Symbols to test (default: config or top pairs)")
    bt.add_argument("--csv-dir", type=Path, default=None, help="Load <SYMBOL>.csv candle files instead of Binance")
    bt.add_argument("--output-dir", type=Path, default=None, help="Directory for exported results")
    bt.add_argument("--format", choices=["csv", "json", "both", "none"], default=None, help="Export format")

    lp = sub.add_parser("list-pairs", help="List top USDT pairs by 24h quote volume")
    lp.add_argument("--config", type=Path, default=None, help="Path to config.yaml")
    lp.add_argument("--limit", type=int, default=30, help="Number of pairs")

    args = parser.parse_args()
    if args.mode == "backtest":
        return run_backtest(args)
    return run_list_pairs(args)


if __name__ == "__main__":
    sys.exit(main())
