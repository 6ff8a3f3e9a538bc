"""Data: candle frames, CSV loading, market data providers."""

from crypto_backtest.data.base import MarketDataProvider
from crypto_backtest.data.binance import BinanceMarketData, FALLBACK_SYMBOLS, validate_symbol
from crypto_backtest.data.candles import (
    CANDLE_COLUMNS,
    candles_to_frame,
    validate_candles,
    load_candles_csv,
    load_candles_dir,
)

__all__ = [
    "MarketDataProvider",
    "BinanceMarketData",
    "FALLBACK_SYMBOLS",
    "validate_symbol",
    "CANDLE_COLUMNS",
    "candles_to_frame",
    "validate_candles",
    "load_candles_csv",
    "load_candles_dir",
]
