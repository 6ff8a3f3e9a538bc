"""Multi-symbol strategy backtester for Binance USDT-M futures candles."""

__version__ = "1.0.0"
