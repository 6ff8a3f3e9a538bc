"""Utils: timeframes."""

from crypto_backtest.utils.timeframes import SUPPORTED_TIMEFRAMES, expected_candles, timeframe_minutes

__all__ = ["SUPPORTED_TIMEFRAMES", "expected_candles", "timeframe_minutes"]
