"""Timeframe string helpers (Binance interval notation)."""

SUPPORTED_TIMEFRAMES = ("1m", "3m", "5m", "15m", "30m", "1h", "2h", "4h", "6h", "8h", "12h", "1d")


def timeframe_minutes(tf: str) -> int:
    """Convert Binance-style timeframe (e.g. '5m', '1h', '1d', '1w') to minutes."""
    tf = tf.strip().lower()
    try:
        if tf.endswith("m"):
            return int(tf[:-1])
        if tf.endswith("h"):
            return int(tf[:-1]) * 60
        if tf.endswith("d"):
            return int(tf[:-1]) * 60 * 24
        if tf.endswith("w"):
            return int(tf[:-1]) * 60 * 24 * 7
    except ValueError:
        pass
    raise ValueError(f"Unsupported timeframe: {tf}")


def expected_candles(tf: str, days: int) -> int:
    """Number of candles of timeframe `tf` covering `days` days (rounded up)."""
    minutes = timeframe_minutes(tf)
    return -(-days * 24 * 60 // minutes)
