"""Indicators: SMA, EMA, RSI, MACD histogram, stochastic, SMI."""

from crypto_backtest.indicators.indicators import (
    IndicatorSeries,
    sma,
    ema,
    rsi,
    macd_histogram,
    stochastic,
    smi,
)

__all__ = [
    "IndicatorSeries",
    "sma",
    "ema",
    "rsi",
    "macd_histogram",
    "stochastic",
    "smi",
]
