"""Shared candle and signal builders."""

from typing import Optional, Sequence

import pandas as pd
import pytest

from crypto_backtest.core.types import Candle, Signal, SignalDirection
from crypto_backtest.data.candles import candles_to_frame

T0 = pd.Timestamp("2024-01-01 00:00:00")


def make_candles(closes: Sequence[float], spread: float = 0.01, freq: str = "1h") -> pd.DataFrame:
    """OHLCV frame around the given closes: high/low at +/- spread, hourly bars."""
    times = pd.date_range(T0, periods=len(closes), freq=freq)
    return candles_to_frame(
        Candle(time=t, open=float(c), high=float(c) * (1 + spread), low=float(c) * (1 - spread),
               close=float(c), volume=100.0)
        for t, c in zip(times, closes)
    )


def make_signal(i: int, price: float, direction: Optional[SignalDirection] = None, kind: str = "") -> Signal:
    direction = direction or SignalDirection.NONE
    return Signal(
        index=i,
        timestamp=T0 + pd.Timedelta(hours=i),
        price=float(price),
        direction=direction,
        kind=kind or ("hold" if direction is SignalDirection.NONE else direction.value),
    )


@pytest.fixture
def crossover_closes():
    # SMA(2)/SMA(3): cross down at index 4, cross up at index 7
    return [10, 10, 10, 10, 9, 8, 7, 12, 15, 16]
