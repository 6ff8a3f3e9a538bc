"""MACD histogram zero-line crossover."""

from __future__ import annotations
from typing import List

import pandas as pd

from crypto_backtest.core.types import SignalDirection
from crypto_backtest.indicators import macd_histogram
from crypto_backtest.strategies.base import BaseStrategy, Decision, HOLD, is_positive_int


class MacdStrategy(BaseStrategy):
    """Buy when the histogram turns positive, sell when it turns negative."""

    name = "macd"

    def __init__(self, fast_period: int = 12, slow_period: int = 26, signal_period: int = 9):
        self.fast_period = fast_period
        self.slow_period = slow_period
        self.signal_period = signal_period

    @property
    def min_candles(self) -> int:
        return max(self.fast_period, self.slow_period)

    def params(self) -> dict:
        return {
            "fast_period": self.fast_period,
            "slow_period": self.slow_period,
            "signal_period": self.signal_period,
        }

    def validate(self) -> List[str]:
        errors = []
        if not is_positive_int(self.fast_period):
            errors.append("MACD fast period must be a positive integer")
        if not is_positive_int(self.slow_period):
            errors.append("MACD slow period must be a positive integer")
        if not is_positive_int(self.signal_period):
            errors.append("MACD signal period must be a positive integer")
        if not errors and self.fast_period >= self.slow_period:
            errors.append("MACD fast period must be smaller than the slow period")
        return errors

    def compute_indicators(self, candles: pd.DataFrame) -> dict:
        close = candles["close"].to_numpy(dtype=float)
        return {"histogram": macd_histogram(close, self.fast_period, self.slow_period, self.signal_period)}

    def decide(self, i: int, candles: pd.DataFrame, ind: dict) -> Decision:
        hist = ind["histogram"]
        prev, cur = hist.at(i - 1), hist.at(i)
        if prev <= 0 < cur:
            return SignalDirection.BUY, "crossover_up"
        if prev >= 0 > cur:
            return SignalDirection.SELL, "crossover_down"
        return HOLD
