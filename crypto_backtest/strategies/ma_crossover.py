"""
SMA crossover: buy when the fast SMA crosses above the slow SMA, sell on the cross below.
"""

from __future__ import annotations
from typing import List

import pandas as pd

from crypto_backtest.core.types import SignalDirection
from crypto_backtest.indicators import sma
from crypto_backtest.strategies.base import (
    BaseStrategy,
    Decision,
    HOLD,
    crossed_above,
    crossed_below,
    is_positive_int,
)


class MovingAverageCrossoverStrategy(BaseStrategy):
    """Fast/slow simple moving average crossover."""

    name = "ma_crossover"

    def __init__(self, fast_period: int = 10, slow_period: int = 30):
        self.fast_period = fast_period
        self.slow_period = slow_period

    @property
    def min_candles(self) -> int:
        return max(self.fast_period, self.slow_period)

    def params(self) -> dict:
        return {"fast_period": self.fast_period, "slow_period": self.slow_period}

    def validate(self) -> List[str]:
        errors = []
        if not is_positive_int(self.fast_period):
            errors.append("Fast moving average period must be a positive integer")
        if not is_positive_int(self.slow_period):
            errors.append("Slow moving average period must be a positive integer")
        if not errors and self.fast_period >= self.slow_period:
            errors.append("Fast moving average period must be smaller than the slow period")
        return errors

    def compute_indicators(self, candles: pd.DataFrame) -> dict:
        close = candles["close"].to_numpy(dtype=float)
        return {
            "fast_ma": sma(close, self.fast_period),
            "slow_ma": sma(close, self.slow_period),
        }

    def decide(self, i: int, candles: pd.DataFrame, ind: dict) -> Decision:
        fast, slow = ind["fast_ma"], ind["slow_ma"]
        args = (fast.at(i - 1), slow.at(i - 1), fast.at(i), slow.at(i))
        if crossed_above(*args):
            return SignalDirection.BUY, "crossover_up"
        if crossed_below(*args):
            return SignalDirection.SELL, "crossover_down"
        return HOLD
