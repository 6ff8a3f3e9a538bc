"""Stochastic %K/%D crossover inside the oversold/overbought zones."""

from __future__ import annotations
from typing import List

import pandas as pd

from crypto_backtest.core.types import SignalDirection
from crypto_backtest.indicators import stochastic
from crypto_backtest.strategies.base import (
    BaseStrategy,
    Decision,
    HOLD,
    crossed_above,
    crossed_below,
    is_positive_int,
    level_errors,
)


class StochasticStrategy(BaseStrategy):
    name = "stochastic"

    def __init__(
        self,
        k_period: int = 14,
        d_period: int = 3,
        oversold: float = 20.0,
        overbought: float = 80.0,
    ):
        self.k_period = k_period
        self.d_period = d_period
        self.oversold = oversold
        self.overbought = overbought

    @property
    def min_candles(self) -> int:
        return self.k_period + self.d_period

    def params(self) -> dict:
        return {
            "k_period": self.k_period,
            "d_period": self.d_period,
            "oversold": self.oversold,
            "overbought": self.overbought,
        }

    def validate(self) -> List[str]:
        errors = []
        if not is_positive_int(self.k_period):
            errors.append("Stochastic %K period must be a positive integer")
        if not is_positive_int(self.d_period):
            errors.append("Stochastic %D period must be a positive integer")
        errors.extend(level_errors(self.oversold, self.overbought, 0.0, 100.0, "Stochastic"))
        return errors

    def compute_indicators(self, candles: pd.DataFrame) -> dict:
        k, d = stochastic(
            candles["high"].to_numpy(dtype=float),
            candles["low"].to_numpy(dtype=float),
            candles["close"].to_numpy(dtype=float),
            self.k_period,
            self.d_period,
        )
        return {"k": k, "d": d}

    def decide(self, i: int, candles: pd.DataFrame, ind: dict) -> Decision:
        k, d = ind["k"], ind["d"]
        args = (k.at(i - 1), d.at(i - 1), k.at(i), d.at(i))
        cur_k = k.at(i)
        if crossed_above(*args) and cur_k < self.oversold:
            return SignalDirection.BUY, "crossover_up"
        if crossed_below(*args) and cur_k > self.overbought:
            return SignalDirection.SELL, "crossover_down"
        return HOLD
