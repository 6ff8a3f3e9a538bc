"""
Stochastic Momentum Index strategy.

Rules, first match wins:
  1. buy  oversold_crossover     SMI crosses above its signal line while below oversold
  2. sell overbought_crossover   SMI crosses below its signal line while above overbought
  3. buy  oversold_divergence    SMI below oversold and rising
  4. sell overbought_divergence  SMI above overbought and falling
"""

from __future__ import annotations
from typing import List

import pandas as pd

from crypto_backtest.core.types import SignalDirection
from crypto_backtest.indicators import smi
from crypto_backtest.strategies.base import (
    BaseStrategy,
    Decision,
    HOLD,
    crossed_above,
    crossed_below,
    is_positive_int,
    level_errors,
)


class SmiStrategy(BaseStrategy):
    """SMI vs. signal line crossovers in the extreme zones."""

    name = "smi"

    def __init__(
        self,
        smi_period: int = 14,
        smoothing_period: int = 3,
        signal_period: int = 3,
        oversold: float = -40.0,
        overbought: float = 40.0,
    ):
        self.smi_period = smi_period
        self.smoothing_period = smoothing_period
        self.signal_period = signal_period
        self.oversold = oversold
        self.overbought = overbought

    @property
    def min_candles(self) -> int:
        return self.smi_period * 2

    def params(self) -> dict:
        return {
            "smi_period": self.smi_period,
            "smoothing_period": self.smoothing_period,
            "signal_period": self.signal_period,
            "oversold": self.oversold,
            "overbought": self.overbought,
        }

    def validate(self) -> List[str]:
        errors = []
        if not is_positive_int(self.smi_period):
            errors.append("SMI period must be a positive integer")
        if not is_positive_int(self.smoothing_period):
            errors.append("SMI smoothing period must be a positive integer")
        if not is_positive_int(self.signal_period):
            errors.append("SMI signal period must be a positive integer")
        errors.extend(level_errors(self.oversold, self.overbought, -100.0, 100.0, "SMI"))
        return errors

    def compute_indicators(self, candles: pd.DataFrame) -> dict:
        smi_series, signal_series = smi(
            candles["high"].to_numpy(dtype=float),
            candles["low"].to_numpy(dtype=float),
            candles["close"].to_numpy(dtype=float),
            self.smi_period,
            self.smoothing_period,
            self.signal_period,
        )
        return {"smi": smi_series, "signal": signal_series}

    def decide(self, i: int, candles: pd.DataFrame, ind: dict) -> Decision:
        line, sig = ind["smi"], ind["signal"]
        prev, cur = line.at(i - 1), line.at(i)
        args = (prev, sig.at(i - 1), cur, sig.at(i))
        if crossed_above(*args) and cur < self.oversold:
            return SignalDirection.BUY, "oversold_crossover"
        if crossed_below(*args) and cur > self.overbought:
            return SignalDirection.SELL, "overbought_crossover"
        if cur < self.oversold and cur > prev:
            return SignalDirection.BUY, "oversold_divergence"
        if cur > self.overbought and cur < prev:
            return SignalDirection.SELL, "overbought_divergence"
        return HOLD
