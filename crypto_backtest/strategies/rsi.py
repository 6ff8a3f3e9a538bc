"""
RSI threshold strategy.

Rules, first match wins:
  1. buy  oversold_exit       RSI crosses up through the oversold level
  2. sell overbought_exit     RSI crosses down through the overbought level
  3. buy  bullish_divergence  RSI below oversold and rising while close falls
  4. sell bearish_divergence  RSI above overbought and falling while close rises
"""

from __future__ import annotations
from typing import List

import pandas as pd

from crypto_backtest.core.types import SignalDirection
from crypto_backtest.indicators import rsi
from crypto_backtest.strategies.base import BaseStrategy, Decision, HOLD, is_positive_int, level_errors


class RsiStrategy(BaseStrategy):
    """Oversold/overbought RSI levels with divergence fallback."""

    name = "rsi"

    def __init__(self, rsi_period: int = 14, oversold: float = 30.0, overbought: float = 70.0):
        self.rsi_period = rsi_period
        self.oversold = oversold
        self.overbought = overbought

    @property
    def min_candles(self) -> int:
        return self.rsi_period + 1

    def params(self) -> dict:
        return {"rsi_period": self.rsi_period, "oversold": self.oversold, "overbought": self.overbought}

    def validate(self) -> List[str]:
        errors = []
        if not is_positive_int(self.rsi_period):
            errors.append("RSI period must be a positive integer")
        errors.extend(level_errors(self.oversold, self.overbought, 0.0, 100.0, "RSI"))
        return errors

    def compute_indicators(self, candles: pd.DataFrame) -> dict:
        return {"rsi": rsi(candles["close"].to_numpy(dtype=float), self.rsi_period)}

    def decide(self, i: int, candles: pd.DataFrame, ind: dict) -> Decision:
        series = ind["rsi"]
        prev, cur = series.at(i - 1), series.at(i)
        close = candles["close"]
        price_falling = close.iat[i] < close.iat[i - 1]
        price_rising = close.iat[i] > close.iat[i - 1]

        if prev < self.oversold <= cur:
            return SignalDirection.BUY, "oversold_exit"
        if prev > self.overbought >= cur:
            return SignalDirection.SELL, "overbought_exit"
        if cur < self.oversold and cur > prev and price_falling:
            return SignalDirection.BUY, "bullish_divergence"
        if cur > self.overbought and cur < prev and price_rising:
            return SignalDirection.SELL, "bearish_divergence"
        return HOLD
