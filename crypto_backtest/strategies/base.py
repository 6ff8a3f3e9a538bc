"""Abstract strategy: indicators + one signal per eligible candle."""

from __future__ import annotations
import logging
from abc import ABC, abstractmethod
from typing import Iterable, List, Optional, Tuple

import numpy as np
import pandas as pd

from crypto_backtest.core.errors import ComputationError
from crypto_backtest.core.types import Signal, SignalDirection
from crypto_backtest.indicators import IndicatorSeries

logger = logging.getLogger("crypto_backtest.strategies")

# (direction, kind) returned by a strategy's per-bar rule
Decision = Tuple[SignalDirection, str]
HOLD: Decision = (SignalDirection.NONE, "hold")


def is_positive_int(value) -> bool:
    return isinstance(value, (int, np.integer)) and not isinstance(value, bool) and value >= 1


def is_level(value) -> bool:
    return isinstance(value, (int, float, np.integer)) and not isinstance(value, bool)


class BaseStrategy(ABC):
    """
    Strategy turns a candle frame into a time-ordered list of Signals, one per
    index where both the current and the previous indicator values exist.
    Instances hold parameters only; nothing carries over between calls.
    """

    name: str = "base"

    @property
    @abstractmethod
    def min_candles(self) -> int:
        """Look-back the strategy needs before its first signal."""

    @abstractmethod
    def validate(self) -> List[str]:
        """Human-readable parameter errors; empty when valid."""

    @abstractmethod
    def compute_indicators(self, candles: pd.DataFrame) -> dict:
        """Name -> IndicatorSeries for this strategy."""

    @abstractmethod
    def decide(self, i: int, candles: pd.DataFrame, ind: dict) -> Decision:
        """Classify candle index i (first match wins)."""

    def params(self) -> dict:
        return {}

    def generate_signals(self, candles: pd.DataFrame) -> List[Signal]:
        ind = self.compute_indicators(candles)
        self._check_finite(ind.values())
        start = max(s.offset for s in ind.values()) + 1
        end = min(s.end for s in ind.values())
        times = candles["time"].to_numpy()
        closes = candles["close"].to_numpy(dtype=float)

        signals: List[Signal] = []
        for i in range(start, end):
            direction, kind = self.decide(i, candles, ind)
            signals.append(Signal(
                index=i,
                timestamp=pd.Timestamp(times[i]),
                price=float(closes[i]),
                direction=direction,
                kind=kind,
                metadata={k: s.at(i) for k, s in ind.items()},
            ))
        logger.debug(
            "%s: %d signals, %d directional",
            self.name, len(signals), sum(1 for s in signals if s.is_directional),
        )
        return signals

    def _check_finite(self, series: Iterable[IndicatorSeries]) -> None:
        for s in series:
            if len(s) and not np.all(np.isfinite(s.values)):
                raise ComputationError(f"{self.name}: non-finite indicator values")

    def __repr__(self) -> str:
        args = ", ".join(f"{k}={v!r}" for k, v in self.params().items())
        return f"{type(self).__name__}({args})"


def crossed_above(prev_a: float, prev_b: float, a: float, b: float) -> bool:
    return prev_a <= prev_b and a > b


def crossed_below(prev_a: float, prev_b: float, a: float, b: float) -> bool:
    return prev_a >= prev_b and a < b


def level_errors(
    oversold: Optional[float],
    overbought: Optional[float],
    low: float,
    high: float,
    label: str,
) -> List[str]:
    """Shared checks for threshold strategies: both levels in range and ordered."""
    errors = []
    for name, level in (("oversold", oversold), ("overbought", overbought)):
        if not is_level(level) or not (low <= level <= high):
            errors.append(f"{label} {name} level must be between {low:g} and {high:g}")
    if is_level(oversold) and is_level(overbought) and oversold >= overbought:
        errors.append(f"{label} oversold level must be below the overbought level")
    return errors
