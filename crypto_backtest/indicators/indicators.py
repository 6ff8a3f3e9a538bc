"""
Indicator engine: pure functions from price arrays to derived series.

Warm-up convention: leading values that cannot be computed are omitted, never
NaN-padded. Each result carries the input index of its first value (offset), so
callers align series to candles through IndicatorSeries.at() instead of offset
arithmetic.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Sequence, Tuple, Union

import numpy as np
import pandas as pd

ArrayLike = Union[Sequence[float], np.ndarray, pd.Series]


@dataclass(frozen=True)
class IndicatorSeries:
    """Densely valued series whose values[0] belongs to input index `offset`."""
    values: np.ndarray
    offset: int

    def __len__(self) -> int:
        return len(self.values)

    @property
    def end(self) -> int:
        """One past the last covered input index."""
        return self.offset + len(self.values)

    def covers(self, index: int) -> bool:
        return self.offset <= index < self.end

    def at(self, index: int) -> float:
        if not self.covers(index):
            raise IndexError(f"index {index} outside [{self.offset}, {self.end})")
        return float(self.values[index - self.offset])

    def tolist(self) -> list:
        return self.values.tolist()


def _as_array(values: ArrayLike) -> np.ndarray:
    return np.asarray(values, dtype=float)


def _check_period(period: int, name: str = "period") -> None:
    if int(period) != period or period < 1:
        raise ValueError(f"{name} must be a positive integer, got {period!r}")


def _empty(offset: int) -> IndicatorSeries:
    return IndicatorSeries(values=np.array([], dtype=float), offset=offset)


def sma(prices: ArrayLike, period: int) -> IndicatorSeries:
    """Arithmetic mean of the trailing `period` values. Offset period - 1."""
    _check_period(period)
    arr = _as_array(prices)
    if len(arr) < period:
        return _empty(period - 1)
    values = pd.Series(arr).rolling(period).mean().to_numpy()[period - 1:]
    return IndicatorSeries(values=values, offset=period - 1)


def _ema_values(arr: np.ndarray, period: int) -> np.ndarray:
    # adjust=False is the recursive form: seed = first value, k = 2 / (period + 1)
    return pd.Series(arr).ewm(span=period, adjust=False).mean().to_numpy()


def ema(prices: ArrayLike, period: int) -> IndicatorSeries:
    """Exponential moving average seeded with the first price. Offset 0."""
    _check_period(period)
    arr = _as_array(prices)
    if len(arr) == 0:
        return _empty(0)
    return IndicatorSeries(values=_ema_values(arr, period), offset=0)


def rsi(prices: ArrayLike, period: int = 14) -> IndicatorSeries:
    """
    Relative Strength Index with Wilder smoothing. Offset `period`.
    The first average gain/loss is the simple mean of the first `period` changes.
    An average loss of zero yields 100.
    """
    _check_period(period)
    arr = _as_array(prices)
    if len(arr) <= period:
        return _empty(period)
    delta = np.diff(arr)
    gains = np.clip(delta, 0.0, None)
    losses = np.clip(-delta, 0.0, None)

    out = np.empty(len(arr) - period, dtype=float)
    avg_gain = gains[:period].mean()
    avg_loss = losses[:period].mean()
    out[0] = _rsi_value(avg_gain, avg_loss)
    for j in range(period, len(delta)):
        avg_gain = (avg_gain * (period - 1) + gains[j]) / period
        avg_loss = (avg_loss * (period - 1) + losses[j]) / period
        out[j - period + 1] = _rsi_value(avg_gain, avg_loss)
    return IndicatorSeries(values=out, offset=period)


def _rsi_value(avg_gain: float, avg_loss: float) -> float:
    if avg_loss == 0:
        return 100.0
    return 100.0 - 100.0 / (1.0 + avg_gain / avg_loss)


def macd_histogram(
    prices: ArrayLike,
    fast_period: int = 12,
    slow_period: int = 26,
    signal_period: int = 9,
) -> IndicatorSeries:
    """
    MACD histogram: (EMA_fast - EMA_slow) - EMA_signal(EMA_fast - EMA_slow).
    The slow EMA seed region is dropped, so the offset is slow_period - 1.
    """
    _check_period(fast_period, "fast_period")
    _check_period(slow_period, "slow_period")
    _check_period(signal_period, "signal_period")
    arr = _as_array(prices)
    offset = slow_period - 1
    if len(arr) <= offset:
        return _empty(offset)
    macd_line = _ema_values(arr, fast_period) - _ema_values(arr, slow_period)
    histogram = macd_line - _ema_values(macd_line, signal_period)
    return IndicatorSeries(values=histogram[offset:], offset=offset)


def stochastic(
    high: ArrayLike,
    low: ArrayLike,
    close: ArrayLike,
    k_period: int = 14,
    d_period: int = 3,
) -> Tuple[IndicatorSeries, IndicatorSeries]:
    """
    Stochastic oscillator (%K, %D). %K offset k_period - 1, %D offset k_period + d_period - 2.
    A flat window (highest high == lowest low) gives %K = 0.
    """
    _check_period(k_period, "k_period")
    _check_period(d_period, "d_period")
    h, l, c = _as_array(high), _as_array(low), _as_array(close)
    k_offset = k_period - 1
    if len(c) < k_period:
        return _empty(k_offset), _empty(k_offset + d_period - 1)
    highest = pd.Series(h).rolling(k_period).max().to_numpy()[k_offset:]
    lowest = pd.Series(l).rolling(k_period).min().to_numpy()[k_offset:]
    span = highest - lowest
    with np.errstate(divide="ignore", invalid="ignore"):
        k_values = np.where(span == 0, 0.0, (c[k_offset:] - lowest) / span * 100.0)
    k_values = np.clip(k_values, 0.0, 100.0)
    k_series = IndicatorSeries(values=k_values, offset=k_offset)
    d_raw = sma(k_values, d_period)
    d_series = IndicatorSeries(values=d_raw.values, offset=k_offset + d_raw.offset)
    return k_series, d_series


def smi(
    high: ArrayLike,
    low: ArrayLike,
    close: ArrayLike,
    period: int = 14,
    smoothing: int = 3,
    signal_period: int = 3,
) -> Tuple[IndicatorSeries, IndicatorSeries]:
    """
    Stochastic Momentum Index and its signal line.

    Distance of close from the midpoint of the `period` high/low range, and the
    range itself, are each smoothed twice by EMA(smoothing). SMI = 100 * D / (R / 2),
    bounded to [-100, 100]; 0 where the smoothed range is 0. Signal = SMA(SMI, signal_period).
    """
    _check_period(period)
    _check_period(smoothing, "smoothing")
    _check_period(signal_period, "signal_period")
    h, l, c = _as_array(high), _as_array(low), _as_array(close)
    offset = period - 1
    if len(c) < period:
        return _empty(offset), _empty(offset + signal_period - 1)
    highest = pd.Series(h).rolling(period).max().to_numpy()[offset:]
    lowest = pd.Series(l).rolling(period).min().to_numpy()[offset:]
    distance = c[offset:] - (highest + lowest) / 2.0
    spread = highest - lowest
    d_smooth = _ema_values(_ema_values(distance, smoothing), smoothing)
    r_smooth = _ema_values(_ema_values(spread, smoothing), smoothing)
    with np.errstate(divide="ignore", invalid="ignore"):
        values = np.where(r_smooth == 0, 0.0, 100.0 * d_smooth / (r_smooth / 2.0))
    values = np.clip(values, -100.0, 100.0)
    smi_series = IndicatorSeries(values=values, offset=offset)
    sig_raw = sma(values, signal_period)
    signal_series = IndicatorSeries(values=sig_raw.values, offset=offset + sig_raw.offset)
    return smi_series, signal_series
