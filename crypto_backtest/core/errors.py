"""
Error kinds raised by the backtest pipeline.
The batch engine decides per kind whether a symbol is skipped, failed, or the run aborts.
"""

from __future__ import annotations
from typing import Iterable, List


class BacktestError(Exception):
    """Base class for all backtest errors."""


class InsufficientDataError(BacktestError):
    """Not enough candles for the strategy look-back. Symbol is skipped."""

    def __init__(self, symbol: str, available: int, required: int):
        self.symbol = symbol
        self.available = available
        self.required = required
        super().__init__(f"{symbol}: {available} candles, {required} required")


class InvalidStrategyConfigError(BacktestError):
    """Configuration rejected before any symbol runs. Carries every message found."""

    def __init__(self, errors: Iterable[str]):
        self.errors: List[str] = list(errors)
        super().__init__("; ".join(self.errors) or "invalid configuration")


class ComputationError(BacktestError):
    """Unexpected numeric state (NaN propagation, unordered signals). Symbol is failed."""


class UpstreamDataError(BacktestError):
    """Market data collaborator failed or returned malformed candles."""
