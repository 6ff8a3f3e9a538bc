"""Core: config, types, errors, logging."""

from crypto_backtest.core.config import load_config, validate_config, ensure_valid_config, Config
from crypto_backtest.core.errors import (
    BacktestError,
    InsufficientDataError,
    InvalidStrategyConfigError,
    ComputationError,
    UpstreamDataError,
)
from crypto_backtest.core.types import (
    Candle,
    Signal,
    SignalDirection,
    Position,
    PositionSide,
    Trade,
    ExitReason,
    SymbolResult,
    SymbolStatus,
)
from crypto_backtest.core.logger import setup_logging

__all__ = [
    "load_config",
    "validate_config",
    "ensure_valid_config",
    "Config",
    "BacktestError",
    "InsufficientDataError",
    "InvalidStrategyConfigError",
    "ComputationError",
    "UpstreamDataError",
    "Candle",
    "Signal",
    "SignalDirection",
    "Position",
    "PositionSide",
    "Trade",
    "ExitReason",
    "SymbolResult",
    "SymbolStatus",
    "setup_logging",
]
