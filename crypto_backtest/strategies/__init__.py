"""Strategies: base interface, implementations, and the name -> class registry."""

from __future__ import annotations
from typing import Any, Dict, Mapping, Optional, Type

from crypto_backtest.core.errors import InvalidStrategyConfigError
from crypto_backtest.strategies.base import BaseStrategy
from crypto_backtest.strategies.ma_crossover import MovingAverageCrossoverStrategy
from crypto_backtest.strategies.rsi import RsiStrategy
from crypto_backtest.strategies.macd import MacdStrategy
from crypto_backtest.strategies.stochastic import StochasticStrategy
from crypto_backtest.strategies.smi import SmiStrategy

STRATEGIES: Dict[str, Type[BaseStrategy]] = {
    cls.name: cls
    for cls in (
        MovingAverageCrossoverStrategy,
        RsiStrategy,
        MacdStrategy,
        StochasticStrategy,
        SmiStrategy,
    )
}


def build_strategy(name: str, params: Optional[Mapping[str, Any]] = None) -> BaseStrategy:
    """Instantiate a registered strategy. Unknown names or parameters are config errors."""
    cls = STRATEGIES.get(name)
    if cls is None:
        raise InvalidStrategyConfigError(
            [f"Unsupported strategy '{name}'. Choose one of: {', '.join(sorted(STRATEGIES))}"]
        )
    try:
        return cls(**dict(params or {}))
    except TypeError as e:
        raise InvalidStrategyConfigError([f"Invalid parameters for strategy '{name}': {e}"]) from e


__all__ = [
    "BaseStrategy",
    "MovingAverageCrossoverStrategy",
    "RsiStrategy",
    "MacdStrategy",
    "StochasticStrategy",
    "SmiStrategy",
    "STRATEGIES",
    "build_strategy",
]
