"""Backtesting: trade lifecycle simulator and the multi-symbol engine."""

from crypto_backtest.backtesting.simulator import SimulationResult, TradeSimulator
from crypto_backtest.backtesting.engine import BacktestEngine, BatchResult

__all__ = ["SimulationResult", "TradeSimulator", "BacktestEngine", "BatchResult"]
