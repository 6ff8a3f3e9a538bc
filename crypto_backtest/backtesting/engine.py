"""
Backtest engine: runs one strategy over many symbols.
Each symbol gets its own signals and simulation; a failing symbol never aborts the batch.
"""

from __future__ import annotations
import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional, Tuple

import pandas as pd

from crypto_backtest.analytics.metrics import (
    OverallMetrics,
    average_win_loss,
    compute_overall_metrics,
    max_drawdown,
    profit_factor,
    win_rate,
)
from crypto_backtest.backtesting.simulator import SimulationResult, TradeSimulator
from crypto_backtest.core.config import Config
from crypto_backtest.core.errors import InsufficientDataError, InvalidStrategyConfigError
from crypto_backtest.core.types import SymbolResult, SymbolStatus
from crypto_backtest.data.candles import validate_candles
from crypto_backtest.risk.manager import RiskManager, is_number
from crypto_backtest.strategies import BaseStrategy, build_strategy

logger = logging.getLogger("crypto_backtest.backtest")


@dataclass
class BatchResult:
    """Completed results in input order, plus skipped/failed symbols with reasons."""
    results: Dict[str, SymbolResult] = field(default_factory=dict)
    skipped: Dict[str, str] = field(default_factory=dict)
    failed: Dict[str, str] = field(default_factory=dict)
    metrics: OverallMetrics = field(default_factory=OverallMetrics)

    @property
    def successful(self) -> int:
        return len(self.results)

    @property
    def processed(self) -> int:
        return len(self.results) + len(self.skipped) + len(self.failed)


class BacktestEngine:
    """
    Strategy + risk rules + capital, applied symbol by symbol.
    max_workers > 1 runs symbols on a bounded thread pool; output order follows input order.
    """

    def __init__(
        self,
        strategy: BaseStrategy,
        risk_manager: RiskManager,
        initial_capital: float = 10000.0,
        min_data_margin: int = 10,
        max_workers: int = 1,
    ):
        errors = list(strategy.validate()) + risk_manager.validate()
        if not is_number(initial_capital) or initial_capital <= 0:
            errors.append("Initial capital must be positive")
        if not isinstance(min_data_margin, int) or isinstance(min_data_margin, bool) or min_data_margin < 0:
            errors.append("min_data_margin must not be negative")
        if errors:
            for msg in errors:
                logger.error("Invalid backtest setup: %s", msg)
            raise InvalidStrategyConfigError(errors)
        self.strategy = strategy
        self.risk_manager = risk_manager
        self.initial_capital = initial_capital
        self.min_data_margin = min_data_margin
        self.max_workers = max(1, int(max_workers))

    @classmethod
    def from_config(cls, config: Config) -> "BacktestEngine":
        strategy = build_strategy(config.strategy, config.strategy_params)
        risk_manager = RiskManager(
            position_fraction=config.position_fraction,
            fee_rate=config.fee_rate,
            stop_loss_pct=config.stop_loss_pct,
            take_profit_pct=config.take_profit_pct,
        )
        return cls(
            strategy=strategy,
            risk_manager=risk_manager,
            initial_capital=config.initial_capital,
            min_data_margin=config.min_data_margin,
            max_workers=config.max_workers,
        )

    @property
    def min_required_candles(self) -> int:
        return self.strategy.min_candles + self.min_data_margin

    def run_symbol(self, symbol: str, candles: Optional[pd.DataFrame]) -> SymbolResult:
        """
        Backtest a single symbol. Raises InsufficientDataError when the candle
        count is below the strategy look-back plus margin.
        """
        available = 0 if candles is None else len(candles)
        if available < self.min_required_candles:
            raise InsufficientDataError(symbol, available, self.min_required_candles)
        candles = validate_candles(candles, symbol)

        signals = self.strategy.generate_signals(candles)
        directional = [s for s in signals if s.is_directional]
        logger.debug("%s: %d candles, %d signals (%d directional)", symbol, available, len(signals), len(directional))

        sim = TradeSimulator(self.risk_manager, self.initial_capital).run(signals)
        result = self._summarise(symbol, sim)
        result.data_points = available
        result.signal_count = len(directional)
        result.signal_kinds = SymbolResult.count_signal_kinds(signals)
        logger.info(
            "%s: %d trades, return %.2f%%, win rate %.1f%%",
            symbol, result.total_trades, result.total_return, result.win_rate,
        )
        return result

    def _summarise(self, symbol: str, sim: SimulationResult) -> SymbolResult:
        pnls = [t.pnl for t in sim.trades]
        avg_win, avg_loss = average_win_loss(pnls)
        durations = [t.duration_seconds for t in sim.trades]
        return SymbolResult(
            symbol=symbol,
            status=SymbolStatus.COMPLETED,
            trades=sim.trades,
            initial_capital=sim.initial_capital,
            final_capital=sim.final_capital,
            total_return=(sim.final_capital - sim.initial_capital) / sim.initial_capital * 100.0,
            total_trades=len(sim.trades),
            winning_trades=sum(1 for p in pnls if p > 0),
            losing_trades=sum(1 for p in pnls if p < 0),
            win_rate=win_rate(pnls),
            total_fees=sim.total_fees,
            max_drawdown=max_drawdown(sim.capital_curve),
            profit_factor=profit_factor(pnls),
            avg_win=avg_win,
            avg_loss=avg_loss,
            avg_trade_duration=sum(durations) / len(durations) if durations else 0.0,
            capital_curve=sim.capital_curve,
        )

    def _run_isolated(self, symbol: str, candles: Optional[pd.DataFrame]) -> SymbolResult:
        """run_symbol with per-symbol error capture: skipped on insufficient data, failed otherwise."""
        try:
            return self.run_symbol(symbol, candles)
        except InsufficientDataError as e:
            logger.warning("Skipping %s: %s", symbol, e)
            return SymbolResult(symbol=symbol, status=SymbolStatus.SKIPPED, error=str(e))
        except Exception as e:
            logger.exception("Backtest failed for %s: %s", symbol, e)
            return SymbolResult(symbol=symbol, status=SymbolStatus.FAILED, error=f"{type(e).__name__}: {e}")

    def run(
        self,
        candles_by_symbol: Mapping[str, Optional[pd.DataFrame]],
        fetch_errors: Optional[Mapping[str, str]] = None,
    ) -> BatchResult:
        """Backtest every symbol, then aggregate. fetch_errors are recorded as failed symbols."""
        items: List[Tuple[str, Optional[pd.DataFrame]]] = list(candles_by_symbol.items())
        logger.info("Running %s on %d symbols (workers=%d)", self.strategy, len(items), self.max_workers)

        if self.max_workers > 1 and len(items) > 1:
            with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
                outcomes = list(pool.map(lambda item: self._run_isolated(*item), items))
        else:
            outcomes = [self._run_isolated(symbol, candles) for symbol, candles in items]

        batch = BatchResult()
        for outcome in outcomes:
            if outcome.status == SymbolStatus.COMPLETED:
                batch.results[outcome.symbol] = outcome
            elif outcome.status == SymbolStatus.SKIPPED:
                batch.skipped[outcome.symbol] = outcome.error or ""
            else:
                batch.failed[outcome.symbol] = outcome.error or ""
        for symbol, reason in (fetch_errors or {}).items():
            batch.failed.setdefault(symbol, f"UpstreamDataError: {reason}")

        batch.metrics = compute_overall_metrics(batch.results)
        logger.info(
            "Backtest done: %d succeeded, %d skipped, %d failed",
            batch.successful, len(batch.skipped), len(batch.failed),
        )
        return batch
