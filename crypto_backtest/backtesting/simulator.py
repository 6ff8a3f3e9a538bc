"""
Trade lifecycle simulator: FLAT / LONG / SHORT state machine over a signal sequence.

Per signal: forced exit (stop-loss / take-profit) first, then an opposing
signal closes the open side, then a flat book opens on any directional
signal. An open position at the end closes as end_of_period at the last price.
"""

from __future__ import annotations
import logging
import math
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from crypto_backtest.core.errors import ComputationError
from crypto_backtest.core.types import (
    ExitReason,
    Position,
    PositionSide,
    Signal,
    SignalDirection,
    Trade,
)
from crypto_backtest.risk.manager import RiskManager

logger = logging.getLogger("crypto_backtest.backtest.simulator")

_SIDE_FOR = {
    SignalDirection.BUY: PositionSide.LONG,
    SignalDirection.SELL: PositionSide.SHORT,
}


@dataclass
class SimulationResult:
    """Ledger and capital path of one simulation run."""
    initial_capital: float
    final_capital: float
    trades: List[Trade] = field(default_factory=list)
    capital_curve: List[float] = field(default_factory=list)
    total_fees: float = 0.0


@dataclass
class SimulationContext:
    """Mutable state of a single run. Built fresh by every TradeSimulator.run()."""
    capital: float
    position: Optional[Position] = None
    trades: List[Trade] = field(default_factory=list)
    capital_curve: List[float] = field(default_factory=list)
    total_fees: float = 0.0


class TradeSimulator:
    """Turns signals into trades. Holds configuration only; safe to reuse across symbols."""

    def __init__(self, risk_manager: RiskManager, initial_capital: float = 10000.0):
        self.risk_manager = risk_manager
        self.initial_capital = initial_capital

    def run(self, signals: Sequence[Signal]) -> SimulationResult:
        ctx = SimulationContext(capital=self.initial_capital, capital_curve=[self.initial_capital])
        last_ts = None
        for signal in signals:
            if last_ts is not None and signal.timestamp <= last_ts:
                raise ComputationError(f"signals out of order at {signal.timestamp} (previous {last_ts})")
            last_ts = signal.timestamp
            if not math.isfinite(signal.price):
                raise ComputationError(f"non-finite price at {signal.timestamp}")
            self._step(ctx, signal)

        if ctx.position is not None:
            self._close(ctx, signals[-1], ExitReason.END_OF_PERIOD)

        return SimulationResult(
            initial_capital=self.initial_capital,
            final_capital=ctx.capital,
            trades=ctx.trades,
            capital_curve=ctx.capital_curve,
            total_fees=ctx.total_fees,
        )

    def _step(self, ctx: SimulationContext, signal: Signal) -> None:
        pos = ctx.position
        if pos is not None:
            reason = self.risk_manager.exit_reason(pos.side, pos.entry_price, signal.price)
            if reason is not None:
                self._close(ctx, signal, reason)

        side = _SIDE_FOR.get(signal.direction)
        if side is None:
            return
        if ctx.position is not None and ctx.position.side != side:
            self._close(ctx, signal, ExitReason.SIGNAL)
        if ctx.position is None:
            self._open(ctx, signal, side)

    def _open(self, ctx: SimulationContext, signal: Signal, side: PositionSide) -> None:
        if signal.price <= 0:
            logger.warning("Skipping %s entry at %s: non-positive price %s", side.value, signal.timestamp, signal.price)
            return
        size = self.risk_manager.position_size(ctx.capital, signal.price)
        fee = self.risk_manager.fee(size, signal.price)
        ctx.capital -= fee
        ctx.total_fees += fee
        ctx.position = Position(
            side=side,
            entry_price=signal.price,
            entry_time=signal.timestamp,
            size=size,
            entry_fee=fee,
        )

    def _close(self, ctx: SimulationContext, signal: Signal, reason: ExitReason) -> None:
        pos = ctx.position
        exit_price = signal.price
        if pos.side == PositionSide.LONG:
            pnl = (exit_price - pos.entry_price) * pos.size
        else:
            pnl = (pos.entry_price - exit_price) * pos.size
        exit_fee = self.risk_manager.fee(pos.size, exit_price)
        ctx.capital += pnl - exit_fee
        ctx.total_fees += exit_fee
        ctx.trades.append(Trade(
            entry_time=pos.entry_time,
            exit_time=signal.timestamp,
            side=pos.side,
            entry_price=pos.entry_price,
            exit_price=exit_price,
            size=pos.size,
            pnl=pnl,
            fees=pos.entry_fee + exit_fee,
            return_pct=self.risk_manager.price_change_pct(pos.side, pos.entry_price, exit_price),
            exit_reason=reason,
        ))
        ctx.capital_curve.append(ctx.capital)
        ctx.position = None
