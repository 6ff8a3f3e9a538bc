"""
Core data types for candles, signals, positions, trades, and per-symbol results.
"""

from __future__ import annotations
from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional

import pandas as pd


class SignalDirection(str, Enum):
    BUY = "buy"
    SELL = "sell"
    NONE = "none"


class PositionSide(str, Enum):
    LONG = "long"
    SHORT = "short"


class ExitReason(str, Enum):
    SIGNAL = "signal"
    STOP_LOSS = "stop_loss"
    TAKE_PROFIT = "take_profit"
    END_OF_PERIOD = "end_of_period"


class SymbolStatus(str, Enum):
    COMPLETED = "completed"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(frozen=True)
class Candle:
    """OHLCV candle."""
    time: pd.Timestamp
    open: float
    high: float
    low: float
    close: float
    volume: float


@dataclass(frozen=True)
class Signal:
    """Directional intent for one candle, past indicator warm-up."""
    index: int
    timestamp: pd.Timestamp
    price: float
    direction: SignalDirection = SignalDirection.NONE
    kind: str = "hold"
    metadata: dict = field(default_factory=dict, compare=False)

    @property
    def is_directional(self) -> bool:
        return self.direction is not SignalDirection.NONE


@dataclass
class Position:
    """Open position state."""
    side: PositionSide
    entry_price: float
    entry_time: pd.Timestamp
    size: float
    entry_fee: float = 0.0


@dataclass(frozen=True)
class Trade:
    """Closed position. fees = entry fee + exit fee; pnl is price P&L before fees."""
    entry_time: pd.Timestamp
    exit_time: pd.Timestamp
    side: PositionSide
    entry_price: float
    exit_price: float
    size: float
    pnl: float
    fees: float
    return_pct: float
    exit_reason: ExitReason

    @property
    def net_pnl(self) -> float:
        return self.pnl - self.fees

    @property
    def duration_seconds(self) -> float:
        return (pd.Timestamp(self.exit_time) - pd.Timestamp(self.entry_time)).total_seconds()


@dataclass
class SymbolResult:
    """Backtest outcome for one symbol."""
    symbol: str
    status: SymbolStatus = SymbolStatus.COMPLETED
    trades: List[Trade] = field(default_factory=list)
    initial_capital: float = 0.0
    final_capital: float = 0.0
    total_return: float = 0.0
    total_trades: int = 0
    winning_trades: int = 0
    losing_trades: int = 0
    win_rate: float = 0.0
    total_fees: float = 0.0
    max_drawdown: float = 0.0
    profit_factor: float = 0.0
    avg_win: float = 0.0
    avg_loss: float = 0.0
    avg_trade_duration: float = 0.0
    capital_curve: List[float] = field(default_factory=list)
    data_points: int = 0
    signal_count: int = 0
    signal_kinds: Dict[str, int] = field(default_factory=dict)
    error: Optional[str] = None

    @staticmethod
    def count_signal_kinds(signals: List[Signal]) -> Dict[str, int]:
        return dict(Counter(s.kind for s in signals if s.is_directional))
