"""
Performance metrics: per-symbol helpers (drawdown, win rate, profit factor) and
the cross-symbol aggregate (success rate, return statistics, ranking,
distribution buckets, signal/return correlation).
All percentages are in percent units (12.5 == 12.5%).
"""

from __future__ import annotations
import math
from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Sequence

import numpy as np

from crypto_backtest.core.types import SymbolResult, SymbolStatus

DISTRIBUTION_BUCKETS = ("loss_high", "loss_medium", "loss_low", "gain_low", "gain_medium", "gain_high")


@dataclass
class PerformerSummary:
    """One row of the ranking."""
    symbol: str = "N/A"
    total_return: float = 0.0
    final_capital: float = 0.0
    trades: int = 0
    winning_trades: int = 0
    losing_trades: int = 0
    win_rate: float = 0.0
    total_fees: float = 0.0
    max_drawdown: float = 0.0
    profit_factor: float = 0.0
    avg_trade_duration: float = 0.0
    data_points: int = 0
    signal_count: int = 0

    @classmethod
    def from_result(cls, r: SymbolResult) -> "PerformerSummary":
        return cls(
            symbol=r.symbol,
            total_return=r.total_return,
            final_capital=r.final_capital,
            trades=r.total_trades,
            winning_trades=r.winning_trades,
            losing_trades=r.losing_trades,
            win_rate=r.win_rate,
            total_fees=r.total_fees,
            max_drawdown=r.max_drawdown,
            profit_factor=r.profit_factor,
            avg_trade_duration=r.avg_trade_duration,
            data_points=r.data_points,
            signal_count=r.signal_count,
        )


@dataclass
class RiskAdjustedMetrics:
    sharpe_ratio: float = 0.0
    sortino_ratio: float = 0.0
    volatility: float = 0.0


@dataclass
class OverallMetrics:
    """Cross-symbol aggregate. Derived fresh from results on every call."""
    total_symbols: int = 0
    profitable_symbols: int = 0
    success_rate: float = 0.0
    average_return: float = 0.0
    median_return: float = 0.0
    std_dev_return: float = 0.0
    min_return: float = 0.0
    max_return: float = 0.0
    best_performer: PerformerSummary = field(default_factory=PerformerSummary)
    worst_performer: PerformerSummary = field(default_factory=PerformerSummary)
    top_performers: List[PerformerSummary] = field(default_factory=list)
    total_trades: int = 0
    total_winning_trades: int = 0
    total_losing_trades: int = 0
    overall_win_rate: float = 0.0
    max_drawdown: float = 0.0
    average_drawdown: float = 0.0
    average_profit_factor: float = 0.0
    average_trade_duration: float = 0.0
    performance_distribution: Dict[str, int] = field(
        default_factory=lambda: {k: 0 for k in DISTRIBUTION_BUCKETS}
    )
    signal_volume_correlation: float = 0.0
    signal_kind_counts: Dict[str, int] = field(default_factory=dict)
    sharpe_ratio: float = 0.0
    sortino_ratio: float = 0.0
    volatility: float = 0.0


def max_drawdown(capital_curve: Sequence[float]) -> float:
    """Largest peak-to-trough decline in percent of the running peak. Always >= 0."""
    if len(capital_curve) == 0:
        return 0.0
    arr = np.asarray(capital_curve, dtype=float)
    peak = np.maximum.accumulate(arr)
    dd = (peak - arr) / np.where(peak > 0, peak, 1.0)
    return float(max(np.max(dd), 0.0)) * 100.0


def win_rate(pnls: Sequence[float]) -> float:
    """Percent of trades with positive PnL."""
    if not pnls:
        return 0.0
    return sum(1 for p in pnls if p > 0) / len(pnls) * 100.0


def average_win_loss(pnls: Sequence[float]) -> tuple[float, float]:
    wins = [p for p in pnls if p > 0]
    losses = [p for p in pnls if p < 0]
    avg_win = sum(wins) / len(wins) if wins else 0.0
    avg_loss = sum(losses) / len(losses) if losses else 0.0
    return avg_win, avg_loss


def profit_factor(pnls: Sequence[float]) -> float:
    """|average win / average loss|. inf with wins and no losses, 0 without wins."""
    avg_win, avg_loss = average_win_loss(pnls)
    if avg_loss == 0:
        return float("inf") if avg_win > 0 else 0.0
    return abs(avg_win / avg_loss)


def pearson_correlation(x: Sequence[float], y: Sequence[float]) -> float:
    """Linear correlation coefficient; 0 for empty, mismatched, or constant input."""
    if len(x) != len(y) or len(x) == 0:
        return 0.0
    xa = np.asarray(x, dtype=float)
    ya = np.asarray(y, dtype=float)
    n = len(xa)
    numerator = n * np.sum(xa * ya) - np.sum(xa) * np.sum(ya)
    denominator = math.sqrt(
        max(n * np.sum(xa * xa) - np.sum(xa) ** 2, 0.0) * max(n * np.sum(ya * ya) - np.sum(ya) ** 2, 0.0)
    )
    if denominator == 0:
        return 0.0
    return float(numerator / denominator)


def risk_adjusted_metrics(returns: Sequence[float], risk_free_rate: float = 0.0) -> RiskAdjustedMetrics:
    """Sharpe and Sortino of a return sample (not annualized), plus its volatility."""
    if not returns:
        return RiskAdjustedMetrics()
    arr = np.asarray(returns, dtype=float)
    excess = arr.mean() - risk_free_rate
    std = float(arr.std())
    downside = arr[arr < 0]
    downside_std = float(downside.std()) if len(downside) else 0.0
    return RiskAdjustedMetrics(
        sharpe_ratio=float(excess / std) if std > 1e-12 else 0.0,
        sortino_ratio=float(excess / downside_std) if downside_std > 1e-12 else 0.0,
        volatility=std,
    )


def distribution_bucket(total_return: float) -> str:
    if total_return < -10:
        return "loss_high"
    if total_return < -5:
        return "loss_medium"
    if total_return < 0:
        return "loss_low"
    if total_return < 5:
        return "gain_low"
    if total_return < 15:
        return "gain_medium"
    return "gain_high"


def compute_overall_metrics(results: Mapping[str, SymbolResult]) -> OverallMetrics:
    """
    Aggregate completed symbol results. Skipped and failed entries are ignored.
    Empty input gives the zero-valued OverallMetrics.
    """
    done = [r for r in results.values() if r.status == SymbolStatus.COMPLETED]
    if not done:
        return OverallMetrics()

    returns = [r.total_return for r in done]
    ranked = sorted(done, key=lambda r: (-r.total_return, r.symbol))
    worst = min(done, key=lambda r: (r.total_return, r.symbol))

    total_trades = sum(r.total_trades for r in done)
    total_wins = sum(r.winning_trades for r in done)
    total_losses = sum(r.losing_trades for r in done)

    drawdowns = [r.max_drawdown for r in done]
    profit_factors = [
        r.profit_factor for r in done
        if r.losing_trades > 0 and math.isfinite(r.profit_factor)
    ]
    durations = [r.avg_trade_duration for r in done if r.total_trades > 0]

    distribution = {k: 0 for k in DISTRIBUTION_BUCKETS}
    for ret in returns:
        distribution[distribution_bucket(ret)] += 1

    kinds: Counter = Counter()
    for r in done:
        kinds.update(r.signal_kinds)

    risk = risk_adjusted_metrics(returns)
    profitable = sum(1 for ret in returns if ret > 0)

    return OverallMetrics(
        total_symbols=len(done),
        profitable_symbols=profitable,
        success_rate=profitable / len(done) * 100.0,
        average_return=float(np.mean(returns)),
        median_return=float(np.median(returns)),
        std_dev_return=float(np.std(returns)),
        min_return=min(returns),
        max_return=max(returns),
        best_performer=PerformerSummary.from_result(ranked[0]),
        worst_performer=PerformerSummary.from_result(worst),
        top_performers=[PerformerSummary.from_result(r) for r in ranked],
        total_trades=total_trades,
        total_winning_trades=total_wins,
        total_losing_trades=total_losses,
        overall_win_rate=total_wins / total_trades * 100.0 if total_trades else 0.0,
        max_drawdown=max(drawdowns),
        average_drawdown=float(np.mean(drawdowns)),
        average_profit_factor=float(np.mean(profit_factors)) if profit_factors else 0.0,
        average_trade_duration=float(np.mean(durations)) if durations else 0.0,
        performance_distribution=distribution,
        signal_volume_correlation=pearson_correlation([r.signal_count for r in done], returns),
        signal_kind_counts=dict(sorted(kinds.items())),
        sharpe_ratio=risk.sharpe_ratio,
        sortino_ratio=risk.sortino_ratio,
        volatility=risk.volatility,
    )
