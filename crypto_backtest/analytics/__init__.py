"""Analytics: per-symbol statistics and cross-symbol aggregate metrics."""

from crypto_backtest.analytics.metrics import (
    OverallMetrics,
    PerformerSummary,
    RiskAdjustedMetrics,
    compute_overall_metrics,
    max_drawdown,
    win_rate,
    profit_factor,
    average_win_loss,
    pearson_correlation,
    risk_adjusted_metrics,
)

__all__ = [
    "OverallMetrics",
    "PerformerSummary",
    "RiskAdjustedMetrics",
    "compute_overall_metrics",
    "max_drawdown",
    "win_rate",
    "profit_factor",
    "average_win_loss",
    "pearson_correlation",
    "risk_adjusted_metrics",
]
