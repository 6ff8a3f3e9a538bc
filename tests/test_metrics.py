"""Unit tests for analytics.metrics."""

import pytest
from crypto_backtest.analytics.metrics import (
    DISTRIBUTION_BUCKETS,
    compute_overall_metrics,
    distribution_bucket,
    max_drawdown,
    pearson_correlation,
    profit_factor,
    risk_adjusted_metrics,
    win_rate,
)
from crypto_backtest.core.types import SymbolResult, SymbolStatus


def _result(symbol, ret, trades=2, wins=1, losses=1, pf=1.5, dd=5.0, signals=4, kinds=None):
    return SymbolResult(
        symbol=symbol,
        total_return=ret,
        final_capital=10000.0 * (1 + ret / 100.0),
        initial_capital=10000.0,
        total_trades=trades,
        winning_trades=wins,
        losing_trades=losses,
        win_rate=wins / trades * 100.0 if trades else 0.0,
        profit_factor=pf,
        max_drawdown=dd,
        signal_count=signals,
        avg_trade_duration=3600.0,
        signal_kinds=kinds or {},
    )


def test_win_rate():
    assert win_rate([1, -1, 1, 1]) == 75.0
    assert win_rate([]) == 0.0


def test_profit_factor():
    assert profit_factor([10, -5, 10, -5]) == 2.0
    assert profit_factor([10, 10]) == float("inf")
    assert profit_factor([-5, -5]) == 0.0
    assert profit_factor([]) == 0.0


def test_max_drawdown():
    # capital 100 -> 120 -> 100 -> 110  =>  peak 120, dd 20/120 = 16.67%
    assert max_drawdown([100.0, 120.0, 100.0, 110.0]) == pytest.approx(16.6667, rel=1e-4)
    assert max_drawdown([100.0, 110.0, 120.0]) == 0.0
    assert max_drawdown([]) == 0.0


def test_pearson_correlation():
    assert pearson_correlation([1, 2, 3], [2, 4, 6]) == pytest.approx(1.0)
    assert pearson_correlation([1, 2, 3], [6, 4, 2]) == pytest.approx(-1.0)
    assert pearson_correlation([1, 1, 1], [1, 2, 3]) == 0.0
    assert pearson_correlation([], []) == 0.0


def test_risk_adjusted_constant_returns():
    m = risk_adjusted_metrics([2.0] * 5)
    assert m.sharpe_ratio == 0.0
    assert m.volatility == 0.0


@pytest.mark.parametrize("ret,bucket", [
    (-12.0, "loss_high"),
    (-10.0, "loss_medium"),
    (-7.0, "loss_medium"),
    (-1.0, "loss_low"),
    (0.0, "gain_low"),
    (10.0, "gain_medium"),
    (15.0, "gain_high"),
])
def test_distribution_bucket(ret, bucket):
    assert distribution_bucket(ret) == bucket


def test_empty_results_give_zero_metrics():
    m = compute_overall_metrics({})
    assert m.total_symbols == 0
    assert m.success_rate == 0.0
    assert m.top_performers == []
    assert m.best_performer.symbol == "N/A"
    assert m.performance_distribution == {k: 0 for k in DISTRIBUTION_BUCKETS}


def test_success_rate_and_ranking():
    m = compute_overall_metrics({"AUSDT": _result("AUSDT", 10.0), "BUSDT": _result("BUSDT", -5.0)})
    assert m.total_symbols == 2
    assert m.profitable_symbols == 1
    assert m.success_rate == pytest.approx(50.0)
    assert m.average_return == pytest.approx(2.5)
    assert m.median_return == pytest.approx(2.5)
    assert m.best_performer.symbol == "AUSDT"
    assert m.worst_performer.symbol == "BUSDT"
    assert [p.symbol for p in m.top_performers] == ["AUSDT", "BUSDT"]
    assert m.performance_distribution["gain_medium"] == 1
    assert m.performance_distribution["loss_low"] == 1


def test_ties_ranked_by_symbol():
    m = compute_overall_metrics({"ZUSDT": _result("ZUSDT", 5.0), "AUSDT": _result("AUSDT", 5.0)})
    assert [p.symbol for p in m.top_performers] == ["AUSDT", "ZUSDT"]
    assert m.best_performer.symbol == "AUSDT"


def test_skipped_and_failed_are_ignored():
    results = {
        "AUSDT": _result("AUSDT", 3.0),
        "BUSDT": SymbolResult(symbol="BUSDT", status=SymbolStatus.SKIPPED),
        "CUSDT": SymbolResult(symbol="CUSDT", status=SymbolStatus.FAILED, error="boom"),
    }
    m = compute_overall_metrics(results)
    assert m.total_symbols == 1
    assert [p.symbol for p in m.top_performers] == ["AUSDT"]


def test_trade_totals_and_averages():
    results = {
        "AUSDT": _result("AUSDT", 4.0, trades=4, wins=3, losses=1, pf=2.0, dd=2.0),
        "BUSDT": _result("BUSDT", 8.0, trades=2, wins=2, losses=0, pf=float("inf"), dd=6.0),
        "CUSDT": _result("CUSDT", -2.0, trades=0, wins=0, losses=0, pf=0.0, dd=0.0),
    }
    m = compute_overall_metrics(results)
    assert m.total_trades == 6
    assert m.total_winning_trades == 5
    assert m.overall_win_rate == pytest.approx(5 / 6 * 100)
    assert m.max_drawdown == 6.0
    assert m.average_drawdown == pytest.approx(8.0 / 3)
    # only symbols with losing trades count toward the profit factor average
    assert m.average_profit_factor == pytest.approx(2.0)
    assert m.average_trade_duration == pytest.approx(3600.0)


def test_signal_kind_counts_and_correlation():
    results = {
        "AUSDT": _result("AUSDT", 1.0, signals=2, kinds={"crossover_up": 1, "crossover_down": 1}),
        "BUSDT": _result("BUSDT", 2.0, signals=4, kinds={"crossover_up": 3, "crossover_down": 1}),
        "CUSDT": _result("CUSDT", 3.0, signals=6, kinds={"crossover_up": 2}),
    }
    m = compute_overall_metrics(results)
    assert m.signal_kind_counts == {"crossover_down": 2, "crossover_up": 6}
    assert m.signal_volume_correlation == pytest.approx(1.0)
