"""Unit tests for backtesting.simulator."""

import pytest

from conftest import make_signal
from crypto_backtest.backtesting.simulator import TradeSimulator
from crypto_backtest.core.errors import ComputationError
from crypto_backtest.core.types import ExitReason, PositionSide, SignalDirection
from crypto_backtest.risk.manager import RiskManager

BUY = SignalDirection.BUY
SELL = SignalDirection.SELL


def _sim(**risk):
    risk.setdefault("position_fraction", 0.5)
    risk.setdefault("fee_rate", 0.0)
    return TradeSimulator(RiskManager(**risk), initial_capital=10000.0)


def test_no_signals_no_trades():
    result = _sim().run([])
    assert result.trades == []
    assert result.final_capital == 10000.0
    assert result.capital_curve == [10000.0]


def test_fees_and_capital_accounting():
    sim = _sim(position_fraction=0.2, fee_rate=0.001)
    result = sim.run([make_signal(0, 100, BUY), make_signal(1, 110)])
    (trade,) = result.trades
    # size 20; entry fee 2.0, exit fee 2.2
    assert trade.size == pytest.approx(20.0)
    assert trade.pnl == pytest.approx(200.0)
    assert trade.fees == pytest.approx(4.2)
    assert trade.net_pnl == pytest.approx(195.8)
    assert trade.exit_reason == ExitReason.END_OF_PERIOD
    assert result.final_capital == pytest.approx(10195.8)
    assert result.total_fees == pytest.approx(4.2)


def test_capital_invariant():
    signals = [
        make_signal(0, 100, BUY),
        make_signal(1, 104, SELL),
        make_signal(2, 97),
        make_signal(3, 99, BUY),
        make_signal(4, 95, SELL),
        make_signal(5, 93),
    ]
    result = _sim(fee_rate=0.0005).run(signals)
    pnl = sum(t.pnl for t in result.trades)
    fees = sum(t.fees for t in result.trades)
    assert result.final_capital == pytest.approx(10000.0 + pnl - fees)
    assert len(result.capital_curve) == len(result.trades) + 1
    assert result.capital_curve[-1] == pytest.approx(result.final_capital)


def test_short_pnl_and_reversal():
    result = _sim().run([make_signal(0, 100, SELL), make_signal(1, 90, BUY)])
    short, long_ = result.trades
    assert short.side == PositionSide.SHORT
    assert short.size == pytest.approx(50.0)
    assert short.pnl == pytest.approx(500.0)
    assert short.return_pct == pytest.approx(10.0)
    assert short.exit_reason == ExitReason.SIGNAL
    assert long_.side == PositionSide.LONG
    assert long_.exit_reason == ExitReason.END_OF_PERIOD
    assert long_.pnl == pytest.approx(0.0)


def test_same_direction_signal_does_not_stack():
    result = _sim().run([make_signal(0, 100, BUY), make_signal(1, 105, BUY), make_signal(2, 110, SELL)])
    first = result.trades[0]
    assert first.entry_price == 100
    assert first.exit_price == 110


def test_stop_loss_on_signal_price():
    signals = [make_signal(0, 100, BUY), make_signal(1, 99), make_signal(2, 98), make_signal(3, 120)]
    result = _sim(stop_loss_pct=2.0).run(signals)
    (trade,) = result.trades
    assert trade.exit_reason == ExitReason.STOP_LOSS
    assert trade.exit_price == 98
    assert trade.return_pct == pytest.approx(-2.0)


def test_take_profit_exit():
    signals = [make_signal(0, 100, SELL), make_signal(1, 94), make_signal(2, 80)]
    result = _sim(take_profit_pct=5.0).run(signals)
    (trade,) = result.trades
    assert trade.exit_reason == ExitReason.TAKE_PROFIT
    assert trade.exit_price == 94


def test_forced_exit_then_reopen_on_same_bar():
    signals = [make_signal(0, 100, BUY), make_signal(1, 97, BUY), make_signal(2, 97)]
    result = _sim(stop_loss_pct=2.0).run(signals)
    stopped, reopened = result.trades
    assert stopped.exit_reason == ExitReason.STOP_LOSS
    assert reopened.entry_time == stopped.exit_time
    assert reopened.exit_reason == ExitReason.END_OF_PERIOD


def test_trades_do_not_overlap():
    signals = [make_signal(i, 100 + (i % 3), BUY if i % 2 == 0 else SELL) for i in range(12)]
    trades = _sim(fee_rate=0.001).run(signals).trades
    assert trades
    for a, b in zip(trades, trades[1:]):
        assert a.exit_time <= b.entry_time


def test_run_is_idempotent():
    sim = _sim(stop_loss_pct=3.0)
    signals = [make_signal(0, 100, BUY), make_signal(1, 96), make_signal(2, 101, SELL), make_signal(3, 99)]
    first = sim.run(signals)
    second = sim.run(signals)
    assert first == second


def test_non_positive_price_skips_entry():
    result = _sim().run([make_signal(0, 0.0, BUY), make_signal(1, 10.0)])
    assert result.trades == []
    assert result.final_capital == 10000.0


def test_out_of_order_signals_raise():
    with pytest.raises(ComputationError):
        _sim().run([make_signal(1, 100, BUY), make_signal(0, 101)])


def test_non_finite_price_raises():
    with pytest.raises(ComputationError):
        _sim().run([make_signal(0, 100, BUY), make_signal(1, float("nan"))])
