"""Unit tests for risk.manager."""

import pytest
from crypto_backtest.risk.manager import RiskManager
from crypto_backtest.core.types import ExitReason, PositionSide


def test_position_size_fraction_of_capital():
    rm = RiskManager(position_fraction=0.2)
    # 10000 * 0.2 / 100 = 20 units
    assert rm.position_size(10000.0, 100.0) == pytest.approx(20.0)


def test_position_size_non_positive_price():
    rm = RiskManager()
    assert rm.position_size(10000.0, 0.0) == 0.0
    assert rm.position_size(10000.0, -1.0) == 0.0


def test_fee_on_notional():
    rm = RiskManager(fee_rate=0.001)
    assert rm.fee(20.0, 100.0) == pytest.approx(2.0)


def test_price_change_pct_by_side():
    assert RiskManager.price_change_pct(PositionSide.LONG, 100.0, 110.0) == pytest.approx(10.0)
    assert RiskManager.price_change_pct(PositionSide.SHORT, 100.0, 110.0) == pytest.approx(-10.0)


def test_exit_disabled_by_default():
    rm = RiskManager()
    assert rm.exit_reason(PositionSide.LONG, 100.0, 50.0) is None
    assert rm.exit_reason(PositionSide.LONG, 100.0, 200.0) is None


def test_stop_loss_long_and_short():
    rm = RiskManager(stop_loss_pct=2.0)
    assert rm.exit_reason(PositionSide.LONG, 100.0, 98.0) == ExitReason.STOP_LOSS
    assert rm.exit_reason(PositionSide.LONG, 100.0, 99.0) is None
    assert rm.exit_reason(PositionSide.SHORT, 100.0, 103.0) == ExitReason.STOP_LOSS
    assert rm.exit_reason(PositionSide.SHORT, 100.0, 97.0) is None


def test_take_profit():
    rm = RiskManager(stop_loss_pct=2.0, take_profit_pct=5.0)
    assert rm.exit_reason(PositionSide.LONG, 100.0, 106.0) == ExitReason.TAKE_PROFIT
    assert rm.exit_reason(PositionSide.SHORT, 100.0, 94.0) == ExitReason.TAKE_PROFIT
    assert rm.exit_reason(PositionSide.LONG, 100.0, 103.0) is None


def test_validate_defaults_and_bounds():
    assert RiskManager().validate() == []
    assert RiskManager(position_fraction=1.0, fee_rate=0.0, stop_loss_pct=50, take_profit_pct=100).validate() == []
    errors = RiskManager(position_fraction=0, fee_rate=0.1, stop_loss_pct=-1, take_profit_pct=101).validate()
    assert errors == [
        "Position fraction must be greater than 0 and at most 1",
        "Fee rate must be between 0 and 0.1",
        "Stop loss must be between 0 and 50%",
        "Take profit must be between 0 and 100%",
    ]


def test_validate_rejects_non_numeric_values():
    assert RiskManager(position_fraction="0.2").validate() == [
        "Position fraction must be greater than 0 and at most 1"
    ]
    assert RiskManager(fee_rate=None).validate() == ["Fee rate must be between 0 and 0.1"]
