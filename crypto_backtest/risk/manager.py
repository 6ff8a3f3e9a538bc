"""
Risk manager: position sizing as a fraction of capital, fees, stop-loss / take-profit checks.
"""

from __future__ import annotations
import logging
from typing import List, Optional

from crypto_backtest.core.types import ExitReason, PositionSide

logger = logging.getLogger("crypto_backtest.risk")


def is_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


class RiskManager:
    """
    Sizes positions as position_fraction of current capital and charges
    fee_rate on notional at entry and at exit. A stop_loss_pct or
    take_profit_pct of 0 disables that exit.
    """

    def __init__(
        self,
        position_fraction: float = 0.20,
        fee_rate: float = 0.001,
        stop_loss_pct: float = 0.0,
        take_profit_pct: float = 0.0,
    ):
        self.position_fraction = position_fraction
        self.fee_rate = fee_rate
        self.stop_loss_pct = stop_loss_pct
        self.take_profit_pct = take_profit_pct

    def validate(self) -> List[str]:
        """Human-readable parameter errors; empty when valid."""
        errors = []
        if not is_number(self.position_fraction) or not (0 < self.position_fraction <= 1):
            errors.append("Position fraction must be greater than 0 and at most 1")
        if not is_number(self.fee_rate) or not (0 <= self.fee_rate < 0.1):
            errors.append("Fee rate must be between 0 and 0.1")
        if not is_number(self.stop_loss_pct) or not (0 <= self.stop_loss_pct <= 50):
            errors.append("Stop loss must be between 0 and 50%")
        if not is_number(self.take_profit_pct) or not (0 <= self.take_profit_pct <= 100):
            errors.append("Take profit must be between 0 and 100%")
        return errors

    def position_size(self, capital: float, price: float) -> float:
        """Units bought/sold: (capital * position_fraction) / price. 0 when price is not positive."""
        if price <= 0:
            return 0.0
        return capital * self.position_fraction / price

    def fee(self, size: float, price: float) -> float:
        return size * price * self.fee_rate

    @staticmethod
    def price_change_pct(side: PositionSide, entry_price: float, price: float) -> float:
        """Percent move from entry in the position's favour (negative = adverse)."""
        if side == PositionSide.LONG:
            return (price - entry_price) / entry_price * 100.0
        return (entry_price - price) / entry_price * 100.0

    def exit_reason(self, side: PositionSide, entry_price: float, price: float) -> Optional[ExitReason]:
        """Forced exit due at `price`, stop-loss checked before take-profit."""
        if self.stop_loss_pct <= 0 and self.take_profit_pct <= 0:
            return None
        change = self.price_change_pct(side, entry_price, price)
        if self.stop_loss_pct > 0 and change <= -self.stop_loss_pct:
            logger.debug("Stop loss: %s entry=%.6f price=%.6f change=%.2f%%", side.value, entry_price, price, change)
            return ExitReason.STOP_LOSS
        if self.take_profit_pct > 0 and change >= self.take_profit_pct:
            logger.debug("Take profit: %s entry=%.6f price=%.6f change=%.2f%%", side.value, entry_price, price, change)
            return ExitReason.TAKE_PROFIT
        return None
