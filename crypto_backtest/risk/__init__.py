"""Risk management: position sizing, fees, stop-loss and take-profit."""

from crypto_backtest.risk.manager import RiskManager

__all__ = ["RiskManager"]
