"""Abstract market data interface: candle history and symbol universe."""

from __future__ import annotations
import logging
from abc import ABC, abstractmethod
from typing import Dict, List, Sequence, Tuple

import pandas as pd

from crypto_backtest.core.errors import UpstreamDataError

logger = logging.getLogger("crypto_backtest.data")


class MarketDataProvider(ABC):
    """Source of ordered OHLCV candles. Rate limiting is the provider's concern."""

    @abstractmethod
    def get_candles(self, symbol: str, interval: str, days: int) -> pd.DataFrame:
        """Return OHLCV DataFrame with columns: time, open, high, low, close, volume."""
        pass

    @abstractmethod
    def top_symbols(self, limit: int = 30) -> List[str]:
        """Symbols to backtest, most liquid first."""
        pass

    def fetch_many(
        self,
        symbols: Sequence[str],
        interval: str,
        days: int,
    ) -> Tuple[Dict[str, pd.DataFrame], Dict[str, str]]:
        """
        Fetch each symbol in turn. A failing symbol is recorded in the error map
        and the rest still load. Returns (data, errors).
        """
        data: Dict[str, pd.DataFrame] = {}
        errors: Dict[str, str] = {}
        logger.info("Fetching %d symbols (%s, %d days)", len(symbols), interval, days)
        for n, symbol in enumerate(symbols, start=1):
            try:
                data[symbol] = self.get_candles(symbol, interval, days)
                logger.info("[%d/%d] %s: %d candles", n, len(symbols), symbol, len(data[symbol]))
            except UpstreamDataError as e:
                logger.warning("[%d/%d] %s: fetch failed: %s", n, len(symbols), symbol, e)
                errors[symbol] = str(e)
        logger.info("Fetch done: %d ok, %d failed", len(data), len(errors))
        return data, errors
