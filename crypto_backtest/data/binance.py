"""
Binance USDT-M futures market data with retry and rate-limit handling.
Public endpoints only; API keys are optional.
"""

from __future__ import annotations
import logging
import re
import time
from datetime import datetime, timedelta, timezone
from typing import Callable, List, Optional

import pandas as pd
import requests

from binance.client import Client
from binance.exceptions import BinanceAPIException, BinanceRequestException

from crypto_backtest.core.errors import UpstreamDataError
from crypto_backtest.data.base import MarketDataProvider
from crypto_backtest.data.candles import CANDLE_COLUMNS, validate_candles
from crypto_backtest.utils.timeframes import expected_candles

logger = logging.getLogger("crypto_backtest.data.binance")

KLINES_LIMIT = 1500
SYMBOL_PATTERN = re.compile(r"^[A-Z0-9]{2,15}USDT$")

FALLBACK_SYMBOLS = [
    "BTCUSDT", "ETHUSDT", "BNBUSDT", "ADAUSDT", "DOTUSDT",
    "XRPUSDT", "LTCUSDT", "BCHUSDT", "LINKUSDT", "EOSUSDT",
    "TRXUSDT", "ETCUSDT", "XLMUSDT", "XMRUSDT", "DASHUSDT",
]

KLINE_FIELDS = [
    "open_time", "open", "high", "low", "close", "volume",
    "close_time", "quote_av", "num_trades", "tb_base_av", "tb_quote_av", "ignore",
]


def validate_symbol(symbol: str) -> bool:
    """USDT-quoted Binance symbol, e.g. BTCUSDT."""
    return isinstance(symbol, str) and bool(SYMBOL_PATTERN.match(symbol))


def retry_on_rate_limit(max_retries: int = 3, base_delay: float = 1.0):
    """Decorator: retry on 429 or 418 (rate limit) with exponential backoff."""
    def decorator(f: Callable):
        def wrapped(*args, **kwargs):
            last_exc = None
            for attempt in range(max_retries):
                try:
                    return f(*args, **kwargs)
                except BinanceAPIException as e:
                    last_exc = e
                    if e.status_code in (429, 418) and attempt < max_retries - 1:
                        delay = base_delay * (2 ** attempt)
                        logger.warning("Rate limited, retry in %.1fs (attempt %d)", delay, attempt + 1)
                        time.sleep(delay)
                    else:
                        raise
            raise last_exc
        return wrapped
    return decorator


def klines_to_frame(raw: List[list]) -> pd.DataFrame:
    """Binance kline rows -> OHLCV frame, deduplicated and sorted by time."""
    if not raw:
        return pd.DataFrame(columns=CANDLE_COLUMNS)
    try:
        df = pd.DataFrame([row[:6] for row in raw], columns=KLINE_FIELDS[:6])
        df[["open", "high", "low", "close", "volume"]] = df[["open", "high", "low", "close", "volume"]].astype(float)
        df["time"] = pd.to_datetime(df["open_time"].astype("int64"), unit="ms")
    except (ValueError, TypeError) as e:
        raise UpstreamDataError(f"malformed kline data: {e}") from e
    df = df.drop_duplicates(subset="time").sort_values("time")
    return df[CANDLE_COLUMNS].reset_index(drop=True)


class BinanceMarketData(MarketDataProvider):
    """Historical klines and liquidity ranking from Binance futures."""

    def __init__(
        self,
        api_key: str = "",
        api_secret: str = "",
        client: Optional[Client] = None,
        now: Optional[Callable[[], datetime]] = None,
    ):
        self._api_key = api_key or None
        self._api_secret = api_secret or None
        self._client = client
        self._now = now or (lambda: datetime.now(timezone.utc))

    @property
    def client(self) -> Client:
        # Created on first use: the constructor of Client talks to the network.
        if self._client is None:
            self._client = Client(self._api_key, self._api_secret)
        return self._client

    @retry_on_rate_limit(max_retries=3, base_delay=1.0)
    def _klines(self, symbol: str, interval: str, start_ms: int, end_ms: int) -> List[list]:
        return self.client.futures_klines(
            symbol=symbol, interval=interval, startTime=start_ms, endTime=end_ms, limit=KLINES_LIMIT,
        )

    @retry_on_rate_limit(max_retries=2)
    def _tickers(self) -> List[dict]:
        return self.client.futures_ticker()

    def get_candles(self, symbol: str, interval: str, days: int) -> pd.DataFrame:
        """
        Page through futures klines from now - days to now, oldest first.
        Returns possibly partial or empty frames; raises UpstreamDataError on API failure.
        """
        if not validate_symbol(symbol):
            raise UpstreamDataError(f"invalid symbol: {symbol!r}")
        end = self._now()
        start = end - timedelta(days=days)
        end_ms = int(end.timestamp() * 1000)
        start_ms = int(start.timestamp() * 1000)
        max_requests = expected_candles(interval, days) // KLINES_LIMIT + 2

        rows: List[list] = []
        cursor = start_ms
        n_requests = 0
        try:
            while cursor < end_ms and n_requests < max_requests:
                raw = self._klines(symbol, interval, cursor, end_ms)
                n_requests += 1
                if not raw:
                    break
                rows.extend(raw)
                if len(raw) < KLINES_LIMIT:
                    break
                cursor = int(raw[-1][0]) + 1
        except (BinanceAPIException, BinanceRequestException, requests.RequestException) as e:
            raise UpstreamDataError(f"{symbol}: {e}") from e
        except (ValueError, TypeError, IndexError, KeyError) as e:
            raise UpstreamDataError(f"{symbol}: malformed kline page: {e}") from e

        df = klines_to_frame(rows)
        if df.empty:
            logger.warning("%s: no klines returned", symbol)
            return df
        window = (df["time"] >= pd.Timestamp(start_ms, unit="ms")) & (df["time"] <= pd.Timestamp(end_ms, unit="ms"))
        df = df[window].reset_index(drop=True)
        logger.debug("%s: %d candles in %d requests", symbol, len(df), n_requests)
        return validate_candles(df, symbol)

    def top_symbols(self, limit: int = 30) -> List[str]:
        """USDT pairs ranked by 24h quote volume; FALLBACK_SYMBOLS when the ranking is unavailable."""
        try:
            tickers = self._tickers()
        except (BinanceAPIException, BinanceRequestException, requests.RequestException) as e:
            logger.warning("Ticker ranking unavailable (%s), using fallback symbols", e)
            return FALLBACK_SYMBOLS[:limit]
        try:
            volumes = [(t.get("symbol", ""), float(t.get("quoteVolume", 0))) for t in tickers]
        except (ValueError, TypeError, AttributeError) as e:
            logger.warning("Malformed ticker data (%s), using fallback symbols", e)
            return FALLBACK_SYMBOLS[:limit]
        ranked = sorted(
            ((s, v) for s, v in volumes if isinstance(s, str) and s.endswith("USDT") and v > 0),
            key=lambda sv: sv[1],
            reverse=True,
        )
        symbols = [s for s, _ in ranked[:limit]]
        if not symbols:
            logger.warning("Ticker ranking empty, using fallback symbols")
            return FALLBACK_SYMBOLS[:limit]
        logger.info("Top %d USDT pairs: %s", len(symbols), ", ".join(symbols[:10]))
        return symbols
