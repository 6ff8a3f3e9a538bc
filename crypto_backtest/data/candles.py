"""Candle frames: construction, structural validation, CSV loading."""

from __future__ import annotations
import logging
from dataclasses import asdict
from pathlib import Path
from typing import Dict, Iterable, Tuple, Union

import pandas as pd

from crypto_backtest.core.errors import UpstreamDataError
from crypto_backtest.core.types import Candle

logger = logging.getLogger("crypto_backtest.data")

CANDLE_COLUMNS = ["time", "open", "high", "low", "close", "volume"]


def candles_to_frame(candles: Iterable[Candle]) -> pd.DataFrame:
    """Build an OHLCV DataFrame (columns: time, open, high, low, close, volume)."""
    rows = [asdict(c) for c in candles]
    if not rows:
        return pd.DataFrame(columns=CANDLE_COLUMNS)
    df = pd.DataFrame(rows, columns=CANDLE_COLUMNS)
    df["time"] = pd.to_datetime(df["time"])
    return df


def validate_candles(df: pd.DataFrame, symbol: str = "") -> pd.DataFrame:
    """
    Check structure: required columns present and time unique and strictly increasing.
    Returns the OHLCV columns with a fresh RangeIndex. Raises UpstreamDataError.
    """
    missing = [c for c in CANDLE_COLUMNS if c not in df.columns]
    if missing:
        raise UpstreamDataError(f"{symbol}: candle frame missing columns {missing}")
    out = df[CANDLE_COLUMNS].reset_index(drop=True)
    if len(out) > 1:
        times = pd.to_datetime(out["time"])
        if not times.is_monotonic_increasing or times.duplicated().any():
            raise UpstreamDataError(f"{symbol}: candle times must be unique and strictly increasing")
    return out


def load_candles_csv(path: Union[str, Path]) -> pd.DataFrame:
    """
    Load candles from CSV. `time` may be ISO datetimes or epoch milliseconds
    (Binance open_time); an `open_time` column is accepted in place of `time`.
    """
    df = pd.read_csv(path)
    if "time" not in df.columns and "open_time" in df.columns:
        df = df.rename(columns={"open_time": "time"})
    if "time" not in df.columns:
        raise UpstreamDataError(f"{path}: no time column")
    if pd.api.types.is_numeric_dtype(df["time"]):
        df["time"] = pd.to_datetime(df["time"], unit="ms")
    else:
        df["time"] = pd.to_datetime(df["time"])
    for col in ("open", "high", "low", "close", "volume"):
        if col in df.columns:
            df[col] = df[col].astype(float)
    return validate_candles(df, str(path))


def load_candles_dir(directory: Union[str, Path]) -> Tuple[Dict[str, pd.DataFrame], Dict[str, str]]:
    """Load every <SYMBOL>.csv in a directory. Returns (data, errors) keyed by symbol."""
    data: Dict[str, pd.DataFrame] = {}
    errors: Dict[str, str] = {}
    for path in sorted(Path(directory).glob("*.csv")):
        symbol = path.stem.upper()
        try:
            data[symbol] = load_candles_csv(path)
        except (UpstreamDataError, ValueError, OSError) as e:
            logger.warning("Could not load %s: %s", path.name, e)
            errors[symbol] = str(e)
    logger.info("Loaded %d candle files from %s (%d unreadable)", len(data), directory, len(errors))
    return data, errors
