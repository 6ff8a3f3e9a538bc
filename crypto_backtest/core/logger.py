"""
Logging for backtest runs: console plus an optional run log file, under the
"crypto_backtest" logger tree. HTTP client chatter from python-binance and
urllib3 is held at WARNING unless the run itself logs at DEBUG.
"""

from __future__ import annotations
import logging
import sys
from pathlib import Path
from typing import Optional

LOGGER_NAME = "crypto_backtest"
LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
# Paging through klines for dozens of symbols floods INFO with connection lines.
NOISY_LOGGERS = ("urllib3", "binance")


def setup_logging(
    level: str = "INFO",
    log_dir: Optional[Path] = None,
    log_file: Optional[str] = None,
) -> logging.Logger:
    """
    Configure the package logger for one run. Calling it again replaces the
    previous handlers (closing any open run log) instead of stacking them.
    """
    log_level = getattr(logging, str(level).upper(), logging.INFO)
    if not isinstance(log_level, int):
        log_level = logging.INFO
    root = logging.getLogger(LOGGER_NAME)
    root.setLevel(log_level)
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    console = logging.StreamHandler(sys.stdout)
    console.setFormatter(formatter)
    root.addHandler(console)

    if log_dir and log_file:
        log_dir = Path(log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(log_dir / log_file, encoding="utf-8")
        fh.setFormatter(formatter)
        root.addHandler(fh)

    third_party_level = logging.DEBUG if log_level <= logging.DEBUG else logging.WARNING
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(third_party_level)

    return root
