"""
Load configuration from config.yaml and .env, and validate it before any symbol runs.
"""

from __future__ import annotations
import logging
import os
from pathlib import Path
from typing import Any, List, Optional

import yaml
from dotenv import load_dotenv

from crypto_backtest.core.errors import InvalidStrategyConfigError
from crypto_backtest.utils.timeframes import SUPPORTED_TIMEFRAMES

logger = logging.getLogger("crypto_backtest.config")

EXPORT_FORMATS = ("csv", "json", "both", "none")


def _env_path(project_root: Optional[Path] = None) -> Path:
    root = project_root or Path(__file__).resolve().parents[2]
    return root / ".env"


def load_dotenv_if_exists(project_root: Optional[Path] = None) -> None:
    """Load .env from project root if present."""
    path = _env_path(project_root)
    if path.exists():
        load_dotenv(path)


def load_config(config_path: Optional[Path] = None, project_root: Optional[Path] = None) -> "Config":
    """Load config.yaml and overlay with env. Returns Config."""
    load_dotenv_if_exists(project_root)
    root = project_root or Path(__file__).resolve().parents[2]
    path = config_path or root / "config.yaml"
    data: dict[str, Any] = {}
    if path.exists():
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    else:
        logger.debug("No config file at %s, using defaults", path)

    def env(key: str, default: str = "") -> str:
        return os.getenv(key, default).strip()

    def env_int(key: str, default: int = 0) -> int:
        try:
            return int(os.getenv(key, str(default)))
        except ValueError:
            return default

    def env_float(key: str, default: float = 0.0) -> float:
        try:
            return float(os.getenv(key, str(default)))
        except ValueError:
            return default

    backtest = data.get("backtest", {}) or {}
    strategy = data.get("strategy", {}) or {}
    logging_cfg = data.get("logging", {}) or {}
    export = data.get("export", {}) or {}

    symbols_env = env("SYMBOLS")
    if symbols_env:
        symbols = [s.strip().upper() for s in symbols_env.split(",") if s.strip()]
    else:
        symbols = [str(s).upper() for s in backtest.get("symbols", []) or []]

    return Config(
        # Keys only from the environment; public klines work without them
        binance_api_key=env("BINANCE_API_KEY"),
        binance_api_secret=env("BINANCE_API_SECRET"),
        strategy=env("STRATEGY", strategy.get("name", "ma_crossover")),
        strategy_params=dict(strategy.get("params", {}) or {}),
        timeframe=env("TIMEFRAME", backtest.get("timeframe", "1h")),
        backtest_days=env_int("BACKTEST_DAYS", backtest.get("days", 30)),
        symbols=symbols,
        top_n=env_int("TOP_N", backtest.get("top_n", 30)),
        initial_capital=env_float("INITIAL_CAPITAL", backtest.get("initial_capital", 10000.0)),
        position_fraction=env_float("POSITION_FRACTION", backtest.get("position_fraction", 0.20)),
        fee_rate=env_float("FEE_RATE", backtest.get("fee_rate", 0.001)),
        stop_loss_pct=env_float("STOP_LOSS_PCT", backtest.get("stop_loss_pct", 0.0)),
        take_profit_pct=env_float("TAKE_PROFIT_PCT", backtest.get("take_profit_pct", 0.0)),
        max_workers=env_int("MAX_WORKERS", backtest.get("max_workers", 1)),
        min_data_margin=int(backtest.get("min_data_margin", 10)),
        export_format=env("EXPORT_FORMAT", export.get("format", "csv")).lower(),
        output_dir=Path(export.get("output_dir", "results")),
        log_level=env("LOG_LEVEL", logging_cfg.get("level", "INFO")),
        log_dir=Path(logging_cfg.get("log_dir", "logs")),
        log_file=logging_cfg.get("log_file", "backtest.log"),
    )


class Config:
    """Unified configuration. Treated as read-only after load."""

    __slots__ = (
        "binance_api_key", "binance_api_secret",
        "strategy", "strategy_params",
        "timeframe", "backtest_days", "symbols", "top_n",
        "initial_capital", "position_fraction", "fee_rate", "stop_loss_pct", "take_profit_pct",
        "max_workers", "min_data_margin",
        "export_format", "output_dir",
        "log_level", "log_dir", "log_file",
    )

    def __init__(
        self,
        binance_api_key: str = "",
        binance_api_secret: str = "",
        strategy: str = "ma_crossover",
        strategy_params: Optional[dict] = None,
        timeframe: str = "1h",
        backtest_days: int = 30,
        symbols: Optional[List[str]] = None,
        top_n: int = 30,
        initial_capital: float = 10000.0,
        position_fraction: float = 0.20,
        fee_rate: float = 0.001,
        stop_loss_pct: float = 0.0,
        take_profit_pct: float = 0.0,
        max_workers: int = 1,
        min_data_margin: int = 10,
        export_format: str = "csv",
        output_dir: Path = None,
        log_level: str = "INFO",
        log_dir: Path = None,
        log_file: str = "backtest.log",
    ):
        self.binance_api_key = binance_api_key
        self.binance_api_secret = binance_api_secret
        self.strategy = strategy
        self.strategy_params = dict(strategy_params or {})
        self.timeframe = timeframe
        self.backtest_days = backtest_days
        self.symbols = list(symbols or [])
        self.top_n = top_n
        self.initial_capital = initial_capital
        self.position_fraction = position_fraction
        self.fee_rate = fee_rate
        self.stop_loss_pct = stop_loss_pct
        self.take_profit_pct = take_profit_pct
        self.max_workers = max_workers
        self.min_data_margin = min_data_margin
        self.export_format = export_format
        self.output_dir = Path(output_dir) if output_dir else Path("results")
        self.log_level = log_level
        self.log_dir = Path(log_dir) if log_dir else Path("logs")
        self.log_file = log_file


def validate_config(config: Config) -> List[str]:
    """Return every human-readable problem with the configuration; empty when valid."""
    # Local imports: strategies and risk import core, core must not import them at module load.
    from crypto_backtest.risk.manager import RiskManager, is_number
    from crypto_backtest.strategies import STRATEGIES, build_strategy

    errors: List[str] = []
    if config.timeframe not in SUPPORTED_TIMEFRAMES:
        errors.append(f"Invalid timeframe '{config.timeframe}'. Use one of: {', '.join(SUPPORTED_TIMEFRAMES)}")
    if not (1 <= config.backtest_days <= 365):
        errors.append("Backtest period must be between 1 and 365 days")
    if not is_number(config.initial_capital) or config.initial_capital <= 0:
        errors.append("Initial capital must be positive")
    errors.extend(RiskManager(
        position_fraction=config.position_fraction,
        fee_rate=config.fee_rate,
        stop_loss_pct=config.stop_loss_pct,
        take_profit_pct=config.take_profit_pct,
    ).validate())
    if config.max_workers < 1:
        errors.append("max_workers must be at least 1")
    if config.min_data_margin < 0:
        errors.append("min_data_margin must not be negative")
    if config.export_format not in EXPORT_FORMATS:
        errors.append(f"Invalid export format '{config.export_format}'. Use one of: {', '.join(EXPORT_FORMATS)}")

    if config.strategy not in STRATEGIES:
        errors.append(f"Unsupported strategy '{config.strategy}'. Choose one of: {', '.join(sorted(STRATEGIES))}")
    else:
        try:
            errors.extend(build_strategy(config.strategy, config.strategy_params).validate())
        except InvalidStrategyConfigError as e:
            errors.extend(e.errors)
    return errors


def ensure_valid_config(config: Config) -> None:
    """Raise InvalidStrategyConfigError listing every problem, before any simulation starts."""
    errors = validate_config(config)
    if errors:
        for msg in errors:
            logger.error("Config: %s", msg)
        raise InvalidStrategyConfigError(errors)
    logger.info("Configuration valid: strategy=%s timeframe=%s days=%d",
                config.strategy, config.timeframe, config.backtest_days)
