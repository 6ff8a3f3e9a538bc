"""
Result export: ranking CSV, full JSON document, per-symbol trade ledgers, text summary.
"""

from __future__ import annotations
import json
import logging
import math
from dataclasses import asdict, is_dataclass
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Union

import numpy as np
import pandas as pd

from crypto_backtest.analytics.metrics import OverallMetrics
from crypto_backtest.backtesting.engine import BatchResult
from crypto_backtest.core.types import SymbolResult

logger = logging.getLogger("crypto_backtest.reports")

RANKING_COLUMNS = ["rank", "symbol", "return_pct", "trades", "win_rate_pct", "max_drawdown_pct"]


def ranking_frame(batch: BatchResult) -> pd.DataFrame:
    """Completed symbols ranked by return (ties by symbol)."""
    rows = [
        {
            "rank": n,
            "symbol": p.symbol,
            "return_pct": round(p.total_return, 2),
            "trades": p.trades,
            "win_rate_pct": round(p.win_rate, 2),
            "max_drawdown_pct": round(p.max_drawdown, 2),
        }
        for n, p in enumerate(batch.metrics.top_performers, start=1)
    ]
    return pd.DataFrame(rows, columns=RANKING_COLUMNS)


def trades_frame(result: SymbolResult) -> pd.DataFrame:
    rows = [
        {
            "entry_time": t.entry_time,
            "exit_time": t.exit_time,
            "side": t.side.value,
            "entry_price": t.entry_price,
            "exit_price": t.exit_price,
            "size": t.size,
            "pnl": t.pnl,
            "fees": t.fees,
            "net_pnl": t.net_pnl,
            "return_pct": t.return_pct,
            "exit_reason": t.exit_reason.value,
        }
        for t in result.trades
    ]
    return pd.DataFrame(rows)


def _json_safe(obj: Any) -> Any:
    """Dataclasses/enums/timestamps to JSON types; non-finite floats become None."""
    if is_dataclass(obj) and not isinstance(obj, type):
        return _json_safe(asdict(obj))
    if isinstance(obj, dict):
        return {str(k): _json_safe(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [_json_safe(v) for v in obj]
    if isinstance(obj, Enum):
        return obj.value
    if isinstance(obj, np.integer):
        return int(obj)
    if isinstance(obj, float):
        return obj if math.isfinite(obj) else None
    if isinstance(obj, (pd.Timestamp, datetime)):
        return obj.isoformat()
    return obj


def batch_document(batch: BatchResult) -> Dict[str, Any]:
    return _json_safe({
        "export_date": datetime.now(timezone.utc).isoformat(),
        "summary": batch.metrics,
        "skipped": batch.skipped,
        "failed": batch.failed,
        "detailed_results": batch.results,
    })


def export_csv(batch: BatchResult, path: Union[str, Path]) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    ranking_frame(batch).to_csv(path, index=False)
    logger.info("Ranking exported to %s", path)
    return path


def export_json(batch: BatchResult, path: Union[str, Path]) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(batch_document(batch), f, indent=2)
    logger.info("Full results exported to %s", path)
    return path


def export_trade_ledgers(batch: BatchResult, directory: Union[str, Path], stamp: str) -> List[Path]:
    """One <SYMBOL>_<stamp>_trades.csv per symbol with at least one trade."""
    directory = Path(directory)
    directory.mkdir(parents=True, exist_ok=True)
    written = []
    for symbol, result in batch.results.items():
        if not result.trades:
            continue
        path = directory / f"{symbol}_{stamp}_trades.csv"
        trades_frame(result).to_csv(path, index=False)
        written.append(path)
    logger.info("Wrote %d trade ledgers to %s", len(written), directory)
    return written


def export_results(batch: BatchResult, output_dir: Union[str, Path], fmt: str = "csv") -> List[Path]:
    """Write the formats selected by fmt (csv | json | both | none) under output_dir."""
    if fmt == "none":
        return []
    output_dir = Path(output_dir)
    stamp = datetime.now(timezone.utc).strftime("%Y%m%d_%H%M%S")
    written: List[Path] = []
    if fmt in ("csv", "both"):
        written.append(export_csv(batch, output_dir / f"backtest_{stamp}.csv"))
    if fmt in ("json", "both"):
        written.append(export_json(batch, output_dir / f"backtest_{stamp}.json"))
    written.extend(export_trade_ledgers(batch, output_dir / "detailed", stamp))
    return written


def format_summary(metrics: OverallMetrics) -> str:
    """Plain-text summary block for the console."""
    best, worst = metrics.best_performer, metrics.worst_performer
    lines = [
        "=" * 50,
        "Backtest Summary",
        "=" * 50,
        f"Symbols tested:      {metrics.total_symbols:>10d}",
        f"Profitable:          {metrics.profitable_symbols:>10d}",
        f"Success rate:        {metrics.success_rate:>9.2f}%",
        f"Average return:      {metrics.average_return:>9.2f}%",
        f"Median return:       {metrics.median_return:>9.2f}%",
        f"Best performer:      {best.symbol:>10s} ({best.total_return:.2f}%)",
        f"Worst performer:     {worst.symbol:>10s} ({worst.total_return:.2f}%)",
        "-" * 50,
        f"Total trades:        {metrics.total_trades:>10d}",
        f"Overall win rate:    {metrics.overall_win_rate:>9.2f}%",
        f"Max drawdown:        {metrics.max_drawdown:>9.2f}%",
        f"Average drawdown:    {metrics.average_drawdown:>9.2f}%",
        f"Avg profit factor:   {metrics.average_profit_factor:>10.2f}",
        f"Sharpe (x-symbol):   {metrics.sharpe_ratio:>10.2f}",
        "=" * 50,
    ]
    return "\n".join(lines)
