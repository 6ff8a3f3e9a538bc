"""Reports: CSV / JSON export and console summary."""

from crypto_backtest.reports.exporter import (
    ranking_frame,
    trades_frame,
    batch_document,
    export_csv,
    export_json,
    export_trade_ledgers,
    export_results,
    format_summary,
)

__all__ = [
    "ranking_frame",
    "trades_frame",
    "batch_document",
    "export_csv",
    "export_json",
    "export_trade_ledgers",
    "export_results",
    "format_summary",
]
