"""Unit tests for reports.exporter."""

import json

import pytest

from conftest import make_candles
from crypto_backtest.analytics.metrics import compute_overall_metrics
from crypto_backtest.backtesting.engine import BacktestEngine, BatchResult
from crypto_backtest.core.types import SymbolResult
from crypto_backtest.reports.exporter import (
    RANKING_COLUMNS,
    export_json,
    export_results,
    export_trade_ledgers,
    format_summary,
    ranking_frame,
)
from crypto_backtest.risk.manager import RiskManager
from crypto_backtest.strategies import MovingAverageCrossoverStrategy


@pytest.fixture
def batch(crossover_closes):
    engine = BacktestEngine(
        strategy=MovingAverageCrossoverStrategy(2, 3),
        risk_manager=RiskManager(position_fraction=0.5, fee_rate=0.0),
        min_data_margin=0,
    )
    rising = [10, 10, 10, 10, 11, 12, 13, 14, 15, 16]
    return engine.run(
        {"BTCUSDT": make_candles(crossover_closes), "ETHUSDT": make_candles(rising), "NEWUSDT": make_candles([1])},
        {"DOWNUSDT": "timeout"},
    )


def test_ranking_frame(batch):
    df = ranking_frame(batch)
    assert list(df.columns) == RANKING_COLUMNS
    assert df["symbol"].tolist() == ["ETHUSDT", "BTCUSDT"]
    assert df["rank"].tolist() == [1, 2]
    assert df["return_pct"].iloc[1] == pytest.approx(-2.78)


def test_ranking_frame_empty():
    df = ranking_frame(BatchResult())
    assert df.empty
    assert list(df.columns) == RANKING_COLUMNS


def test_export_json_document(batch, tmp_path):
    path = export_json(batch, tmp_path / "out" / "results.json")
    doc = json.loads(path.read_text(encoding="utf-8"))
    assert doc["summary"]["total_symbols"] == 2
    assert doc["summary"]["best_performer"]["symbol"] == "ETHUSDT"
    assert doc["skipped"].keys() == {"NEWUSDT"}
    assert doc["failed"].keys() == {"DOWNUSDT"}
    trade = doc["detailed_results"]["BTCUSDT"]["trades"][0]
    assert trade["side"] == "short"
    assert trade["exit_reason"] == "signal"
    assert trade["entry_time"].startswith("2024-01-01T04:00:00")


def test_export_json_non_finite_as_null(tmp_path):
    result = SymbolResult(symbol="AUSDT", total_trades=1, winning_trades=1, profit_factor=float("inf"))
    batch = BatchResult(results={"AUSDT": result}, metrics=compute_overall_metrics({"AUSDT": result}))
    doc = json.loads(export_json(batch, tmp_path / "r.json").read_text(encoding="utf-8"))
    assert doc["detailed_results"]["AUSDT"]["profit_factor"] is None
    assert doc["summary"]["top_performers"][0]["profit_factor"] is None


def test_trade_ledgers_one_file_per_traded_symbol(batch, tmp_path):
    paths = export_trade_ledgers(batch, tmp_path, "20240101_000000")
    names = sorted(p.name for p in paths)
    assert "BTCUSDT_20240101_000000_trades.csv" in names
    assert all(p.exists() for p in paths)


def test_export_results_formats(batch, tmp_path):
    assert export_results(batch, tmp_path, "none") == []
    written = export_results(batch, tmp_path, "both")
    suffixes = sorted(p.suffix for p in written if p.parent == tmp_path)
    assert suffixes == [".csv", ".json"]


def test_format_summary(batch):
    text = format_summary(batch.metrics)
    assert "Backtest Summary" in text
    assert "ETHUSDT" in text
    assert "Symbols tested:" in text
