"""Unit tests for indicators."""

import numpy as np
import pytest

from crypto_backtest.indicators import IndicatorSeries, sma, ema, rsi, macd_histogram, stochastic, smi


def _noisy(n=200, seed=7):
    rng = np.random.default_rng(seed)
    close = 100 + np.cumsum(rng.normal(0, 1, n))
    high = close + rng.uniform(0.1, 2.0, n)
    low = close - rng.uniform(0.1, 2.0, n)
    return high, low, close


def test_sma_values_and_offset():
    s = sma([1, 2, 3, 4, 5], 3)
    assert s.offset == 2
    assert s.tolist() == pytest.approx([2.0, 3.0, 4.0])
    assert s.at(4) == pytest.approx(4.0)
    assert s.end == 5


def test_sma_too_short_is_empty():
    s = sma([1, 2], 3)
    assert len(s) == 0
    assert s.offset == 2


def test_indicator_series_at_outside_range():
    s = IndicatorSeries(values=np.array([1.0, 2.0]), offset=3)
    assert s.covers(3) and s.covers(4)
    assert not s.covers(2) and not s.covers(5)
    with pytest.raises(IndexError):
        s.at(2)


def test_ema_seeded_with_first_price():
    s = ema([2, 4], 3)  # k = 0.5
    assert s.offset == 0
    assert s.tolist() == pytest.approx([2.0, 3.0])


def test_ema_constant_series():
    assert ema([10] * 5, 3).tolist() == pytest.approx([10.0] * 5)


def test_rsi_known_value():
    s = rsi([1, 2, 1], 2)  # avg gain 0.5, avg loss 0.5
    assert s.offset == 2
    assert s.tolist() == pytest.approx([50.0])


def test_rsi_no_losses_is_100():
    s = rsi(list(range(1, 30)), 14)
    assert np.all(s.values == 100.0)


def test_rsi_needs_more_than_period_prices():
    assert len(rsi([1] * 14, 14)) == 0
    assert len(rsi([1] * 15, 14)) == 1


def test_rsi_bounds():
    _, _, close = _noisy()
    s = rsi(close, 14)
    assert len(s) == len(close) - 14
    assert np.all((s.values >= 0) & (s.values <= 100))


def test_macd_histogram_offset_and_flat_prices():
    s = macd_histogram([50.0] * 40, 12, 26, 9)
    assert s.offset == 25
    assert len(s) == 15
    assert np.allclose(s.values, 0.0)


def test_stochastic_flat_window_is_zero():
    k, d = stochastic([5] * 10, [5] * 10, [5] * 10, 3, 2)
    assert k.offset == 2
    assert d.offset == 3
    assert np.all(k.values == 0.0)


def test_stochastic_close_at_high_is_100():
    k, _ = stochastic([1, 2, 3], [0, 1, 2], [1, 2, 3], 3, 1)
    assert k.tolist() == pytest.approx([100.0])


def test_stochastic_bounds():
    high, low, close = _noisy()
    k, d = stochastic(high, low, close, 14, 3)
    assert np.all((k.values >= 0) & (k.values <= 100))
    assert np.all((d.values >= 0) & (d.values <= 100))
    assert d.end == k.end == len(close)


def test_smi_bounds_and_offsets():
    high, low, close = _noisy()
    line, signal = smi(high, low, close, 14, 3, 3)
    assert line.offset == 13
    assert signal.offset == 15
    assert np.all((line.values >= -100) & (line.values <= 100))


def test_smi_flat_prices_is_zero():
    line, _ = smi([3] * 30, [3] * 30, [3] * 30, 14, 3, 3)
    assert np.all(line.values == 0.0)


@pytest.mark.parametrize("period", [0, -1, 2.5])
def test_invalid_period(period):
    with pytest.raises(ValueError):
        sma([1, 2, 3], period)
