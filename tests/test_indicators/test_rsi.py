# tests/test_indicators/test_rsi.py
import numpy as np
import pytest
from analyzer.indicators.rsi import rsi, compute_rsi
from analyzer.models import Candle


def test_rsi_length_and_seed():
    prices = [1,2,3,4,5,6,7,8,9,10]
    period = 3
    out = rsi(prices, period)
    assert len(out) == len(prices)
    # index < period harus None
    for i in range(period):
        assert out[i] is None
    # index period harus numeric
    assert isinstance(out[period], float)


def test_rsi_no_losses_uses_loss_of_one():
    # 14 kenaikan @1 -> gain=14, loss dianggap 1 -> rs=14
    prices = [100 + i for i in range(15)]
    out = rsi(prices, 14)
    assert out[14] == pytest.approx(100 - 100 / 15)


def test_rsi_large_gains_without_losses_approaches_100():
    prices = [100 + 100 * i for i in range(30)]
    out = rsi(prices, 14)
    numeric = [v for v in out if v is not None]
    assert all(v > 99.9 for v in numeric)
    assert all(v <= 100.0 for v in numeric)


def test_rsi_flat_window_is_zero():
    # gain=0, loss dianggap 1 -> rs=0 -> RSI 0 (aproksimasi yang disengaja)
    out = rsi([50.0] * 20, 14)
    assert out[14] == 0.0


def test_rsi_balanced_window_is_50():
    prices = [1, 2, 1, 2, 1, 2, 1]
    out = rsi(prices, 2)
    assert out[2] == pytest.approx(50.0)
    assert out[-1] == pytest.approx(50.0)


def test_rsi_window_is_trailing_only():
    # kerugian besar di awal tidak mempengaruhi window setelah keluar
    prices = [100, 50] + [50 + i for i in range(1, 6)]
    out = rsi(prices, 3)
    assert out[3] < 50
    assert out[-1] == pytest.approx(100 - 100 / 4)


def test_rsi_bounded_on_random_walk():
    rng = np.random.RandomState(7)
    prices = list(100 + np.cumsum(rng.normal(0, 1.5, size=300)))
    out = rsi(prices, 14)
    numeric = [v for v in out if v is not None]
    assert len(numeric) == len(prices) - 14
    assert all(0.0 <= v <= 100.0 for v in numeric)


def test_compute_rsi_reads_candle_closes():
    candles = [Candle(time=i * 60, open=0.0, high=0.0, low=0.0, close=float(c))
               for i, c in enumerate([10, 11, 10, 12])]
    assert compute_rsi(candles, 2) == rsi([10, 11, 10, 12], 2)


def test_rsi_invalid_period():
    with pytest.raises(ValueError):
        rsi([1, 2, 3], -1)
