import pytest
from analyzer.models import Candle, Signal, SignalKind
from analyzer.signal_engine.rules import build_signal, detect, evaluate

START = 1735689600  # 2025-01-01 00:00:00 UTC

# periode kecil supaya window pendek tetap cukup untuk warm-up
SMALL = {"ema_fast": 2, "ema_slow": 10, "rsi_period": 14}


def make_candles(closes, start=START, step=900):
    return [Candle(time=start + i * step, open=c, high=c, low=c, close=c) for i, c in enumerate(closes)]


def down_then_jump():
    # turun 2 per bar (EMA cepat di bawah EMA lambat), lalu lompat +16 di bar terakhir:
    # EMA2 = p29+11 > EMA10 = p29+10.27 dan RSI14 = 100-100/(1+16/26) ~ 38.1
    closes = [200.0 - 2 * i for i in range(30)]
    closes.append(closes[-1] + 16)
    return closes


def up_then_drop():
    closes = [100.0 + 2 * i for i in range(30)]
    closes.append(closes[-1] - 16)
    return closes


def test_detect_buy_on_upward_cross_with_low_rsi():
    ema20 = [None, 9.0, 11.0]
    ema50 = [None, 10.0, 10.0]
    rsi = [None, 30.0, 35.0]
    assert detect(ema20, ema50, rsi, 2) is SignalKind.BUY


def test_detect_sell_on_downward_cross_with_high_rsi():
    ema20 = [None, 11.0, 9.0]
    ema50 = [None, 10.0, 10.0]
    rsi = [None, 70.0, 65.0]
    assert detect(ema20, ema50, rsi, 2) is SignalKind.SELL


def test_detect_rsi_on_wrong_side_is_no_signal():
    assert detect([9.0, 11.0], [10.0, 10.0], [None, 50.0], 1) is None
    assert detect([11.0, 9.0], [10.0, 10.0], [None, 50.0], 1) is None
    # batas threshold tidak inklusif
    assert detect([9.0, 11.0], [10.0, 10.0], [None, 40.0], 1) is None
    assert detect([11.0, 9.0], [10.0, 10.0], [None, 60.0], 1) is None


def test_detect_equal_previous_counts_as_below_and_above():
    assert detect([10.0, 11.0], [10.0, 10.0], [None, 35.0], 1) is SignalKind.BUY
    assert detect([10.0, 9.0], [10.0, 10.0], [None, 65.0], 1) is SignalKind.SELL


def test_detect_equal_current_is_no_signal():
    assert detect([9.0, 10.0], [10.0, 10.0], [None, 35.0], 1) is None
    assert detect([11.0, 10.0], [10.0, 10.0], [None, 65.0], 1) is None


def test_detect_no_cross_is_no_signal():
    assert detect([11.0, 12.0], [10.0, 10.0], [None, 35.0], 1) is None


def test_detect_warmup_values_missing():
    assert detect([None, 11.0], [10.0, 10.0], [None, 35.0], 1) is None
    assert detect([9.0, 11.0], [None, 10.0], [None, 35.0], 1) is None
    assert detect([9.0, 11.0], [10.0, 10.0], [None, None], 1) is None
    assert detect([9.0, 11.0], [10.0, float("nan")], [None, 35.0], 1) is None
    assert detect([11.0], [10.0], [35.0], 0) is None


def test_detect_custom_thresholds():
    assert detect([9.0, 11.0], [10.0, 10.0], [None, 50.0], 1, rsi_buy_max=55) is SignalKind.BUY


def test_build_signal_buy_levels():
    candle = Candle(time=START, open=99.0, high=101.0, low=98.0, close=100.0)
    sig = build_signal(SignalKind.BUY, candle)
    assert isinstance(sig, Signal)
    assert sig.price == 100.0
    assert sig.timestamp == START
    assert sig.take_profit == pytest.approx(101.0)
    assert sig.stop_loss == pytest.approx(99.0)
    assert sig.trailing_stop == pytest.approx(0.3)


def test_build_signal_sell_levels_swapped():
    candle = Candle(time=START, open=99.0, high=101.0, low=98.0, close=100.0)
    sig = build_signal(SignalKind.SELL, candle)
    assert sig.take_profit == pytest.approx(99.0)
    assert sig.stop_loss == pytest.approx(101.0)
    assert sig.trailing_stop == pytest.approx(0.3)


def test_evaluate_buy_on_last_candle():
    candles = make_candles(down_then_jump())
    sig = evaluate(candles, SMALL)
    assert sig is not None
    assert sig.kind is SignalKind.BUY
    assert sig.price == 158.0
    assert sig.timestamp == candles[-1].time
    assert round(sig.take_profit, 2) == round(158.0 * 1.01, 2)
    assert round(sig.stop_loss, 2) == round(158.0 * 0.99, 2)


def test_evaluate_sell_on_last_candle():
    candles = make_candles(up_then_drop())
    sig = evaluate(candles, SMALL)
    assert sig is not None
    assert sig.kind is SignalKind.SELL
    assert sig.price == 142.0
    assert round(sig.take_profit, 2) == round(142.0 * 0.99, 2)
    assert round(sig.stop_loss, 2) == round(142.0 * 1.01, 2)


def test_evaluate_only_looks_at_last_index():
    # cross terjadi di bar terakhir; satu bar sebelumnya belum ada sinyal
    candles = make_candles(down_then_jump())
    assert evaluate(candles[:-1], SMALL) is None


def test_evaluate_rsi_filter_blocks_cross():
    candles = make_candles(down_then_jump())
    assert evaluate(candles, dict(SMALL, rsi_buy_max=30)) is None


def test_evaluate_short_history_never_signals():
    closes = [100.0 + ((-1) ** i) * i for i in range(49)]
    candles = make_candles(closes)
    # default 20/50/14: kurang dari 50 candle -> tidak ada sinyal, tanpa exception
    for k in range(len(candles) + 1):
        assert evaluate(candles[:k]) is None
