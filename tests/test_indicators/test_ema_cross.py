# tests/test_indicators/test_ema_cross.py
import pytest

from analyzer.indicators import crossed, ema_cross_buy, ema_cross_sell

def test_ema_cross_buy_basic():
    ef = [1, 1, 2, 3]
    es = [1, 1.5, 1.8, 2.5]
    out = ema_cross_buy(ef, es)
    # length must match input (min length)
    assert len(out) == 4
    # Only index 2 should be True (0-based)
    assert out == [False, False, True, False]

def test_ema_cross_sell_basic():
    ef = [3, 2, 1.5, 1]
    es = [2, 2, 1.8, 1.2]
    # idx1: prev 3>=2, now 2<2 false; idx2: prev 2>=2 and 1.5<1.8 -> True
    assert ema_cross_sell(ef, es) == [False, False, True, False]

def test_equal_values_do_not_fire_both_ways():
    ef = [1.0, 1.0, 1.0]
    es = [1.0, 1.0, 1.0]
    assert ema_cross_buy(ef, es) == [False, False, False]
    assert ema_cross_sell(ef, es) == [False, False, False]

def test_ema_cross_with_none_and_nan():
    ef = [None, 1.0, 2.0, 3.0]
    es = [1.0, 1.0, float('nan'), 2.5]
    # missing values should cause False results
    assert ema_cross_buy(ef, es) == [False, False, False, False]
    assert ema_cross_sell(ef, es) == [False, False, False, False]

def test_crossed_single_bar():
    assert crossed(1.0, 1.0, 2.0, 1.5, "up") is True
    assert crossed(2.0, 1.0, 3.0, 1.5, "up") is False
    assert crossed(2.0, 2.0, 1.0, 1.5, "down") is True
    assert crossed(None, 1.0, 2.0, 1.5, "up") is False
    assert crossed(1.0, float('nan'), 2.0, 1.5, "up") is False

def test_crossed_bad_direction():
    with pytest.raises(ValueError):
        crossed(1.0, 1.0, 2.0, 1.5, "sideways")
