# analyzer/indicators/ema.py
from math import isnan
from typing import List, Optional, Sequence, Tuple, Union
import numpy as np
import pandas as pd

from analyzer.models import Candle


def ema(prices: Sequence[float], period: int) -> List[Optional[float]]:
    """
    Low-level EMA calculator.
    - prices: sequence (list/Series) of floats
    - period: int
    Returns list length == len(prices) with None for indices before seed.
    Seed at index period-1 is the SMA of the first `period` prices.
    """
    if period <= 0:
        raise ValueError("period must be > 0")
    n = len(prices)
    if n < period:
        return [None] * n

    k = 2.0 / (period + 1)
    seed = sum(float(p) for p in prices[:period]) / float(period)
    ema_vals: List[Optional[float]] = [None] * (period - 1) + [seed]
    prev = seed
    for p in prices[period:]:
        prev = (float(p) - prev) * k + prev
        ema_vals.append(prev)
    return ema_vals


def compute_ema(candles: Sequence[Candle], period: int) -> List[Optional[float]]:
    """EMA over candle closes, aligned by index with `candles`."""
    return ema([c.close for c in candles], period)


def add_ema(df: pd.DataFrame,
            spans: Union[Tuple[int, ...], Sequence[int]] = (20, 50),
            price_col: str = "close",
            prefix: str = "ema",
            force: bool = False) -> pd.DataFrame:
    """
    High-level helper that computes EMA(s) and adds columns to df.
    - df: pandas DataFrame with price_col column
    - spans: tuple/list of integer periods, e.g. (20, 50)
    - price_col: column name in df to use as price ('close' by default)
    - prefix: column prefix, result columns will be f"{prefix}_{span}"
    - force: if True overwrite existing columns
    Returns df (modified in-place and returned)
    """
    if price_col not in df.columns:
        raise ValueError(f"price_col '{price_col}' not found in DataFrame")

    if isinstance(spans, int):
        spans = (spans,)
    spans = tuple(int(s) for s in spans)

    prices = df[price_col].tolist()
    for span in spans:
        colname = f"{prefix}_{span}"
        if (colname in df.columns) and not force:
            continue
        vals = ema(prices, span)
        # None -> np.nan untuk kolom pandas
        df[colname] = [np.nan if v is None else float(v) for v in vals]
    return df


def _missing(v) -> bool:
    return v is None or (isinstance(v, float) and isnan(v))


def crossed(fast_prev, slow_prev, fast_now, slow_now, direction: str) -> bool:
    """
    Single-bar cross test between two consecutive bars.
    "up"  : fast_prev <= slow_prev and fast_now > slow_now
    "down": fast_prev >= slow_prev and fast_now < slow_now
    Any None/NaN input -> False.
    """
    if any(_missing(v) for v in (fast_prev, slow_prev, fast_now, slow_now)):
        return False
    if direction == "up":
        return fast_prev <= slow_prev and fast_now > slow_now
    if direction == "down":
        return fast_prev >= slow_prev and fast_now < slow_now
    raise ValueError(f"direction must be 'up' or 'down', got {direction!r}")


def _cross(ema_fast, ema_slow, direction: str) -> List[bool]:
    n = min(len(ema_fast), len(ema_slow))
    return [i > 0 and crossed(ema_fast[i-1], ema_slow[i-1], ema_fast[i], ema_slow[i], direction)
            for i in range(n)]


def ema_cross_buy(ema_fast, ema_slow) -> List[bool]:
    """
    Detect single-bar bullish EMA cross.
    True at index i if:
      ema_fast[i-1] <= ema_slow[i-1] and ema_fast[i] > ema_slow[i]
    If any required value is None or NaN -> treat as missing and result False.
    """
    return _cross(ema_fast, ema_slow, "up")


def ema_cross_sell(ema_fast, ema_slow) -> List[bool]:
    """
    Mirror of ema_cross_buy. True at index i if:
      ema_fast[i-1] >= ema_slow[i-1] and ema_fast[i] < ema_slow[i]
    """
    return _cross(ema_fast, ema_slow, "down")
