# analyzer/indicators/__init__.py
"""
Public API for indicators (list-based core + DataFrame-friendly helpers).
Exports: ema, rsi, compute_ema, compute_rsi, crossed, ema_cross_buy, ema_cross_sell,
         add_ema, add_rsi, add_indicators, candles_to_frame
"""
from typing import Any, Mapping, Optional, Sequence
import numpy as np
import pandas as pd

from analyzer.models import Candle
from .ema import add_ema, compute_ema, crossed, ema, ema_cross_buy, ema_cross_sell
from .rsi import compute_rsi, rsi


def add_rsi(df: pd.DataFrame, period: int = 14, price_col: str = "close",
            prefix: str = "rsi", force: bool = False) -> pd.DataFrame:
    """
    Compute RSI (trailing-window sums, see rsi.rsi) and add column f"{prefix}_{period}".
    Returns df (modified in-place).
    """
    colname = f"{prefix}_{period}"
    if (colname in df.columns) and not force:
        return df
    if price_col not in df.columns:
        raise ValueError(f"price_col '{price_col}' not found in DataFrame")
    vals = rsi(df[price_col].astype(float).tolist(), period)
    df[colname] = [np.nan if v is None else float(v) for v in vals]
    return df


def candles_to_frame(candles: Sequence[Candle]) -> pd.DataFrame:
    """Candle list -> DataFrame indexed by UTC datetime with open/high/low/close."""
    df = pd.DataFrame(
        [{"time": c.time, "open": c.open, "high": c.high, "low": c.low, "close": c.close} for c in candles],
        columns=["time", "open", "high", "low", "close"],
    )
    df.index = pd.to_datetime(df["time"], unit="s", utc=True)
    df.index.name = "datetime"
    return df


def add_indicators(df: pd.DataFrame, cfg: Optional[Mapping[str, Any]] = None, force: bool = False) -> pd.DataFrame:
    """
    Compute EMA fast/slow and RSI columns requested via cfg and return df.
    cfg example:
      {'ema_fast': 20, 'ema_slow': 50, 'rsi_period': 14, 'price_col': 'close'}
    """
    cfg = dict(cfg or {})
    price_col = cfg.get("price_col", "close")
    spans = (int(cfg.get("ema_fast", 20)), int(cfg.get("ema_slow", 50)))
    add_ema(df, spans=spans, price_col=price_col, force=force)
    add_rsi(df, period=int(cfg.get("rsi_period", 14)), price_col=price_col, force=force)
    return df


__all__ = [
    "ema", "rsi", "compute_ema", "compute_rsi", "crossed", "ema_cross_buy", "ema_cross_sell",
    "add_ema", "add_rsi", "add_indicators", "candles_to_frame",
]
