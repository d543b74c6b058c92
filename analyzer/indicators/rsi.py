# analyzer/indicators/rsi.py
from typing import List, Optional, Sequence

from analyzer.models import Candle


def _rsi_at(deltas: Sequence[float]) -> float:
    gain = sum(d for d in deltas if d > 0)
    loss = -sum(d for d in deltas if d < 0)
    # loss == 0 diganti 1 (aproksimasi yang disengaja, bukan error)
    rs = gain / (loss if loss else 1.0)
    return 100.0 - (100.0 / (1.0 + rs))


def rsi(prices: Sequence[float], period: int = 14) -> List[Optional[float]]:
    """
    Low-level RSI calculator over a trailing window of `period` deltas.
    - prices: list of floats (close prices)
    - period: RSI period (default 14)
    Returns a list len == len(prices) with None for indices < period.

    Each index is computed independently from its own window (plain sums of
    gains/losses, no Wilder smoothing). A window without losses uses loss = 1.
    """
    if period <= 0:
        raise ValueError("period must be > 0")
    prices_f = [float(x) for x in prices]
    n = len(prices_f)
    deltas = [prices_f[i] - prices_f[i-1] for i in range(1, n)]

    # deltas[i-1] = close[i] - close[i-1]; window for index i is deltas[i-period:i]
    return [None if i < period else _rsi_at(deltas[i-period:i]) for i in range(n)]


def compute_rsi(candles: Sequence[Candle], period: int = 14) -> List[Optional[float]]:
    """RSI over candle closes, aligned by index with `candles`."""
    return rsi([c.close for c in candles], period)
