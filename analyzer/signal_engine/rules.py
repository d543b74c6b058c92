# analyzer/signal_engine/rules.py
import logging
from math import isnan
from typing import Any, Mapping, Optional, Sequence

from analyzer.indicators import compute_ema, compute_rsi, crossed
from analyzer.models import Candle, Signal, SignalKind
from analyzer.signal_engine import config as C
from indicators.sltp import compute_levels

logger = logging.getLogger(__name__)


def _defined(v) -> bool:
    return v is not None and not (isinstance(v, float) and isnan(v))


def detect(ema_fast: Sequence[Optional[float]],
           ema_slow: Sequence[Optional[float]],
           rsi_vals: Sequence[Optional[float]],
           index: int,
           rsi_buy_max: float = C.RSI_BUY_MAX,
           rsi_sell_min: float = C.RSI_SELL_MIN) -> Optional[SignalKind]:
    """
    Classify bar `index` (normally the last one) as BUY, SELL or no signal.
    - BUY : ema_fast[i-1] <= ema_slow[i-1] and ema_fast[i] > ema_slow[i] and rsi[i] < rsi_buy_max
    - SELL: ema_fast[i-1] >= ema_slow[i-1] and ema_fast[i] < ema_slow[i] and rsi[i] > rsi_sell_min
    Returns None during warm-up (any required value None/NaN) or when no rule fires.
    """
    if index < 1 or index >= min(len(ema_fast), len(ema_slow), len(rsi_vals)):
        return None
    f_prev, s_prev = ema_fast[index-1], ema_slow[index-1]
    f_now, s_now = ema_fast[index], ema_slow[index]
    r_now = rsi_vals[index]
    if not _defined(r_now):
        return None

    if crossed(f_prev, s_prev, f_now, s_now, "up") and r_now < rsi_buy_max:
        return SignalKind.BUY
    if crossed(f_prev, s_prev, f_now, s_now, "down") and r_now > rsi_sell_min:
        return SignalKind.SELL
    return None


def build_signal(kind: SignalKind, candle: Candle,
                 tp_pct: float = C.TP_PCT,
                 sl_pct: float = C.SL_PCT,
                 trailing_pct: float = C.TRAILING_PCT) -> Signal:
    """Attach TP/SL/trailing levels to a detected kind, priced at the candle close."""
    tp, sl, trailing = compute_levels(kind, candle.close, tp_pct=tp_pct, sl_pct=sl_pct,
                                      trailing_pct=trailing_pct)
    return Signal(kind=kind, price=candle.close, take_profit=tp, stop_loss=sl,
                  trailing_stop=trailing, timestamp=candle.time)


def evaluate(candles: Sequence[Candle], cfg: Optional[Mapping[str, Any]] = None) -> Optional[Signal]:
    """
    Full core pipeline for one window: EMA fast/slow + RSI -> detect on the
    last candle -> Signal (or None).
    cfg keys (all optional): ema_fast, ema_slow, rsi_period, rsi_buy_max,
    rsi_sell_min, tp_pct, sl_pct, trailing_pct.
    """
    cfg = dict(cfg or {})
    if not candles:
        return None

    ema_fast = compute_ema(candles, int(cfg.get("ema_fast", C.EMA_FAST)))
    ema_slow = compute_ema(candles, int(cfg.get("ema_slow", C.EMA_SLOW)))
    rsi_vals = compute_rsi(candles, int(cfg.get("rsi_period", C.RSI_PERIOD)))

    i = len(candles) - 1
    kind = detect(ema_fast, ema_slow, rsi_vals, i,
                  rsi_buy_max=float(cfg.get("rsi_buy_max", C.RSI_BUY_MAX)),
                  rsi_sell_min=float(cfg.get("rsi_sell_min", C.RSI_SELL_MIN)))
    logger.debug("index=%d ema_fast=%s ema_slow=%s rsi=%s -> %s",
                 i, ema_fast[i], ema_slow[i], rsi_vals[i], kind)
    if kind is None:
        return None
    return build_signal(kind, candles[i],
                        tp_pct=float(cfg.get("tp_pct", C.TP_PCT)),
                        sl_pct=float(cfg.get("sl_pct", C.SL_PCT)),
                        trailing_pct=float(cfg.get("trailing_pct", C.TRAILING_PCT)))
