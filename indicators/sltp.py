from typing import Tuple, Union

from analyzer.models import SignalKind
from analyzer.signal_engine.config import SL_PCT, TP_PCT, TRAILING_PCT


def compute_levels(
    kind: Union[SignalKind, str],
    price: float,
    tp_pct: float = TP_PCT,
    sl_pct: float = SL_PCT,
    trailing_pct: float = TRAILING_PCT,
) -> Tuple[float, float, float]:
    """
    Compute TP, SL and trailing-stop offset for a signal at `price`.

    Returns (take_profit, stop_loss, trailing_stop)
    - BUY : tp = price * (1 + tp_pct), sl = price * (1 - sl_pct)
    - SELL: tp = price * (1 - tp_pct), sl = price * (1 + sl_pct)
    - trailing_stop = price * trailing_pct for both (absolute offset)
    Values are NOT rounded; rounding happens when the signal is formatted.
    """
    try:
        kind = SignalKind(str(getattr(kind, "value", kind)).upper())
    except ValueError:
        raise ValueError(f"invalid signal kind: {kind!r}")
    price = float(price)

    if kind is SignalKind.BUY:
        tp = price * (1 + tp_pct)
        sl = price * (1 - sl_pct)
    else:  # SELL
        tp = price * (1 - tp_pct)
        sl = price * (1 + sl_pct)
    return tp, sl, price * trailing_pct
