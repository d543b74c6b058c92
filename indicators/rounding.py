from datetime import datetime, timezone
from typing import Dict

from analyzer.models import Signal
from analyzer.signal_engine.config import PRICE_DECIMALS


def round_price(price: float, ndigits: int = PRICE_DECIMALS) -> float:
    """Round `price` for output. Comparison logic never uses rounded values."""
    if price is None:
        raise ValueError("price is None")
    return round(float(price), ndigits)


def format_timestamp(ts: float) -> str:
    """Epoch seconds -> 'YYYY-MM-DD HH:MM:SS' (UTC)."""
    return datetime.fromtimestamp(ts, tz=timezone.utc).strftime("%Y-%m-%d %H:%M:%S")


def format_price(price: float) -> str:
    """Reference price as plain number text: 158.0 -> '158', 67234.56 -> '67234.56'."""
    p = float(price)
    return str(int(p)) if p.is_integer() else repr(p)


def rounded_levels(signal: Signal, ndigits: int = PRICE_DECIMALS) -> Dict[str, float]:
    """
    Return the signal levels rounded for output:
      {'take_profit': .., 'stop_loss': .., 'trailing_stop': ..}
    """
    return {
        "take_profit": round_price(signal.take_profit, ndigits),
        "stop_loss": round_price(signal.stop_loss, ndigits),
        "trailing_stop": round_price(signal.trailing_stop, ndigits),
    }


def format_signal(signal: Signal, ndigits: int = PRICE_DECIMALS) -> str:
    """
    Human readable one-liner, e.g.
      'buy @100 TP @101.00 SL @99.00 trailing stop @0.30'
    Levels are shown with `ndigits` decimals, reference price as received.
    """
    lv = rounded_levels(signal, ndigits)
    fmt = f"{{:.{ndigits}f}}"
    return (
        f"{signal.kind.value.lower()} @{format_price(signal.price)} "
        f"TP @{fmt.format(lv['take_profit'])} "
        f"SL @{fmt.format(lv['stop_loss'])} "
        f"trailing stop @{fmt.format(lv['trailing_stop'])}"
    )
