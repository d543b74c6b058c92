# analyzer/models.py
"""
Tipe data bersama untuk engine sinyal scalping.

- Candle: satu bar OHLC (time dalam detik, UTC)
- SignalKind: BUY / SELL
- Signal: hasil deteksi + level TP/SL/trailing (belum dibulatkan)
"""
from dataclasses import dataclass
from enum import Enum


@dataclass(frozen=True)
class Candle:
    time: int
    open: float
    high: float
    low: float
    close: float


class SignalKind(str, Enum):
    BUY = "BUY"
    SELL = "SELL"


@dataclass(frozen=True)
class Signal:
    kind: SignalKind
    price: float
    take_profit: float
    stop_loss: float
    trailing_stop: float
    timestamp: int
