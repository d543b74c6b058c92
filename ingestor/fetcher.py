# ingestor/fetcher.py
"""
Market-data fetcher:
- GET candles (klines) for one symbol/interval from the Binance REST API
- normalize payload rows with pandas into Candle objects (oldest first)
- any network / HTTP / payload problem raises FetchError; a candle is never invented
"""
from __future__ import annotations
import logging
from typing import Any, List, Optional

import pandas as pd
import requests

from analyzer.models import Candle

logger = logging.getLogger(__name__)

BINANCE_KLINES_URL = "https://api.binance.com/api/v3/klines"

# kline row: [open_time_ms, open, high, low, close, volume, close_time, ...]
KLINE_COLUMNS = ["open_time", "open", "high", "low", "close"]


class FetchError(RuntimeError):
    """Raised when candles cannot be fetched or the payload is malformed."""


def klines_to_candles(payload: Any) -> List[Candle]:
    """
    Normalize a Binance klines payload (list of lists) into Candles.
    Rejects (FetchError) rows with missing/non-numeric OHLC or duplicated times.
    """
    if not isinstance(payload, list):
        msg = payload.get("msg") if isinstance(payload, dict) else str(payload)[:200]
        raise FetchError(f"unexpected klines payload: {msg}")
    if not payload:
        return []

    if not all(isinstance(row, (list, tuple)) and len(row) >= len(KLINE_COLUMNS) for row in payload):
        raise FetchError("malformed kline rows: expected lists of at least 5 fields")
    try:
        df = pd.DataFrame([row[:len(KLINE_COLUMNS)] for row in payload], columns=KLINE_COLUMNS)
    except (TypeError, ValueError) as e:
        raise FetchError(f"malformed kline rows: {e}") from e

    for col in KLINE_COLUMNS:
        df[col] = pd.to_numeric(df[col], errors="coerce")
    bad = df[df[KLINE_COLUMNS].isna().any(axis=1)]
    if not bad.empty:
        raise FetchError(f"{len(bad)} kline row(s) with missing/non-numeric fields")

    df["time"] = (df["open_time"] // 1000).astype("int64")
    df = df.sort_values("time").reset_index(drop=True)
    if df["time"].duplicated().any():
        raise FetchError("duplicated candle timestamps in payload")

    return [
        Candle(time=int(row.time), open=float(row.open), high=float(row.high),
               low=float(row.low), close=float(row.close))
        for row in df.itertuples(index=False)
    ]


def fetch_candles(symbol: str = "BTCUSDT", interval: str = "15m", limit: int = 100,
                  timeout: float = 10.0, session: Optional[requests.Session] = None,
                  url: str = BINANCE_KLINES_URL) -> List[Candle]:
    """Fetch the `limit` most recent candles for `symbol` / `interval`."""
    http = session or requests
    params = {"symbol": symbol, "interval": interval, "limit": int(limit)}
    logger.debug("fetching %s %s limit=%d", symbol, interval, limit)
    try:
        resp = http.get(url, params=params, timeout=timeout)
        resp.raise_for_status()
        payload = resp.json()
    except requests.RequestException as e:
        raise FetchError(f"fetch {symbol} failed: {e}") from e
    except ValueError as e:
        raise FetchError(f"fetch {symbol}: invalid JSON body") from e

    candles = klines_to_candles(payload)
    logger.info("fetched %d candles for %s/%s", len(candles), symbol, interval)
    return candles
