"""
runner/check_and_dispatch.py

Satu kali jalan pipeline:
  fetch candles -> indikator + deteksi -> cek duplikat -> simpan DB -> kirim Telegram

Usage (dari root repo):
  python -m runner.check_and_dispatch [--config config.yaml] [--test] [--show]
"""
import argparse
import logging
from typing import Any, Callable, Dict, List, Optional

from dotenv import load_dotenv
from sqlalchemy.exc import SQLAlchemyError

from analyzer.indicators import add_indicators, candles_to_frame
from analyzer.models import Candle, Signal
from analyzer.signal_engine.rules import evaluate
from dispatcher.telegram_bot import format_message, send_telegram_message
from indicators.rounding import format_signal, format_timestamp
from ingestor.fetcher import FetchError, fetch_candles
from ingestor.storage import SignalStore, signal_record
from runner.config import load_config
from signal_engine.postprocess import is_duplicate, load_state, remember

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s: %(message)s"


def setup_logging(level: str = "INFO") -> None:
    logging.basicConfig(level=getattr(logging, str(level).upper(), logging.INFO), format=LOG_FORMAT)


def _fetch(cfg: Dict[str, Any], fetch: Callable[..., List[Candle]]) -> Optional[List[Candle]]:
    try:
        return fetch(cfg["symbol"], cfg["interval"], cfg["limit"], timeout=cfg["request_timeout"])
    except FetchError as e:
        logger.error("fetch failed, skipping run: %s", e)
        return None


def open_store(cfg: Dict[str, Any]) -> Optional[SignalStore]:
    """SignalStore for cfg, or None (warning logged) if it cannot even be built."""
    try:
        return SignalStore(cfg["db_url"], cfg["table"])
    except (SQLAlchemyError, ImportError) as e:
        logger.warning("signal store unavailable (%s), running without persistence: %s", cfg["db_url"], e)
        return None


def _persist(store: Optional[SignalStore], record: Dict[str, Any]) -> bool:
    if store is None:
        return False
    try:
        store.save(record)
        return True
    except (SQLAlchemyError, OSError) as e:
        logger.warning("saving signal failed: %s", e)
        return False


def run_once(cfg: Dict[str, Any],
             fetch: Optional[Callable[..., List[Candle]]] = None,
             store: Optional[SignalStore] = None,
             notify: Optional[Callable[..., bool]] = None,
             dry_run: bool = False) -> Optional[Signal]:
    """
    Run the pipeline once and return the emitted Signal (None if no signal,
    duplicate, or fetch failure). Persistence and notification failures are
    logged and do not stop each other.
    fetch / notify default to fetch_candles / send_telegram_message.
    """
    fetch = fetch or fetch_candles
    notify = notify or send_telegram_message
    candles = _fetch(cfg, fetch)
    if not candles:
        if candles is not None:
            logger.warning("provider returned no candles for %s", cfg["symbol"])
        return None

    signal = evaluate(candles, cfg)
    if signal is None:
        logger.info("Tidak ada sinyal (%s, last close %s)", cfg["symbol"], candles[-1].close)
        return None

    state_file = cfg.get("state_file")
    if cfg.get("dedupe") and state_file:
        if is_duplicate(signal, load_state(state_file), cfg.get("cooldown_minutes", 0)):
            logger.info("duplicate %s signal at %s suppressed", signal.kind.value,
                        format_timestamp(signal.timestamp))
            return None

    record = signal_record(signal)
    persisted = False
    if dry_run:
        logger.info("[TEST] would save record: %s", record)
    else:
        persisted = _persist(store, record)

    if cfg.get("telegram_enabled", True):
        # undelivered alerts are not remembered, the next tick retries them
        emitted = notify(cfg.get("bot_token"), cfg.get("chat_id"), format_message(signal),
                         dry_run=dry_run, timeout=cfg["request_timeout"])
    else:
        emitted = persisted

    if cfg.get("dedupe") and state_file and emitted and not dry_run:
        try:
            remember(signal, state_file)
        except OSError as e:
            logger.warning("could not write state file %s: %s", state_file, e)

    logger.info("[%s] %s", record["tgl"], format_signal(signal))
    return signal


def show_indicators(candles: List[Candle], cfg: Dict[str, Any], rows: int = 5) -> None:
    df = add_indicators(candles_to_frame(candles), cfg)
    logger.info("last %d bars:\n%s", rows, df.drop(columns=["time"]).tail(rows).to_string())


def main(argv=None):
    parser = argparse.ArgumentParser(description="EMA cross + RSI scalping signal (single run)")
    parser.add_argument("--config", default=None, help="path to config .yaml/.json")
    parser.add_argument("--test", action="store_true", help="Dry-run mode (no Telegram send, no DB write)")
    parser.add_argument("--env-file", default=".env", help="dotenv file with TG_BOT_TOKEN / TG_CHAT_ID / DB_URL")
    parser.add_argument("--show", action="store_true", help="log the last bars with indicator values")
    args = parser.parse_args(argv)

    load_dotenv(args.env_file)
    cfg = load_config(args.config)
    setup_logging(cfg["log_level"])

    if args.show:
        candles = _fetch(cfg, fetch_candles)
        if candles:
            show_indicators(candles, cfg)

    store = None if args.test else open_store(cfg)
    try:
        run_once(cfg, store=store, dry_run=args.test)
    finally:
        if store is not None:
            store.close()


if __name__ == "__main__":
    main()
