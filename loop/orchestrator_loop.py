"""
loop/orchestrator_loop.py

Scheduler: run the pipeline once at startup, then every `schedule_minutes`.
Each run executes in a worker thread; a tick that fires while the previous
run is still busy (slow network / DB) is skipped, never overlapped.

Usage:
  python -m loop.orchestrator_loop [--config config.yaml] [--test]
"""
import argparse
import logging
import threading
from typing import Callable, Optional

import schedule
from dotenv import load_dotenv

from runner.check_and_dispatch import open_store, run_once, setup_logging
from runner.config import load_config

logger = logging.getLogger(__name__)


class SingleFlightJob:
    """Callable wrapper allowing at most one in-flight run of `func`."""

    def __init__(self, func: Callable[[], object], name: str = "pipeline"):
        self.func = func
        self.name = name
        self.skipped = 0
        self._lock = threading.Lock()
        self._thread: Optional[threading.Thread] = None

    @property
    def busy(self) -> bool:
        return self._lock.locked()

    def __call__(self) -> bool:
        if not self._lock.acquire(blocking=False):
            self.skipped += 1
            logger.warning("%s run still in progress; skipping this tick", self.name)
            return False
        self._thread = threading.Thread(target=self._run, name=f"{self.name}-run", daemon=True)
        self._thread.start()
        return True

    def _run(self) -> None:
        try:
            self.func()
        except Exception:
            logger.exception("%s run failed", self.name)
        finally:
            self._lock.release()

    def join(self, timeout: Optional[float] = None) -> None:
        if self._thread is not None:
            self._thread.join(timeout)


def start_loop(job: Callable[[], object], minutes: float,
               stop_event: Optional[threading.Event] = None,
               scheduler: Optional[schedule.Scheduler] = None,
               poll_seconds: float = 1.0) -> SingleFlightJob:
    """
    Block until `stop_event` is set: run `job` now, then every `minutes`.
    Returns the SingleFlightJob wrapper (useful for inspection in tests).
    """
    stop_event = stop_event or threading.Event()
    scheduler = scheduler or schedule.Scheduler()
    guarded = job if isinstance(job, SingleFlightJob) else SingleFlightJob(job)

    scheduler.every(max(1, int(minutes * 60))).seconds.do(guarded)
    logger.info("Scheduler started (every %s min), press Ctrl+C to stop.", minutes)
    guarded()  # run first time immediately
    while not stop_event.is_set():
        scheduler.run_pending()
        stop_event.wait(poll_seconds)
    scheduler.clear()
    guarded.join()
    return guarded


def main(argv=None):
    parser = argparse.ArgumentParser(description="Run the scalping signal pipeline on a schedule")
    parser.add_argument("--config", default=None, help="path to config .yaml/.json")
    parser.add_argument("--test", action="store_true", help="Dry-run mode (no Telegram send, no DB write)")
    parser.add_argument("--env-file", default=".env", help="dotenv file with TG_BOT_TOKEN / TG_CHAT_ID / DB_URL")
    args = parser.parse_args(argv)

    load_dotenv(args.env_file)
    cfg = load_config(args.config)
    setup_logging(cfg["log_level"])
    store = None if args.test else open_store(cfg)

    def job():
        run_once(cfg, store=store, dry_run=args.test)

    stop = threading.Event()
    try:
        start_loop(job, cfg["schedule_minutes"], stop_event=stop)
    except KeyboardInterrupt:
        logger.info("stopping scheduler")
        stop.set()
    finally:
        if store is not None:
            store.close()


if __name__ == "__main__":
    main()
