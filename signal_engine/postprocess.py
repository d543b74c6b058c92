"""
signal_engine/postprocess.py

Duplicate guard for emitted signals. The detector is stateless, so the same
crossover bar can be seen by several consecutive runs (e.g. a 15m candle is
evaluated three times by a 5m schedule). This module keeps the last emitted
signal in a small JSON state file:

  {"kind": "BUY", "timestamp": 1735689600, "emitted_at": 1735689900.0}

and answers whether a new signal repeats it.
"""
import json
import logging
import os
import time
from typing import Dict, Optional

from analyzer.models import Signal

logger = logging.getLogger(__name__)


def load_state(path: str) -> Dict:
    if not path or not os.path.exists(path):
        return {}
    try:
        with open(path, "r", encoding="utf-8") as f:
            state = json.load(f)
    except (OSError, ValueError) as e:
        logger.warning("could not read state file %s (%s); starting empty", path, e)
        return {}
    return state if isinstance(state, dict) else {}


def save_state(path: str, state: Dict) -> None:
    parent = os.path.dirname(path)
    if parent:
        os.makedirs(parent, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(state, f, indent=2, ensure_ascii=False)


def is_duplicate(signal: Signal, state: Dict, cooldown_minutes: float = 0,
                 now: Optional[float] = None) -> bool:
    """
    True when `signal` repeats the last emitted one:
      - same kind for the same candle timestamp, or
      - same kind emitted less than `cooldown_minutes` ago (0 disables this check)
    An opposite-kind signal is never a duplicate.
    """
    if not state or state.get("kind") != signal.kind.value:
        return False
    if state.get("timestamp") == signal.timestamp:
        return True
    if cooldown_minutes and cooldown_minutes > 0:
        now = time.time() if now is None else now
        emitted_at = state.get("emitted_at")
        if emitted_at is not None and now - float(emitted_at) < cooldown_minutes * 60:
            return True
    return False


def remember(signal: Signal, path: str, now: Optional[float] = None) -> Dict:
    """Persist `signal` as the last emitted one and return the new state."""
    state = {
        "kind": signal.kind.value,
        "timestamp": signal.timestamp,
        "emitted_at": time.time() if now is None else now,
    }
    save_state(path, state)
    return state
