"""
runner/config.py

Load pipeline config (.yaml/.yml or .json), merge over DEFAULT_CONFIG,
apply environment overrides and validate.

Secrets are read from the environment (entry points first load a .env file
with python-dotenv; real environment variables win):
  TG_BOT_TOKEN, TG_CHAT_ID   -> telegram credentials
  DB_URL                     -> overrides 'db_url'
"""
import json
import os
from typing import Any, Dict, List, Mapping, Optional

import yaml

from analyzer.signal_engine import config as C

DEFAULT_CONFIG: Dict[str, Any] = {
    "symbol": "BTCUSDT",
    "interval": "15m",
    "limit": 100,
    "ema_fast": C.EMA_FAST,
    "ema_slow": C.EMA_SLOW,
    "rsi_period": C.RSI_PERIOD,
    "rsi_buy_max": C.RSI_BUY_MAX,
    "rsi_sell_min": C.RSI_SELL_MIN,
    "tp_pct": C.TP_PCT,
    "sl_pct": C.SL_PCT,
    "trailing_pct": C.TRAILING_PCT,
    "schedule_minutes": 5,
    "request_timeout": 10.0,
    "db_url": "sqlite:///data/signals.db",
    "table": "sinyal_scalping",
    "state_file": "state/last_signal.json",
    "dedupe": True,
    "cooldown_minutes": 0,
    "telegram_enabled": True,
    "log_level": "INFO",
}

TYPES = {
    "symbol": str,
    "interval": str,
    "limit": int,
    "ema_fast": int,
    "ema_slow": int,
    "rsi_period": int,
    "rsi_buy_max": (int, float),
    "rsi_sell_min": (int, float),
    "tp_pct": (int, float),
    "sl_pct": (int, float),
    "trailing_pct": (int, float),
    "schedule_minutes": (int, float),
    "request_timeout": (int, float),
    "db_url": str,
    "table": str,
    "state_file": str,
    "dedupe": bool,
    "cooldown_minutes": (int, float),
    "telegram_enabled": bool,
    "log_level": str,
}

POSITIVE = ("limit", "ema_fast", "ema_slow", "rsi_period", "schedule_minutes", "request_timeout")
LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


def load_config_file(path: str) -> Dict[str, Any]:
    if not os.path.exists(path):
        raise FileNotFoundError(f"Config file not found: {path}")
    ext = os.path.splitext(path)[1].lower()
    if ext not in (".yaml", ".yml", ".json"):
        raise ValueError("Unsupported config format. Use .yaml/.yml or .json")
    with open(path, "r", encoding="utf-8") as f:
        try:
            data = json.load(f) if ext == ".json" else yaml.safe_load(f)
        except (yaml.YAMLError, json.JSONDecodeError) as e:
            raise ValueError(f"invalid config file {path}: {e}") from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError("Config must be a mapping/object at top level.")
    return data


def validate_config(cfg: Any) -> List[str]:
    errors: List[str] = []
    if not isinstance(cfg, dict):
        return ["Config must be a mapping/object at top level."]
    for k in cfg:
        if k not in TYPES:
            errors.append(f"Unknown key: '{k}'")
    for k, expected in TYPES.items():
        if k not in cfg:
            continue
        v = cfg[k]
        # bool is an int subclass; only accept it where bool is expected
        if (isinstance(v, bool) and expected is not bool) or not isinstance(v, expected):
            errors.append(f"Invalid type for '{k}': expected {expected}, got {type(v).__name__}")
    if errors:
        return errors

    for k in POSITIVE:
        if k in cfg and cfg[k] <= 0:
            errors.append(f"{k} must be > 0")
    for k in ("tp_pct", "sl_pct", "trailing_pct", "cooldown_minutes"):
        if k in cfg and cfg[k] < 0:
            errors.append(f"{k} must be >= 0")
    for k in ("rsi_buy_max", "rsi_sell_min"):
        if k in cfg and not 0 <= cfg[k] <= 100:
            errors.append(f"{k} must be within [0, 100]")
    if cfg.get("ema_fast", 0) >= cfg.get("ema_slow", float("inf")):
        errors.append("ema_fast must be < ema_slow")
    if "log_level" in cfg and str(cfg["log_level"]).upper() not in LOG_LEVELS:
        errors.append(f"Invalid value for 'log_level': '{cfg['log_level']}' not in {sorted(LOG_LEVELS)}")
    return errors


def load_config(path: Optional[str] = None, env: Optional[Mapping[str, str]] = None) -> Dict[str, Any]:
    """
    DEFAULT_CONFIG <- file (if path given and exists) <- env overrides.
    Raises ValueError listing all validation errors.
    """
    env = os.environ if env is None else env
    cfg = dict(DEFAULT_CONFIG)
    if path:
        cfg.update(load_config_file(path))
    if env.get("DB_URL"):
        cfg["db_url"] = env["DB_URL"]

    errs = validate_config(cfg)
    if errs:
        raise ValueError("invalid config: " + "; ".join(errs))

    cfg["bot_token"] = env.get("TG_BOT_TOKEN")
    cfg["chat_id"] = env.get("TG_CHAT_ID")
    return cfg
