import logging

import requests

from analyzer.models import Signal
from indicators.rounding import format_signal

logger = logging.getLogger(__name__)

TELEGRAM_API = "https://api.telegram.org/bot{token}/sendMessage"


def format_message(signal: Signal) -> str:
    return f"📊 {format_signal(signal)}"


def send_telegram_message(bot_token, chat_id, text, dry_run=False, timeout=10.0):
    """Kirim pesan ke Telegram atau tampilkan ke log kalau test mode.

    Tidak pernah raise: kegagalan dicatat sebagai warning dan return False.
    """
    if dry_run:
        logger.info("[TEST] Telegram message -> %s: %s", chat_id, text)
        return True
    if not bot_token or not chat_id:
        logger.warning("Telegram not configured (TG_BOT_TOKEN / TG_CHAT_ID missing); message dropped")
        return False

    url = TELEGRAM_API.format(token=bot_token)
    try:
        resp = requests.post(url, json={"chat_id": chat_id, "text": text}, timeout=timeout)
    except requests.RequestException as e:
        logger.warning("Telegram send failed: %s", e)
        return False
    if resp.status_code != 200:
        logger.warning("Telegram send failed (%s): %s", resp.status_code, resp.text[:200])
        return False
    return True
