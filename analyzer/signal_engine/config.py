# analyzer/signal_engine/config.py
"""
Konfigurasi utama untuk rule EMA cross + RSI (scalping, BUY dan SELL).
Semua nilai dapat diimpor oleh modul lain; runner.config memakai nilai ini
sebagai default.
"""

# --- EMA parameter ---
EMA_FAST = 20      # periode EMA cepat
EMA_SLOW = 50      # periode EMA lambat

# --- RSI parameter ---
RSI_PERIOD = 14
RSI_BUY_MAX = 40.0    # BUY valid jika RSI < 40
RSI_SELL_MIN = 60.0   # SELL valid jika RSI > 60

# --- Level (persentase dari harga referensi) ---
TP_PCT = 0.01
SL_PCT = 0.01
TRAILING_PCT = 0.003  # offset absolut, bukan batas harga

# --- Output ---
PRICE_DECIMALS = 2
