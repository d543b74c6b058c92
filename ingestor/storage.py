# ingestor/storage.py
"""
Storage helpers untuk sinyal scalping.

- signal_record(signal) -> dict   (record datar: tgl, sinyal, real, format_sinyal)
- SignalStore(db_url, table)      (SQLAlchemy Core; sqlite default, MySQL via URL)

Kolom 'real' adalah placeholder hasil (outcome) yang diisi manual belakangan;
saat insert nilainya '-'.
"""
import logging
from pathlib import Path
from typing import Any, Dict, List

from sqlalchemy import Column, Integer, MetaData, String, Table, Text, create_engine, select
from sqlalchemy.engine import make_url

from analyzer.models import Signal
from indicators.rounding import format_signal, format_timestamp

logger = logging.getLogger(__name__)

# kolom yang diisi oleh pipeline
FIELDNAMES = ["tgl", "sinyal", "real", "format_sinyal"]
OUTCOME_PLACEHOLDER = "-"


def signal_record(signal: Signal) -> Dict[str, Any]:
    """Flat record for persistence."""
    return {
        "tgl": format_timestamp(signal.timestamp),
        "sinyal": signal.kind.value,
        "real": OUTCOME_PLACEHOLDER,
        "format_sinyal": format_signal(signal),
    }


def _ensure_sqlite_parent(db_url: str) -> None:
    url = make_url(db_url)
    if url.get_backend_name() == "sqlite" and url.database and url.database != ":memory:":
        Path(url.database).parent.mkdir(parents=True, exist_ok=True)


class SignalStore:
    """
    Persist signal records into one table.
    The SQLite folder and the table are created on the first save/fetch_all,
    so connection problems raise from that call, never from the constructor.
    """

    def __init__(self, db_url: str, table: str = "sinyal_scalping"):
        self.db_url = db_url
        self._ready = False
        self.engine = create_engine(db_url)
        self.metadata = MetaData()
        self.table = Table(
            table, self.metadata,
            Column("id", Integer, primary_key=True, autoincrement=True),
            Column("tgl", String(19), nullable=False),
            Column("sinyal", String(4), nullable=False),
            Column("real", String(32)),
            Column("format_sinyal", Text),
        )

    def _ensure_table(self) -> None:
        if self._ready:
            return
        _ensure_sqlite_parent(self.db_url)
        self.metadata.create_all(self.engine)
        self._ready = True

    def save(self, record: Dict[str, Any]) -> None:
        missing = [k for k in FIELDNAMES if k not in record]
        if missing:
            raise ValueError(f"record missing fields: {missing}")
        self._ensure_table()
        with self.engine.begin() as conn:
            conn.execute(self.table.insert().values(**{k: record[k] for k in FIELDNAMES}))
        logger.debug("saved %s signal at %s", record["sinyal"], record["tgl"])

    def fetch_all(self) -> List[Dict[str, Any]]:
        self._ensure_table()
        with self.engine.connect() as conn:
            rows = conn.execute(select(self.table).order_by(self.table.c.id)).mappings().all()
        return [dict(r) for r in rows]

    def close(self) -> None:
        self.engine.dispose()
