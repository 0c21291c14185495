"""Day-record persistence, one row per sundown day."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Optional, Protocol

from .db import connect, init_database
from .day_record import DayRecord

logger = logging.getLogger("sundown.day_record_store")


class DayRecordStore(Protocol):
    def load(self, day_id: str) -> Optional[DayRecord]: ...

    def load_all(self) -> list[DayRecord]: ...

    def save(self, record: DayRecord) -> None: ...


def _decode(day_id: str, payload: str) -> Optional[DayRecord]:
    try:
        return DayRecord.from_dict(json.loads(payload))
    except (json.JSONDecodeError, KeyError, TypeError, ValueError) as e:
        logger.warning(f"Skipping undecodable day record {day_id}: {e}")
        return None


class SQLiteDayRecordStore:
    """Upserts records keyed by day_id. Undecodable rows read as missing."""

    def __init__(self, db_path: str | Path):
        self.db_path = init_database(db_path)

    def load(self, day_id: str) -> Optional[DayRecord]:
        conn = connect(self.db_path)
        try:
            row = conn.execute(
                "SELECT day_id, payload FROM day_records WHERE day_id = ?", (day_id,)
            ).fetchone()
        finally:
            conn.close()

        if not row:
            return None
        return _decode(row["day_id"], row["payload"])

    def load_all(self) -> list[DayRecord]:
        conn = connect(self.db_path)
        try:
            rows = conn.execute(
                "SELECT day_id, payload FROM day_records ORDER BY day_id ASC"
            ).fetchall()
        finally:
            conn.close()

        records = []
        for row in rows:
            record = _decode(row["day_id"], row["payload"])
            if record is not None:
                records.append(record)
        return records

    def save(self, record: DayRecord) -> None:
        conn = connect(self.db_path)
        try:
            conn.execute("""
                INSERT INTO day_records (day_id, payload, updated_at)
                VALUES (?, ?, CURRENT_TIMESTAMP)
                ON CONFLICT(day_id) DO UPDATE SET
                    payload = excluded.payload,
                    updated_at = excluded.updated_at
            """, (record.day_id, json.dumps(record.to_dict())))
            conn.commit()
        finally:
            conn.close()
