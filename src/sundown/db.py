"""SQLite database setup shared by the settings and day-record stores."""

from __future__ import annotations

import sqlite3
from pathlib import Path

DEFAULT_DB_PATH = Path.home() / ".sundown" / "sundown.db"


def connect(db_path: str | Path) -> sqlite3.Connection:
    conn = sqlite3.connect(str(db_path))
    conn.row_factory = sqlite3.Row
    # Busy timeout keeps a status read from failing while the tracker writes
    conn.execute("PRAGMA busy_timeout=5000")
    return conn


def init_database(db_path: str | Path = DEFAULT_DB_PATH) -> Path:
    """Create the database file and tables if they don't exist."""
    path = Path(db_path)
    path.parent.mkdir(parents=True, exist_ok=True)

    conn = connect(path)
    try:
        conn.execute("PRAGMA journal_mode=WAL")

        # One row per configured setting; absent row = not configured
        conn.execute("""
            CREATE TABLE IF NOT EXISTS settings (
                key TEXT PRIMARY KEY,
                value TEXT NOT NULL
            )
        """)

        # One row per sundown day
        conn.execute("""
            CREATE TABLE IF NOT EXISTS day_records (
                day_id TEXT PRIMARY KEY,
                payload TEXT NOT NULL,
                updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        """)
        conn.commit()
    finally:
        conn.close()

    return path
