"""Persisted user settings and the settings store."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Optional, Protocol

from pydantic import BaseModel, ConfigDict, ValidationError

from .day_boundary import MINUTES_PER_DAY
from .db import connect, init_database

logger = logging.getLogger("sundown.settings")

# Reset time filled in when a daily limit is set before any reset time (04:00)
DEFAULT_DAY_RESET_MINUTES = 240


class PersistedSettings(BaseModel):
    """Immutable settings snapshot. ``None`` means "not configured"."""

    model_config = ConfigDict(frozen=True)

    daily_limit_minutes: Optional[int] = None
    day_reset_minutes_from_midnight: Optional[int] = None
    notifications_enabled: Optional[bool] = None
    idle_threshold_minutes: Optional[int] = None
    over_limit_reminder_minutes: Optional[int] = None

    def updated(self, **changes) -> "PersistedSettings":
        data = self.model_dump()
        data.update(changes)
        return PersistedSettings.model_validate(data)

    def with_onboarding_defaults(self) -> "PersistedSettings":
        """A daily limit without a reset time gets the default reset time."""
        if self.daily_limit_minutes is None or self.day_reset_minutes_from_midnight is not None:
            return self
        return self.updated(day_reset_minutes_from_midnight=DEFAULT_DAY_RESET_MINUTES)

    def with_daily_limit(self, minutes: int) -> "PersistedSettings":
        return self.updated(daily_limit_minutes=minutes).with_onboarding_defaults()

    def with_reset_time(self, minutes_from_midnight: int) -> "PersistedSettings":
        """Wraps around midnight: -30 becomes 23:30, 1440 becomes 00:00."""
        return self.updated(day_reset_minutes_from_midnight=minutes_from_midnight % MINUTES_PER_DAY)

    def cleared(self) -> "PersistedSettings":
        return PersistedSettings()


class SettingsStore(Protocol):
    def load(self) -> PersistedSettings: ...

    def save(self, settings: PersistedSettings) -> None: ...


class SQLiteSettingsStore:
    """Key/value settings table. Saving ``None`` for a field deletes its row."""

    FIELDS = tuple(PersistedSettings.model_fields)

    def __init__(self, db_path: str | Path):
        self.db_path = init_database(db_path)

    def load(self) -> PersistedSettings:
        conn = connect(self.db_path)
        try:
            rows = conn.execute("SELECT key, value FROM settings").fetchall()
        finally:
            conn.close()

        data = {}
        for row in rows:
            if row["key"] not in self.FIELDS:
                continue
            try:
                data[row["key"]] = json.loads(row["value"])
            except json.JSONDecodeError:
                logger.warning(f"Ignoring undecodable setting {row['key']!r}")

        try:
            settings = PersistedSettings.model_validate(data)
        except ValidationError as e:
            # Drop only the offending fields
            bad = {err["loc"][0] for err in e.errors() if err.get("loc")}
            logger.warning(f"Ignoring invalid settings: {', '.join(sorted(map(str, bad)))}")
            settings = PersistedSettings.model_validate({k: v for k, v in data.items() if k not in bad})
        return settings.with_onboarding_defaults()

    def save(self, settings: PersistedSettings) -> None:
        conn = connect(self.db_path)
        try:
            for key, value in settings.model_dump().items():
                if value is None:
                    conn.execute("DELETE FROM settings WHERE key = ?", (key,))
                else:
                    conn.execute(
                        "INSERT OR REPLACE INTO settings (key, value) VALUES (?, ?)",
                        (key, json.dumps(value)),
                    )
            conn.commit()
        finally:
            conn.close()
