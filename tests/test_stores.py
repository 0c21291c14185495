"""Tests for the SQLite settings and day-record stores.

Each test gets its own temporary database file.
"""

import sqlite3
from pathlib import Path

import pytest

from sundown.activity import ActivityKind
from sundown.day_record import DayRecord
from sundown.day_record_store import SQLiteDayRecordStore
from sundown.settings import DEFAULT_DAY_RESET_MINUTES, PersistedSettings, SQLiteSettingsStore


@pytest.fixture
def db_path(tmp_path: Path) -> Path:
    return tmp_path / "data" / "sundown.db"


FULL_SETTINGS = PersistedSettings(
    daily_limit_minutes=480,
    day_reset_minutes_from_midnight=240,
    notifications_enabled=True,
    idle_threshold_minutes=5,
    over_limit_reminder_minutes=30,
)


# ---- Settings ----

class TestSettingsStore:
    def test_empty_store_loads_all_unset(self, db_path):
        settings = SQLiteSettingsStore(db_path).load()
        assert settings == PersistedSettings()
        assert settings.notifications_enabled is None

    def test_creates_parent_directory(self, db_path):
        SQLiteSettingsStore(db_path)
        assert db_path.exists()

    def test_round_trip(self, db_path):
        store = SQLiteSettingsStore(db_path)
        store.save(FULL_SETTINGS)
        assert store.load() == FULL_SETTINGS

    def test_saving_none_clears_field(self, db_path):
        store = SQLiteSettingsStore(db_path)
        store.save(FULL_SETTINGS)
        store.save(PersistedSettings())
        assert store.load() == PersistedSettings()

    def test_persists_across_instances(self, db_path):
        SQLiteSettingsStore(db_path).save(FULL_SETTINGS)
        assert SQLiteSettingsStore(db_path).load() == FULL_SETTINGS

    def test_undecodable_value_reads_as_unset(self, db_path):
        store = SQLiteSettingsStore(db_path)
        store.save(FULL_SETTINGS)
        with sqlite3.connect(db_path) as conn:
            conn.execute("UPDATE settings SET value = '{not json' WHERE key = 'daily_limit_minutes'")

        loaded = store.load()
        assert loaded.daily_limit_minutes is None
        assert loaded.day_reset_minutes_from_midnight == 240

    def test_wrong_type_reads_as_unset(self, db_path):
        store = SQLiteSettingsStore(db_path)
        store.save(FULL_SETTINGS)
        with sqlite3.connect(db_path) as conn:
            conn.execute("UPDATE settings SET value = '\"lots\"' WHERE key = 'idle_threshold_minutes'")

        loaded = store.load()
        assert loaded.idle_threshold_minutes is None
        assert loaded.daily_limit_minutes == 480

    def test_limit_without_reset_loads_default_reset(self, db_path):
        store = SQLiteSettingsStore(db_path)
        with sqlite3.connect(db_path) as conn:
            conn.execute("INSERT INTO settings (key, value) VALUES ('daily_limit_minutes', '480')")

        loaded = store.load()
        assert loaded.daily_limit_minutes == 480
        assert loaded.day_reset_minutes_from_midnight == DEFAULT_DAY_RESET_MINUTES

    def test_reset_alone_stays_without_limit(self, db_path):
        store = SQLiteSettingsStore(db_path)
        store.save(PersistedSettings(day_reset_minutes_from_midnight=60))
        assert store.load() == PersistedSettings(day_reset_minutes_from_midnight=60)

    def test_unknown_keys_ignored(self, db_path):
        store = SQLiteSettingsStore(db_path)
        with sqlite3.connect(db_path) as conn:
            conn.execute("INSERT INTO settings (key, value) VALUES ('menu_bar_mode', '1')")
        assert store.load() == PersistedSettings()


class TestSettingsUpdates:
    def test_updated_returns_new_snapshot(self):
        base = PersistedSettings()
        changed = base.updated(idle_threshold_minutes=3)
        assert base.idle_threshold_minutes is None
        assert changed.idle_threshold_minutes == 3

    def test_daily_limit_fills_default_reset_time(self):
        settings = PersistedSettings().with_daily_limit(480)
        assert settings.day_reset_minutes_from_midnight == DEFAULT_DAY_RESET_MINUTES

    def test_daily_limit_keeps_existing_reset_time(self):
        settings = PersistedSettings(day_reset_minutes_from_midnight=60).with_daily_limit(300)
        assert settings.day_reset_minutes_from_midnight == 60

    def test_reset_time_wraps(self):
        assert PersistedSettings().with_reset_time(-30).day_reset_minutes_from_midnight == 1410
        assert PersistedSettings().with_reset_time(1440).day_reset_minutes_from_midnight == 0

    def test_onboarding_defaults_keep_configured_reset(self):
        settings = PersistedSettings(daily_limit_minutes=300, day_reset_minutes_from_midnight=0)
        assert settings.with_onboarding_defaults() == settings

    def test_cleared(self):
        assert FULL_SETTINGS.cleared() == PersistedSettings()


# ---- Day records ----

class TestDayRecordStore:
    def test_missing_day_loads_none(self, db_path):
        assert SQLiteDayRecordStore(db_path).load("2026-02-22") is None

    def test_round_trip(self, db_path):
        store = SQLiteDayRecordStore(db_path)
        record = DayRecord(day_id="2026-02-22", limit_minutes=480)
        record.add(ActivityKind.WORK, 90)

        store.save(record)
        assert store.load("2026-02-22") == record

    def test_save_upserts(self, db_path):
        store = SQLiteDayRecordStore(db_path)
        record = DayRecord(day_id="2026-02-22", limit_minutes=480)
        store.save(record)
        record.add(ActivityKind.IDLE, 4)
        store.save(record)

        assert store.load("2026-02-22").idle_minutes == 4
        assert len(store.load_all()) == 1

    def test_load_all_sorted_by_day(self, db_path):
        store = SQLiteDayRecordStore(db_path)
        store.save(DayRecord(day_id="2026-02-23", limit_minutes=480))
        store.save(DayRecord(day_id="2026-02-22", limit_minutes=480))
        store.save(DayRecord(day_id="2025-12-31", limit_minutes=480))

        assert [r.day_id for r in store.load_all()] == ["2025-12-31", "2026-02-22", "2026-02-23"]

    def test_corrupt_row_reads_as_missing(self, db_path):
        store = SQLiteDayRecordStore(db_path)
        store.save(DayRecord(day_id="2026-02-22", limit_minutes=480))
        with sqlite3.connect(db_path) as conn:
            conn.execute("INSERT INTO day_records (day_id, payload) VALUES ('2026-02-23', '{\"day_id\": 1}')")
            conn.execute("INSERT INTO day_records (day_id, payload) VALUES ('2026-02-24', 'garbage')")

        assert store.load("2026-02-23") is None
        assert store.load("2026-02-24") is None
        assert [r.day_id for r in store.load_all()] == ["2026-02-22"]

    def test_shares_database_with_settings(self, db_path):
        SQLiteSettingsStore(db_path).save(FULL_SETTINGS)
        SQLiteDayRecordStore(db_path).save(DayRecord(day_id="2026-02-22", limit_minutes=480))
        assert SQLiteSettingsStore(db_path).load() == FULL_SETTINGS
