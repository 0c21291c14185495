"""Unit tests for TimeEngine defaults and pass-through."""

from datetime import datetime, timezone

from sundown.activity import ActivityKind
from sundown.engine import TimeEngine
from sundown.onboarding import OnboardingGateState
from sundown.settings import PersistedSettings
from sundown.worktime import OverLimit, UnderLimit

NOW = datetime(2024, 1, 31, 4, 0, tzinfo=timezone.utc)


def make_engine() -> TimeEngine:
    return TimeEngine.for_timezone(timezone.utc)


def configured(**overrides) -> PersistedSettings:
    data = {"daily_limit_minutes": 480, "day_reset_minutes_from_midnight": 300}
    data.update(overrides)
    return PersistedSettings(**data)


class TestDayId:
    def test_none_without_reset_time(self):
        assert make_engine().day_id(NOW, PersistedSettings(daily_limit_minutes=480)) is None

    def test_uses_reset_time(self):
        assert make_engine().day_id(NOW, configured()) == "2024-01-30"


class TestWorktimeState:
    def test_none_without_limit(self):
        settings = PersistedSettings(day_reset_minutes_from_midnight=240)
        assert make_engine().worktime_state(100, settings) is None

    def test_under(self):
        assert make_engine().worktime_state(9420, configured()) == UnderLimit(remaining_seconds=19380)

    def test_over(self):
        assert make_engine().worktime_state(31020, configured()) == OverLimit(overtime_seconds=2220)

    def test_invalid_limit_still_evaluates(self):
        # The gate blocks use of a zero limit; the engine stays total
        assert make_engine().worktime_state(10, configured(daily_limit_minutes=0)) == OverLimit(overtime_seconds=10)


class TestActivity:
    def test_default_threshold_is_five_minutes(self):
        engine = make_engine()
        assert engine.activity(False, 299, configured()) == ActivityKind.WORK
        assert engine.activity(False, 300, configured()) == ActivityKind.IDLE

    def test_configured_threshold(self):
        settings = configured(idle_threshold_minutes=2)
        assert make_engine().activity(False, 120, settings) == ActivityKind.IDLE

    def test_threshold_clamped(self):
        settings = configured(idle_threshold_minutes=0)
        assert make_engine().idle_threshold_minutes(settings) == 1
        assert make_engine().activity(False, 60, settings) == ActivityKind.IDLE

    def test_break(self):
        assert make_engine().activity(True, 0, configured()) == ActivityKind.BREAK_TIME


class TestReminderInterval:
    def test_default(self):
        assert make_engine().reminder_interval_minutes(configured()) == 30

    def test_configured(self):
        assert make_engine().reminder_interval_minutes(configured(over_limit_reminder_minutes=10)) == 10

    def test_clamped(self):
        assert make_engine().reminder_interval_minutes(configured(over_limit_reminder_minutes=-4)) == 1


def test_gate_state():
    assert make_engine().gate_state(configured()) == OnboardingGateState.ALLOWED


def test_calls_are_idempotent():
    engine = make_engine()
    settings = configured(idle_threshold_minutes=3)
    assert engine.worktime_state(12345, settings) == engine.worktime_state(12345, settings)
    assert engine.day_id(NOW, settings) == engine.day_id(NOW, settings)
    assert engine.activity(False, 150, settings) == engine.activity(False, 150, settings)
