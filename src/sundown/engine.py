"""TimeEngine: the evaluators projected over a settings snapshot.

Stateless. Defaults for unset settings are resolved here and nowhere else.
"""

from __future__ import annotations

from datetime import datetime, tzinfo
from typing import Optional

from .activity import DEFAULT_IDLE_THRESHOLD_MINUTES, ActivityKind, classify_activity
from .day_boundary import DayBoundary
from .notification_policy import DEFAULT_REMINDER_INTERVAL_MINUTES
from .onboarding import OnboardingGateState, evaluate_gate
from .settings import PersistedSettings
from .worktime import WorktimeState, evaluate_worktime


class TimeEngine:
    def __init__(self, day_boundary: DayBoundary | None = None):
        self.day_boundary = day_boundary or DayBoundary()

    @classmethod
    def for_timezone(cls, tz: tzinfo | None) -> "TimeEngine":
        return cls(DayBoundary(tz))

    def day_id(self, now: datetime, settings: PersistedSettings) -> Optional[str]:
        if settings.day_reset_minutes_from_midnight is None:
            return None
        return self.day_boundary.day_id(now, settings.day_reset_minutes_from_midnight)

    def worktime_state(self, elapsed_seconds: int, settings: PersistedSettings) -> Optional[WorktimeState]:
        if settings.daily_limit_minutes is None:
            return None
        return evaluate_worktime(elapsed_seconds, settings.daily_limit_minutes)

    def idle_threshold_minutes(self, settings: PersistedSettings) -> int:
        if settings.idle_threshold_minutes is None:
            return DEFAULT_IDLE_THRESHOLD_MINUTES
        return max(1, settings.idle_threshold_minutes)

    def activity(
        self, is_break_active: bool, inactivity_seconds: int, settings: PersistedSettings
    ) -> ActivityKind:
        return classify_activity(
            is_break_active, inactivity_seconds, self.idle_threshold_minutes(settings)
        )

    def reminder_interval_minutes(self, settings: PersistedSettings) -> int:
        if settings.over_limit_reminder_minutes is None:
            return DEFAULT_REMINDER_INTERVAL_MINUTES
        return max(1, settings.over_limit_reminder_minutes)

    def gate_state(self, settings: PersistedSettings) -> OnboardingGateState:
        return evaluate_gate(settings)
