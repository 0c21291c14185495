"""Sundown: track the working day against a daily limit.

Pure time/state evaluators (day boundary, activity, worktime, onboarding
gate, reminder policy) plus the session tracker and stores that host them.
"""

from .activity import ActivityKind, classify_activity
from .day_boundary import DayBoundary
from .day_record import DayRecord, RitualTotals
from .engine import TimeEngine
from .notification_policy import should_notify
from .onboarding import OnboardingGateState, evaluate_gate, gate_message
from .settings import PersistedSettings
from .tracker import SessionTracker, TickResult, TrackerEvent
from .worktime import OverLimit, UnderLimit, WorktimeState, display_text, evaluate_worktime, is_over_limit

__all__ = [
    "ActivityKind",
    "DayBoundary",
    "DayRecord",
    "OnboardingGateState",
    "OverLimit",
    "PersistedSettings",
    "RitualTotals",
    "SessionTracker",
    "TickResult",
    "TimeEngine",
    "TrackerEvent",
    "UnderLimit",
    "WorktimeState",
    "classify_activity",
    "display_text",
    "evaluate_gate",
    "evaluate_worktime",
    "gate_message",
    "is_over_limit",
    "should_notify",
]
