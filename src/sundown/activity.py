"""Activity classification from break state and inactivity."""

from __future__ import annotations

from enum import Enum

DEFAULT_IDLE_THRESHOLD_MINUTES = 5


class ActivityKind(str, Enum):
    WORK = "work"
    BREAK_TIME = "break"
    IDLE = "idle"

    @property
    def label(self) -> str:
        return {
            ActivityKind.WORK: "Work",
            ActivityKind.BREAK_TIME: "Break",
            ActivityKind.IDLE: "Idle",
        }[self]


def idle_threshold_seconds(idle_threshold_minutes: int) -> int:
    return max(1, idle_threshold_minutes) * 60


def classify_activity(
    is_break_active: bool, inactivity_seconds: int, idle_threshold_minutes: int
) -> ActivityKind:
    """Break beats idle, idle beats work. The idle threshold is inclusive."""
    if is_break_active:
        return ActivityKind.BREAK_TIME

    if max(0, inactivity_seconds) >= idle_threshold_seconds(idle_threshold_minutes):
        return ActivityKind.IDLE

    return ActivityKind.WORK
