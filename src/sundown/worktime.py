"""Worktime state: how far the tracked work time is from the daily limit.

All values are integer seconds. ``UnderLimit`` holds up to and including the
limit itself, so reaching the limit exactly is ``UnderLimit(0)``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union


@dataclass(frozen=True)
class UnderLimit:
    remaining_seconds: int


@dataclass(frozen=True)
class OverLimit:
    overtime_seconds: int


WorktimeState = Union[UnderLimit, OverLimit]


def evaluate_worktime(elapsed_seconds: int, daily_limit_minutes: int) -> WorktimeState:
    elapsed = max(0, elapsed_seconds)
    limit_seconds = max(0, daily_limit_minutes) * 60

    if elapsed <= limit_seconds:
        return UnderLimit(remaining_seconds=limit_seconds - elapsed)

    return OverLimit(overtime_seconds=elapsed - limit_seconds)


def is_over_limit(state: WorktimeState) -> bool:
    return isinstance(state, OverLimit)


def state_seconds(state: WorktimeState) -> int:
    """Seconds carried by the state: remaining when under, overtime when over."""
    if isinstance(state, OverLimit):
        return state.overtime_seconds
    return state.remaining_seconds


def _hms(total_seconds: int) -> str:
    hours = total_seconds // 3600
    minutes = (total_seconds % 3600) // 60
    seconds = total_seconds % 60
    return f"{hours}h {minutes:02d}m {seconds:02d}s"


def display_text(state: WorktimeState) -> str:
    """Format as ``'7h 58m 00s left'`` or ``'+0h 37m 00s'``."""
    if isinstance(state, OverLimit):
        return f"+{_hms(state.overtime_seconds)}"
    return f"{_hms(state.remaining_seconds)} left"
