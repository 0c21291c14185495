"""Onboarding gate: tracking stays blocked until limit and reset time are sane."""

from __future__ import annotations

from enum import Enum

from .day_boundary import MAX_RESET_MINUTES
from .settings import PersistedSettings


class OnboardingGateState(str, Enum):
    BLOCKED_MISSING_DAILY_LIMIT = "blocked_missing_daily_limit"
    BLOCKED_INVALID_DAILY_LIMIT = "blocked_invalid_daily_limit"
    BLOCKED_MISSING_RESET_TIME = "blocked_missing_reset_time"
    BLOCKED_INVALID_RESET_TIME = "blocked_invalid_reset_time"
    ALLOWED = "allowed"


GATE_MESSAGES: dict[OnboardingGateState, str] = {
    OnboardingGateState.BLOCKED_MISSING_DAILY_LIMIT: "Set daily limit to start",
    OnboardingGateState.BLOCKED_INVALID_DAILY_LIMIT: "Daily limit must be above 0",
    OnboardingGateState.BLOCKED_MISSING_RESET_TIME: "Set day reset time to start",
    OnboardingGateState.BLOCKED_INVALID_RESET_TIME: "Reset time must be 00:00-23:59",
    OnboardingGateState.ALLOWED: "Sundown is ready",
}


def evaluate_gate(settings: PersistedSettings) -> OnboardingGateState:
    """Check ``settings.daily_limit_minutes`` then ``day_reset_minutes_from_midnight``.

    The first failing check wins, so with several bad fields the user sees
    the daily-limit problem first.
    """
    daily_limit = settings.daily_limit_minutes
    if daily_limit is None:
        return OnboardingGateState.BLOCKED_MISSING_DAILY_LIMIT
    if daily_limit <= 0:
        return OnboardingGateState.BLOCKED_INVALID_DAILY_LIMIT

    reset = settings.day_reset_minutes_from_midnight
    if reset is None:
        return OnboardingGateState.BLOCKED_MISSING_RESET_TIME
    if not 0 <= reset <= MAX_RESET_MINUTES:
        return OnboardingGateState.BLOCKED_INVALID_RESET_TIME

    return OnboardingGateState.ALLOWED


def gate_message(state: OnboardingGateState) -> str:
    return GATE_MESSAGES[state]
