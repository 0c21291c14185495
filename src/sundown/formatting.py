"""Duration and settings labels for status output."""

from __future__ import annotations


def hours_one_decimal(seconds: int) -> str:
    return f"{max(0, seconds) / 3600:.1f}"


def numeric_duration(seconds: int, is_over: bool) -> str:
    """Signed short duration: '0m', '+12m', '-45m', '+1.5h'.

    Below one hour the value is whole minutes, otherwise hours with one
    decimal.
    """
    normalized = max(0, seconds)
    sign = "+" if is_over else "-"
    if normalized < 3600:
        minutes = normalized // 60
        if minutes == 0:
            return "0m"
        return f"{sign}{minutes}m"

    return f"{sign}{hours_one_decimal(normalized)}h"


def compact_duration(seconds: int) -> str:
    normalized = max(0, seconds)
    hours = normalized // 3600
    minutes = (normalized % 3600) // 60
    if hours > 0:
        return f"{hours}h {minutes:02d}m"
    return f"{minutes}m"


def detailed_duration(seconds: int) -> str:
    normalized = max(0, seconds)
    hours = normalized // 3600
    minutes = (normalized % 3600) // 60
    return f"{hours}h {minutes:02d}m {normalized % 60:02d}s"


def format_limit_label(daily_limit_minutes: int | None) -> str:
    if daily_limit_minutes is None:
        return "Unset"
    return f"{daily_limit_minutes // 60}h {daily_limit_minutes % 60:02d}m"


def format_reset_label(reset_minutes_from_midnight: int | None) -> str:
    if reset_minutes_from_midnight is None:
        return "Unset"
    return f"{reset_minutes_from_midnight // 60:02d}:{reset_minutes_from_midnight % 60:02d}"


def format_minutes(minutes: int) -> str:
    """'2h 05m' for day-record minute totals."""
    return compact_duration(max(0, minutes) * 60)
