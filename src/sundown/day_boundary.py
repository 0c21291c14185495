"""Sundown day boundaries.

A sundown day starts at the user's reset time instead of midnight. A moment
before the reset time belongs to the previous calendar day.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta, tzinfo

MINUTES_PER_DAY = 24 * 60
MAX_RESET_MINUTES = MINUTES_PER_DAY - 1


def clamp_reset_minutes(minutes: int) -> int:
    return min(max(int(minutes), 0), MAX_RESET_MINUTES)


def format_day_id(day: date) -> str:
    return f"{day.year:04d}-{day.month:02d}-{day.day:02d}"


class DayBoundary:
    """Maps timestamps to sundown day identifiers (``YYYY-MM-DD``).

    ``tz`` is the calendar timezone. ``None`` means the system local zone.
    Naive timestamps are taken as already being in that zone.
    """

    def __init__(self, tz: tzinfo | None = None):
        self._tz = tz

    @property
    def tz(self) -> tzinfo | None:
        return self._tz

    def local_time(self, timestamp: datetime) -> datetime:
        if timestamp.tzinfo is None:
            return timestamp
        if self._tz is None:
            return timestamp.astimezone()
        return timestamp.astimezone(self._tz)

    def day_for(self, timestamp: datetime, reset_minutes_from_midnight: int) -> date:
        reset = clamp_reset_minutes(reset_minutes_from_midnight)
        local = self.local_time(timestamp)

        # Compare wall-clock minutes, then shift by whole calendar days.
        minutes_since_midnight = local.hour * 60 + local.minute
        day = local.date()
        if minutes_since_midnight < reset:
            day -= timedelta(days=1)
        return day

    def day_id(self, timestamp: datetime, reset_minutes_from_midnight: int) -> str:
        return format_day_id(self.day_for(timestamp, reset_minutes_from_midnight))
