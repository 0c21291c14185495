"""When an over-limit reminder is due."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

DEFAULT_REMINDER_INTERVAL_MINUTES = 30


def should_notify(
    notifications_enabled: Optional[bool],
    is_over_limit: bool,
    was_over_limit: bool,
    now: datetime,
    last_notification_at: Optional[datetime],
    reminder_interval_minutes: int = DEFAULT_REMINDER_INTERVAL_MINUTES,
) -> bool:
    """Decide whether to send an over-limit notification now.

    The first tick over the limit always notifies. While the user stays over,
    reminders repeat once the interval has fully elapsed since the last one.
    The caller records ``last_notification_at`` after a successful send.
    """
    if notifications_enabled is not True:
        return False

    if not is_over_limit:
        return False

    if not was_over_limit:
        return True

    if last_notification_at is None:
        return True

    interval_seconds = max(1, reminder_interval_minutes) * 60
    return (now - last_notification_at).total_seconds() >= interval_seconds
