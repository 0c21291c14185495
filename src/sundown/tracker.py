"""Session tracker: the one stateful piece.

Owns the live clock state (elapsed work accumulator, last tick, last user
interaction) and the current DayRecord. Every mutation goes through the
tracker lock, and ``tick`` is the single update path the host calls once a
second. Time is always passed in, never read here, so the tracker is
deterministic under test.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import Optional

from .activity import ActivityKind
from .day_record import DayRecord
from .day_record_store import DayRecordStore
from .engine import TimeEngine
from .notification_policy import should_notify
from .notifications import NotificationService, over_limit_message
from .onboarding import OnboardingGateState
from .settings import PersistedSettings
from .worktime import WorktimeState, display_text, is_over_limit

logger = logging.getLogger("sundown.tracker")

# Gaps longer than this between ticks are sleep/suspend, not work
MAX_TICK_GAP_SECONDS = 300


class TrackerEvent(Enum):
    STALE_TICK_DROPPED = "stale_tick_dropped"
    DAY_ROLLOVER = "day_rollover"
    OVER_LIMIT_CROSSED = "over_limit_crossed"
    NOTIFICATION_SENT = "notification_sent"
    RECORD_FLUSHED = "record_flushed"


@dataclass
class TickResult:
    events: list[TrackerEvent] = field(default_factory=list)
    activity: ActivityKind | None = None
    worktime_state: WorktimeState | None = None
    rollover_day_id: str | None = None


class SessionTracker:
    def __init__(
        self,
        settings: PersistedSettings,
        record_store: DayRecordStore,
        notification_service: NotificationService,
        now: datetime,
        engine: TimeEngine | None = None,
    ):
        self._lock = threading.Lock()
        self._settings = settings
        self._record_store = record_store
        self._notifier = notification_service
        self._engine = engine or TimeEngine()

        self._has_started: bool = False
        self._is_active: bool = False
        self._is_break_active: bool = False
        self._elapsed_seconds: float = 0.0
        self._last_tick_at: datetime = now
        self._last_interaction_at: datetime = now
        self._inactivity_seconds: int = 0
        self._last_notification_at: Optional[datetime] = None
        self._was_over_limit: bool = False
        self._day_id: Optional[str] = None
        self._record: Optional[DayRecord] = None
        self._pending_seconds: dict[ActivityKind, float] = {kind: 0.0 for kind in ActivityKind}

    # ---- Read-only properties ----

    @property
    def settings(self) -> PersistedSettings:
        return self._settings

    @property
    def has_started(self) -> bool:
        return self._has_started

    @property
    def is_active(self) -> bool:
        return self._is_active

    @property
    def is_break_active(self) -> bool:
        return self._is_break_active

    @property
    def tracked_work_seconds(self) -> int:
        return int(self._elapsed_seconds)

    @property
    def inactivity_seconds(self) -> int:
        return self._inactivity_seconds

    @property
    def last_notification_at(self) -> Optional[datetime]:
        return self._last_notification_at

    @property
    def day_record(self) -> Optional[DayRecord]:
        return self._record

    @property
    def gate_state(self) -> OnboardingGateState:
        return self._engine.gate_state(self._settings)

    @property
    def worktime_state(self) -> Optional[WorktimeState]:
        if not self._has_started:
            return None
        return self._engine.worktime_state(self.tracked_work_seconds, self._settings)

    @property
    def activity(self) -> ActivityKind:
        if not self._is_active:
            return ActivityKind.IDLE
        return self._engine.activity(self._is_break_active, self._inactivity_seconds, self._settings)

    # ---- Session control ----

    def start(self, now: datetime) -> bool:
        """Start (or resume) tracking. Refused until the onboarding gate allows it."""
        with self._lock:
            if self.gate_state != OnboardingGateState.ALLOWED:
                logger.info(f"Start refused: {self.gate_state.value}")
                return False

            record = self._resolve_record(now)
            if not self._has_started and self._elapsed_seconds == 0 and record is not None:
                self._seed_elapsed(record)

            self._has_started = True
            self._is_active = True
            self._last_tick_at = now
            self._touch(now)
            logger.info(f"Session started for {self._day_id} at {self.tracked_work_seconds}s")
            return True

    def set_paused(self, paused: bool, now: datetime) -> None:
        with self._lock:
            if not self._has_started:
                return
            if paused:
                self._advance(now)
            else:
                self._last_tick_at = now
                self._touch(now)
            self._is_active = not paused

    def set_break(self, active: bool, now: datetime) -> None:
        """Toggle a manual break. Time up to ``now`` is credited to the old activity."""
        with self._lock:
            if self._has_started and self._is_active:
                self._advance(now)
            self._is_break_active = active

    def reset(self, now: datetime) -> Optional[DayRecord]:
        """Clear the session and start today's record over with the current limit."""
        with self._lock:
            self._has_started = False
            self._is_active = False
            self._is_break_active = False
            self._elapsed_seconds = 0.0
            self._last_notification_at = None
            self._was_over_limit = False
            self._last_tick_at = now
            self._touch(now)
            self._clear_pending()
            return self._replace_record(now)

    def reset_today_record(self, now: datetime) -> Optional[DayRecord]:
        with self._lock:
            self._clear_pending()
            return self._replace_record(now)

    def add_minutes(self, activity: ActivityKind, minutes: int, now: datetime) -> Optional[DayRecord]:
        """Manually credit minutes to today's record."""
        with self._lock:
            if self._resolve_record(now) is None:
                return None
            record = self._reload_record()
            record.add(activity, minutes)
            self._record_store.save(record)
            return record

    def apply_settings(self, settings: PersistedSettings) -> None:
        with self._lock:
            self._settings = settings

    # ---- Input signals ----

    def mark_interaction(self, now: datetime) -> None:
        with self._lock:
            self._touch(now)

    def handle_wake(self, now: datetime) -> None:
        """After system sleep, restart the tick clock so the gap is not credited."""
        with self._lock:
            self._last_tick_at = now
            self._touch(now)

    # ---- Tick ----

    def tick(self, now: datetime, inactivity_seconds: int | None = None) -> TickResult:
        """Advance the session to ``now``.

        ``inactivity_seconds`` comes from an OS idle probe when the host has
        one; otherwise inactivity is measured from the last interaction.
        """
        with self._lock:
            if inactivity_seconds is not None:
                self._inactivity_seconds = max(0, int(inactivity_seconds))
                self._last_interaction_at = now - timedelta(seconds=self._inactivity_seconds)
            if not self._has_started:
                self._last_tick_at = now
                return TickResult()
            return self._advance(now)

    def snapshot(self, now: datetime) -> dict:
        """Read-only status for display."""
        with self._lock:
            state = self.worktime_state
            record = self._record
            return {
                "gate": self.gate_state.value,
                "has_started": self._has_started,
                "is_active": self._is_active,
                "is_break_active": self._is_break_active,
                "activity": self.activity.value,
                "day_id": self._engine.day_id(now, self._settings),
                "tracked_work_seconds": self.tracked_work_seconds,
                "inactivity_seconds": self._inactivity_seconds,
                "worktime": display_text(state) if state is not None else None,
                "is_over_limit": is_over_limit(state) if state is not None else False,
                "last_notification_at": (
                    self._last_notification_at.isoformat() if self._last_notification_at else None
                ),
                "record": record.to_dict() if record is not None else None,
            }

    # ---- Internal ----

    def _touch(self, now: datetime) -> None:
        self._last_interaction_at = now
        self._inactivity_seconds = 0

    def _clear_pending(self) -> None:
        for kind in ActivityKind:
            self._pending_seconds[kind] = 0.0

    def _advance(self, now: datetime) -> TickResult:
        result = TickResult()
        self._inactivity_seconds = max(0, int((now - self._last_interaction_at).total_seconds()))

        if not self._is_active:
            self._last_tick_at = now
            return result

        delta = (now - self._last_tick_at).total_seconds()
        self._last_tick_at = now

        if delta > MAX_TICK_GAP_SECONDS:
            logger.debug(f"Dropped stale tick gap of {delta:.0f}s")
            result.events.append(TrackerEvent.STALE_TICK_DROPPED)
            return result
        delta = max(0.0, delta)

        day_id = self._engine.day_id(now, self._settings)
        if day_id is None or self._settings.daily_limit_minutes is None:
            return result

        if self._day_id is not None and day_id != self._day_id:
            result.rollover_day_id = self._day_id
            self._roll_over(now)
            result.events.append(TrackerEvent.DAY_ROLLOVER)
        elif self._record is None:
            self._resolve_record(now)

        activity = self._engine.activity(self._is_break_active, self._inactivity_seconds, self._settings)
        result.activity = activity
        self._pending_seconds[activity] += delta
        if activity == ActivityKind.WORK:
            self._elapsed_seconds += delta

        if self._flush_pending():
            result.events.append(TrackerEvent.RECORD_FLUSHED)

        state = self._engine.worktime_state(self.tracked_work_seconds, self._settings)
        result.worktime_state = state
        over = is_over_limit(state)
        if over and not self._was_over_limit:
            result.events.append(TrackerEvent.OVER_LIMIT_CROSSED)

        if should_notify(
            self._settings.notifications_enabled,
            is_over_limit=over,
            was_over_limit=self._was_over_limit,
            now=now,
            last_notification_at=self._last_notification_at,
            reminder_interval_minutes=self._engine.reminder_interval_minutes(self._settings),
        ):
            self._notifier.send_over_limit_notification(over_limit_message(display_text(state)))
            self._last_notification_at = now
            result.events.append(TrackerEvent.NOTIFICATION_SENT)

        self._was_over_limit = over
        return result

    def _flush_pending(self) -> bool:
        """Move whole pending minutes into the day record. Returns True if saved."""
        if self._record is None:
            return False

        whole_minutes = {kind: int(seconds // 60) for kind, seconds in self._pending_seconds.items()}
        if not any(minutes > 0 for minutes in whole_minutes.values()):
            return False

        self._reload_record()
        for kind, minutes in whole_minutes.items():
            if minutes > 0:
                self._record.add(kind, minutes)
                self._pending_seconds[kind] -= minutes * 60

        self._record_store.save(self._record)
        return True

    def _roll_over(self, now: datetime) -> None:
        old_day_id = self._day_id
        self._flush_pending()
        self._clear_pending()
        self._elapsed_seconds = 0.0
        self._was_over_limit = False
        self._last_notification_at = None
        self._record = None
        self._day_id = None
        record = self._resolve_record(now)
        if record is not None:
            self._seed_elapsed(record)
        logger.info(f"Day rollover: {old_day_id} -> {self._day_id}")

    def _reload_record(self) -> DayRecord:
        """Re-read the current day from the store.

        ``sundown log`` and ``sundown reset-day`` write the same row while a
        session runs in another process.
        """
        stored = self._record_store.load(self._record.day_id)
        if stored is not None:
            self._record = stored
        return self._record

    def _seed_elapsed(self, record: DayRecord) -> None:
        """Pick up work already recorded for this sundown day."""
        self._elapsed_seconds = float(record.work_minutes * 60)
        self._was_over_limit = is_over_limit(
            self._engine.worktime_state(self.tracked_work_seconds, self._settings)
        )

    def _resolve_record(self, now: datetime) -> Optional[DayRecord]:
        day_id = self._engine.day_id(now, self._settings)
        limit = self._settings.daily_limit_minutes
        if day_id is None or limit is None:
            return None

        if self._record is not None and self._record.day_id == day_id:
            return self._record

        record = self._record_store.load(day_id)
        if record is None:
            record = DayRecord(day_id=day_id, limit_minutes=limit)
            self._record_store.save(record)
        self._record = record
        self._day_id = day_id
        return record

    def _replace_record(self, now: datetime) -> Optional[DayRecord]:
        day_id = self._engine.day_id(now, self._settings)
        limit = self._settings.daily_limit_minutes
        if day_id is None or limit is None:
            self._record = None
            self._day_id = None
            return None

        record = DayRecord(day_id=day_id, limit_minutes=limit)
        self._record_store.save(record)
        self._record = record
        self._day_id = day_id
        return record
