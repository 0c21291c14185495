"""Per-day minute totals by activity kind."""

from __future__ import annotations

from dataclasses import dataclass

from .activity import ActivityKind


@dataclass(frozen=True)
class RitualTotals:
    work_minutes: int
    break_minutes: int
    idle_minutes: int

    @property
    def total_minutes(self) -> int:
        return self.work_minutes + self.break_minutes + self.idle_minutes


class DayRecord:
    """Minutes of work, break and idle time for one sundown day.

    ``limit_minutes`` is a snapshot of the daily limit when the record was
    created and never changes afterwards. ``over_minutes`` is always
    ``max(0, work_minutes - limit_minutes)``.
    """

    def __init__(
        self,
        day_id: str,
        limit_minutes: int,
        work_minutes: int = 0,
        break_minutes: int = 0,
        idle_minutes: int = 0,
    ):
        self._day_id = day_id
        self._limit_minutes = max(0, int(limit_minutes))
        self._work_minutes = max(0, int(work_minutes))
        self._break_minutes = max(0, int(break_minutes))
        self._idle_minutes = max(0, int(idle_minutes))
        self._over_minutes = 0
        self._recalculate_over_minutes()

    # ---- Read-only properties ----

    @property
    def day_id(self) -> str:
        return self._day_id

    @property
    def limit_minutes(self) -> int:
        return self._limit_minutes

    @property
    def work_minutes(self) -> int:
        return self._work_minutes

    @property
    def break_minutes(self) -> int:
        return self._break_minutes

    @property
    def idle_minutes(self) -> int:
        return self._idle_minutes

    @property
    def over_minutes(self) -> int:
        return self._over_minutes

    # ---- Mutation ----

    def add(self, activity: ActivityKind, minutes: int) -> None:
        minutes = max(0, int(minutes))
        if activity == ActivityKind.WORK:
            self._work_minutes += minutes
        elif activity == ActivityKind.BREAK_TIME:
            self._break_minutes += minutes
        elif activity == ActivityKind.IDLE:
            self._idle_minutes += minutes

        self._recalculate_over_minutes()

    def ritual_totals(self) -> RitualTotals:
        return RitualTotals(
            work_minutes=self._work_minutes,
            break_minutes=self._break_minutes,
            idle_minutes=self._idle_minutes,
        )

    # ---- Serialization ----

    def to_dict(self) -> dict:
        return {
            "day_id": self._day_id,
            "work_minutes": self._work_minutes,
            "break_minutes": self._break_minutes,
            "idle_minutes": self._idle_minutes,
            "limit_minutes": self._limit_minutes,
            "over_minutes": self._over_minutes,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "DayRecord":
        """Restore a stored record. A stored over_minutes is ignored and recomputed."""
        return cls(
            day_id=str(data["day_id"]),
            limit_minutes=int(data["limit_minutes"]),
            work_minutes=int(data.get("work_minutes", 0)),
            break_minutes=int(data.get("break_minutes", 0)),
            idle_minutes=int(data.get("idle_minutes", 0)),
        )

    # ---- Internal ----

    def _recalculate_over_minutes(self) -> None:
        self._over_minutes = max(0, self._work_minutes - self._limit_minutes)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, DayRecord):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __repr__(self) -> str:
        return (
            f"DayRecord(day_id={self._day_id!r}, work={self._work_minutes}, "
            f"break={self._break_minutes}, idle={self._idle_minutes}, "
            f"limit={self._limit_minutes}, over={self._over_minutes})"
        )
