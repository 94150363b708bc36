"""
Value types shared by the engine, storage and reports.

Timestamps are datetimes in memory and ISO-8601 strings on disk. Every
from_dict() is forgiving: missing or garbled fields fall back to zero/empty
values instead of raising, so a damaged file never blocks startup.
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import List, Optional

_MS_PER_HOUR = 3_600_000
_MS_PER_MINUTE = 60_000
_MS_PER_SECOND = 1_000
_ONE_MS = timedelta(milliseconds=1)


def parse_timestamp(value) -> Optional[datetime]:
    """ISO string (or datetime) → datetime. Anything else → None."""
    if isinstance(value, datetime):
        return value
    if not isinstance(value, str) or not value:
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None


def format_timestamp(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


def elapsed_ms(start: datetime, end: datetime) -> int:
    """Whole milliseconds from start to end. May be negative."""
    return (end - start) // _ONE_MS


def _as_int(value) -> int:
    try:
        return max(0, int(value))
    except (TypeError, ValueError):
        return 0


@dataclass(frozen=True)
class Duration:
    hours: int = 0
    minutes: int = 0
    seconds: int = 0

    @classmethod
    def from_ms(cls, ms) -> "Duration":
        """
        Split a millisecond count into h/m/s with integer division.
        Fractional seconds are dropped; negative input clamps to zero.
        """
        ms = max(0, int(ms))
        return cls(
            hours=ms // _MS_PER_HOUR,
            minutes=(ms % _MS_PER_HOUR) // _MS_PER_MINUTE,
            seconds=(ms % _MS_PER_MINUTE) // _MS_PER_SECOND,
        )

    @property
    def total_minutes(self) -> int:
        return self.hours * 60 + self.minutes

    @property
    def total_ms(self) -> int:
        return (
            self.hours * _MS_PER_HOUR
            + self.minutes * _MS_PER_MINUTE
            + self.seconds * _MS_PER_SECOND
        )

    def __str__(self):
        return f"{self.hours:02d}:{self.minutes:02d}:{self.seconds:02d}"

    def to_dict(self):
        return {"hours": self.hours, "minutes": self.minutes, "seconds": self.seconds}

    @classmethod
    def from_dict(cls, data) -> "Duration":
        if not isinstance(data, dict):
            return cls()
        return cls(
            hours=_as_int(data.get("hours")),
            minutes=_as_int(data.get("minutes")),
            seconds=_as_int(data.get("seconds")),
        )


ZERO = Duration()


@dataclass
class BreakRecord:
    start_time: datetime
    end_time: Optional[datetime] = None
    duration: Duration = ZERO

    @property
    def is_open(self) -> bool:
        return self.end_time is None

    def close(self, now: datetime):
        self.end_time = now
        self.duration = Duration.from_ms(elapsed_ms(self.start_time, now))

    def to_dict(self):
        data = {
            "startTime": format_timestamp(self.start_time),
            "duration": self.duration.to_dict(),
        }
        if self.end_time is not None:
            data["endTime"] = format_timestamp(self.end_time)
        return data

    @classmethod
    def from_dict(cls, data) -> Optional["BreakRecord"]:
        """Returns None when the record has no usable start time."""
        if not isinstance(data, dict):
            return None
        start = parse_timestamp(data.get("startTime"))
        if start is None:
            return None
        return cls(
            start_time=start,
            end_time=parse_timestamp(data.get("endTime")),
            duration=Duration.from_dict(data.get("duration")),
        )


@dataclass(frozen=True)
class DailyRecord:
    """Archived summary of one checked-out day. Never mutated."""

    date: str
    check_in_time: str
    check_out_time: str
    total_work_time: Duration
    total_break_time: Duration
    breaks: tuple = ()
    efficiency: int = 100

    def to_dict(self):
        return {
            "date": self.date,
            "checkInTime": self.check_in_time,
            "checkOutTime": self.check_out_time,
            "totalWorkTime": self.total_work_time.to_dict(),
            "totalBreakTime": self.total_break_time.to_dict(),
            "breaks": [b.to_dict() for b in self.breaks],
            "efficiency": self.efficiency,
        }

    @classmethod
    def from_dict(cls, data) -> Optional["DailyRecord"]:
        if not isinstance(data, dict) or not data.get("date"):
            return None
        breaks = []
        for raw in data.get("breaks") or []:
            record = BreakRecord.from_dict(raw)
            if record is not None:
                breaks.append(record)
        return cls(
            date=str(data["date"]),
            check_in_time=str(data.get("checkInTime") or ""),
            check_out_time=str(data.get("checkOutTime") or ""),
            total_work_time=Duration.from_dict(data.get("totalWorkTime")),
            total_break_time=Duration.from_dict(data.get("totalBreakTime")),
            breaks=tuple(breaks),
            efficiency=min(100, _as_int(data.get("efficiency", 100))),
        )


@dataclass(frozen=True)
class Notification:
    id: str
    kind: str          # "warning" | "info" | "success"
    message: str
    timestamp: datetime = field(default_factory=datetime.now)

    def to_dict(self):
        return {
            "id": self.id,
            "kind": self.kind,
            "message": self.message,
            "timestamp": format_timestamp(self.timestamp),
        }


@dataclass(frozen=True)
class TimeSnapshot:
    """What the UI shows after a tick or a transition."""

    is_checked_in: bool
    is_on_break: bool
    time_worked: Duration
    break_duration: Duration
    total_break_time: Duration
    efficiency: int
    notifications: List[Notification] = field(default_factory=list)
