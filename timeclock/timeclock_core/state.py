"""
SessionState — single source of truth for the live check-in session.

Only the engine mutates it, always on the Tk main thread. No locks needed.
The dict form is the persisted blob; from_dict() repairs anything that
breaks the invariants instead of refusing the blob.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional

from .models import (
    ZERO, BreakRecord, Duration, format_timestamp, parse_timestamp,
)


class Phase(str, Enum):
    CHECKED_OUT = "CheckedOut"
    WORKING = "Working"
    ON_BREAK = "OnBreak"


@dataclass
class SessionState:
    is_checked_in: bool = False
    check_in_time: Optional[datetime] = None

    # ── Break tracking ────────────────────────────────────────
    is_on_break: bool = False
    last_break_time: Optional[datetime] = None
    break_history: List[BreakRecord] = field(default_factory=list)
    total_break_time: Duration = ZERO

    @property
    def phase(self) -> Phase:
        if not self.is_checked_in:
            return Phase.CHECKED_OUT
        return Phase.ON_BREAK if self.is_on_break else Phase.WORKING

    @property
    def open_break(self) -> Optional[BreakRecord]:
        """The break currently in progress, if any."""
        if self.break_history and self.break_history[-1].is_open:
            return self.break_history[-1]
        return None

    @property
    def is_empty(self) -> bool:
        return self == SessionState()

    def reset(self):
        self.is_checked_in = False
        self.check_in_time = None
        self.is_on_break = False
        self.last_break_time = None
        self.break_history = []
        self.total_break_time = ZERO

    def to_dict(self):
        return {
            "isCheckedIn": self.is_checked_in,
            "checkInTime": format_timestamp(self.check_in_time),
            "isOnBreak": self.is_on_break,
            "lastBreakTime": format_timestamp(self.last_break_time),
            "breakHistory": [b.to_dict() for b in self.break_history],
            "totalBreakTime": self.total_break_time.to_dict(),
        }

    @classmethod
    def from_dict(cls, data) -> "SessionState":
        state = cls()
        if not isinstance(data, dict):
            return state

        check_in = parse_timestamp(data.get("checkInTime"))
        if not data.get("isCheckedIn") or check_in is None:
            return state

        history = []
        for raw in data.get("breakHistory") or []:
            record = BreakRecord.from_dict(raw)
            if record is not None:
                history.append(record)

        # Only the newest break may be open. Older open entries are closed
        # at their own start so they add nothing.
        for record in history[:-1]:
            if record.is_open:
                record.close(record.start_time)

        last_break = parse_timestamp(data.get("lastBreakTime"))
        on_break = bool(data.get("isOnBreak")) and last_break is not None
        if on_break:
            if not history or not history[-1].is_open:
                history.append(BreakRecord(start_time=last_break))
        elif history and history[-1].is_open:
            history[-1].close(history[-1].start_time)
            last_break = None
        else:
            last_break = None

        state.is_checked_in = True
        state.check_in_time = check_in
        state.is_on_break = on_break
        state.last_break_time = last_break if on_break else None
        state.break_history = history
        state.total_break_time = Duration.from_dict(data.get("totalBreakTime"))
        return state
