import os
import tempfile
from datetime import datetime, timedelta

import pytest

# config.py creates its data folder at import time; keep it out of $HOME.
os.environ.setdefault("TIMECLOCK_HOME", tempfile.mkdtemp(prefix="timeclock-tests-"))

from timeclock_core.engine import TimeAccrualEngine  # noqa: E402
from timeclock_core.storage import MemoryStore  # noqa: E402


class FakeClock:
    def __init__(self, start: datetime):
        self.current = start

    def now(self) -> datetime:
        return self.current

    def advance(self, **kwargs):
        self.current += timedelta(**kwargs)

    def set(self, value: datetime):
        self.current = value


class ManualScheduler:
    """Deterministic stand-in for root.after(). advance() runs due callbacks
    in order and moves the clock to each callback's due time."""

    def __init__(self, clock=None):
        self.clock = clock
        self.elapsed_ms = 0
        self._jobs = {}
        self._seq = 0

    def call_later(self, delay_ms, callback):
        self._seq += 1
        self._jobs[self._seq] = (self.elapsed_ms + int(delay_ms), callback)
        return self._seq

    def cancel(self, handle):
        self._jobs.pop(handle, None)

    @property
    def pending(self):
        return len(self._jobs)

    def _move_to(self, target_ms):
        if self.clock is not None and target_ms > self.elapsed_ms:
            self.clock.advance(milliseconds=target_ms - self.elapsed_ms)
        self.elapsed_ms = target_ms

    def advance(self, ms=0, **kwargs):
        target = self.elapsed_ms + ms + int(timedelta(**kwargs) / timedelta(milliseconds=1))
        while True:
            due = [(when, seq) for seq, (when, _) in self._jobs.items() if when <= target]
            if not due:
                break
            when, seq = min(due)
            _, callback = self._jobs.pop(seq)
            self._move_to(when)
            callback()
        self._move_to(target)


START = datetime(2026, 10, 19, 9, 0, 0)


@pytest.fixture
def clock():
    return FakeClock(START)


@pytest.fixture
def scheduler(clock):
    return ManualScheduler(clock)


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def events():
    return {"updates": [], "notices": [], "archived": []}


@pytest.fixture
def engine(store, scheduler, clock, events):
    eng = TimeAccrualEngine(
        store,
        scheduler,
        clock,
        on_update=events["updates"].append,
        on_notify=events["notices"].append,
        on_archive=events["archived"].append,
    )
    eng.start()
    yield eng
    eng.dispose()
