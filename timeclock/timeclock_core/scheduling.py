"""
Clock and timer seams for the engine.

The engine never sleeps or spawns threads; it asks a Scheduler to call it
back later. In the app that is Tk's root.after(), so every callback runs on
the main thread.
"""

from datetime import datetime
from typing import Callable, Protocol


class Clock(Protocol):
    def now(self) -> datetime:
        raise NotImplementedError


class SystemClock:
    """Local wall-clock time, timezone-aware."""

    def now(self):
        return datetime.now().astimezone()


class Scheduler(Protocol):
    def call_later(self, delay_ms: int, callback: Callable[[], None]):
        """Run callback once after delay_ms. Returns a cancel handle."""
        raise NotImplementedError

    def cancel(self, handle) -> None:
        raise NotImplementedError


class TkScheduler:
    """Scheduler backed by a Tk widget's after()/after_cancel()."""

    def __init__(self, root):
        self._root = root

    def call_later(self, delay_ms, callback):
        return self._root.after(int(delay_ms), callback)

    def cancel(self, handle):
        if handle is None:
            return
        try:
            self._root.after_cancel(handle)
        except Exception:
            pass  # root already destroyed
