"""
TimeClockApp — the main Tkinter application.

The engine's tick and save timers run inside Tkinter's event loop via
root.after(). Zero busy-wait loops.

Background threads: ONLY short-lived API call threads (record sync,
buffer flush). None of them touch Tkinter or the engine.
"""

import threading
import tkinter as tk

from .constants import APP_VERSION, CONNECTIVITY_CHECK_SEC
from .config import log, safe_print, sync_enabled, DATA_DIR
from .engine import TimeAccrualEngine
from .scheduling import SystemClock, TkScheduler
from .storage import JsonFileStore
from .widget import TimeClockWidget
from .api import send_daily_record
from . import network


class TimeClockApp:
    """
    Owns the Tk main loop. Schedules everything via root.after():
      engine._tick()          — worked/break clock          (every 1s)
      engine._flush_save()    — debounced session save      (1s after change)
      _check_connectivity()   — replay offline buffer       (every 15s)
    """

    def __init__(self, config=None, store=None):
        self._config = config or {}
        self._store = store or JsonFileStore(DATA_DIR)
        self._root = None
        self._widget = None
        self.engine = None
        self._flush_in_flight = False

    def run(self):
        """Start the widget. Blocks on Tk mainloop. Call from main thread."""
        self._root = tk.Tk()

        self.engine = TimeAccrualEngine(
            self._store,
            TkScheduler(self._root),
            SystemClock(),
            on_update=self._on_update,
            on_notify=self._on_notify,
            on_archive=self._on_archive,
        )
        self._widget = TimeClockWidget(self._root, self.engine)
        self.engine.start()

        if sync_enabled(self._config):
            self._root.after(CONNECTIVITY_CHECK_SEC * 1000, self._check_connectivity)

        self._root.protocol("WM_DELETE_WINDOW", self.stop)

        log.info(
            "v%s started (sync=%s, data=%s)",
            APP_VERSION, "on" if sync_enabled(self._config) else "off", DATA_DIR,
        )
        safe_print("Time clock running.\n")

        try:
            self._root.mainloop()
        finally:
            self.engine.dispose()
            log.info("TimeClockApp shut down.")

    def stop(self):
        if self.engine is not None:
            self.engine.dispose()
        try:
            self._root.destroy()
        except tk.TclError:
            pass

    # ─── Engine callbacks (main thread) ──────────────────────

    def _on_update(self, snapshot):
        if self._widget is not None:
            self._widget.render(snapshot)

    def _on_notify(self, notification):
        if self._widget is not None:
            self._widget.show_notification(notification)

    def _on_archive(self, record):
        if not sync_enabled(self._config):
            return
        config = self._config

        def do_sync():
            try:
                send_daily_record(config, record)
            except Exception as e:
                log.warning("Record sync thread error: %s", e)

        threading.Thread(target=do_sync, daemon=True).start()

    # ─── Offline buffer replay (every 15s) ───────────────────

    def _check_connectivity(self):
        try:
            self._do_connectivity_check()
        except Exception as e:
            log.error("_check_connectivity error: %s", e)
        self._root.after(CONNECTIVITY_CHECK_SEC * 1000, self._check_connectivity)

    def _do_connectivity_check(self):
        if self._flush_in_flight or not network.has_buffered_requests():
            return
        self._flush_in_flight = True
        config = self._config

        def flush():
            try:
                if network.is_online(config["serverUrl"]):
                    network.flush_buffer(config)
            except Exception as e:
                log.warning("Buffer flush failed: %s", e)
            finally:
                self._flush_in_flight = False

        threading.Thread(target=flush, daemon=True).start()
