"""
timeclock_core — HR Portal Time Clock widget v1.0
=================================================
Architecture: Tkinter main-thread event loop. Zero busy-wait.

  constants.py     → Version, timer intervals, reminder thresholds, theme
  config.py        → Paths, logging, config load/save, helpers
  models.py        → Duration, BreakRecord, DailyRecord, Notification
  state.py         → SessionState dataclass (single source of truth)
  engine.py        → TimeAccrualEngine (check-in/break/check-out clock)
  notifications.py → Reminder rule table + transition messages
  reports.py       → Efficiency, weekly report, sorting, CSV export
  storage.py       → KeyValueStore: JSON files / in-memory
  scheduling.py    → Clock + Scheduler seams (Tk root.after)
  http_client.py   → HTTP session with retry/pooling + bearer refresh
  api.py           → Server API calls (sign-in, daily record sync)
  network.py       → Connectivity check, offline buffer
  enrollment.py    → Sign-in dialog
  widget.py        → TimeClockWidget (Tk window)
  app.py           → TimeClockApp (Tk main loop, root.after scheduling)
  runner.py        → main() + auto-restart wrapper
"""
