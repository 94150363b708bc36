"""
TimeAccrualEngine — check-in/break/check-out state machine with a live
worked-time clock.

Runs entirely on the caller's (Tk main) thread:
  _tick()        — recompute worked/break time          (every 1s)
  _flush_save()  — persist the session, debounced        (1s after last change)

Worked time is re-derived from raw timestamps on every tick, never
accumulated, so a missed tick or a clock jump cannot build up drift.
"""

import copy

from .config import log
from .constants import TICK_INTERVAL_MS, SAVE_DEBOUNCE_MS
from .models import ZERO, BreakRecord, DailyRecord, Duration, TimeSnapshot, elapsed_ms
from .scheduling import SystemClock
from .state import Phase, SessionState
from . import notifications
from . import reports


# ─── Elapsed-time computation ────────────────────────────────────

def closed_break_ms(break_history):
    """Total length of every finished break, in ms."""
    return sum(
        max(0, elapsed_ms(b.start_time, b.end_time))
        for b in break_history
        if b.end_time is not None
    )


def open_break_ms(now, is_on_break, last_break_time):
    if not is_on_break or last_break_time is None:
        return 0
    return max(0, elapsed_ms(last_break_time, now))


def compute_time_worked(now, check_in_time, break_history, is_on_break, last_break_time):
    """
    gross time since check-in, minus finished breaks, minus the break in
    progress. Clamped at zero if the clock went backwards.
    """
    if check_in_time is None:
        return ZERO
    gross = elapsed_ms(check_in_time, now)
    worked = (
        gross
        - closed_break_ms(break_history)
        - open_break_ms(now, is_on_break, last_break_time)
    )
    return Duration.from_ms(worked)


def _clock_label(ts):
    return ts.strftime("%I:%M %p") if ts is not None else ""


class TimeAccrualEngine:
    """
    Lifecycle:
      start()    → restore the saved session once, resume ticking if checked in
      check_in() / start_break() / end_break() / check_out()
      dispose()  → cancel timers, flush any pending save

    Transitions that don't apply to the current phase (e.g. check_out()
    while checked out) are logged and ignored; the widget never offers them.
    """

    def __init__(
        self,
        store,
        scheduler,
        clock=None,
        *,
        on_update=None,
        on_notify=None,
        on_archive=None,
        tick_interval_ms=TICK_INTERVAL_MS,
        save_debounce_ms=SAVE_DEBOUNCE_MS,
    ):
        self.state = SessionState()
        self._store = store
        self._scheduler = scheduler
        self._clock = clock or SystemClock()
        self._on_update = on_update
        self._on_notify = on_notify
        self._on_archive = on_archive
        self._tick_interval_ms = tick_interval_ms
        self._save_debounce_ms = save_debounce_ms

        self._time_worked = ZERO
        self._break_duration = ZERO
        self._notifications = []

        self._tick_handle = None
        self._save_handle = None
        self._last_tick_at = None
        self._started = False
        self._disposed = False

    # ─── Lifecycle ───────────────────────────────────────────

    def start(self):
        if self._started or self._disposed:
            return
        self._started = True

        try:
            restored = self._store.load_session_state()
        except Exception as e:
            log.warning("Session restore failed, starting checked out: %s", e)
            restored = None

        if restored is not None:
            self.state = restored

        now = self._clock.now()
        if self.state.is_checked_in:
            log.info("Resuming session checked in at %s", self.state.check_in_time)
            self._start_ticking(now)
        self._recompute(now)
        self._publish()

    def dispose(self):
        """Stop all timers. A save still waiting for its debounce runs now."""
        if self._disposed:
            return
        self._stop_ticking()
        if self._save_handle is not None:
            self._scheduler.cancel(self._save_handle)
            self._save_handle = None
            self._save_now()
        self._disposed = True
        log.info("Time tracking engine disposed")

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.dispose()
        return False

    @property
    def disposed(self):
        return self._disposed

    @property
    def phase(self):
        return self.state.phase

    # ─── Transitions ─────────────────────────────────────────

    def _allowed(self, action, *phases):
        if self._disposed:
            log.warning("%s ignored: engine disposed", action)
            return False
        if self.state.phase not in phases:
            log.warning("%s ignored while %s", action, self.state.phase.value)
            return False
        return True

    def check_in(self):
        if not self._allowed("check_in", Phase.CHECKED_OUT):
            return False
        now = self._clock.now()

        self.state.reset()
        self.state.is_checked_in = True
        self.state.check_in_time = now
        log.info("Checked in at %s", now.isoformat())

        self._emit(notifications.welcome(now))
        self._after_mutation(now)
        self._start_ticking(now)
        return True

    def start_break(self):
        if not self._allowed("start_break", Phase.WORKING):
            return False
        now = self._clock.now()

        self.state.is_on_break = True
        self.state.last_break_time = now
        self.state.break_history.append(BreakRecord(start_time=now))
        log.info("Break started at %s", now.isoformat())

        self._emit(notifications.break_started(now))
        self._after_mutation(now)
        return True

    def end_break(self):
        if not self._allowed("end_break", Phase.ON_BREAK):
            return False
        now = self._clock.now()
        self._close_break(now)
        self._after_mutation(now)
        return True

    def toggle_break(self):
        if self.state.is_on_break:
            return self.end_break()
        return self.start_break()

    def _close_break(self, now):
        record = self.state.open_break
        if record is None:
            record = BreakRecord(start_time=self.state.last_break_time or now)
            self.state.break_history.append(record)
        record.close(now)

        self.state.is_on_break = False
        self.state.last_break_time = None
        self.state.total_break_time = Duration.from_ms(closed_break_ms(self.state.break_history))
        self._break_duration = ZERO
        log.info("Break ended after %s", record.duration)

        self._emit(notifications.break_ended(record.duration, now))

    def check_out(self):
        """Close the day. Returns the archived DailyRecord (None if ignored)."""
        if not self._allowed("check_out", Phase.WORKING, Phase.ON_BREAK):
            return None
        now = self._clock.now()

        if self.state.is_on_break:
            self._close_break(now)

        worked = compute_time_worked(
            now, self.state.check_in_time, self.state.break_history, False, None,
        )
        total_break = Duration.from_ms(closed_break_ms(self.state.break_history))
        record = DailyRecord(
            date=now.date().isoformat(),
            check_in_time=_clock_label(self.state.check_in_time),
            check_out_time=_clock_label(now),
            total_work_time=worked,
            total_break_time=total_break,
            breaks=tuple(copy.copy(b) for b in self.state.break_history),
            efficiency=reports.efficiency_of(worked, total_break),
        )

        try:
            self._store.append_daily_record(record)
        except Exception as e:
            log.warning("Daily record archive failed: %s", e)

        log.info(
            "Checked out | worked=%s | breaks=%s | efficiency=%d%%",
            worked, total_break, record.efficiency,
        )

        self._stop_ticking()
        self.state.reset()
        self._emit(notifications.day_summary(record, now))
        self._after_mutation(now)

        if self._on_archive:
            try:
                self._on_archive(record)
            except Exception as e:
                log.error("on_archive callback error: %s", e)
        return record

    def sign_out(self):
        """Wipe stored data. Refused while a session is open."""
        if self._disposed:
            return False
        if self.state.is_checked_in:
            self._emit(notifications.checkout_required(self._clock.now()))
            return False
        if self._save_handle is not None:
            self._scheduler.cancel(self._save_handle)
            self._save_handle = None
        try:
            self._store.clear()
        except Exception as e:
            log.warning("Store clear failed: %s", e)
        return True

    # ─── Derived values ──────────────────────────────────────

    @property
    def time_worked(self):
        return self._time_worked

    @property
    def break_duration(self):
        return self._break_duration

    @property
    def total_break_time(self):
        return self.state.total_break_time

    @property
    def efficiency(self):
        return reports.efficiency_of(self._time_worked, self.state.total_break_time)

    @property
    def notifications(self):
        return list(self._notifications)

    def snapshot(self):
        return TimeSnapshot(
            is_checked_in=self.state.is_checked_in,
            is_on_break=self.state.is_on_break,
            time_worked=self._time_worked,
            break_duration=self._break_duration,
            total_break_time=self.state.total_break_time,
            efficiency=self.efficiency,
            notifications=list(self._notifications),
        )

    def history(self):
        try:
            return self._store.list_daily_records()
        except Exception as e:
            log.warning("History read failed: %s", e)
            return []

    def _recompute(self, now):
        state = self.state
        if not state.is_checked_in:
            self._time_worked = ZERO
            self._break_duration = ZERO
            self._notifications = []
            return

        current_break = open_break_ms(now, state.is_on_break, state.last_break_time)
        self._break_duration = Duration.from_ms(current_break)
        # Derived from history, so refreshing it is not a change worth saving.
        state.total_break_time = Duration.from_ms(
            closed_break_ms(state.break_history) + current_break
        )
        self._time_worked = compute_time_worked(
            now, state.check_in_time, state.break_history,
            state.is_on_break, state.last_break_time,
        )
        self._notifications = notifications.evaluate(
            self._time_worked, self._break_duration, state.is_on_break, now,
        )

    # ─── Tick (every 1s while checked in) ────────────────────

    def _start_ticking(self, now):
        if self._tick_handle is not None:
            return
        self._last_tick_at = now
        self._tick_handle = self._scheduler.call_later(self._tick_interval_ms, self._tick)

    def _stop_ticking(self):
        if self._tick_handle is not None:
            self._scheduler.cancel(self._tick_handle)
        self._tick_handle = None
        self._last_tick_at = None

    def _tick(self):
        self._tick_handle = None
        if self._disposed or not self.state.is_checked_in:
            return
        try:
            self._do_tick()
        except Exception as e:
            log.error("_tick error: %s", e, exc_info=True)
        self._tick_handle = self._scheduler.call_later(self._tick_interval_ms, self._tick)

    def _do_tick(self):
        now = self._clock.now()
        gap = elapsed_ms(self._last_tick_at, now) if self._last_tick_at else self._tick_interval_ms
        # Timers can fire early or bunch up; only a full interval counts.
        # A backwards clock jump restarts the interval from the new time.
        if 0 <= gap < self._tick_interval_ms:
            return
        self._last_tick_at = now
        self._recompute(now)
        self._publish()

    # ─── Persistence (debounced) ─────────────────────────────

    def _after_mutation(self, now):
        self._recompute(now)
        self._schedule_save()
        self._publish()

    def _schedule_save(self):
        if self._save_handle is not None:
            self._scheduler.cancel(self._save_handle)
        self._save_handle = self._scheduler.call_later(self._save_debounce_ms, self._flush_save)

    def _flush_save(self):
        self._save_handle = None
        self._save_now()

    def _save_now(self):
        try:
            self._store.save_session_state(copy.deepcopy(self.state))
        except Exception as e:
            log.warning("Session save failed: %s", e)

    # ─── Outbound callbacks ──────────────────────────────────

    def _emit(self, notification):
        log.info("Notify [%s] %s: %s", notification.kind, notification.id,
                 notification.message.replace("\n", " | "))
        if self._on_notify:
            try:
                self._on_notify(notification)
            except Exception as e:
                log.error("on_notify callback error: %s", e)

    def _publish(self):
        if self._on_update:
            try:
                self._on_update(self.snapshot())
            except Exception as e:
                log.error("on_update callback error: %s", e)
