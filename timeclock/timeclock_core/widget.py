"""
TimeClockWidget — the visible window.

Created and updated EXCLUSIVELY on the Tkinter main thread. It owns no
timing logic: it renders engine snapshots and forwards button presses to
the engine after a confirmation prompt.
"""

import tkinter as tk
from datetime import date, timedelta
from tkinter import filedialog, messagebox

from .config import log
from .constants import THEME, KIND_COLORS
from . import reports

_TOAST_MS = 4000

_CONFIRM = {
    "checkin": ("Check In", "Start your work day now?"),
    "checkout": ("Check Out", "End your work day now? Today's summary will be saved."),
    "break": ("Start Break", "Start a break now?"),
    "endbreak": ("End Break", "End your break and get back to work?"),
}


class TimeClockWidget:
    def __init__(self, root, engine):
        self._root = root
        self._engine = engine
        self._toast_job = None
        self._build_ui()

    # ─── UI construction ─────────────────────────────────────

    def _build_ui(self):
        root = self._root
        root.title("Time Clock")
        root.configure(bg=THEME["bg_darkest"])
        root.resizable(False, False)

        card = tk.Frame(root, bg=THEME["bg_card"], padx=24, pady=18)
        card.pack(fill="both", expand=True, padx=12, pady=12)

        self._status_label = tk.Label(card, text="Checked out", font=("Segoe UI", 11),
                                      fg=THEME["text_muted"], bg=THEME["bg_card"])
        self._status_label.pack(anchor="w")

        self._worked_label = tk.Label(card, text="00:00:00", font=("Consolas", 32, "bold"),
                                      fg=THEME["text_primary"], bg=THEME["bg_card"])
        self._worked_label.pack(anchor="w", pady=(2, 0))

        self._break_label = tk.Label(card, text="Breaks 00:00:00", font=("Segoe UI", 11),
                                     fg=THEME["text_muted"], bg=THEME["bg_card"])
        self._break_label.pack(anchor="w")

        self._efficiency_label = tk.Label(card, text="", font=("Segoe UI", 11),
                                          fg=THEME["text_muted"], bg=THEME["bg_card"])
        self._efficiency_label.pack(anchor="w", pady=(0, 12))

        buttons = tk.Frame(card, bg=THEME["bg_card"])
        buttons.pack(fill="x")
        self._checkin_btn = tk.Button(
            buttons, text="Check In", font=("Segoe UI", 12, "bold"),
            bg=THEME["primary"], fg="white",
            activebackground=THEME["primary_hover"], activeforeground="white",
            relief="flat", padx=18, pady=8, cursor="hand2",
            command=self._on_check_in_out,
        )
        self._checkin_btn.pack(side="left", fill="x", expand=True)
        self._break_btn = tk.Button(
            buttons, text="Break", font=("Segoe UI", 12, "bold"),
            bg=THEME["break"], fg="white", activeforeground="white",
            relief="flat", padx=18, pady=8, cursor="hand2", state="disabled",
            command=self._on_break,
        )
        self._break_btn.pack(side="left", fill="x", expand=True, padx=(10, 0))

        self._notice_frame = tk.Frame(card, bg=THEME["bg_card"])
        self._notice_frame.pack(fill="x", pady=(14, 0))

        self._toast_label = tk.Label(card, text="", font=("Segoe UI", 10),
                                     bg=THEME["bg_card"], justify="left", wraplength=320)
        self._toast_label.pack(anchor="w", pady=(10, 0))

        footer = tk.Frame(card, bg=THEME["bg_card"])
        footer.pack(fill="x", pady=(12, 0))
        self._week_label = tk.Label(footer, text="", font=("Segoe UI", 9),
                                    fg=THEME["text_muted"], bg=THEME["bg_card"])
        self._week_label.pack(side="left")
        tk.Button(footer, text="Export CSV", font=("Segoe UI", 9),
                  bg=THEME["bg_input"], fg=THEME["text_muted"], relief="flat",
                  command=self._on_export).pack(side="right")
        tk.Button(footer, text="Clear data", font=("Segoe UI", 9),
                  bg=THEME["bg_input"], fg=THEME["text_muted"], relief="flat",
                  command=self._on_sign_out).pack(side="right", padx=(0, 6))

        self.refresh_history()

    # ─── Rendering ───────────────────────────────────────────

    def render(self, snapshot):
        """Show a TimeSnapshot. Called by the engine every tick."""
        try:
            if not snapshot.is_checked_in:
                status = "Checked out"
            elif snapshot.is_on_break:
                status = f"On break · {snapshot.break_duration}"
            else:
                status = "Working"
            self._status_label.config(text=status)
            self._worked_label.config(text=str(snapshot.time_worked))
            self._break_label.config(text=f"Breaks {snapshot.total_break_time}")
            if snapshot.is_checked_in:
                self._efficiency_label.config(
                    text=f"Efficiency {snapshot.efficiency}% · {reports.work_status(snapshot.efficiency)}"
                )
            else:
                self._efficiency_label.config(text="")

            self._checkin_btn.config(text="Check Out" if snapshot.is_checked_in else "Check In")
            self._break_btn.config(
                text="End Break" if snapshot.is_on_break else "Break",
                state="normal" if snapshot.is_checked_in else "disabled",
            )
            self._render_notices(snapshot.notifications)
        except tk.TclError:
            pass  # window closing

    def _render_notices(self, notices):
        for child in self._notice_frame.winfo_children():
            child.destroy()
        for n in notices:
            tk.Label(self._notice_frame, text=f"• {n.message}", font=("Segoe UI", 9),
                     fg=KIND_COLORS.get(n.kind, THEME["text_muted"]),
                     bg=THEME["bg_card"], wraplength=320, justify="left").pack(anchor="w")

    def show_notification(self, notification):
        """Transient toast for transition messages."""
        try:
            self._toast_label.config(
                text=notification.message,
                fg=KIND_COLORS.get(notification.kind, THEME["text_primary"]),
            )
            if self._toast_job is not None:
                self._root.after_cancel(self._toast_job)
            self._toast_job = self._root.after(_TOAST_MS, self._clear_toast)
        except tk.TclError:
            pass

    def _clear_toast(self):
        self._toast_job = None
        try:
            self._toast_label.config(text="")
        except tk.TclError:
            pass

    def refresh_history(self):
        today = date.today()
        week_start = today - timedelta(days=today.weekday())
        report = reports.weekly_report(self._engine.history(), week_start)
        self._week_label.config(
            text=f"This week: {report.total_work_hours}h · avg {report.average_efficiency}%"
        )

    # ─── Button handlers ─────────────────────────────────────

    def _confirm(self, key):
        title, question = _CONFIRM[key]
        return messagebox.askyesno(title, question, parent=self._root)

    def _on_check_in_out(self):
        if self._engine.state.is_checked_in:
            if self._confirm("checkout"):
                self._engine.check_out()
                self.refresh_history()
        elif self._confirm("checkin"):
            self._engine.check_in()

    def _on_break(self):
        key = "endbreak" if self._engine.state.is_on_break else "break"
        if self._confirm(key):
            self._engine.toggle_break()

    def _on_export(self):
        path = filedialog.asksaveasfilename(
            parent=self._root,
            defaultextension=".csv",
            initialfile=f"time-tracking-report-{date.today().isoformat()}.csv",
            filetypes=[("CSV", "*.csv")],
        )
        if not path:
            return
        records = reports.sort_records(self._engine.history(), "date", descending=True)
        try:
            count = reports.export_csv(records, path)
            log.info("Exported %d daily records to %s", count, path)
        except OSError as e:
            log.error("CSV export failed: %s", e)
            messagebox.showerror("Export failed", str(e), parent=self._root)

    def _on_sign_out(self):
        if self._engine.state.is_checked_in:
            self._engine.sign_out()  # refused; shows the check-out reminder
            return
        if messagebox.askyesno("Clear data", "Delete the saved session and history?",
                               parent=self._root):
            self._engine.sign_out()
            self.refresh_history()
