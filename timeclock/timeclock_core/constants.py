"""
Constants, thresholds, theme colors, and reminder thresholds.
"""

APP_VERSION = "1.0.0"

# ─── Timers ──────────────────────────────────────────────────────
TICK_INTERVAL_MS = 1000        # Recompute worked/break time every second
SAVE_DEBOUNCE_MS = 1000        # Coalesce state saves within this window
CONNECTIVITY_CHECK_SEC = 15    # How often to retry the offline buffer

# ─── Reminders ───────────────────────────────────────────────────
LONG_WORK_HOURS = 4
LONG_WORK_MINUTES = 30
LONG_BREAK_MINUTES = 45
REMINDER_HOURS = 2

# ─── History ─────────────────────────────────────────────────────
MAX_HISTORY_DAYS = 30          # Keep only the 30 most recent daily records
MAX_BREAK_MINUTES = 60

# Efficiency bands (lower bound, label), checked top to bottom
EFFICIENCY_BANDS = [
    (80, "Excellent"),
    (60, "Good"),
    (40, "Fair"),
    (0, "Needs Improvement"),
]

# Average break length (upper bound in minutes, label)
BREAK_BANDS = [
    (15, "Short Breaks"),
    (30, "Moderate Breaks"),
]
LONG_BREAKS_LABEL = "Long Breaks"

# ─── Network ─────────────────────────────────────────────────────
DEFAULT_SERVER_URL = "http://127.0.0.1:8000/api/v1"
API_TIMEOUT = 10               # Seconds
API_TIMEOUT_SYNC = 30          # Record sync can hit a cold backend

# ─── Portal Theme Colors (matching HR portal dark theme) ─────────
THEME = {
    "bg_darkest":    "#020617",   # window background
    "bg_card":       "#1e293b",   # card background
    "bg_input":      "#0f172a",   # input field bg
    "header_bg":     "#0a2c54",   # header background
    "primary":       "#3b82f6",   # blue button
    "primary_hover": "#2563eb",   # button hover
    "break":         "#a855f7",   # purple break button
    "text_primary":  "#f1f5f9",   # white text
    "text_muted":    "#94a3b8",   # muted text
    "border":        "#374151",   # borders
    "success":       "#22c55e",   # green
    "error":         "#ef4444",   # red
    "warning":       "#fbbf24",   # yellow
}

KIND_COLORS = {
    "warning": THEME["warning"],
    "info": THEME["primary"],
    "success": THEME["success"],
}
