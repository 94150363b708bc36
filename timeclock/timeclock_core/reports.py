"""
Read-only analytics over durations and archived daily records:
efficiency, status labels, weekly roll-up, sorting/filtering, CSV export.
"""

import csv
import math
from dataclasses import dataclass
from datetime import date, timedelta

from .constants import (
    EFFICIENCY_BANDS, BREAK_BANDS, LONG_BREAKS_LABEL, MAX_BREAK_MINUTES,
)

CSV_HEADERS = ["Date", "Check In", "Check Out", "Work Time", "Break Time", "Efficiency"]


def _round_half_up(value):
    return int(math.floor(value + 0.5))


def efficiency(work_minutes, break_minutes):
    """
    Share of worked time in worked+break time, as a whole percentage.
    A day with no time at all counts as fully efficient.
    """
    total = work_minutes + break_minutes
    if total <= 0:
        return 100
    return _round_half_up(work_minutes / total * 100)


def efficiency_of(time_worked, total_break_time):
    return efficiency(time_worked.total_minutes, total_break_time.total_minutes)


def work_status(value):
    for lower, label in EFFICIENCY_BANDS:
        if value >= lower:
            return label
    return EFFICIENCY_BANDS[-1][1]


def average_break_minutes(total_break_time, break_count):
    if break_count <= 0:
        return 0
    return _round_half_up(total_break_time.total_minutes / break_count)


def break_status(avg_minutes):
    for upper, label in BREAK_BANDS:
        if avg_minutes <= upper:
            return label
    return LONG_BREAKS_LABEL


def is_valid_break_duration(minutes):
    return minutes <= MAX_BREAK_MINUTES


_BAND_KEYS = {
    "Excellent": "excellent",
    "Good": "good",
    "Fair": "fair",
    "Needs Improvement": "poor",
}


def efficiency_band(value):
    """Lower-case band key used by filter_records()."""
    return _BAND_KEYS[work_status(value)]


# ─── Weekly roll-up ──────────────────────────────────────────────

@dataclass(frozen=True)
class WeeklyReport:
    week_start_date: str
    total_work_hours: float
    average_efficiency: int
    total_break_minutes: int
    most_productive_day: str


def _record_date(record):
    try:
        return date.fromisoformat(record.date)
    except ValueError:
        return None


def weekly_report(records, week_start):
    """Summarise records dated in [week_start, week_start + 7 days)."""
    week_end = week_start + timedelta(days=7)
    week = []
    for r in records:
        d = _record_date(r)
        if d is not None and week_start <= d < week_end:
            week.append(r)

    if not week:
        return WeeklyReport(week_start.isoformat(), 0, 0, 0, "-")

    total_hours = sum(r.total_work_time.hours + r.total_work_time.minutes / 60 for r in week)
    avg_eff = sum(r.efficiency for r in week) / len(week)
    total_break = sum(r.total_break_time.total_minutes for r in week)

    best = week[0]
    for r in week[1:]:
        if r.efficiency > best.efficiency:
            best = r

    return WeeklyReport(
        week_start_date=week_start.isoformat(),
        total_work_hours=round(total_hours, 2),
        average_efficiency=_round_half_up(avg_eff),
        total_break_minutes=total_break,
        most_productive_day=best.date,
    )


# ─── Sorting / filtering ─────────────────────────────────────────

_SORT_KEYS = {
    "date": lambda r: r.date,
    "efficiency": lambda r: r.efficiency,
    "workTime": lambda r: r.total_work_time.total_minutes,
    "breakTime": lambda r: r.total_break_time.total_minutes,
}


def sort_records(records, key="date", descending=True):
    if key not in _SORT_KEYS:
        return list(records)
    return sorted(records, key=_SORT_KEYS[key], reverse=descending)


def filter_records(records, bands=None, has_breaks="all"):
    """
    bands: subset of {"excellent", "good", "fair", "poor"}; None keeps all.
    has_breaks: "all" | "with" | "without".
    """
    result = []
    for r in records:
        if bands is not None and efficiency_band(r.efficiency) not in bands:
            continue
        break_minutes = r.total_break_time.total_minutes
        if has_breaks == "with" and break_minutes == 0:
            continue
        if has_breaks == "without" and break_minutes > 0:
            continue
        result.append(r)
    return result


# ─── CSV export ──────────────────────────────────────────────────

def export_csv(records, out):
    """Write records to a path or an open text stream. Returns rows written."""
    if hasattr(out, "write"):
        return _write_csv(records, out)
    with open(out, "w", newline="", encoding="utf-8") as f:
        return _write_csv(records, f)


def _write_csv(records, stream):
    writer = csv.writer(stream, lineterminator="\n")
    writer.writerow(CSV_HEADERS)
    count = 0
    for r in records:
        writer.writerow([
            r.date,
            r.check_in_time,
            r.check_out_time or "-",
            str(r.total_work_time),
            str(r.total_break_time),
            f"{r.efficiency}%",
        ])
        count += 1
    return count
