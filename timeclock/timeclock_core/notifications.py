"""
Reminder rules, evaluated every tick while checked in.

Each rule is independent; several can be active at once. Ids are stable
so the widget can de-duplicate between ticks.
"""

from collections import namedtuple

from .constants import (
    LONG_WORK_HOURS, LONG_WORK_MINUTES, LONG_BREAK_MINUTES, REMINDER_HOURS,
)
from .models import Notification

Rule = namedtuple("Rule", "predicate id kind message")


RULES = [
    Rule(
        lambda worked, brk, on_break: (
            worked.hours >= LONG_WORK_HOURS
            and worked.minutes >= LONG_WORK_MINUTES
            and not on_break
        ),
        "long-work", "warning",
        "You have been working for over 4.5 hours. Consider taking a break.",
    ),
    Rule(
        lambda worked, brk, on_break: on_break and brk.total_minutes >= LONG_BREAK_MINUTES,
        "long-break", "warning",
        "Your break has exceeded 45 minutes.",
    ),
    Rule(
        lambda worked, brk, on_break: worked.hours >= REMINDER_HOURS and not on_break,
        "efficiency", "info",
        "Remember to stay hydrated and maintain good posture.",
    ),
    # Same guard as above, separate reminder.
    Rule(
        lambda worked, brk, on_break: worked.hours >= REMINDER_HOURS and not on_break,
        "break-reminder", "info",
        "Consider taking a short break to maintain productivity.",
    ),
]


def evaluate(time_worked, break_duration, is_on_break, now, rules=RULES):
    """Return a Notification for every rule whose guard holds, in table order."""
    return [
        Notification(id=rule.id, kind=rule.kind, message=rule.message, timestamp=now)
        for rule in rules
        if rule.predicate(time_worked, break_duration, is_on_break)
    ]


# ─── Transition messages ─────────────────────────────────────────

def welcome(now):
    return Notification(
        "welcome", "success",
        "You have successfully checked in. Have a productive day!", now,
    )


def break_started(now):
    return Notification(
        "break-started", "info", "Your break time has started. Take your time!", now,
    )


def break_ended(duration, now):
    return Notification("break-ended", "success", f"Break duration: {duration}", now)


def day_summary(record, now):
    return Notification(
        "day-summary", "success",
        f"Work time: {record.total_work_time}\nTotal breaks: {record.total_break_time}",
        now,
    )


def checkout_required(now):
    return Notification(
        "checkout-required", "warning", "Please check out before logging out.", now,
    )
