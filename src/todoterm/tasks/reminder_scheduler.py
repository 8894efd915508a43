# src/todoterm/tasks/reminder_scheduler.py

"""
Reminder scheduling policy.

Everything here is pure: no clock reads, no storage, no notifier.
The firing loop asks `decide()` what to do with a reminder at a given "now",
then performs the I/O itself (notify, persist `next_state`).

Repeating reminders advance from their previous scheduled time, not from "now",
so a reminder that is several intervals overdue keeps its original cadence.
"""

from __future__ import annotations

from dataclasses import dataclass

from ..core.errors import ValidationError
from .task_models import Reminder, ReminderState

MIN_REMINDER_SECONDS = 3600
MAX_REMINDER_SECONDS = 168 * 3600

DEFAULT_MESSAGE = "Task reminder"

UNIT_SECONDS = {
    "s": 1,
    "m": 60,
    "h": 3600,
    "d": 86400,
}


@dataclass(slots=True, frozen=True)
class NotDue:
    pass


@dataclass(slots=True, frozen=True)
class Fire:
    message: str
    next_state: ReminderState


Outcome = NotDue | Fire

NOT_DUE = NotDue()


def decide(reminder: Reminder | None, now: float) -> Outcome:
    """Return Fire(message, next_state) when the reminder is due at `now`, else NotDue."""
    if reminder is None or not reminder.scheduled_time:
        return NOT_DUE
    if reminder.scheduled_time > now:
        return NOT_DUE
    if reminder.triggered and not reminder.repeats:
        return NOT_DUE

    if reminder.repeats:
        next_state = ReminderState(
            scheduled_time=reminder.scheduled_time + reminder.repeat_interval,
            triggered=False,
        )
    else:
        next_state = ReminderState(scheduled_time=0, triggered=True)

    message = (reminder.message or "").strip() or DEFAULT_MESSAGE
    return Fire(message=message, next_state=next_state)


def clamp_offset(seconds: int) -> int:
    """Clamp a relative offset into [1h, 168h]; zero or negative means "no reminder" (0)."""
    if seconds <= 0:
        return 0
    return min(max(int(seconds), MIN_REMINDER_SECONDS), MAX_REMINDER_SECONDS)


def parse_offset(quantity: str, unit: str = "h") -> int:
    """
    Convert user input like ("90", "m") into seconds (unclamped).

    Blank quantity means 0. Blank unit means hours.
    """
    raw = (quantity or "").strip()
    if not raw:
        return 0
    try:
        value = int(raw)
    except ValueError:
        raise ValidationError(f"reminder quantity must be a whole number, got {raw!r}") from None
    if value < 0:
        raise ValidationError("reminder quantity must not be negative")

    key = (unit or "h").strip().lower() or "h"
    if key not in UNIT_SECONDS:
        raise ValidationError(f"unknown reminder unit {unit!r} (use s, m, h or d)")
    return value * UNIT_SECONDS[key]


def schedule_from_offset(now: float, offset_seconds: int) -> int:
    """Absolute scheduled_time for a relative offset, or 0 when no reminder is wanted."""
    clamped = clamp_offset(offset_seconds)
    if not clamped:
        return 0
    return int(now) + clamped


def clamp_repeat(seconds: int) -> int:
    return clamp_offset(seconds)
