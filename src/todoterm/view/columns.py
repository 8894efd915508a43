# src/todoterm/view/columns.py

"""Text for the fixed columns next to each task (reminder, category, date)."""

from __future__ import annotations

from datetime import datetime

from ..tasks.task_models import Task

NO_REMINDER = "NoRem"
TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M"


def format_timestamp(ts: int | float | None) -> str:
    if not ts:
        return ""
    return datetime.fromtimestamp(ts).strftime(TIMESTAMP_FORMAT)


def reminder_label(task: Task) -> str:
    """Local time of the active reminder, `*` marks a repeating one."""
    r = task.reminder
    if r is None or not r.scheduled_time:
        return NO_REMINDER
    label = format_timestamp(r.scheduled_time)
    return f"{label}*" if r.repeats else label


def date_label(task: Task) -> str:
    """Creation date for open tasks, completion date for completed ones."""
    if task.completed:
        return format_timestamp(task.completed_at)
    return format_timestamp(task.created_at)


def fit(text: str, width: int) -> str:
    """Pad or truncate to exactly `width` characters."""
    if width <= 0:
        return ""
    if len(text) <= width:
        return text.ljust(width)
    if width == 1:
        return text[:1]
    return text[: width - 1] + "~"
