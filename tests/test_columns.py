# tests/test_columns.py

from __future__ import annotations

from datetime import datetime

from todoterm.tasks.task_models import Reminder, Task
from todoterm.view.columns import NO_REMINDER, date_label, fit, format_timestamp, reminder_label

T = 1_700_000_000


def _task(**kw) -> Task:
    base = dict(id=1, text="x", category="", created_at=T, updated_at=T)
    base.update(kw)
    return Task(**base)


def _reminder(scheduled_time: int, repeat: int = 0) -> Reminder:
    return Reminder(
        id=1, task_id=1, scheduled_time=scheduled_time, triggered=False, repeat_interval=repeat, message="x"
    )


def test_format_timestamp_uses_local_time() -> None:
    assert format_timestamp(T) == datetime.fromtimestamp(T).strftime("%Y-%m-%d %H:%M")
    assert format_timestamp(0) == ""
    assert format_timestamp(None) == ""


def test_reminder_label() -> None:
    assert reminder_label(_task()) == NO_REMINDER
    assert reminder_label(_task(reminder=_reminder(0))) == NO_REMINDER
    assert reminder_label(_task(reminder=_reminder(T + 3600))) == format_timestamp(T + 3600)
    assert reminder_label(_task(reminder=_reminder(T + 3600, repeat=3600))).endswith("*")


def test_date_label_depends_on_partition() -> None:
    assert date_label(_task()) == format_timestamp(T)
    done = _task(completed=True, completed_at=T + 86400)
    assert date_label(done) == format_timestamp(T + 86400)


def test_fit_pads_and_truncates() -> None:
    assert fit("Work", 6) == "Work  "
    assert fit("Groceries", 6) == "Groce~"
    assert fit("abc", 1) == "a"
    assert fit("abc", 0) == ""
