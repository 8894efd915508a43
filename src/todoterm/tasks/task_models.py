# src/todoterm/tasks/task_models.py

from __future__ import annotations

from dataclasses import dataclass

# Category filter sentinel meaning "no filtering". Distinct from "" (uncategorized).
ALL_CATEGORIES = "All"


@dataclass(slots=True, frozen=True)
class ReminderState:
    """The part of a reminder the firing loop is allowed to change."""

    scheduled_time: int
    triggered: bool


@dataclass(slots=True)
class Reminder:
    id: int
    task_id: int
    scheduled_time: int  # epoch seconds, 0 = no active reminder
    triggered: bool
    repeat_interval: int  # seconds, 0 = one-shot
    message: str
    created_at: int = 0
    active: bool = True

    @property
    def repeats(self) -> bool:
        return self.repeat_interval > 0

    @property
    def state(self) -> ReminderState:
        return ReminderState(scheduled_time=self.scheduled_time, triggered=self.triggered)


@dataclass(slots=True)
class Task:
    id: int
    text: str
    category: str
    created_at: int
    updated_at: int
    completed: bool = False
    completed_at: int | None = None
    reminder: Reminder | None = None

    def matches(self, category_filter: str | None) -> bool:
        if category_filter is None or category_filter == ALL_CATEGORIES:
            return True
        return self.category == category_filter
