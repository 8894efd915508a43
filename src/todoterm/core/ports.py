# src/todoterm/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the core.

The navigation controller and the firing loop depend on Protocols instead of
the concrete SQLite store and notify-send adapter. Tests plug in fakes.
"""

from typing import Awaitable, Protocol

from ..tasks.task_models import Reminder, ReminderState, Task


class ReminderRepo(Protocol):
    """What the firing loop needs from the store."""

    def list_due_reminders(self, now: float) -> list[Reminder]: ...
    def advance_reminder(self, task_id: int, reminder_id: int, next_state: ReminderState) -> None: ...


class TaskRepo(ReminderRepo, Protocol):
    """What the interactive program needs from the store."""

    def create(self, text: str, category: str = "") -> int: ...
    def get(self, task_id: int) -> Task: ...
    def update_text(self, task_id: int, text: str) -> None: ...
    def update_category(self, task_id: int, category: str) -> None: ...
    def complete(self, task_id: int) -> None: ...
    def delete(self, task_id: int) -> None: ...
    def set_reminder(
        self,
        task_id: int,
        scheduled_time: int,
        repeat_interval: int = 0,
        message: str | None = None,
    ) -> None: ...
    def list(self, completed: bool, category_filter: str | None = ...) -> list[Task]: ...
    def distinct_categories(self, completed: bool) -> set[str]: ...
    def count(self, completed: bool) -> int: ...


class Notifier(Protocol):
    """
    Desktop notification port.

    Implementations raise NotifierInvocationFailed when the notification could
    not be handed to the desktop; the firing loop logs it and moves on.
    """

    def notify(self, *, title: str, message: str) -> Awaitable[None]: ...
