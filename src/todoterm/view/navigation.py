# src/todoterm/view/navigation.py

"""
Selection & navigation state machine.

NavState is an explicit value owned by the caller; the transition functions
below take it as their first argument. TaskBoard wires the transitions to a
TaskRepo and re-reads the store after every mutation, so the view never
relies on a stale private copy.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from enum import StrEnum

from ..core.errors import NotFound
from ..core.ports import TaskRepo
from ..tasks.reminder_scheduler import clamp_repeat, parse_offset, schedule_from_offset
from ..tasks.task_models import ALL_CATEGORIES, Task
from .list_view import ListViewport, clamp_index, filter_tasks, layout

logger = logging.getLogger(__name__)

DEFAULT_PAGE_STEP = 10


class View(StrEnum):
    CURRENT = "current"
    COMPLETED = "completed"

    @property
    def completed(self) -> bool:
        return self is View.COMPLETED

    def toggled(self) -> View:
        return View.COMPLETED if self is View.CURRENT else View.CURRENT


@dataclass(slots=True)
class NavState:
    view: View = View.CURRENT
    category_filter: str = ALL_CATEGORIES
    selected_index: int = 0


# ---- transitions ----


def switch_view(state: NavState) -> None:
    """Current <-> Completed. The filter is kept; the selection goes back to the top."""
    state.view = state.view.toggled()
    state.selected_index = 0


def set_filter(state: NavState, category: str, filtered_len: int) -> None:
    """
    Change the category filter.

    The selection is only clamped, not reset, so it may land on a different task.
    """
    state.category_filter = category
    clamp(state, filtered_len)


def clamp(state: NavState, filtered_len: int) -> None:
    state.selected_index = clamp_index(state.selected_index, filtered_len)


def move(state: NavState, delta: int, filtered_len: int) -> None:
    state.selected_index = clamp_index(state.selected_index + delta, filtered_len)


def home(state: NavState) -> None:
    state.selected_index = 0


def end(state: NavState, filtered_len: int) -> None:
    state.selected_index = clamp_index(filtered_len - 1, filtered_len)


def page_up(state: NavState, filtered_len: int, step: int = DEFAULT_PAGE_STEP) -> None:
    move(state, -abs(step), filtered_len)


def page_down(state: NavState, filtered_len: int, step: int = DEFAULT_PAGE_STEP) -> None:
    move(state, abs(step), filtered_len)


def goto(state: NavState, item_number: int, partition: Sequence[Task], filtered: Sequence[Task]) -> bool:
    """
    Select the task shown as number `item_number` (1-based, unfiltered partition).

    A target hidden by the active filter (or out of range) leaves the selection unchanged.
    """
    if item_number < 1 or item_number > len(partition):
        return False
    target_id = partition[item_number - 1].id
    for position, task in enumerate(filtered):
        if task.id == target_id:
            state.selected_index = position
            return True
    return False


# ---- controller ----


class TaskBoard:
    """
    Binds a NavState to a TaskRepo.

    NotFound from the store (task removed by the other process) is handled here:
    the action is skipped and the view refreshed. ValidationError and
    StorageUnavailable propagate to the caller, which must report them.
    """

    def __init__(
        self,
        store: TaskRepo,
        state: NavState | None = None,
        *,
        page_step: int = DEFAULT_PAGE_STEP,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._store = store
        self.state = state if state is not None else NavState()
        self.page_step = max(1, int(page_step))
        self._clock = clock
        self._partition: list[Task] = []
        self._filtered: list[Task] = []

    # ---- reading ----

    @property
    def partition(self) -> list[Task]:
        return list(self._partition)

    @property
    def filtered(self) -> list[Task]:
        return list(self._filtered)

    def refresh(self) -> None:
        self._partition = self._store.list(self.state.view.completed, ALL_CATEGORIES)
        self._filtered = filter_tasks(self._partition, self.state.category_filter)
        clamp(self.state, len(self._filtered))

    def selected_task(self) -> Task | None:
        if not self._filtered:
            return None
        return self._filtered[clamp_index(self.state.selected_index, len(self._filtered))]

    def item_number(self, task: Task) -> int:
        """1-based position of `task` in the unfiltered partition (0 if absent)."""
        for i, t in enumerate(self._partition):
            if t.id == task.id:
                return i + 1
        return 0

    def counts(self) -> tuple[int, int]:
        return self._store.count(False), self._store.count(True)

    def categories(self) -> list[str]:
        """Filter menu entries: "All" followed by the partition's categories, sorted."""
        found = self._store.distinct_categories(self.state.view.completed) - {ALL_CATEGORIES}
        return [ALL_CATEGORIES, *sorted(found)]

    def viewport(self, height: int, width: int) -> ListViewport:
        vp = layout(self._partition, self.state.category_filter, self.state.selected_index, height, width)
        self.state.selected_index = vp.selected_index
        return vp

    # ---- navigation ----

    def switch_view(self) -> None:
        switch_view(self.state)
        self.refresh()

    def set_filter(self, category: str) -> None:
        self._filtered = filter_tasks(self._partition, category)
        set_filter(self.state, category, len(self._filtered))

    def move(self, delta: int) -> None:
        move(self.state, delta, len(self._filtered))

    def home(self) -> None:
        home(self.state)

    def end(self) -> None:
        end(self.state, len(self._filtered))

    def page_up(self) -> None:
        page_up(self.state, len(self._filtered), self.page_step)

    def page_down(self) -> None:
        page_down(self.state, len(self._filtered), self.page_step)

    def goto(self, item_number: int) -> bool:
        return goto(self.state, item_number, self._partition, self._filtered)

    # ---- mutations ----

    def _apply(self, action: Callable[[int], None], task: Task | None) -> bool:
        if task is None:
            return False
        try:
            action(task.id)
        except NotFound:
            logger.info("Task %s no longer exists; refreshing view", task.id)
            self.refresh()
            return False
        self.refresh()
        return True

    def add(self, text: str, category: str = "") -> int:
        task_id = self._store.create(text, category)
        self.refresh()
        return task_id

    def edit_selected(self, text: str) -> bool:
        return self._apply(lambda task_id: self._store.update_text(task_id, text), self.selected_task())

    def set_category_selected(self, category: str) -> bool:
        return self._apply(
            lambda task_id: self._store.update_category(task_id, category), self.selected_task()
        )

    def complete_selected(self) -> bool:
        """Completing only makes sense from the Current view."""
        if self.state.view is not View.CURRENT:
            return False
        return self._apply(self._store.complete, self.selected_task())

    def delete_selected(self) -> bool:
        return self._apply(self._store.delete, self.selected_task())

    def set_reminder_selected(self, quantity: str, unit: str = "h", repeat_hours: str = "") -> bool:
        """
        Set (or clear, with a zero/blank quantity) the selected task's reminder.

        Raises ValidationError for malformed input before touching the store.
        """
        task = self.selected_task()
        if task is None:
            return False

        scheduled = schedule_from_offset(self._clock(), parse_offset(quantity, unit))
        repeat = clamp_repeat(parse_offset(repeat_hours, "h")) if scheduled else 0

        return self._apply(
            lambda task_id: self._store.set_reminder(task_id, scheduled, repeat, task.text), task
        )
