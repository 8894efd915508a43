# tests/test_firing_loop.py

from __future__ import annotations

import asyncio

import pytest

from todoterm.core.errors import NotFound, StorageUnavailable
from todoterm.tasks.firing_loop import run_firing_cycle, run_firing_loop
from todoterm.tasks.notifier import DesktopNotifier
from todoterm.tasks.task_models import Reminder, ReminderState
from todoterm.tasks.task_store import TaskStore

from .fakes import FakeClock, FakeNotifier

HOUR = 3600


class FakeReminderRepo:
    """
    In-memory ReminderRepo for failure-path tests.

    `deleted` task ids make advance_reminder raise NotFound, mimicking a delete
    by the interactive program between list and update.
    """

    def __init__(self, reminders: list[Reminder]) -> None:
        self.reminders = {r.id: r for r in reminders}
        self.deleted: set[int] = set()
        self.broken = False
        self.advanced: list[tuple[int, ReminderState]] = []

    def list_due_reminders(self, now: float) -> list[Reminder]:
        if self.broken:
            raise StorageUnavailable("database is locked")
        return [
            r
            for r in sorted(self.reminders.values(), key=lambda x: x.id)
            if r.scheduled_time and r.scheduled_time <= now
        ]

    def advance_reminder(self, task_id: int, reminder_id: int, next_state: ReminderState) -> None:
        if task_id in self.deleted:
            raise NotFound(task_id, what="reminder for task")
        r = self.reminders[reminder_id]
        r.scheduled_time = next_state.scheduled_time
        r.triggered = next_state.triggered
        self.advanced.append((reminder_id, next_state))


def _reminder(rid: int, task_id: int, scheduled_time: int, *, repeat: int = 0, message: str = "") -> Reminder:
    return Reminder(
        id=rid,
        task_id=task_id,
        scheduled_time=scheduled_time,
        triggered=False,
        repeat_interval=repeat,
        message=message,
    )


@pytest.mark.asyncio
async def test_one_shot_reminder_fires_once(store: TaskStore, clock: FakeClock) -> None:
    task_id = store.create("Buy milk")
    store.set_reminder(task_id, int(clock.now) + 2 * HOUR)
    notifier = FakeNotifier()

    assert await run_firing_cycle(store, notifier, now=clock.advance(HOUR), title="TODO") == 0
    assert notifier.sent == []

    assert await run_firing_cycle(store, notifier, now=clock.advance(HOUR + 10), title="TODO") == 1
    assert [(n.title, n.message) for n in notifier.sent] == [("TODO", "Buy milk")]

    assert await run_firing_cycle(store, notifier, now=clock.advance(HOUR), title="TODO") == 0
    assert len(notifier.sent) == 1

    reminder = store.get(task_id).reminder
    assert reminder is not None
    assert reminder.scheduled_time == 0
    assert reminder.triggered is True


@pytest.mark.asyncio
async def test_repeating_reminder_keeps_cadence(store: TaskStore, clock: FakeClock) -> None:
    start = int(clock.now)
    task_id = store.create("Stretch")
    store.set_reminder(task_id, start + HOUR, repeat_interval=HOUR)
    notifier = FakeNotifier()

    await run_firing_cycle(store, notifier, now=start + HOUR + 30)
    assert store.get(task_id).reminder.scheduled_time == start + 2 * HOUR

    await run_firing_cycle(store, notifier, now=start + 2 * HOUR + 45)
    assert store.get(task_id).reminder.scheduled_time == start + 3 * HOUR
    assert len(notifier.sent) == 2


@pytest.mark.asyncio
async def test_notifier_failure_still_advances(store: TaskStore, clock: FakeClock) -> None:
    task_id = store.create("Water plants")
    store.set_reminder(task_id, int(clock.now) + HOUR)
    notifier = FakeNotifier(fail=True)

    fired = await run_firing_cycle(store, notifier, now=clock.advance(2 * HOUR))

    assert fired == 1
    assert len(notifier.sent) == 1
    reminder = store.get(task_id).reminder
    assert reminder.scheduled_time == 0
    assert reminder.triggered is True


@pytest.mark.asyncio
async def test_deleted_task_is_skipped_and_others_continue() -> None:
    repo = FakeReminderRepo([_reminder(1, 10, 100, message="A"), _reminder(2, 20, 100, message="B")])
    repo.deleted.add(10)
    notifier = FakeNotifier()

    fired = await run_firing_cycle(repo, notifier, now=200)

    assert fired == 1
    assert [rid for rid, _ in repo.advanced] == [2]
    assert repo.reminders[2].triggered is True


@pytest.mark.asyncio
async def test_storage_failure_while_listing_returns_zero() -> None:
    repo = FakeReminderRepo([_reminder(1, 10, 100)])
    repo.broken = True
    notifier = FakeNotifier()

    assert await run_firing_cycle(repo, notifier, now=200) == 0
    assert notifier.sent == []


@pytest.mark.asyncio
async def test_blank_message_uses_default_text() -> None:
    repo = FakeReminderRepo([_reminder(1, 10, 100, message="  ")])
    notifier = FakeNotifier()

    await run_firing_cycle(repo, notifier, now=200, title="Reminders")

    assert [(n.title, n.message) for n in notifier.sent] == [("Reminders", "Task reminder")]


@pytest.mark.asyncio
async def test_firing_loop_polls_until_cancelled() -> None:
    repo = FakeReminderRepo([_reminder(1, 10, 100, repeat=HOUR, message="tick")])
    notifier = FakeNotifier()
    clock = FakeClock(100)

    def ticking_clock() -> float:
        # Each poll happens one interval later in "wall" time.
        return clock.advance(HOUR) - HOUR

    task = asyncio.create_task(
        run_firing_loop(repo, notifier, interval_seconds=0.01, title="TODO", clock=ticking_clock)
    )
    for _ in range(200):
        if len(notifier.sent) >= 3:
            break
        await asyncio.sleep(0.01)

    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task

    assert len(notifier.sent) >= 3
    assert {n.message for n in notifier.sent} == {"tick"}


class CrashingNotifier:
    """Notifier that fails with something other than NotifierInvocationFailed."""

    def __init__(self) -> None:
        self.calls = 0

    async def notify(self, *, title: str, message: str) -> None:
        self.calls += 1
        raise RuntimeError("display connection lost")


@pytest.mark.asyncio
async def test_unexpected_notifier_error_still_advances(store: TaskStore, clock: FakeClock) -> None:
    task_id = store.create("Call the bank")
    store.set_reminder(task_id, int(clock.now) + HOUR)
    notifier = CrashingNotifier()

    assert await run_firing_cycle(store, notifier, now=clock.advance(2 * HOUR)) == 1
    assert await run_firing_cycle(store, notifier, now=clock.advance(60)) == 0

    assert notifier.calls == 1
    reminder = store.get(task_id).reminder
    assert reminder.scheduled_time == 0
    assert reminder.triggered is True


@pytest.mark.asyncio
async def test_message_with_nul_byte_is_advanced_once(store: TaskStore, clock: FakeClock) -> None:
    task_id = store.create("milk\x00eggs")
    store.set_reminder(task_id, int(clock.now) + HOUR)
    notifier = DesktopNotifier("true")

    assert await run_firing_cycle(store, notifier, now=clock.advance(2 * HOUR)) == 1
    assert await run_firing_cycle(store, notifier, now=clock.advance(60)) == 0

    reminder = store.get(task_id).reminder
    assert reminder.scheduled_time == 0
    assert reminder.triggered is True
