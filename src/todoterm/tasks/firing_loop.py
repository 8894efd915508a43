# src/todoterm/tasks/firing_loop.py

from __future__ import annotations

"""
Notification firing loop (the daemon side).

Every interval_seconds:
- re-read due reminders from the store (never cached between cycles),
- ask the scheduler policy what to do with each one,
- invoke the notifier,
- persist the reminder's next state, whether or not the notifier succeeded.

Failure policy:
- storage failure while listing: logged, retried next cycle
- notifier failure: logged, reminder still advances
- task deleted (or reminder replaced) before the update: logged, skipped
- anything else on one record: logged with traceback, next record continues

To stop the loop, cancel the coroutine/task.
"""

import asyncio
import logging
import time
from collections.abc import Callable

from ..core.errors import NotFound, NotifierInvocationFailed, StorageUnavailable
from ..core.ports import Notifier, ReminderRepo
from .reminder_scheduler import Fire, decide

logger = logging.getLogger(__name__)

DEFAULT_TITLE = "TODO"


async def run_firing_cycle(
    store: ReminderRepo,
    notifier: Notifier,
    *,
    now: float,
    title: str = DEFAULT_TITLE,
) -> int:
    """Run one poll cycle at `now`. Returns the number of reminders fired."""
    try:
        reminders = store.list_due_reminders(now)
    except StorageUnavailable:
        logger.exception("list_due_reminders failed; will retry next cycle")
        return 0

    fired = 0
    for reminder in reminders:
        try:
            outcome = decide(reminder, now)
            if not isinstance(outcome, Fire):
                continue

            try:
                await notifier.notify(title=title, message=outcome.message)
            except NotifierInvocationFailed as e:
                logger.warning("Notification for task_id=%s failed: %s", reminder.task_id, e)
            except Exception:
                # The reminder still advances, otherwise it would re-fire every cycle.
                logger.exception("Notifier raised unexpectedly for task_id=%s", reminder.task_id)

            try:
                store.advance_reminder(reminder.task_id, reminder.id, outcome.next_state)
            except NotFound:
                logger.info(
                    "Task %s was deleted or its reminder replaced before update; skipped",
                    reminder.task_id,
                )
                continue

            fired += 1
            logger.info(
                "Reminder fired task_id=%s reminder_id=%s next=%s",
                reminder.task_id,
                reminder.id,
                outcome.next_state.scheduled_time or "none",
            )
        except Exception:
            logger.exception(
                "Reminder handling failed task_id=%s reminder_id=%s",
                getattr(reminder, "task_id", None),
                getattr(reminder, "id", None),
            )

    return fired


async def run_firing_loop(
    store: ReminderRepo,
    notifier: Notifier,
    *,
    interval_seconds: float = 15.0,
    title: str = DEFAULT_TITLE,
    clock: Callable[[], float] = time.time,
) -> None:
    """Poll forever. There is no internal shutdown; cancel the task to stop."""
    sleep_s = max(0.01, float(interval_seconds))
    logger.info("Firing loop started (interval=%.2fs)", sleep_s)

    while True:
        await run_firing_cycle(store, notifier, now=clock(), title=title)
        await asyncio.sleep(sleep_s)
