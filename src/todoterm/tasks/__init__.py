"""
Task subsystem.

Components:
- task_models.py: data structures (Task, Reminder, ReminderState)
- task_store.py: SQLite-backed storage shared by the UI and the daemon
- reminder_scheduler.py: pure "is it due, and what next" policy
- firing_loop.py: polling loop that fires due reminders
- notifier.py: notify-send adapter
"""
