"""Terminal task manager with desktop reminders."""

__version__ = "0.3.0"
