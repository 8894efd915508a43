# src/todoterm/core/errors.py

"""
Error taxonomy shared by the interactive program and the firing loop.

- ValidationError: caller input rejected (empty text, bad reminder quantity/unit).
- NotFound: the referenced task no longer exists (e.g. deleted by the other process).
- StorageUnavailable: the durable store could not be opened, read or written.
- NotifierInvocationFailed: the desktop notification command failed or is missing.
"""

from __future__ import annotations


class TodoError(Exception):
    """Base class for all todoterm errors."""


class ValidationError(TodoError, ValueError):
    pass


class NotFound(TodoError, LookupError):
    def __init__(self, task_id: int, what: str = "task") -> None:
        super().__init__(f"{what} {task_id} not found")
        self.task_id = task_id


class StorageUnavailable(TodoError, RuntimeError):
    pass


class NotifierInvocationFailed(TodoError, RuntimeError):
    pass
