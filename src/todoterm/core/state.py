# src/todoterm/core/state.py

from __future__ import annotations

from dataclasses import dataclass

from ..tasks.task_store import TaskStore


@dataclass(slots=True)
class AppState:
    # Settings object (or a test namespace with the same attributes).
    settings: object
    task_store: TaskStore
