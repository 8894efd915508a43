# tests/conftest.py

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import pytest

from todoterm.core.state import AppState
from todoterm.tasks.task_store import TaskStore

from .fakes import FakeClock


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock(1_700_000_000)


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with AppState and the UI/daemon wiring.

    We intentionally use a SimpleNamespace rather than reading the real
    environment, to keep unit tests isolated and deterministic.
    """
    return SimpleNamespace(
        app_name="todoterm",
        log_level="DEBUG",
        data_dir=tmp_path,
        db_path=tmp_path / "todo.sqlite3",
        log_dir=tmp_path,
        poll_interval_seconds=1.0,
        notify_command="true",
        notify_title="TODO",
        notify_timeout_seconds=5.0,
        page_step=10,
        refresh_interval_seconds=5.0,
    )


@pytest.fixture()
def store(settings: SimpleNamespace, clock: FakeClock) -> TaskStore:
    """Real SQLite store on a temp file, driven by the fake clock."""
    return TaskStore(settings.db_path, clock=clock)


@pytest.fixture()
def state(settings: SimpleNamespace, store: TaskStore) -> AppState:
    return AppState(settings=settings, task_store=store)
