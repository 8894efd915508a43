# src/todoterm/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local directories exist,
- wires the concrete store and notifier.
"""

from __future__ import annotations

import logging

from ..config import Settings, get_settings
from ..core.errors import StorageUnavailable
from ..core.state import AppState
from ..tasks.notifier import DesktopNotifier
from ..tasks.task_store import TaskStore

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings: Settings) -> None:
    try:
        settings.data_dir.mkdir(parents=True, exist_ok=True)
        settings.db_path.parent.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise StorageUnavailable(f"cannot create data directory: {e}") from e


def create_initial_state(*, settings: Settings | None = None) -> AppState:
    """
    Create AppState from the provided settings.

    Raises StorageUnavailable when the store cannot be opened; callers treat
    that as a fatal startup error.
    """
    if settings is None:
        settings = get_settings()

    _ensure_local_dirs(settings)
    return AppState(settings=settings, task_store=TaskStore(settings.db_path))


def create_notifier(settings: Settings) -> DesktopNotifier:
    return DesktopNotifier(settings.notify_command, timeout_seconds=settings.notify_timeout_seconds)
