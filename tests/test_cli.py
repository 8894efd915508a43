# tests/test_cli.py

from __future__ import annotations

from pathlib import Path

import pytest
from click.testing import CliRunner

import todoterm.cli.main as main_mod
from todoterm import config
from todoterm.tasks.task_store import TaskStore


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("TODOTERM_DATA_DIR", str(tmp_path / "data"))
    monkeypatch.setenv("TODOTERM_NOTIFY_COMMAND", "true")
    monkeypatch.delenv("TODOTERM_DB_PATH", raising=False)
    monkeypatch.delenv("TODOTERM_LOG_DIR", raising=False)
    monkeypatch.setattr(config, "_SETTINGS", None)
    # Leave the root logger alone; pytest's caplog owns it.
    monkeypatch.setattr(main_mod, "setup_logging", lambda **kw: tmp_path / "todoterm.log")


def test_help_lists_options() -> None:
    result = CliRunner().invoke(main_mod.main, ["--help"])

    assert result.exit_code == 0
    assert "--daemon" in result.output
    assert "--db" in result.output


def test_daemon_single_cycle_fires_due_reminder(tmp_path: Path) -> None:
    db = tmp_path / "todo.sqlite3"
    store = TaskStore(db, clock=lambda: 1_000_000)
    task_id = store.create("Buy milk")
    store.set_reminder(task_id, 1_000_100)

    result = CliRunner().invoke(main_mod.main, ["--daemon", "--once", "--db", str(db)])

    assert result.exit_code == 0, result.output
    reminder = store.get(task_id).reminder
    assert reminder.triggered is True
    assert reminder.scheduled_time == 0


def test_default_store_location_is_created(tmp_path: Path) -> None:
    result = CliRunner().invoke(main_mod.main, ["-d", "--once"])

    assert result.exit_code == 0, result.output
    assert (tmp_path / "data" / "todo.sqlite3").exists()


def test_unusable_store_exits_with_1(tmp_path: Path) -> None:
    blocker = tmp_path / "blocker"
    blocker.write_text("a regular file")

    result = CliRunner().invoke(main_mod.main, ["--daemon", "--once", "--db", str(blocker / "todo.sqlite3")])

    assert result.exit_code == 1
    assert "Cannot open task store" in result.output


def test_interactive_mode_needs_a_terminal(tmp_path: Path) -> None:
    result = CliRunner().invoke(main_mod.main, ["--db", str(tmp_path / "todo.sqlite3")])

    assert result.exit_code == 1
