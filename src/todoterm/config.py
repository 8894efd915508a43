# src/todoterm/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app, shared by the UI and the daemon.
- The store location is resolved once, at startup.
- Malformed values fall back to defaults instead of aborting startup.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

ENV_PREFIX = "TODOTERM"


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


def default_data_dir() -> Path:
    return Path.home() / ".local" / "share" / "todoterm"


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str

    # ---- Local data paths ----
    data_dir: Path
    db_path: Path
    log_dir: Path

    # ---- Firing loop / notifier ----
    poll_interval_seconds: float
    notify_command: str
    notify_title: str
    notify_timeout_seconds: float

    # ---- Interactive UI ----
    page_step: int
    refresh_interval_seconds: float

    @staticmethod
    def from_env() -> "Settings":
        app_name = _env(_k("APP_NAME"), "todoterm").strip() or "todoterm"
        log_level = _env(_k("LOG_LEVEL"), "INFO").strip().upper() or "INFO"

        data_dir = _env_path(_k("DATA_DIR"), default_data_dir())
        db_path = _env_path(_k("DB_PATH"), data_dir / "todo.sqlite3")
        log_dir = _env_path(_k("LOG_DIR"), data_dir)

        poll_interval_seconds = max(1.0, _env_float(_k("POLL_INTERVAL"), 15.0))
        notify_command = _env(_k("NOTIFY_COMMAND"), "notify-send").strip() or "notify-send"
        notify_title = _env(_k("NOTIFY_TITLE"), "TODO")
        notify_timeout_seconds = max(0.5, _env_float(_k("NOTIFY_TIMEOUT"), 10.0))

        page_step = max(1, _env_int(_k("PAGE_STEP"), 10))
        refresh_interval_seconds = max(0.5, _env_float(_k("REFRESH_INTERVAL"), 5.0))

        return Settings(
            app_name=app_name,
            log_level=log_level,
            data_dir=data_dir,
            db_path=db_path,
            log_dir=log_dir,
            poll_interval_seconds=poll_interval_seconds,
            notify_command=notify_command,
            notify_title=notify_title,
            notify_timeout_seconds=notify_timeout_seconds,
            page_step=page_step,
            refresh_interval_seconds=refresh_interval_seconds,
        )


_SETTINGS: Settings | None = None


def get_settings() -> Settings:
    """Load .env (without overriding the real environment) and build Settings once."""
    global _SETTINGS
    if _SETTINGS is None:
        load_dotenv(override=False)
        _SETTINGS = Settings.from_env()
    return _SETTINGS
