# src/todoterm/cli/main.py

"""
CLI entrypoint.

Initializes logging, opens the task store, then runs either:
- the interactive terminal UI (default), or
- the reminder firing loop (--daemon), until the process is stopped.

Exit codes: 0 on normal quit, 1 when the store cannot be opened at startup.
"""

from __future__ import annotations

import asyncio
import contextlib
import dataclasses
import logging
import signal
import sys
import time
from pathlib import Path

import click

from ..config import Settings, get_settings
from ..core.errors import StorageUnavailable
from ..core.state import AppState
from ..logging_setup import setup_logging
from ..tasks.firing_loop import run_firing_cycle, run_firing_loop
from .bootstrap import create_initial_state, create_notifier

logger = logging.getLogger(__name__)


async def _serve_daemon(state: AppState) -> None:
    settings = state.settings
    notifier = create_notifier(settings)

    # SIGINT/SIGTERM cancel the loop so the process exits cleanly.
    loop = asyncio.get_running_loop()
    current = asyncio.current_task()
    if current is not None:
        for sig in (signal.SIGINT, signal.SIGTERM):
            with contextlib.suppress(NotImplementedError, RuntimeError):
                loop.add_signal_handler(sig, current.cancel)

    try:
        await run_firing_loop(
            state.task_store,
            notifier,
            interval_seconds=settings.poll_interval_seconds,
            title=settings.notify_title,
        )
    except asyncio.CancelledError:
        logger.info("Stop requested, shutting down...")


def run_daemon(state: AppState, *, once: bool = False) -> int:
    if once:
        fired = asyncio.run(
            run_firing_cycle(
                state.task_store,
                create_notifier(state.settings),
                now=time.time(),
                title=state.settings.notify_title,
            )
        )
        logger.info("Single cycle done, fired=%s", fired)
        return 0

    try:
        asyncio.run(_serve_daemon(state))
    except KeyboardInterrupt:
        logger.info("KeyboardInterrupt, shutting down...")
    return 0


def _configure_logging(settings: Settings, *, daemon: bool) -> None:
    console_level = getattr(logging, settings.log_level.upper(), logging.INFO)
    setup_logging(
        log_dir=settings.log_dir,
        log_name="todoterm-daemon.log" if daemon else "todoterm.log",
        console=daemon,
        console_level=console_level,
    )


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.option("-d", "--daemon", is_flag=True, help="Run the reminder firing loop instead of the UI.")
@click.option("--once", is_flag=True, help="With --daemon: run a single firing cycle and exit.")
@click.option(
    "--db",
    "db_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Task store location (overrides TODOTERM_DB_PATH).",
)
def main(daemon: bool, once: bool, db_path: Path | None) -> None:
    """Terminal task manager with desktop reminders."""
    settings = get_settings()
    if db_path is not None:
        settings = dataclasses.replace(settings, db_path=db_path.expanduser())

    try:
        _configure_logging(settings, daemon=daemon)
    except OSError as e:
        click.echo(f"Cannot set up logging in {settings.log_dir}: {e}", err=True)
        sys.exit(1)

    logger.info("Starting %s (%s)...", settings.app_name, "daemon" if daemon else "interactive")

    try:
        state = create_initial_state(settings=settings)
    except StorageUnavailable as e:
        logger.error("Startup failed: %s", e)
        click.echo(f"Cannot open task store: {e}", err=True)
        sys.exit(1)

    if daemon:
        code = run_daemon(state, once=once)
    else:
        from ..ui.app import run_interactive

        code = run_interactive(state)

    logger.info("Bye.")
    sys.exit(code)


if __name__ == "__main__":
    main()
