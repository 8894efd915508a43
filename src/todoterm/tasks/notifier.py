# src/todoterm/tasks/notifier.py

from __future__ import annotations

import asyncio
import contextlib
import logging
import shlex

from ..core.errors import NotifierInvocationFailed

logger = logging.getLogger(__name__)


class DesktopNotifier:
    """
    Runs an external notification command: `<command...> <title> <message>`.

    The default command is notify-send. Arguments are passed as argv (no shell),
    so the message needs no quoting.
    """

    def __init__(self, command: str = "notify-send", *, timeout_seconds: float = 10.0) -> None:
        argv = shlex.split(command or "")
        if not argv:
            raise ValueError("notification command is empty")
        self._argv = argv
        self._timeout = max(0.5, float(timeout_seconds))

    @property
    def argv(self) -> list[str]:
        return list(self._argv)

    async def notify(self, *, title: str, message: str) -> None:
        try:
            proc = await asyncio.create_subprocess_exec(
                *self._argv,
                title,
                message,
                stdout=asyncio.subprocess.DEVNULL,
                stderr=asyncio.subprocess.PIPE,
            )
        except (OSError, ValueError) as e:
            # ValueError: arguments the OS cannot pass, e.g. an embedded NUL.
            raise NotifierInvocationFailed(f"cannot run {self._argv[0]!r}: {e}") from e

        try:
            _, stderr = await asyncio.wait_for(proc.communicate(), timeout=self._timeout)
        except asyncio.TimeoutError:
            with contextlib.suppress(ProcessLookupError):
                proc.kill()
            await proc.wait()
            raise NotifierInvocationFailed(
                f"{self._argv[0]!r} did not finish within {self._timeout:.1f}s"
            ) from None

        if proc.returncode != 0:
            detail = (stderr or b"").decode("utf-8", errors="replace").strip()
            raise NotifierInvocationFailed(
                f"{self._argv[0]!r} exited with status {proc.returncode}: {detail}"
            )
        logger.debug("Notification delivered via %s title=%r", self._argv[0], title)
