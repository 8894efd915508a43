# src/todoterm/tasks/task_store.py

from __future__ import annotations

import contextlib
import logging
import sqlite3
import time
from collections.abc import Callable, Iterator
from pathlib import Path

from ..core.errors import NotFound, StorageUnavailable, ValidationError
from .reminder_scheduler import clamp_repeat
from .task_models import ALL_CATEGORIES, Reminder, ReminderState, Task

logger = logging.getLogger(__name__)

_TASK_COLUMNS = "t.id, t.created_at, t.updated_at, t.completed_at, t.completed, t.text, t.category"
_REMINDER_COLUMNS = (
    "r.id AS r_id, r.task_id AS r_task_id, r.scheduled_time AS r_scheduled_time, "
    "r.triggered AS r_triggered, r.repeat_interval AS r_repeat_interval, "
    "r.message AS r_message, r.created_at AS r_created_at, r.active AS r_active"
)


class TaskStore:
    """
    SQLite task + reminder store shared by the interactive program and the daemon.

    Concurrency:
    - each method opens its own short-lived connection
    - every mutation runs inside BEGIN IMMEDIATE, so writers from both processes
      are serialized by SQLite's file lock
    - reads are single statements and see a consistent snapshot

    Reminders live in their own table. At most one row per task is active;
    replaced reminders are kept inactive as history.
    """

    def __init__(
        self,
        db_path: str | Path = "todo.sqlite3",
        *,
        timeout: float = 10.0,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._db_path = Path(db_path)
        self._timeout = float(timeout)
        self._clock = clock
        try:
            self._db_path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageUnavailable(f"cannot create store directory {self._db_path.parent}: {e}") from e
        self._ensure_schema()
        logger.info("TaskStore ready db=%s total=%s", self._db_path, self.count_tasks())

    @property
    def db_path(self) -> Path:
        return self._db_path

    # ---- low-level helpers ----

    def _now(self) -> int:
        return int(self._clock())

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self._db_path), timeout=self._timeout, isolation_level=None)
        conn.row_factory = sqlite3.Row
        self._configure_conn(conn)
        return conn

    @staticmethod
    def _configure_conn(conn: sqlite3.Connection) -> None:
        with contextlib.suppress(sqlite3.Error):
            conn.execute("PRAGMA journal_mode=WAL")
        conn.execute("PRAGMA foreign_keys=ON")

    @contextlib.contextmanager
    def _session(self, *, write: bool = False) -> Iterator[sqlite3.Connection]:
        """Open a connection; for writes, wrap the body in one IMMEDIATE transaction."""
        try:
            conn = self._get_conn()
        except (sqlite3.Error, OSError) as e:
            raise StorageUnavailable(f"cannot open task store {self._db_path}: {e}") from e

        try:
            if write:
                conn.execute("BEGIN IMMEDIATE")
            yield conn
            if write:
                conn.execute("COMMIT")
        except (sqlite3.Error, OSError) as e:
            self._rollback(conn)
            raise StorageUnavailable(f"task store {self._db_path} failed: {e}") from e
        except BaseException:
            self._rollback(conn)
            raise
        finally:
            conn.close()

    @staticmethod
    def _rollback(conn: sqlite3.Connection) -> None:
        if conn.in_transaction:
            with contextlib.suppress(sqlite3.Error):
                conn.execute("ROLLBACK")

    def _ensure_schema(self) -> None:
        with self._session(write=True) as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS tasks (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    created_at INTEGER NOT NULL,
                    updated_at INTEGER NOT NULL,
                    completed_at INTEGER,
                    completed INTEGER NOT NULL DEFAULT 0,
                    text TEXT NOT NULL,
                    category TEXT NOT NULL DEFAULT ''
                )
                """
            )
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS reminders (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    task_id INTEGER NOT NULL REFERENCES tasks(id) ON DELETE CASCADE,
                    scheduled_time INTEGER NOT NULL DEFAULT 0,
                    triggered INTEGER NOT NULL DEFAULT 0,
                    repeat_interval INTEGER NOT NULL DEFAULT 0,
                    message TEXT NOT NULL DEFAULT '',
                    created_at INTEGER NOT NULL DEFAULT 0,
                    active INTEGER NOT NULL DEFAULT 1
                )
                """
            )

            # Migrations (safe): add missing columns to databases created by older versions.
            def add_col(table: str, name: str, decl: str) -> None:
                cols = {row["name"] for row in conn.execute(f"PRAGMA table_info({table})")}
                if name in cols:
                    return
                conn.execute(f"ALTER TABLE {table} ADD COLUMN {name} {decl}")
                logger.info("TaskStore migration: added column %s.%s", table, name)

            add_col("tasks", "updated_at", "INTEGER NOT NULL DEFAULT 0")
            add_col("tasks", "completed_at", "INTEGER")
            add_col("tasks", "category", "TEXT NOT NULL DEFAULT ''")
            add_col("reminders", "repeat_interval", "INTEGER NOT NULL DEFAULT 0")
            add_col("reminders", "message", "TEXT NOT NULL DEFAULT ''")
            add_col("reminders", "created_at", "INTEGER NOT NULL DEFAULT 0")
            add_col("reminders", "active", "INTEGER NOT NULL DEFAULT 1")

            conn.execute("CREATE INDEX IF NOT EXISTS idx_tasks_partition ON tasks(completed, created_at, id)")
            conn.execute(
                "CREATE UNIQUE INDEX IF NOT EXISTS idx_reminders_one_active "
                "ON reminders(task_id) WHERE active = 1"
            )
            conn.execute(
                "CREATE INDEX IF NOT EXISTS idx_reminders_due ON reminders(active, scheduled_time)"
            )

    @staticmethod
    def _row_to_reminder(row: sqlite3.Row, prefix: str = "") -> Reminder:
        return Reminder(
            id=int(row[f"{prefix}id"]),
            task_id=int(row[f"{prefix}task_id"]),
            scheduled_time=int(row[f"{prefix}scheduled_time"] or 0),
            triggered=bool(row[f"{prefix}triggered"]),
            repeat_interval=int(row[f"{prefix}repeat_interval"] or 0),
            message=str(row[f"{prefix}message"] or ""),
            created_at=int(row[f"{prefix}created_at"] or 0),
            active=bool(row[f"{prefix}active"]),
        )

    def _row_to_task(self, row: sqlite3.Row) -> Task:
        reminder = None
        if row["r_id"] is not None:
            reminder = self._row_to_reminder(row, prefix="r_")
        return Task(
            id=int(row["id"]),
            text=str(row["text"] or ""),
            category=str(row["category"] or ""),
            created_at=int(row["created_at"] or 0),
            updated_at=int(row["updated_at"] or 0),
            completed=bool(row["completed"]),
            completed_at=int(row["completed_at"]) if row["completed_at"] is not None else None,
            reminder=reminder,
        )

    @staticmethod
    def _require_task(conn: sqlite3.Connection, task_id: int) -> sqlite3.Row:
        row = conn.execute("SELECT id, text FROM tasks WHERE id = ?", (int(task_id),)).fetchone()
        if row is None:
            raise NotFound(task_id)
        return row

    @staticmethod
    def _clean_text(text: str) -> str:
        cleaned = (text or "").strip()
        if not cleaned:
            raise ValidationError("task text must not be empty")
        return cleaned

    @staticmethod
    def _clean_category(category: str) -> str:
        cleaned = (category or "").strip()
        if cleaned == ALL_CATEGORIES:
            raise ValidationError(f"{ALL_CATEGORIES!r} is reserved for the category filter")
        return cleaned

    # ---- public API ----

    def count_tasks(self) -> int:
        with self._session() as conn:
            (n,) = conn.execute("SELECT COUNT(*) FROM tasks").fetchone()
            return int(n)

    def count(self, completed: bool) -> int:
        with self._session() as conn:
            (n,) = conn.execute(
                "SELECT COUNT(*) FROM tasks WHERE completed = ?", (int(bool(completed)),)
            ).fetchone()
            return int(n)

    def create(self, text: str, category: str = "") -> int:
        cleaned = self._clean_text(text)
        cleaned_category = self._clean_category(category)
        now = self._now()
        with self._session(write=True) as conn:
            cur = conn.execute(
                """
                INSERT INTO tasks(created_at, updated_at, completed_at, completed, text, category)
                VALUES (?, ?, NULL, 0, ?, ?)
                """,
                (now, now, cleaned, cleaned_category),
            )
            rowid = cur.lastrowid
        if rowid is None:
            raise StorageUnavailable("SQLite did not return lastrowid for tasks insert")
        task_id = int(rowid)
        logger.debug("Task created id=%s category=%r", task_id, category)
        return task_id

    def get(self, task_id: int) -> Task:
        with self._session() as conn:
            row = conn.execute(
                f"""
                SELECT {_TASK_COLUMNS}, {_REMINDER_COLUMNS}
                FROM tasks t
                LEFT JOIN reminders r ON r.task_id = t.id AND r.active = 1
                WHERE t.id = ?
                """,
                (int(task_id),),
            ).fetchone()
        if row is None:
            raise NotFound(task_id)
        return self._row_to_task(row)

    def update_text(self, task_id: int, text: str) -> None:
        cleaned = self._clean_text(text)
        with self._session(write=True) as conn:
            cur = conn.execute(
                "UPDATE tasks SET text = ?, updated_at = ? WHERE id = ?",
                (cleaned, self._now(), int(task_id)),
            )
            if cur.rowcount == 0:
                raise NotFound(task_id)
        logger.debug("Task text updated id=%s", task_id)

    def update_category(self, task_id: int, category: str) -> None:
        cleaned_category = self._clean_category(category)
        with self._session(write=True) as conn:
            cur = conn.execute(
                "UPDATE tasks SET category = ?, updated_at = ? WHERE id = ?",
                (cleaned_category, self._now(), int(task_id)),
            )
            if cur.rowcount == 0:
                raise NotFound(task_id)
        logger.debug("Task category updated id=%s category=%r", task_id, category)

    def complete(self, task_id: int) -> None:
        """Mark completed. completed_at is only ever set by the first call."""
        with self._session(write=True) as conn:
            cur = conn.execute(
                """
                UPDATE tasks
                SET completed = 1,
                    completed_at = COALESCE(completed_at, ?)
                WHERE id = ?
                """,
                (self._now(), int(task_id)),
            )
            if cur.rowcount == 0:
                raise NotFound(task_id)
        logger.debug("Task completed id=%s", task_id)

    def delete(self, task_id: int) -> None:
        with self._session(write=True) as conn:
            conn.execute("DELETE FROM reminders WHERE task_id = ?", (int(task_id),))
            cur = conn.execute("DELETE FROM tasks WHERE id = ?", (int(task_id),))
            if cur.rowcount == 0:
                raise NotFound(task_id)
        logger.debug("Task deleted id=%s", task_id)

    def set_reminder(
        self,
        task_id: int,
        scheduled_time: int,
        repeat_interval: int = 0,
        message: str | None = None,
    ) -> None:
        """
        Replace the task's reminder wholesale.

        scheduled_time == 0 clears it. The previous reminder (if any) is kept as history.
        message defaults to the task's text.
        """
        scheduled_time = int(scheduled_time)
        if scheduled_time < 0:
            raise ValidationError("scheduled_time must not be negative")
        repeat = clamp_repeat(int(repeat_interval or 0))

        with self._session(write=True) as conn:
            row = self._require_task(conn, task_id)
            conn.execute(
                "UPDATE reminders SET active = 0 WHERE task_id = ? AND active = 1",
                (int(task_id),),
            )
            if scheduled_time:
                conn.execute(
                    """
                    INSERT INTO reminders(
                        task_id, scheduled_time, triggered, repeat_interval, message, created_at, active
                    )
                    VALUES (?, ?, 0, ?, ?, ?, 1)
                    """,
                    (
                        int(task_id),
                        scheduled_time,
                        repeat,
                        (message or "").strip() or str(row["text"]),
                        self._now(),
                    ),
                )
        logger.debug(
            "Reminder set task_id=%s scheduled_time=%s repeat=%s", task_id, scheduled_time, repeat
        )

    def list(self, completed: bool, category_filter: str | None = ALL_CATEGORIES) -> list[Task]:
        """
        Tasks of one partition, oldest first (ties broken by id).

        category_filter None or "All" disables filtering; any other value,
        including "", is an exact match.
        """
        sql = f"""
            SELECT {_TASK_COLUMNS}, {_REMINDER_COLUMNS}
            FROM tasks t
            LEFT JOIN reminders r ON r.task_id = t.id AND r.active = 1
            WHERE t.completed = ?
        """
        params: list[object] = [int(bool(completed))]
        if category_filter is not None and category_filter != ALL_CATEGORIES:
            sql += " AND t.category = ?"
            params.append(category_filter)
        sql += " ORDER BY t.created_at ASC, t.id ASC"

        with self._session() as conn:
            rows = conn.execute(sql, params).fetchall()
        return [self._row_to_task(r) for r in rows]

    def distinct_categories(self, completed: bool) -> set[str]:
        with self._session() as conn:
            rows = conn.execute(
                "SELECT DISTINCT category FROM tasks WHERE completed = ? AND category != ''",
                (int(bool(completed)),),
            ).fetchall()
        return {str(r["category"]) for r in rows}

    def reminder_history(self, task_id: int) -> list[Reminder]:
        """Inactive (replaced or cleared) reminders of a task, oldest first."""
        with self._session() as conn:
            self._require_task(conn, task_id)
            rows = conn.execute(
                """
                SELECT id, task_id, scheduled_time, triggered, repeat_interval, message, created_at, active
                FROM reminders
                WHERE task_id = ? AND active = 0
                ORDER BY id ASC
                """,
                (int(task_id),),
            ).fetchall()
        return [self._row_to_reminder(r) for r in rows]

    # ---- firing loop API ----

    def list_due_reminders(self, now: float) -> list[Reminder]:
        """
        Active reminders whose scheduled_time is set and at or before `now`.

        Rows that cannot be decoded are logged and skipped so one bad record
        does not hide the others.
        """
        with self._session() as conn:
            rows = conn.execute(
                """
                SELECT r.id, r.task_id, r.scheduled_time, r.triggered, r.repeat_interval,
                       r.message, r.created_at, r.active
                FROM reminders r
                JOIN tasks t ON t.id = r.task_id
                WHERE r.active = 1
                  AND r.scheduled_time != 0
                  AND r.scheduled_time <= ?
                ORDER BY r.scheduled_time ASC, r.id ASC
                """,
                (float(now),),
            ).fetchall()

        out: list[Reminder] = []
        for row in rows:
            try:
                out.append(self._row_to_reminder(row))
            except (TypeError, ValueError):
                logger.warning("Skipping malformed reminder row id=%s", row["id"], exc_info=True)
        return out

    def advance_reminder(self, task_id: int, reminder_id: int, next_state: ReminderState) -> None:
        """
        Persist the firing loop's decision.

        Fails with NotFound when the task was deleted or the reminder was replaced
        since it was listed; nothing else is touched in that case.
        """
        with self._session(write=True) as conn:
            cur = conn.execute(
                """
                UPDATE reminders
                SET scheduled_time = ?, triggered = ?
                WHERE id = ?
                  AND task_id = ?
                  AND active = 1
                  AND EXISTS (SELECT 1 FROM tasks WHERE id = ?)
                """,
                (
                    int(next_state.scheduled_time),
                    int(bool(next_state.triggered)),
                    int(reminder_id),
                    int(task_id),
                    int(task_id),
                ),
            )
            if cur.rowcount == 0:
                raise NotFound(task_id, what="reminder for task")
        logger.debug(
            "Reminder advanced id=%s task_id=%s scheduled_time=%s triggered=%s",
            reminder_id,
            task_id,
            next_state.scheduled_time,
            next_state.triggered,
        )
