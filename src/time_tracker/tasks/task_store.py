# src/time_tracker/tasks/task_store.py

from __future__ import annotations

import contextlib
import logging
import sqlite3
import uuid
from collections.abc import Iterable, Iterator
from pathlib import Path

from .task_models import Task, TaskStatus

logger = logging.getLogger(__name__)


class StorageError(Exception):
    """The underlying database failed (connectivity, constraint, disk...)."""


class TaskStore:
    """
    SQLite task store.

    The schema is intentionally simple and migration-safe:
    - create table if missing
    - use PRAGMA table_info to detect missing columns
    - add columns with ALTER TABLE only when needed

    Status changes are conditional (WHERE status IN ...): zero affected rows
    means "precondition not met" and is reported as False, not raised.
    Every sqlite3.Error is re-raised as StorageError.

    Thread-safety:
    - each method opens its own SQLite connection
    """

    def __init__(self, db_path: str | Path = "tasks.sqlite3") -> None:
        self._db_path = Path(db_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._ensure_schema()
        try:
            total = self.count_tasks()
        except StorageError:
            total = -1
        logger.info("TaskStore ready db=%s total=%s", self._db_path, total)

    @property
    def db_path(self) -> Path:
        return self._db_path

    def close(self) -> None:
        """Compatibility hook for shutdown (no persistent connections to close)."""
        return

    # ---- low-level helpers ----

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self._db_path), timeout=30.0)
        conn.row_factory = sqlite3.Row
        self._configure_conn(conn)
        return conn

    @staticmethod
    def _configure_conn(conn: sqlite3.Connection) -> None:
        with contextlib.suppress(sqlite3.Error):
            conn.execute("PRAGMA journal_mode=WAL")

    @contextlib.contextmanager
    def _connect(self, op: str) -> Iterator[sqlite3.Connection]:
        try:
            conn = self._get_conn()
        except sqlite3.Error as e:
            raise StorageError(f"{op}: cannot open {self._db_path}: {e}") from e
        try:
            yield conn
        except sqlite3.Error as e:
            with contextlib.suppress(sqlite3.Error):
                conn.rollback()
            raise StorageError(f"{op} failed: {e}") from e
        finally:
            conn.close()

    def _ensure_schema(self) -> None:
        with self._connect("ensure_schema") as conn:
            cur = conn.cursor()

            cur.execute(
                """
                CREATE TABLE IF NOT EXISTS tasks (
                    id TEXT PRIMARY KEY,
                    name TEXT NOT NULL,
                    start_time REAL NOT NULL,
                    stop_time REAL,
                    status TEXT NOT NULL DEFAULT 'active'
                )
                """
            )

            # Migrations (safe): add missing columns.
            cur.execute("PRAGMA table_info(tasks)")
            cols = {row["name"] for row in cur.fetchall()}

            def add_col(name: str, decl: str) -> None:
                if name in cols:
                    return
                cur.execute(f"ALTER TABLE tasks ADD COLUMN {name} {decl}")
                logger.info("TaskStore migration: added column %s", name)

            add_col("stop_time", "REAL")
            add_col("status", "TEXT NOT NULL DEFAULT 'active'")

            cur.execute("CREATE INDEX IF NOT EXISTS idx_tasks_status ON tasks(status)")

            conn.commit()

    @staticmethod
    def _row_to_task(row: sqlite3.Row) -> Task:
        return Task(
            id=str(row["id"]),
            name=str(row["name"]),
            status=TaskStatus.from_db(row["status"]),
            start_time=float(row["start_time"]),
            stop_time=float(row["stop_time"]) if row["stop_time"] is not None else None,
        )

    @staticmethod
    def _status_values(expected: TaskStatus | Iterable[TaskStatus]) -> list[str]:
        if isinstance(expected, TaskStatus):
            return [expected.value]
        return [TaskStatus(e).value for e in expected]

    # ---- public API ----

    def count_tasks(self) -> int:
        with self._connect("count_tasks") as conn:
            (n,) = conn.execute("SELECT COUNT(*) FROM tasks").fetchone()
            return int(n)

    def add_task(
        self,
        *,
        name: str,
        start_time: float,
        status: TaskStatus = TaskStatus.ACTIVE,
    ) -> str:
        if not name or not name.strip():
            raise ValueError("name is required")

        task_id = uuid.uuid4().hex

        with self._connect("add_task") as conn:
            conn.execute(
                """
                INSERT INTO tasks(id, name, start_time, stop_time, status)
                VALUES (?, ?, ?, NULL, ?)
                """,
                (task_id, name.strip(), float(start_time), status.value),
            )
            conn.commit()

        logger.debug("Task added id=%s status=%s", task_id, status.value)
        return task_id

    def list_tasks(self) -> list[Task]:
        with self._connect("list_tasks") as conn:
            rows = conn.execute("SELECT * FROM tasks ORDER BY start_time ASC, id ASC").fetchall()
            return [self._row_to_task(r) for r in rows]

    def get_task(self, task_id: str) -> Task | None:
        with self._connect("get_task") as conn:
            row = conn.execute("SELECT * FROM tasks WHERE id = ?", (str(task_id),)).fetchone()
            return self._row_to_task(row) if row else None

    def exists(self, task_id: str) -> bool:
        with self._connect("exists") as conn:
            row = conn.execute("SELECT 1 FROM tasks WHERE id = ?", (str(task_id),)).fetchone()
            return row is not None

    def update_name(self, task_id: str, name: str) -> bool:
        if not name or not name.strip():
            raise ValueError("name is required")

        with self._connect("update_name") as conn:
            cur = conn.execute(
                "UPDATE tasks SET name = ? WHERE id = ?",
                (name.strip(), str(task_id)),
            )
            conn.commit()
            changed = cur.rowcount == 1

        logger.debug("Task renamed id=%s changed=%s", task_id, changed)
        return changed

    def update_status_and_stop_time(
        self,
        task_id: str,
        status: TaskStatus,
        *,
        stop_time: float,
        expected: TaskStatus | Iterable[TaskStatus],
    ) -> bool:
        """
        Atomically transitions:
          status IN expected -> status = <status>, stop_time = <stop_time>

        Returns True if the row was updated.
        """
        exp = self._status_values(expected)
        if not exp:
            return False

        placeholders = ",".join("?" for _ in exp)
        with self._connect("update_status_and_stop_time") as conn:
            cur = conn.execute(
                f"""
                UPDATE tasks
                SET status = ?, stop_time = ?
                WHERE id = ?
                  AND status IN ({placeholders})
                """,
                (status.value, float(stop_time), str(task_id), *exp),
            )
            conn.commit()
            changed = cur.rowcount == 1

        logger.debug("Task id=%s -> %s (stop_time set) changed=%s", task_id, status.value, changed)
        return changed

    def update_status(
        self,
        task_id: str,
        status: TaskStatus,
        *,
        expected: TaskStatus | Iterable[TaskStatus],
        stop_time: float | None = None,
    ) -> bool:
        """
        Atomically transitions:
          status IN expected -> status = <status>

        An earlier stop keeps its freeze point: stop_time is only written when
        the row has none yet. A task finished straight from ACTIVE always takes
        the new stop_time; a leftover value on an active row is ignored, as
        get_duration ignores it.
        """
        exp = self._status_values(expected)
        if not exp:
            return False

        placeholders = ",".join("?" for _ in exp)
        with self._connect("update_status") as conn:
            cur = conn.execute(
                f"""
                UPDATE tasks
                SET status = ?,
                    stop_time = CASE
                        WHEN status = 'active' THEN COALESCE(?, stop_time)
                        ELSE COALESCE(stop_time, ?)
                    END
                WHERE id = ?
                  AND status IN ({placeholders})
                """,
                (status.value, stop_time, stop_time, str(task_id), *exp),
            )
            conn.commit()
            changed = cur.rowcount == 1

        logger.debug("Task id=%s -> %s changed=%s", task_id, status.value, changed)
        return changed

    def delete_task(self, task_id: str) -> bool:
        with self._connect("delete_task") as conn:
            cur = conn.execute("DELETE FROM tasks WHERE id = ?", (str(task_id),))
            conn.commit()
            changed = cur.rowcount == 1

        logger.debug("Task deleted id=%s changed=%s", task_id, changed)
        return changed
