# src/taskflow/tasks/task_store.py

from __future__ import annotations

import contextlib
import logging
import sqlite3
from collections.abc import Callable
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from .task_models import Priority, Task, TaskStatus, User

logger = logging.getLogger(__name__)

# Fields the task-mutation path may change. Anything else is rejected.
UPDATABLE_FIELDS = frozenset(
    {"title", "description", "priority", "status", "due_date", "reminders", "category"}
)


def _utcnow() -> datetime:
    return datetime.now(UTC)


def _to_ts(dt: datetime | None) -> float | None:
    if dt is None:
        return None
    if dt.tzinfo is None:
        # Naive datetimes are treated as UTC.
        dt = dt.replace(tzinfo=UTC)
    return dt.timestamp()


def _from_ts(ts: float | None) -> datetime | None:
    if ts is None:
        return None
    return datetime.fromtimestamp(float(ts), tz=UTC)


class TaskStore:
    """
    SQLite store for users and their tasks.

    The schema is intentionally simple and migration-safe:
    - create tables if missing
    - use PRAGMA table_info to detect missing columns
    - add columns with ALTER TABLE only when needed

    Timestamps are stored as REAL epoch seconds (UTC) and handed out as
    timezone-aware datetimes.

    Thread-safety:
    - each method opens its own SQLite connection
    """

    def __init__(
        self,
        db_path: str | Path = "tasks.sqlite3",
        *,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._db_path = Path(db_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._clock = clock
        self._ensure_schema()
        try:
            total = self.count_tasks()
        except sqlite3.Error:
            total = -1
        logger.info("TaskStore ready db=%s total=%s", self._db_path, total)

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
        conn.execute("PRAGMA foreign_keys=ON")

    def _ensure_schema(self) -> None:
        conn = self._get_conn()
        try:
            cur = conn.cursor()

            cur.execute(
                """
                CREATE TABLE IF NOT EXISTS users (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    name TEXT NOT NULL,
                    email TEXT NOT NULL UNIQUE,
                    created_at REAL NOT NULL
                )
                """
            )
            cur.execute(
                """
                CREATE TABLE IF NOT EXISTS tasks (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    owner_id INTEGER NOT NULL REFERENCES users(id) ON DELETE CASCADE,
                    title TEXT NOT NULL,
                    description TEXT NOT NULL DEFAULT '',
                    priority TEXT NOT NULL DEFAULT 'Medium',
                    status TEXT NOT NULL DEFAULT 'todo',
                    category TEXT NOT NULL DEFAULT 'None',
                    due_date REAL,
                    reminders INTEGER NOT NULL DEFAULT 1,
                    reminder_sent_at REAL,
                    completed_at REAL,
                    created_at REAL NOT NULL,
                    updated_at REAL NOT NULL
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

            add_col("category", "TEXT NOT NULL DEFAULT 'None'")
            add_col("reminders", "INTEGER NOT NULL DEFAULT 1")
            add_col("reminder_sent_at", "REAL")
            add_col("completed_at", "REAL")

            cur.execute("CREATE INDEX IF NOT EXISTS idx_tasks_owner ON tasks(owner_id)")
            cur.execute(
                "CREATE INDEX IF NOT EXISTS idx_tasks_reminder "
                "ON tasks(reminders, reminder_sent_at, due_date)"
            )

            conn.commit()
        finally:
            conn.close()

    @staticmethod
    def _row_to_task(row: sqlite3.Row) -> Task:
        return Task(
            id=int(row["id"]),
            owner_id=int(row["owner_id"]),
            title=str(row["title"] or ""),
            description=str(row["description"] or ""),
            priority=Priority.from_db(row["priority"]),
            status=TaskStatus.from_db(row["status"]),
            category=str(row["category"] or "None"),
            due_date=_from_ts(row["due_date"]),
            reminders=bool(row["reminders"]),
            reminder_sent_at=_from_ts(row["reminder_sent_at"]),
            completed_at=_from_ts(row["completed_at"]),
            created_at=_from_ts(row["created_at"] or 0.0),
            updated_at=_from_ts(row["updated_at"] or 0.0),
        )

    @staticmethod
    def _row_to_user(row: sqlite3.Row) -> User:
        return User(
            id=int(row["id"]),
            name=str(row["name"] or ""),
            email=str(row["email"] or ""),
            created_at=_from_ts(row["created_at"] or 0.0),
        )

    # ---- users ----

    def add_user(self, *, name: str, email: str) -> int:
        if not name or not name.strip():
            raise ValueError("name is required")
        if not email or not email.strip():
            raise ValueError("email is required")

        conn = self._get_conn()
        try:
            cur = conn.cursor()
            cur.execute(
                "INSERT INTO users(name, email, created_at) VALUES (?, ?, ?)",
                (name.strip(), email.strip().lower(), _to_ts(self._clock())),
            )
            conn.commit()
            rowid = cur.lastrowid
            if rowid is None:
                raise RuntimeError("SQLite did not return lastrowid for users insert")
            logger.debug("User added id=%s", rowid)
            return int(rowid)
        finally:
            conn.close()

    def get_user(self, user_id: int) -> User | None:
        conn = self._get_conn()
        try:
            row = conn.execute(
                "SELECT id, name, email, created_at FROM users WHERE id = ?",
                (int(user_id),),
            ).fetchone()
            return self._row_to_user(row) if row else None
        finally:
            conn.close()

    def delete_user(self, user_id: int) -> bool:
        """Delete a user; their tasks go with them (ON DELETE CASCADE)."""
        conn = self._get_conn()
        try:
            cur = conn.execute("DELETE FROM users WHERE id = ?", (int(user_id),))
            conn.commit()
            return cur.rowcount == 1
        finally:
            conn.close()

    # ---- tasks ----

    def count_tasks(self) -> int:
        conn = self._get_conn()
        try:
            cur = conn.cursor()
            cur.execute("SELECT COUNT(*) FROM tasks")
            (n,) = cur.fetchone()
            return int(n)
        finally:
            conn.close()

    def add_task(
        self,
        *,
        owner_id: int,
        title: str,
        description: str = "",
        priority: Priority = Priority.MEDIUM,
        status: TaskStatus = TaskStatus.TODO,
        category: str = "None",
        due_date: datetime | None = None,
        reminders: bool = True,
    ) -> int:
        if not title or not title.strip():
            raise ValueError("title is required")

        now_ts = _to_ts(self._clock())
        completed_ts = now_ts if TaskStatus(status) == TaskStatus.COMPLETED else None

        conn = self._get_conn()
        try:
            cur = conn.cursor()
            cur.execute(
                """
                INSERT INTO tasks(
                    owner_id, title, description, priority, status, category,
                    due_date, reminders, reminder_sent_at, completed_at,
                    created_at, updated_at
                )
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, NULL, ?, ?, ?)
                """,
                (
                    int(owner_id),
                    title.strip(),
                    (description or "").strip(),
                    Priority(priority).value,
                    TaskStatus(status).value,
                    category or "None",
                    _to_ts(due_date),
                    1 if reminders else 0,
                    completed_ts,
                    now_ts,
                    now_ts,
                ),
            )
            conn.commit()
            rowid = cur.lastrowid
            if rowid is None:
                raise RuntimeError("SQLite did not return lastrowid for tasks insert")
            task_id = int(rowid)
            logger.debug(
                "Task added id=%s owner=%s status=%s due_date=%s",
                task_id,
                owner_id,
                TaskStatus(status).value,
                due_date,
            )
            return task_id
        finally:
            conn.close()

    def get_task(self, task_id: int) -> Task | None:
        conn = self._get_conn()
        try:
            row = conn.execute("SELECT * FROM tasks WHERE id = ?", (int(task_id),)).fetchone()
            return self._row_to_task(row) if row else None
        finally:
            conn.close()

    def delete_task(self, task_id: int) -> bool:
        conn = self._get_conn()
        try:
            cur = conn.execute("DELETE FROM tasks WHERE id = ?", (int(task_id),))
            conn.commit()
            return cur.rowcount == 1
        finally:
            conn.close()

    def update_task(self, task_id: int, **changes: Any) -> Task | None:
        """
        Apply user edits to a task.

        Rules:
        - status=completed stamps completed_at; any other status clears it
        - touching due_date (new value, same value, or None) clears
          reminder_sent_at so the task is re-armed for its new due date

        Returns the updated task, or None if it does not exist.
        """
        unknown = set(changes) - UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"cannot update fields: {', '.join(sorted(unknown))}")
        if not changes:
            raise ValueError("nothing to update")

        now_ts = _to_ts(self._clock())
        fields: list[str] = []
        params: list[Any] = []

        if "title" in changes:
            title = changes["title"]
            if not title or not str(title).strip():
                raise ValueError("title is required")
            fields.append("title = ?")
            params.append(str(title).strip())

        if "description" in changes:
            fields.append("description = ?")
            params.append(str(changes["description"] or "").strip())

        if "priority" in changes:
            fields.append("priority = ?")
            params.append(Priority(changes["priority"]).value)

        if "category" in changes:
            fields.append("category = ?")
            params.append(changes["category"] or "None")

        if "reminders" in changes:
            fields.append("reminders = ?")
            params.append(1 if changes["reminders"] else 0)

        if "status" in changes:
            status = TaskStatus(changes["status"])
            fields.append("status = ?")
            params.append(status.value)
            fields.append("completed_at = ?")
            params.append(now_ts if status == TaskStatus.COMPLETED else None)

        if "due_date" in changes:
            fields.append("due_date = ?")
            params.append(_to_ts(changes["due_date"]))
            fields.append("reminder_sent_at = NULL")

        fields.append("updated_at = ?")
        params.append(now_ts)
        params.append(int(task_id))

        sql = f"UPDATE tasks SET {', '.join(fields)} WHERE id = ?"

        conn = self._get_conn()
        try:
            cur = conn.execute(sql, params)
            conn.commit()
            if cur.rowcount != 1:
                return None
        finally:
            conn.close()

        if "due_date" in changes:
            logger.debug("Task %s due_date changed; reminder re-armed", task_id)
        return self.get_task(task_id)

    def toggle_complete(self, task_id: int) -> Task | None:
        task = self.get_task(task_id)
        if task is None:
            return None
        new_status = TaskStatus.TODO if task.status == TaskStatus.COMPLETED else TaskStatus.COMPLETED
        return self.update_task(task_id, status=new_status)

    # ---- reminder queries ----

    def find_due_candidates(self, *, now: datetime, deadline: datetime) -> list[Task]:
        """
        Tasks owed a reminder in the window [now, deadline] (both ends inclusive):
        reminders on, not completed, due date set and inside the window,
        no reminder sent yet for this due date.
        """
        conn = self._get_conn()
        try:
            cur = conn.cursor()
            cur.execute(
                """
                SELECT *
                FROM tasks
                WHERE reminders = 1
                  AND status != 'completed'
                  AND due_date IS NOT NULL
                  AND due_date >= ?
                  AND due_date <= ?
                  AND reminder_sent_at IS NULL
                ORDER BY due_date ASC, id ASC
                """,
                (_to_ts(now), _to_ts(deadline)),
            )
            return [self._row_to_task(r) for r in cur.fetchall()]
        finally:
            conn.close()

    def find_owner(self, owner_id: int) -> User | None:
        return self.get_user(owner_id)

    def mark_reminder_sent(self, task_id: int, sent_at: datetime) -> None:
        conn = self._get_conn()
        try:
            conn.execute(
                "UPDATE tasks SET reminder_sent_at = ?, updated_at = ? WHERE id = ?",
                (_to_ts(sent_at), _to_ts(self._clock()), int(task_id)),
            )
            conn.commit()
        finally:
            conn.close()
