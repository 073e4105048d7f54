# src/taskboard/gateways/sqlite_gateway.py

from __future__ import annotations

import asyncio
import contextlib
import logging
import sqlite3
import uuid
from pathlib import Path

from ..core.dates import parse_timestamp, to_iso, utc_now
from ..core.errors import ErrorKind, Failure, Ok, classify_exception
from ..tasks.task_models import Task, TaskPatch, TaskStatus

logger = logging.getLogger(__name__)


class SqliteTaskGateway:
    """
    SQLite-backed task repository.

    The schema is intentionally simple and migration-safe:
    - create table if missing
    - use PRAGMA table_info to detect missing columns
    - add columns with ALTER TABLE only when needed

    Thread-safety:
    - each call opens its own SQLite connection
    - blocking work runs in a worker thread (asyncio.to_thread)
    """

    def __init__(self, db_path: str | Path = "tasks.sqlite3", *, timeout_seconds: float = 30.0) -> None:
        self._db_path = Path(db_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._timeout = float(timeout_seconds)
        self._ensure_schema()
        try:
            total = self.count_tasks()
        except sqlite3.Error:
            total = -1
        logger.info("SqliteTaskGateway ready db=%s total=%s", self._db_path, total)

    # ---- low-level helpers ----

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self._db_path), timeout=self._timeout)
        conn.row_factory = sqlite3.Row
        self._configure_conn(conn)
        return conn

    @staticmethod
    def _configure_conn(conn: sqlite3.Connection) -> None:
        with contextlib.suppress(sqlite3.Error):
            conn.execute("PRAGMA journal_mode=WAL")

    def _ensure_schema(self) -> None:
        conn = self._get_conn()
        try:
            cur = conn.cursor()

            cur.execute(
                """
                CREATE TABLE IF NOT EXISTS tasks (
                    id TEXT PRIMARY KEY,
                    title TEXT NOT NULL CHECK (length(trim(title)) > 0),
                    description TEXT NOT NULL DEFAULT '',
                    status TEXT NOT NULL DEFAULT 'pending',
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL
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
                logger.info("SqliteTaskGateway migration: added column %s", name)

            add_col("description", "TEXT NOT NULL DEFAULT ''")
            add_col("status", "TEXT NOT NULL DEFAULT 'pending'")
            add_col("created_at", "TEXT NOT NULL DEFAULT '1970-01-01T00:00:00+00:00'")
            add_col("updated_at", "TEXT NOT NULL DEFAULT '1970-01-01T00:00:00+00:00'")

            cur.execute("CREATE INDEX IF NOT EXISTS idx_tasks_created ON tasks(created_at)")
            cur.execute("CREATE INDEX IF NOT EXISTS idx_tasks_status ON tasks(status)")

            conn.commit()
        finally:
            conn.close()

    @staticmethod
    def _row_to_task(row: sqlite3.Row) -> Task:
        created_at = parse_timestamp(row["created_at"]) or utc_now()
        return Task(
            id=str(row["id"]),
            title=str(row["title"] or ""),
            description=str(row["description"] or ""),
            status=TaskStatus.from_db(row["status"]),
            created_at=created_at,
            updated_at=parse_timestamp(row["updated_at"]) or created_at,
        )

    # ---- sync implementation ----

    def count_tasks(self) -> int:
        conn = self._get_conn()
        try:
            cur = conn.cursor()
            cur.execute("SELECT COUNT(*) FROM tasks")
            (n,) = cur.fetchone()
            return int(n)
        finally:
            conn.close()

    def _list_sync(self) -> list[Task]:
        conn = self._get_conn()
        try:
            cur = conn.cursor()
            cur.execute("SELECT * FROM tasks ORDER BY created_at DESC, rowid ASC")
            return [self._row_to_task(r) for r in cur.fetchall()]
        finally:
            conn.close()

    def _insert_sync(self, title: str, description: str, status: TaskStatus) -> str:
        now = to_iso(utc_now())
        task_id = str(uuid.uuid4())
        conn = self._get_conn()
        try:
            conn.execute(
                """
                INSERT INTO tasks(id, title, description, status, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (task_id, title, description, status.value, now, now),
            )
            conn.commit()
            logger.debug("Task inserted id=%s status=%s", task_id, status.value)
            return task_id
        finally:
            conn.close()

    def _update_sync(self, task_id: str, patch: TaskPatch) -> int:
        fields = patch.as_fields()
        assignments = [f"{name} = ?" for name in fields]
        params: list[object] = list(fields.values())

        assignments.append("updated_at = ?")
        params.append(to_iso(utc_now()))
        params.append(task_id)

        sql = f"UPDATE tasks SET {', '.join(assignments)} WHERE id = ?"

        conn = self._get_conn()
        try:
            cur = conn.execute(sql, params)
            conn.commit()
            return cur.rowcount
        finally:
            conn.close()

    def _delete_sync(self, task_id: str) -> int:
        conn = self._get_conn()
        try:
            cur = conn.execute("DELETE FROM tasks WHERE id = ?", (task_id,))
            conn.commit()
            return cur.rowcount
        finally:
            conn.close()

    # ---- TaskGateway ----

    async def list_tasks(self) -> Ok[list[Task]] | Failure:
        try:
            return Ok(await asyncio.to_thread(self._list_sync))
        except sqlite3.Error as e:
            logger.warning("sqlite list failed: %s", e)
            return classify_exception(e)

    async def create_task(
        self,
        *,
        title: str,
        description: str,
        status: TaskStatus = TaskStatus.PENDING,
    ) -> Ok[None] | Failure:
        try:
            await asyncio.to_thread(self._insert_sync, title, description, status)
        except sqlite3.Error as e:
            logger.warning("sqlite insert failed: %s", e)
            return classify_exception(e)
        return Ok()

    async def update_task(self, task_id: str, patch: TaskPatch) -> Ok[None] | Failure:
        if patch.is_empty():
            return Failure.validation("Nothing to update")
        try:
            changed = await asyncio.to_thread(self._update_sync, task_id, patch)
        except sqlite3.Error as e:
            logger.warning("sqlite update failed id=%s: %s", task_id, e)
            return classify_exception(e)
        if changed == 0:
            return Failure.of(ErrorKind.NOT_FOUND)
        return Ok()

    async def delete_task(self, task_id: str) -> Ok[None] | Failure:
        try:
            changed = await asyncio.to_thread(self._delete_sync, task_id)
        except sqlite3.Error as e:
            logger.warning("sqlite delete failed id=%s: %s", task_id, e)
            return classify_exception(e)
        if changed == 0:
            return Failure.of(ErrorKind.NOT_FOUND)
        return Ok()

    async def aclose(self) -> None:
        """Compatibility hook for shutdown (no persistent connections to close)."""
        return
