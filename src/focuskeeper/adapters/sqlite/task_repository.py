"""SQLite implementation of TaskRepository."""

from __future__ import annotations

import sqlite3
import uuid
from datetime import UTC, datetime

from focuskeeper.adapters.sqlite.connection import get_connection
from focuskeeper.adapters.sqlite.focus_repository import translate_errors
from focuskeeper.models import NotFoundError, Task, TaskCreate
from focuskeeper.repositories import TaskRepository


class SqliteTaskRepository(TaskRepository):
    """SQLite implementation of task repository."""

    def __init__(self, db_path: str | None = None):
        self.db_path = db_path
        self._connection: sqlite3.Connection | None = None

    @property
    def connection(self) -> sqlite3.Connection:
        """Get or create database connection."""
        if self._connection is None:
            self._connection = get_connection(self.db_path)
        return self._connection

    async def add(self, task_data: TaskCreate) -> Task:
        task_id = str(uuid.uuid4())
        with translate_errors("task insert"):
            self.connection.execute(
                """
                INSERT INTO tasks (id, user_id, text, status, pomodoros_completed, created_at)
                VALUES (?, ?, ?, 'pending', 0, ?)
                """,
                (
                    task_id,
                    task_data.user_id,
                    task_data.text.strip(),
                    datetime.now(UTC).isoformat(),
                ),
            )
            self.connection.commit()
        return await self.get(task_id)

    async def list_all(self, user_id: str) -> list[Task]:
        with translate_errors("task listing"):
            rows = self.connection.execute(
                "SELECT * FROM tasks WHERE user_id = ? ORDER BY created_at DESC",
                (user_id,),
            ).fetchall()
        return [Task.model_validate(dict(row)) for row in rows]

    async def get(self, task_id: str) -> Task:
        with translate_errors("task read"):
            row = self.connection.execute(
                "SELECT * FROM tasks WHERE id = ?", (task_id,)
            ).fetchone()
        if row is None:
            raise NotFoundError(f"Task not found: {task_id}")
        return Task.model_validate(dict(row))

    async def delete(self, task_id: str) -> bool:
        with translate_errors("task delete"):
            cursor = self.connection.execute("DELETE FROM tasks WHERE id = ?", (task_id,))
            self.connection.commit()
        return cursor.rowcount > 0

    async def increment_pomodoro_count(
        self, task_id: str, credit_serial: int | None = None
    ) -> bool:
        with translate_errors("task counter update"):
            if credit_serial is None:
                cursor = self.connection.execute(
                    "UPDATE tasks SET pomodoros_completed = pomodoros_completed + 1 "
                    "WHERE id = ?",
                    (task_id,),
                )
            else:
                cursor = self.connection.execute(
                    """
                    UPDATE tasks
                    SET pomodoros_completed = pomodoros_completed + 1,
                        last_credited_serial = ?
                    WHERE id = ? AND last_credited_serial < ?
                    """,
                    (credit_serial, task_id, credit_serial),
                )
            self.connection.commit()
        if cursor.rowcount > 0:
            return True
        # Nothing updated: either the task is gone or this serial was counted
        await self.get(task_id)
        return False
