"""SQLite implementation of FocusRepository."""

from __future__ import annotations

import json
import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import UTC, date, datetime
from typing import Any

from focuskeeper.adapters.sqlite import schema
from focuskeeper.adapters.sqlite.connection import get_connection
from focuskeeper.models import PersistenceError
from focuskeeper.models.focus import (
    DailyGoal,
    FocusSession,
    ProductivityStats,
    TimerSettings,
)
from focuskeeper.models.focus.goals import goal_id
from focuskeeper.repositories import FocusRepository
from focuskeeper.utils.logger import get_logger


@contextmanager
def translate_errors(operation: str) -> Iterator[None]:
    """Re-raise sqlite3 failures as PersistenceError."""
    try:
        yield
    except sqlite3.Error as e:
        get_logger("sqlite").error("%s failed: %s", operation, e)
        raise PersistenceError(f"Local vault {operation} failed: {e}") from e


class SqliteFocusRepository(FocusRepository):
    """SQLite implementation of the focus repository."""

    def __init__(self, db_path: str | None = None):
        """Initialize SQLite focus repository.

        Args:
            db_path: Optional database file path. If None, uses default location.
        """
        self.db_path = db_path
        self._connection: sqlite3.Connection | None = None

    @property
    def connection(self) -> sqlite3.Connection:
        """Get or create database connection."""
        if self._connection is None:
            self._connection = get_connection(self.db_path)
        return self._connection

    # ------------------------------------------------------------------
    # Document helpers
    # ------------------------------------------------------------------

    def _get_document(self, collection: str, doc_id: str) -> dict[str, Any] | None:
        with translate_errors(f"read of {collection}/{doc_id}"):
            row = self.connection.execute(
                "SELECT body FROM documents WHERE collection = ? AND doc_id = ?",
                (collection, doc_id),
            ).fetchone()
        if row is None:
            return None
        return json.loads(row["body"])

    def _put_document(
        self,
        collection: str,
        doc_id: str,
        user_id: str,
        body: dict[str, Any],
        sort_key: str | None = None,
    ) -> None:
        with translate_errors(f"write of {collection}/{doc_id}"):
            self.connection.execute(
                """
                INSERT INTO documents (collection, doc_id, user_id, sort_key, body, updated_at)
                VALUES (?, ?, ?, ?, ?, ?)
                ON CONFLICT(collection, doc_id) DO UPDATE SET
                    body = excluded.body,
                    sort_key = excluded.sort_key,
                    updated_at = excluded.updated_at
                """,
                (
                    collection,
                    doc_id,
                    user_id,
                    sort_key,
                    json.dumps(body),
                    datetime.now(UTC).isoformat(),
                ),
            )
            self.connection.commit()

    # ------------------------------------------------------------------
    # FocusRepository
    # ------------------------------------------------------------------

    async def load_session(self, user_id: str) -> FocusSession | None:
        data = self._get_document(schema.SESSIONS, user_id)
        return FocusSession.from_dict(data) if data is not None else None

    async def save_session(self, user_id: str, session: FocusSession) -> None:
        self._put_document(schema.SESSIONS, user_id, user_id, session.to_dict())

    async def load_settings(self, user_id: str) -> TimerSettings | None:
        data = self._get_document(schema.SETTINGS, user_id)
        return TimerSettings.from_dict(data) if data is not None else None

    async def save_settings(self, user_id: str, settings: TimerSettings) -> None:
        self._put_document(schema.SETTINGS, user_id, user_id, settings.to_dict())

    async def load_daily_goal(self, user_id: str, day: date) -> DailyGoal | None:
        data = self._get_document(schema.DAILY_GOALS, goal_id(user_id, day))
        return DailyGoal.from_dict(data, user_id=user_id) if data is not None else None

    async def save_daily_goal(self, user_id: str, goal: DailyGoal) -> None:
        self._put_document(
            schema.DAILY_GOALS,
            goal_id(user_id, goal.date),
            user_id,
            goal.to_dict(),
            sort_key=goal.date,
        )

    async def list_daily_goals(self, user_id: str, since: date) -> list[DailyGoal]:
        with translate_errors("listing of daily goals"):
            rows = self.connection.execute(
                """
                SELECT body FROM documents
                WHERE collection = ? AND user_id = ? AND sort_key >= ?
                ORDER BY sort_key
                """,
                (schema.DAILY_GOALS, user_id, since.isoformat()),
            ).fetchall()
        return [DailyGoal.from_dict(json.loads(row["body"]), user_id=user_id) for row in rows]

    async def load_stats(self, user_id: str) -> ProductivityStats | None:
        data = self._get_document(schema.STATS, user_id)
        return ProductivityStats.from_dict(data) if data is not None else None

    async def save_stats(self, user_id: str, stats: ProductivityStats) -> None:
        self._put_document(schema.STATS, user_id, user_id, stats.to_dict())
