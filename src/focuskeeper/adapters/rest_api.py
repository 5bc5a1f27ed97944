"""REST API adapters - Repository implementations over the remote document store.

These adapters wrap the API client to implement the repository interfaces.
Transport and server failures are reported as ``PersistenceError``.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from datetime import date

import httpx

from focuskeeper.adapters.sqlite import schema
from focuskeeper.models import NotFoundError, PersistenceError, Task, TaskCreate
from focuskeeper.models.focus import (
    DailyGoal,
    FocusSession,
    ProductivityStats,
    TimerSettings,
)
from focuskeeper.models.focus.goals import goal_id
from focuskeeper.repositories import FocusRepository, TaskRepository
from focuskeeper.services.api.client import APIClient
from focuskeeper.services.api.documents import DocumentsAPI, TasksAPI


@contextmanager
def translate_http_errors(operation: str, not_found: str | None = None) -> Iterator[None]:
    """Re-raise httpx failures as PersistenceError (or NotFoundError on 404)."""
    try:
        yield
    except httpx.HTTPStatusError as e:
        if not_found is not None and e.response.status_code == 404:
            raise NotFoundError(not_found) from e
        raise PersistenceError(
            f"{operation} failed: HTTP {e.response.status_code}"
        ) from e
    except httpx.HTTPError as e:
        raise PersistenceError(f"{operation} failed: {e}") from e


class RestApiFocusRepository(FocusRepository):
    """Focus repository implementation using the document store API."""

    def __init__(self, client: APIClient | None = None):
        self._client = client
        self._documents_api: DocumentsAPI | None = None

    @property
    def documents_api(self) -> DocumentsAPI:
        """Get or create DocumentsAPI instance."""
        if self._documents_api is None:
            if self._client is None:
                self._client = APIClient()
            self._documents_api = DocumentsAPI(self._client)
        return self._documents_api

    async def _get(self, collection: str, doc_id: str) -> dict | None:
        with translate_http_errors(f"Loading {collection}/{doc_id}"):
            return await self.documents_api.get_document(collection, doc_id)

    async def _put(self, collection: str, doc_id: str, body: dict) -> None:
        with translate_http_errors(f"Saving {collection}/{doc_id}"):
            await self.documents_api.put_document(collection, doc_id, body)

    async def load_session(self, user_id: str) -> FocusSession | None:
        data = await self._get(schema.SESSIONS, user_id)
        return FocusSession.from_dict(data) if data is not None else None

    async def save_session(self, user_id: str, session: FocusSession) -> None:
        await self._put(schema.SESSIONS, user_id, session.to_dict())

    async def load_settings(self, user_id: str) -> TimerSettings | None:
        data = await self._get(schema.SETTINGS, user_id)
        return TimerSettings.from_dict(data) if data is not None else None

    async def save_settings(self, user_id: str, settings: TimerSettings) -> None:
        await self._put(schema.SETTINGS, user_id, settings.to_dict())

    async def load_daily_goal(self, user_id: str, day: date) -> DailyGoal | None:
        data = await self._get(schema.DAILY_GOALS, goal_id(user_id, day))
        return DailyGoal.from_dict(data, user_id=user_id) if data is not None else None

    async def save_daily_goal(self, user_id: str, goal: DailyGoal) -> None:
        await self._put(schema.DAILY_GOALS, goal_id(user_id, goal.date), goal.to_dict())

    async def list_daily_goals(self, user_id: str, since: date) -> list[DailyGoal]:
        with translate_http_errors("Listing daily goals"):
            documents = await self.documents_api.query_documents(
                schema.DAILY_GOALS, user_id=user_id, since=since.isoformat()
            )
        goals = [DailyGoal.from_dict(doc, user_id=user_id) for doc in documents]
        return sorted((g for g in goals if g.date >= since.isoformat()), key=lambda g: g.date)

    async def load_stats(self, user_id: str) -> ProductivityStats | None:
        data = await self._get(schema.STATS, user_id)
        return ProductivityStats.from_dict(data) if data is not None else None

    async def save_stats(self, user_id: str, stats: ProductivityStats) -> None:
        await self._put(schema.STATS, user_id, stats.to_dict())


class RestApiTaskRepository(TaskRepository):
    """Task repository implementation using REST API."""

    def __init__(self, client: APIClient | None = None):
        self._client = client
        self._tasks_api: TasksAPI | None = None

    @property
    def tasks_api(self) -> TasksAPI:
        """Get or create TasksAPI instance."""
        if self._tasks_api is None:
            if self._client is None:
                self._client = APIClient()
            self._tasks_api = TasksAPI(self._client)
        return self._tasks_api

    async def add(self, task_data: TaskCreate) -> Task:
        with translate_http_errors("Creating task"):
            result = await self.tasks_api.create_task(task_data.text, task_data.user_id)
        return Task(**result)

    async def list_all(self, user_id: str) -> list[Task]:
        with translate_http_errors("Listing tasks"):
            result = await self.tasks_api.list_tasks(user_id)
        # API returns {"tasks": [...]}
        tasks_data = result.get("tasks", []) if isinstance(result, dict) else result
        tasks = [Task(**task_dict) for task_dict in tasks_data]
        return sorted(tasks, key=lambda t: t.created_at, reverse=True)

    async def get(self, task_id: str) -> Task:
        with translate_http_errors("Loading task", not_found=f"Task not found: {task_id}"):
            result = await self.tasks_api.get_task(task_id)
        return Task(**result)

    async def delete(self, task_id: str) -> bool:
        try:
            with translate_http_errors("Deleting task", not_found=task_id):
                await self.tasks_api.delete_task(task_id)
        except NotFoundError:
            return False
        return True

    async def increment_pomodoro_count(
        self, task_id: str, credit_serial: int | None = None
    ) -> bool:
        with translate_http_errors(
            "Crediting task", not_found=f"Task not found: {task_id}"
        ):
            result = await self.tasks_api.increment_pomodoros(task_id, credit_serial)
        return bool(result.get("credited", True)) if isinstance(result, dict) else True
