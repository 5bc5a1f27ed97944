"""Shared test fixtures and configuration.

Provides infrastructure to isolate tests from real filesystem/API state.
"""

from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime, timedelta, timezone
from unittest.mock import patch

import pytest

from focuskeeper.models import NotFoundError, PersistenceError, Task, TaskCreate
from focuskeeper.models.config_models import AppConfig, Context, FocusConfig
from focuskeeper.repositories import FocusRepository, TaskRepository


# ---------------------------------------------------------------------------
# Config isolation helpers
# ---------------------------------------------------------------------------


def _make_local_config(tmp_path) -> AppConfig:
    """Build a minimal AppConfig pointing at a tmp SQLite database."""
    db = str(tmp_path / "test.db")
    ctx = Context(name="default", type="local", source=db, user_id="u1")
    return AppConfig(current_context_name="default", contexts=[ctx])


@pytest.fixture()
def tmp_config(tmp_path):
    """Provide a real ConfigService backed by a temporary directory.

    Patches platform dirs so config/data files land in *tmp_path* only.
    Also clears the lru_cache so get_config_service() returns this instance.
    """
    from focuskeeper.services import config_service as module

    tmpdir = str(tmp_path)
    module.get_config_service.cache_clear()
    with (
        patch.object(module, "user_config_dir", return_value=tmpdir),
        patch.object(module, "user_data_dir", return_value=tmpdir),
    ):
        yield module.get_config_service()
    module.get_config_service.cache_clear()


@pytest.fixture(autouse=True)
def reset_singletons():
    """Drop the SQLite connection and registered focus services between tests."""
    from focuskeeper.adapters.sqlite.connection import close_connections
    from focuskeeper.services.focus_service import reset_focus_services

    yield
    close_connections()
    reset_focus_services()


@pytest.fixture(autouse=True)
def isolated_logs(tmp_path):
    """Keep log files out of the user's log directory."""
    with patch("focuskeeper.utils.logger.user_log_dir", return_value=str(tmp_path / "logs")):
        yield


# ---------------------------------------------------------------------------
# In-memory repositories
# ---------------------------------------------------------------------------


class MemoryFocusRepository(FocusRepository):
    """Dict-backed FocusRepository recording every write in order.

    Operations named in ``failing`` raise PersistenceError.
    """

    def __init__(self):
        self.sessions = {}
        self.settings = {}
        self.goals = {}
        self.stats = {}
        self.writes: list[str] = []
        self.failing: set[str] = set()

    def _check(self, op: str) -> None:
        if op in self.failing:
            raise PersistenceError(f"{op} unavailable")

    async def load_session(self, user_id):
        self._check("load_session")
        session = self.sessions.get(user_id)
        return session.copy() if session else None

    async def save_session(self, user_id, session):
        self._check("save_session")
        self.writes.append("session")
        self.sessions[user_id] = session.copy()

    async def load_settings(self, user_id):
        self._check("load_settings")
        return self.settings.get(user_id)

    async def save_settings(self, user_id, settings):
        self._check("save_settings")
        self.writes.append("settings")
        self.settings[user_id] = replace(settings)

    async def load_daily_goal(self, user_id, day):
        self._check("load_daily_goal")
        goal = self.goals.get((user_id, day.isoformat()))
        return replace(goal) if goal else None

    async def save_daily_goal(self, user_id, goal):
        self._check("save_daily_goal")
        self.writes.append("goal")
        self.goals[(user_id, goal.date)] = replace(goal)

    async def list_daily_goals(self, user_id, since):
        return sorted(
            (g for (uid, d), g in self.goals.items() if uid == user_id and d >= since.isoformat()),
            key=lambda g: g.date,
        )

    async def load_stats(self, user_id):
        self._check("load_stats")
        stats = self.stats.get(user_id)
        return replace(stats) if stats else None

    async def save_stats(self, user_id, stats):
        self._check("save_stats")
        self.writes.append("stats")
        self.stats[user_id] = replace(stats)


class MemoryTaskRepository(TaskRepository):
    """Dict-backed TaskRepository."""

    def __init__(self, focus_repo: MemoryFocusRepository | None = None):
        self.tasks: dict[str, Task] = {}
        self.credit_serials: dict[str, int] = {}
        self.focus_repo = focus_repo
        self.failing = False

    async def add(self, task_data: TaskCreate) -> Task:
        task = Task(
            id=f"task-{len(self.tasks) + 1}",
            user_id=task_data.user_id,
            text=task_data.text,
            created_at=datetime(2024, 3, 1, tzinfo=timezone.utc)
            + timedelta(minutes=len(self.tasks)),
        )
        self.tasks[task.id] = task
        return task

    async def list_all(self, user_id):
        tasks = [t for t in self.tasks.values() if t.user_id == user_id]
        return sorted(tasks, key=lambda t: t.created_at, reverse=True)

    async def get(self, task_id):
        if task_id not in self.tasks:
            raise NotFoundError(f"Task not found: {task_id}")
        return self.tasks[task_id]

    async def delete(self, task_id):
        return self.tasks.pop(task_id, None) is not None

    async def increment_pomodoro_count(self, task_id, credit_serial=None):
        if self.failing:
            raise PersistenceError("tasks unavailable")
        task = await self.get(task_id)
        if credit_serial is not None:
            if credit_serial <= self.credit_serials.get(task_id, 0):
                return False
            self.credit_serials[task_id] = credit_serial
        task.pomodoros_completed += 1
        if self.focus_repo is not None:
            self.focus_repo.writes.append("task")
        return True


class FakeNow:
    """Settable clock for services and the session clock."""

    def __init__(self, start: datetime | None = None):
        self.current = start or datetime(2024, 3, 1, 9, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.current

    def advance(self, seconds: float) -> None:
        self.current += timedelta(seconds=seconds)

    @property
    def today(self) -> date:
        return self.current.date()


@pytest.fixture()
def focus_repo():
    return MemoryFocusRepository()


@pytest.fixture()
def task_repo(focus_repo):
    return MemoryTaskRepository(focus_repo)


@pytest.fixture()
def fake_now():
    return FakeNow()


@pytest.fixture()
def focus_config():
    """Fast ticks so scheduling tests run quickly."""
    return FocusConfig(tick_interval_seconds=0.01)


@pytest.fixture()
def local_config(tmp_path):
    return _make_local_config(tmp_path)
