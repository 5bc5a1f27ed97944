"""Repository abstraction layer for FocusKeeper.

This module defines the abstract base classes (interfaces) that the focus
core persists through, following the hexagonal architecture (Ports &
Adapters) pattern. Concrete adapters live in ``focuskeeper.adapters``.

Every record is owned by a single user and addressed by user id. Loads
return ``None`` when nothing is stored yet; callers treat that as "use
defaults". Backend failures surface as ``PersistenceError``.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import date

from focuskeeper.models import Task, TaskCreate
from focuskeeper.models.focus import (
    DailyGoal,
    FocusSession,
    ProductivityStats,
    TimerSettings,
)


class FocusRepository(ABC):
    """Abstract base class for focus session persistence.

    Covers the session record, timer settings, daily goals and running
    statistics of a user.
    """

    @abstractmethod
    async def load_session(self, user_id: str) -> FocusSession | None:
        """Load the user's current session.

        Returns:
            The stored session, or None if the user has none yet

        Raises:
            PersistenceError: If the backend could not be read
        """
        raise NotImplementedError(
            "FocusRepository.load_session() must be implemented by adapter"
        )

    @abstractmethod
    async def save_session(self, user_id: str, session: FocusSession) -> None:
        """Store the user's session, replacing any previous one.

        Raises:
            PersistenceError: If the write failed
        """
        raise NotImplementedError(
            "FocusRepository.save_session() must be implemented by adapter"
        )

    @abstractmethod
    async def load_settings(self, user_id: str) -> TimerSettings | None:
        """Load the user's timer settings, or None if never saved."""
        raise NotImplementedError(
            "FocusRepository.load_settings() must be implemented by adapter"
        )

    @abstractmethod
    async def save_settings(self, user_id: str, settings: TimerSettings) -> None:
        """Store the user's timer settings."""
        raise NotImplementedError(
            "FocusRepository.save_settings() must be implemented by adapter"
        )

    @abstractmethod
    async def load_daily_goal(self, user_id: str, day: date) -> DailyGoal | None:
        """Load the goal for a calendar date, or None if none exists."""
        raise NotImplementedError(
            "FocusRepository.load_daily_goal() must be implemented by adapter"
        )

    @abstractmethod
    async def save_daily_goal(self, user_id: str, goal: DailyGoal) -> None:
        """Store a daily goal, keyed by user and goal date."""
        raise NotImplementedError(
            "FocusRepository.save_daily_goal() must be implemented by adapter"
        )

    @abstractmethod
    async def list_daily_goals(self, user_id: str, since: date) -> list[DailyGoal]:
        """List goals dated on or after *since*, oldest first."""
        raise NotImplementedError(
            "FocusRepository.list_daily_goals() must be implemented by adapter"
        )

    @abstractmethod
    async def load_stats(self, user_id: str) -> ProductivityStats | None:
        """Load the user's running statistics, or None if never saved."""
        raise NotImplementedError(
            "FocusRepository.load_stats() must be implemented by adapter"
        )

    @abstractmethod
    async def save_stats(self, user_id: str, stats: ProductivityStats) -> None:
        """Store the user's running statistics."""
        raise NotImplementedError(
            "FocusRepository.save_stats() must be implemented by adapter"
        )


class TaskRepository(ABC):
    """Abstract base class for task persistence operations."""

    @abstractmethod
    async def add(self, task_data: TaskCreate) -> Task:
        """Create a new task.

        Returns:
            Created Task object with generated ID and timestamp
        """
        raise NotImplementedError("TaskRepository.add() must be implemented by adapter")

    @abstractmethod
    async def list_all(self, user_id: str) -> list[Task]:
        """List a user's tasks, newest first."""
        raise NotImplementedError(
            "TaskRepository.list_all() must be implemented by adapter"
        )

    @abstractmethod
    async def get(self, task_id: str) -> Task:
        """Get a specific task by ID.

        Raises:
            NotFoundError: If task does not exist
        """
        raise NotImplementedError("TaskRepository.get() must be implemented by adapter")

    @abstractmethod
    async def delete(self, task_id: str) -> bool:
        """Delete a task.

        Returns:
            True if a task was deleted
        """
        raise NotImplementedError(
            "TaskRepository.delete() must be implemented by adapter"
        )

    @abstractmethod
    async def increment_pomodoro_count(
        self, task_id: str, credit_serial: int | None = None
    ) -> bool:
        """Add one completed focus phase to a task's counter.

        With a *credit_serial*, the increment and the task's
        ``last_credited_serial`` are updated together, and a serial at or
        below the stored one is ignored.

        Returns:
            True if the counter was incremented

        Raises:
            NotFoundError: If task does not exist
            PersistenceError: If the write failed
        """
        raise NotImplementedError(
            "TaskRepository.increment_pomodoro_count() must be implemented by adapter"
        )
