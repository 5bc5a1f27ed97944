"""
Strategy Pattern: Storage Strategy Container

The StorageStrategyContext holds the strategy chosen at startup and hands the
matching repositories to services.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from focuskeeper.repositories import FocusRepository, TaskRepository


class StorageStrategy(ABC):
    """
    Abstract base class for storage strategies.

    A strategy encapsulates ALL repository implementations for a given
    storage backend (either Local SQLite or Remote API).
    """

    @abstractmethod
    def get_focus_repository(self) -> FocusRepository:
        """Get focus repository implementation for this strategy."""

    @abstractmethod
    def get_task_repository(self) -> TaskRepository:
        """Get task repository implementation for this strategy."""

    @property
    @abstractmethod
    def storage_type(self) -> str:
        """Get storage type identifier (for logging/debugging)."""


class LocalStorageStrategy(StorageStrategy):
    """
    Local SQLite storage strategy.

    Instantiated once at startup if the active context is 'local'.
    """

    def __init__(self, db_path: str):
        self.db_path = db_path

        # Import here to avoid circular dependencies
        from focuskeeper.adapters.sqlite import (
            SqliteFocusRepository,
            SqliteTaskRepository,
        )

        self._focus_repo = SqliteFocusRepository(db_path=db_path)
        self._task_repo = SqliteTaskRepository(db_path=db_path)

    def get_focus_repository(self) -> FocusRepository:
        return self._focus_repo

    def get_task_repository(self) -> TaskRepository:
        return self._task_repo

    @property
    def storage_type(self) -> str:
        return "local"


class RemoteStorageStrategy(StorageStrategy):
    """
    Remote API storage strategy.

    Instantiated once at startup if the active context is 'remote'.
    """

    def __init__(self):
        from focuskeeper.adapters.rest_api import (
            RestApiFocusRepository,
            RestApiTaskRepository,
        )
        from focuskeeper.services.api.client import APIClient

        client = APIClient()
        self._focus_repo = RestApiFocusRepository(client)
        self._task_repo = RestApiTaskRepository(client)

    def get_focus_repository(self) -> FocusRepository:
        return self._focus_repo

    def get_task_repository(self) -> TaskRepository:
        return self._task_repo

    @property
    def storage_type(self) -> str:
        return "remote"


class StorageStrategyContext:
    """
    Strategy context that provides access to all repositories.

    Usage:
        strategy = LocalStorageStrategy(db_path="/path/to/vault.db")
        context = StorageStrategyContext(strategy)
        repo = context.focus_repository
    """

    def __init__(self, strategy: StorageStrategy):
        self._strategy = strategy

    def switch_strategy(self, new_strategy: StorageStrategy):
        """Switch to a new storage strategy at runtime."""
        self._strategy = new_strategy

    @property
    def focus_repository(self) -> FocusRepository:
        """Get focus repository from current strategy."""
        return self._strategy.get_focus_repository()

    @property
    def task_repository(self) -> TaskRepository:
        """Get task repository from current strategy."""
        return self._strategy.get_task_repository()

    @property
    def storage_type(self) -> str:
        return self._strategy.storage_type
