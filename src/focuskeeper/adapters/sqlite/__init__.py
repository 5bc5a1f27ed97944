"""SQLite adapter module - Local database storage implementation."""

from focuskeeper.adapters.sqlite.connection import (
    close_connections,
    default_vault_path,
    get_connection,
)
from focuskeeper.adapters.sqlite.focus_repository import SqliteFocusRepository
from focuskeeper.adapters.sqlite.task_repository import SqliteTaskRepository

__all__ = [
    "close_connections",
    "default_vault_path",
    "get_connection",
    "SqliteFocusRepository",
    "SqliteTaskRepository",
]
