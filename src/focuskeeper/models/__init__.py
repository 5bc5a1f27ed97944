"""FocusKeeper domain models.

Pydantic models for tasks and configuration; the focus timer records live
in ``focuskeeper.models.focus`` as plain dataclasses.
"""

from .config_models import AppConfig, Context
from .core import Task, TaskCreate, TaskStatus
from .exceptions import (
    FocusKeeperError,
    InvalidStateError,
    NotFoundError,
    PersistenceError,
    SessionBusyError,
    ValidationError,
)

__all__ = [
    # Task models
    "Task",
    "TaskCreate",
    "TaskStatus",
    # Config models
    "AppConfig",
    "Context",
    # Errors
    "FocusKeeperError",
    "PersistenceError",
    "ValidationError",
    "InvalidStateError",
    "NotFoundError",
    "SessionBusyError",
]
