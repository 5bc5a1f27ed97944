"""Repository interfaces (ports) for FocusKeeper storage backends."""

from .repository import FocusRepository, TaskRepository

__all__ = ["FocusRepository", "TaskRepository"]
