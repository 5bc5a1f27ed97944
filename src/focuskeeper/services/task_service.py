"""Task service - Business logic for the tasks pomodoros are credited to.

This service layer sits between commands and repositories.
"""

from __future__ import annotations

from focuskeeper.models import NotFoundError, Task, TaskCreate, ValidationError
from focuskeeper.repositories import TaskRepository


class TaskService:
    """Service for task business logic."""

    def __init__(self, task_repository: TaskRepository, user_id: str):
        """Initialize the task service.

        Args:
            task_repository: TaskRepository implementation for data access
            user_id: Owner of the tasks handled by this service
        """
        self.repository = task_repository
        self.user_id = user_id

    async def add_task(self, text: str) -> Task:
        """Create a task; blank text is rejected."""
        if not text or not text.strip():
            raise ValidationError("Task text cannot be empty")
        return await self.repository.add(TaskCreate(text=text.strip(), user_id=self.user_id))

    async def list_tasks(self) -> list[Task]:
        """All tasks of the user, newest first."""
        return await self.repository.list_all(self.user_id)

    async def get_task(self, task_id: str) -> Task:
        """Get a task by full id or unique id prefix.

        Raises:
            NotFoundError: No task, or more than one, matches
        """
        try:
            return await self.repository.get(task_id)
        except NotFoundError:
            matches = [t for t in await self.list_tasks() if t.id.startswith(task_id)]
            if len(matches) != 1:
                raise
            return matches[0]

    async def delete_task(self, task_id: str) -> bool:
        """Delete a task by id or unique prefix; False if it did not exist."""
        try:
            task = await self.get_task(task_id)
        except NotFoundError:
            return False
        return await self.repository.delete(task.id)


def get_task_service() -> TaskService:
    """TaskService for the user of the active context."""
    from focuskeeper.services.config_service import get_config_service

    config_service = get_config_service()
    repository = config_service.storage_strategy_context.task_repository
    return TaskService(repository, config_service.get_current_context().user_id)
