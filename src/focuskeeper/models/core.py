"""Task data models."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

TaskStatus = Literal["pending", "completed"]


class Task(BaseModel):
    """Task model.

    Attributes:
        id: Unique identifier for the task
        user_id: Owner of the task
        text: Task description
        status: pending or completed
        created_at: Creation timestamp
        pomodoros_completed: Focus phases credited to this task
    """

    id: str
    user_id: str
    text: str
    status: TaskStatus = "pending"
    created_at: datetime
    pomodoros_completed: int = Field(default=0, ge=0)


class TaskCreate(BaseModel):
    """Model for creating a new task."""

    text: str = Field(..., min_length=1)
    user_id: str
