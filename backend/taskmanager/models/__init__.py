"""ORM models package export."""

from taskmanager.models.task import Task, TaskPriority
from taskmanager.models.user import User

__all__ = ["Task", "TaskPriority", "User"]
