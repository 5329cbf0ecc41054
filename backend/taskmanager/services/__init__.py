"""Service layer exports."""
from taskmanager.services import (
    auth_service,
    image_service,
    notification_service,
    task_service,
    user_service,
)

__all__ = [
    "auth_service",
    "image_service",
    "notification_service",
    "task_service",
    "user_service",
]
