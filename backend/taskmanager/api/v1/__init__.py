"""Versioned API router."""

from fastapi import APIRouter

from taskmanager.api.rate_limit import DEFAULT_RATE_LIMIT

from . import auth, health, tasks, users

router = APIRouter()
router.include_router(health.router, prefix="/health", tags=["health"])
router.include_router(auth.router, prefix="/auth", tags=["auth"])
router.include_router(
    tasks.router, prefix="/tasks", tags=["tasks"], dependencies=[DEFAULT_RATE_LIMIT]
)
router.include_router(
    users.router, prefix="/user", tags=["user"], dependencies=[DEFAULT_RATE_LIMIT]
)

__all__ = ["router"]
