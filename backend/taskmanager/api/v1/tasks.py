"""Task endpoints; every route is scoped to the authenticated caller."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, Depends, Query, Response, status

from taskmanager.api.deps import CurrentPrincipal, DbSession, get_database
from taskmanager.core.errors import NotFound
from taskmanager.db.session import Database
from taskmanager.models.task import TaskPriority
from taskmanager.schemas.task import (
    SortOrder,
    TaskCreate,
    TaskListQuery,
    TaskPage,
    TaskRead,
    TaskSortField,
    TaskUpdate,
)
from taskmanager.services import task_service

router = APIRouter()


def task_list_query(
    search: Annotated[str | None, Query()] = None,
    priority: Annotated[TaskPriority | None, Query()] = None,
    completed: Annotated[bool | None, Query()] = None,
    due_before: Annotated[datetime | None, Query(alias="dueBefore")] = None,
    due_after: Annotated[datetime | None, Query(alias="dueAfter")] = None,
    page: Annotated[int, Query(ge=1)] = 1,
    limit: Annotated[int, Query(ge=1, le=100)] = 20,
    sort: Annotated[TaskSortField, Query()] = TaskSortField.CREATED_AT,
    order: Annotated[SortOrder, Query()] = SortOrder.DESC,
) -> TaskListQuery:
    return TaskListQuery(
        search=search or None,
        priority=priority,
        completed=completed,
        due_before=due_before,
        due_after=due_after,
        page=page,
        limit=limit,
        sort=sort,
        order=order,
    )


@router.get("", response_model=TaskPage, summary="List tasks")
async def list_tasks(
    principal: CurrentPrincipal,
    database: Annotated[Database, Depends(get_database)],
    query: Annotated[TaskListQuery, Depends(task_list_query)],
) -> TaskPage:
    return await task_service.list_tasks(database, owner_id=principal.id, query=query)


@router.get("/{task_id}", response_model=TaskRead, summary="Get task by ID")
async def get_task(
    task_id: uuid.UUID, principal: CurrentPrincipal, session: DbSession
) -> TaskRead:
    task = await task_service.get_task(session, owner_id=principal.id, task_id=task_id)
    if task is None:
        raise NotFound("Task not found")
    return TaskRead.model_validate(task)


@router.post(
    "",
    response_model=TaskRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create task",
)
async def create_task(
    payload: TaskCreate, principal: CurrentPrincipal, session: DbSession
) -> TaskRead:
    task = await task_service.create_task(
        session, owner_id=principal.id, payload=payload
    )
    return TaskRead.model_validate(task)


@router.patch("/{task_id}", response_model=TaskRead, summary="Update task")
async def update_task(
    task_id: uuid.UUID,
    payload: TaskUpdate,
    principal: CurrentPrincipal,
    session: DbSession,
) -> TaskRead:
    task = await task_service.update_task(
        session, owner_id=principal.id, task_id=task_id, payload=payload
    )
    if task is None:
        raise NotFound("Task not found")
    return TaskRead.model_validate(task)


@router.delete(
    "/{task_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    summary="Delete task",
)
async def delete_task(
    task_id: uuid.UUID, principal: CurrentPrincipal, session: DbSession
) -> None:
    deleted = await task_service.delete_task(
        session, owner_id=principal.id, task_id=task_id
    )
    if not deleted:
        raise NotFound("Task not found")
