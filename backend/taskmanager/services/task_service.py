"""Task persistence and the owner-scoped list query builder."""

from __future__ import annotations

import asyncio
import logging
import uuid
from collections.abc import Sequence
from typing import Any

from sqlalchemy import ColumnElement, case, delete, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from taskmanager.db.session import Database
from taskmanager.models.task import Task, TaskPriority
from taskmanager.schemas.task import (
    SortOrder,
    TaskCreate,
    TaskListQuery,
    TaskPage,
    TaskRead,
    TaskSortField,
    TaskUpdate,
)

logger = logging.getLogger(__name__)

_PRIORITY_RANK = case(
    (Task.priority == TaskPriority.LOW, 0),
    (Task.priority == TaskPriority.MEDIUM, 1),
    else_=2,
)


def _like_pattern(term: str) -> str:
    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


def build_task_filters(
    owner_id: uuid.UUID, query: TaskListQuery
) -> list[ColumnElement[bool]]:
    """Translate a list query into conjunctive clauses, owner scope first."""
    clauses: list[ColumnElement[bool]] = [Task.owner_id == owner_id]
    if query.priority is not None:
        clauses.append(Task.priority == query.priority)
    if query.completed is not None:
        clauses.append(Task.completed.is_(query.completed))
    if query.due_before is not None:
        clauses.append(Task.due_date <= query.due_before)
    if query.due_after is not None:
        clauses.append(Task.due_date >= query.due_after)
    if query.search is not None:
        terms = query.search.split()
        if terms:
            matches = []
            for term in terms:
                pattern = _like_pattern(term)
                matches.append(Task.title.ilike(pattern, escape="\\"))
                matches.append(Task.description.ilike(pattern, escape="\\"))
            clauses.append(or_(*matches))
    return clauses


def build_task_ordering(query: TaskListQuery) -> list[Any]:
    """Return ORDER BY terms for the requested sort, with stable tie-breakers."""
    descending = query.order == SortOrder.DESC

    def _direct(column: Any) -> Any:
        return column.desc() if descending else column.asc()

    if query.sort == TaskSortField.DUE_DATE:
        primary = [_direct(Task.due_date).nulls_last()]
    elif query.sort == TaskSortField.PRIORITY:
        primary = [_direct(_PRIORITY_RANK)]
    else:
        primary = [_direct(Task.created_at)]

    tie_breakers = [_direct(Task.id)]
    if query.sort != TaskSortField.CREATED_AT:
        tie_breakers.insert(0, _direct(Task.created_at))
    return primary + tie_breakers


async def _fetch_page(
    database: Database, filters: Sequence[ColumnElement[bool]], query: TaskListQuery
) -> list[Task]:
    statement = (
        select(Task)
        .where(*filters)
        .order_by(*build_task_ordering(query))
        .offset(query.offset)
        .limit(query.limit)
    )
    async with database.session() as session:
        result = await session.execute(statement)
        return list(result.scalars().all())


async def _count(database: Database, filters: Sequence[ColumnElement[bool]]) -> int:
    statement = select(func.count()).select_from(Task).where(*filters)
    async with database.session() as session:
        result = await session.execute(statement)
        return int(result.scalar_one())


async def list_tasks(
    database: Database, *, owner_id: uuid.UUID, query: TaskListQuery
) -> TaskPage:
    """Return one page of the owner's tasks plus the total match count.

    The page and the count run concurrently on separate sessions, so the
    total can drift from the page under concurrent writes.
    """
    filters = build_task_filters(owner_id, query)
    items, total = await asyncio.gather(
        _fetch_page(database, filters, query), _count(database, filters)
    )
    return TaskPage(
        items=[TaskRead.model_validate(item) for item in items],
        page=query.page,
        limit=query.limit,
        total=total,
    )


async def create_task(
    session: AsyncSession, *, owner_id: uuid.UUID, payload: TaskCreate
) -> Task:
    task = Task(owner_id=owner_id, **payload.model_dump())
    session.add(task)
    await session.commit()
    await session.refresh(task)
    logger.debug("Created task %s for %s", task.id, owner_id)
    return task


async def get_task(
    session: AsyncSession, *, owner_id: uuid.UUID, task_id: uuid.UUID
) -> Task | None:
    """Return the task if it exists and belongs to ``owner_id``."""
    result = await session.execute(
        select(Task).where(Task.id == task_id, Task.owner_id == owner_id)
    )
    return result.scalar_one_or_none()


async def update_task(
    session: AsyncSession,
    *,
    owner_id: uuid.UUID,
    task_id: uuid.UUID,
    payload: TaskUpdate,
) -> Task | None:
    """Apply the fields present in ``payload``; other fields are untouched."""
    task = await get_task(session, owner_id=owner_id, task_id=task_id)
    if task is None:
        return None
    for field, value in payload.model_dump(exclude_unset=True).items():
        setattr(task, field, value)
    await session.commit()
    await session.refresh(task)
    return task


async def delete_task(
    session: AsyncSession, *, owner_id: uuid.UUID, task_id: uuid.UUID
) -> bool:
    """Delete an owned task; returns False when nothing matched."""
    result = await session.execute(
        delete(Task).where(Task.id == task_id, Task.owner_id == owner_id)
    )
    await session.commit()
    return bool(result.rowcount)


async def clear_tasks(session: AsyncSession) -> int:
    """Remove every task for every user."""
    result = await session.execute(delete(Task))
    await session.commit()
    return int(result.rowcount or 0)


async def seed_tasks(
    session: AsyncSession, *, owner_id: uuid.UUID, payloads: Sequence[TaskCreate]
) -> int:
    """Insert ``payloads`` for ``owner_id`` unless the owner already has tasks."""
    existing = await session.execute(
        select(func.count()).select_from(Task).where(Task.owner_id == owner_id)
    )
    if existing.scalar_one():
        return 0
    session.add_all(
        Task(owner_id=owner_id, **payload.model_dump()) for payload in payloads
    )
    await session.commit()
    return len(payloads)
