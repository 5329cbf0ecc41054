"""Schemas for tasks and the task list query."""

from __future__ import annotations

import enum
import uuid
from typing import Annotated

from pydantic import (
    AfterValidator,
    BaseModel,
    ConfigDict,
    Field,
    StringConstraints,
    model_validator,
)

from taskmanager.models.task import TaskPriority
from taskmanager.schemas.common import CamelModel, UTCDateTime


def _strip_optional(value: str | None) -> str | None:
    return value.strip() if value is not None else None


Title = Annotated[
    str, StringConstraints(strip_whitespace=True, min_length=1, max_length=500)
]
Description = Annotated[str | None, AfterValidator(_strip_optional)]


class TaskSortField(str, enum.Enum):
    CREATED_AT = "createdAt"
    DUE_DATE = "dueDate"
    PRIORITY = "priority"


class SortOrder(str, enum.Enum):
    ASC = "asc"
    DESC = "desc"


class TaskCreate(CamelModel):
    """Payload for creating a task; the owner comes from the bearer token."""

    model_config = ConfigDict(extra="forbid")

    title: Title
    description: Description = None
    priority: TaskPriority = TaskPriority.MEDIUM
    due_date: UTCDateTime | None = None
    completed: bool = False


class TaskUpdate(CamelModel):
    """Partial update; only fields present in the request are applied."""

    model_config = ConfigDict(extra="forbid")

    title: Title | None = None
    description: Description = None
    priority: TaskPriority | None = None
    due_date: UTCDateTime | None = None
    completed: bool | None = None

    @model_validator(mode="after")
    def _reject_nulls(self) -> "TaskUpdate":
        for field in ("title", "priority", "completed"):
            if field in self.model_fields_set and getattr(self, field) is None:
                raise ValueError(f"{field} cannot be null")
        return self


class TaskRead(CamelModel):
    """Serialized task response."""

    id: uuid.UUID
    owner_id: uuid.UUID
    title: str
    description: str | None = None
    priority: TaskPriority
    due_date: UTCDateTime | None = None
    completed: bool
    created_at: UTCDateTime
    updated_at: UTCDateTime


class TaskListQuery(BaseModel):
    """Filter, sort and page parameters for listing a user's tasks.

    Every filter is optional and checked for presence explicitly by the
    query builder; the owner scope is not part of this struct.
    """

    model_config = ConfigDict(frozen=True)

    search: str | None = None
    priority: TaskPriority | None = None
    completed: bool | None = None
    due_before: UTCDateTime | None = None
    due_after: UTCDateTime | None = None
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=20, ge=1, le=100)
    sort: TaskSortField = TaskSortField.CREATED_AT
    order: SortOrder = SortOrder.DESC

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


class TaskPage(CamelModel):
    items: list[TaskRead]
    page: int
    limit: int
    total: int
