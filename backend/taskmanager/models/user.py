"""User model holding credentials and profile settings."""
from __future__ import annotations

import uuid
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from taskmanager.db.base import Base
from taskmanager.models.mixins import TimestampMixin

if TYPE_CHECKING:  # pragma: no cover - typing only imports
    from taskmanager.models.task import Task


class User(TimestampMixin, Base):
    """Registered account.

    ``password_reset_token_hash`` and ``password_reset_expires`` are set
    together when a reset is requested and cleared together when it is
    consumed; a newer request overwrites both.
    """

    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True, default=uuid.uuid4, unique=True
    )
    email: Mapped[str] = mapped_column(String(320), unique=True, nullable=False)
    hashed_password: Mapped[str] = mapped_column(String(255), nullable=False)
    name: Mapped[str | None] = mapped_column(String(200))
    theme_background_url: Mapped[str | None] = mapped_column(String(1024))
    password_reset_token_hash: Mapped[str | None] = mapped_column(
        String(128), index=True
    )
    password_reset_expires: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True)
    )

    tasks: Mapped[list["Task"]] = relationship(
        "Task",
        back_populates="owner",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
