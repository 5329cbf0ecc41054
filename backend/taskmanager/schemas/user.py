"""User-related schemas."""

from __future__ import annotations

import uuid

from taskmanager.schemas.common import CamelModel


class UserPublic(CamelModel):
    """User view returned alongside issued tokens."""

    id: uuid.UUID
    email: str
    name: str | None = None


class UserRead(UserPublic):
    """Profile of the authenticated user."""

    theme_background_url: str | None = None


class ThemeUpdateResponse(CamelModel):
    ok: bool = True
    theme_background_url: str
