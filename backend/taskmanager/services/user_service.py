"""User data access helpers."""
from __future__ import annotations

import logging
import os
import time
import uuid

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from taskmanager.core.errors import EmailAlreadyExists, ValidationError
from taskmanager.core.security import get_password_hash, password_too_long
from taskmanager.integrations import ObjectStore
from taskmanager.models.user import User
from taskmanager.services.image_service import inspect_image

logger = logging.getLogger(__name__)

_DEFAULT_THEME_EXTENSION = ".jpg"


def normalise_email(email: str) -> str:
    return email.strip().lower()


async def get_user_by_email(session: AsyncSession, email: str) -> User | None:
    """Return a user by email address (case-insensitive)."""
    result = await session.execute(
        select(User).where(User.email == normalise_email(email))
    )
    return result.scalar_one_or_none()


async def get_user(session: AsyncSession, user_id: uuid.UUID) -> User | None:
    """Return a user by ID."""
    result = await session.execute(select(User).where(User.id == user_id))
    return result.scalar_one_or_none()


async def create_user(
    session: AsyncSession, *, email: str, password: str, name: str | None = None
) -> User:
    """Persist a new user with hashed password."""
    if password_too_long(password):
        raise ValidationError("password is too long")
    user = User(
        email=normalise_email(email),
        hashed_password=get_password_hash(password),
        name=name,
    )
    session.add(user)
    try:
        await session.commit()
    except IntegrityError as exc:
        await session.rollback()
        raise EmailAlreadyExists() from exc
    await session.refresh(user)
    return user


async def set_theme_background(session: AsyncSession, user: User, url: str) -> User:
    user.theme_background_url = url
    await session.commit()
    await session.refresh(user)
    return user


def _theme_extension(filename: str | None) -> str:
    _, ext = os.path.splitext(filename or "")
    ext = ext.lower()
    if not ext or len(ext) > 10 or not ext[1:].isalnum():
        return _DEFAULT_THEME_EXTENSION
    return ext


def store_theme_image(
    store: ObjectStore,
    *,
    user_id: uuid.UUID,
    filename: str | None,
    data: bytes,
    max_bytes: int,
) -> str:
    """Validate and write a theme image, returning its public URL.

    The object key is derived from the owner and the upload time:
    ``themes/<user_id>-<epoch millis><ext>``.
    """
    if not data:
        raise ValidationError("image file is required")
    if len(data) > max_bytes:
        raise ValidationError(f"image exceeds the {max_bytes} byte limit")
    info = inspect_image(data)
    if info is None:
        raise ValidationError("uploaded file is not a supported image")

    extension = info.extension or _theme_extension(filename)
    key = f"themes/{user_id}-{int(time.time() * 1000)}{extension}"
    stored = store.put_object(key, data)
    logger.info("Stored theme image %s (%d bytes)", stored.key, stored.size)
    return stored.url


def remove_theme_image(store: ObjectStore, url: str) -> bool:
    """Delete a previously stored theme image; foreign URLs are left alone."""
    key = store.key_for_url(url)
    if key is None:
        return False
    removed = store.delete_object(key)
    if removed:
        logger.info("Removed theme image %s", key)
    return removed
