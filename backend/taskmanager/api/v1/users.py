"""Current-user profile endpoints."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, File, UploadFile
from fastapi.concurrency import run_in_threadpool

from taskmanager.api.deps import CurrentPrincipal, DbSession, get_object_store
from taskmanager.core.config import get_settings
from taskmanager.core.errors import NotFound, ValidationError
from taskmanager.integrations import ObjectStore
from taskmanager.schemas.user import ThemeUpdateResponse, UserRead
from taskmanager.services import user_service

router = APIRouter()


@router.get("/me", response_model=UserRead, summary="Current user profile")
async def read_current_user(
    principal: CurrentPrincipal, session: DbSession
) -> UserRead:
    """Return the authenticated user's profile."""
    user = await user_service.get_user(session, user_id=principal.id)
    if user is None:
        raise NotFound("User not found")
    return UserRead.model_validate(user)


@router.post(
    "/theme",
    response_model=ThemeUpdateResponse,
    summary="Upload a theme background image",
)
async def upload_theme(
    principal: CurrentPrincipal,
    session: DbSession,
    store: Annotated[ObjectStore, Depends(get_object_store)],
    image: Annotated[UploadFile | None, File()] = None,
) -> ThemeUpdateResponse:
    if image is None:
        raise ValidationError("image file is required")
    user = await user_service.get_user(session, user_id=principal.id)
    if user is None:
        raise NotFound("User not found")

    max_bytes = get_settings().theme_max_bytes
    # one byte past the limit is enough to reject oversized uploads
    data = await image.read(max_bytes + 1)
    previous_url = user.theme_background_url
    url = await run_in_threadpool(
        user_service.store_theme_image,
        store,
        user_id=user.id,
        filename=image.filename,
        data=data,
        max_bytes=max_bytes,
    )
    await user_service.set_theme_background(session, user, url)
    if previous_url and previous_url != url:
        await run_in_threadpool(user_service.remove_theme_image, store, previous_url)
    return ThemeUpdateResponse(theme_background_url=url)
