"""Authentication endpoints."""

from __future__ import annotations

from fastapi import APIRouter, BackgroundTasks, status

from taskmanager.api.deps import DbSession
from taskmanager.api.rate_limit import AUTH_RATE_LIMIT
from taskmanager.core.config import get_settings
from taskmanager.schemas.auth import (
    AuthResponse,
    ForgotPasswordRequest,
    ForgotPasswordResponse,
    LoginRequest,
    RegisterRequest,
    ResetPasswordRequest,
)
from taskmanager.schemas.user import UserPublic
from taskmanager.services import auth_service, notification_service
from taskmanager.services.auth_service import AuthResult

router = APIRouter(dependencies=[AUTH_RATE_LIMIT])


def _auth_response(result: AuthResult) -> AuthResponse:
    return AuthResponse(
        user=UserPublic.model_validate(result.user), token=result.token
    )


@router.post(
    "/register",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a new account",
)
async def register(payload: RegisterRequest, session: DbSession) -> AuthResponse:
    result = await auth_service.register(
        session, email=payload.email, password=payload.password, name=payload.name
    )
    return _auth_response(result)


@router.post("/login", response_model=AuthResponse, summary="Obtain access token")
async def login(payload: LoginRequest, session: DbSession) -> AuthResponse:
    """Validate credentials and issue a bearer token."""
    result = await auth_service.login(
        session, email=payload.email, password=payload.password
    )
    return _auth_response(result)


@router.post(
    "/forgot",
    response_model=ForgotPasswordResponse,
    response_model_exclude_none=True,
    summary="Request password reset",
)
async def forgot_password(
    payload: ForgotPasswordRequest,
    session: DbSession,
    background_tasks: BackgroundTasks,
) -> ForgotPasswordResponse:
    """Always answers ``ok`` so callers cannot tell which emails exist."""
    issued = await auth_service.request_password_reset(session, email=payload.email)
    if issued is None:
        return ForgotPasswordResponse()

    raw_token, user = issued
    subject, body = notification_service.build_password_reset_email(
        name=user.name, token=raw_token
    )
    notification_service.schedule_email(
        background_tasks, recipients=[user.email], subject=subject, body=body
    )
    if get_settings().is_production:
        return ForgotPasswordResponse()
    return ForgotPasswordResponse(token=raw_token)


@router.post("/reset", response_model=AuthResponse, summary="Confirm password reset")
async def reset_password(
    payload: ResetPasswordRequest, session: DbSession
) -> AuthResponse:
    result = await auth_service.complete_password_reset(
        session, token=payload.token, password=payload.password, name=payload.name
    )
    return _auth_response(result)
