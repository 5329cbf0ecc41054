"""Authentication schemas."""
from __future__ import annotations

from typing import Annotated

from pydantic import AfterValidator, EmailStr, Field, StringConstraints

from taskmanager.core.security import MAX_PASSWORD_BYTES, password_too_long
from taskmanager.schemas.common import CamelModel
from taskmanager.schemas.user import UserPublic


def _normalise_name(value: str | None) -> str | None:
    if value is None:
        return None
    stripped = value.strip()
    return stripped or None


DisplayName = Annotated[
    Annotated[str, StringConstraints(max_length=200)] | None,
    AfterValidator(_normalise_name),
]


def _check_password_bytes(value: str) -> str:
    if password_too_long(value):
        raise ValueError(f"password must be at most {MAX_PASSWORD_BYTES} bytes")
    return value


NewPassword = Annotated[
    str,
    StringConstraints(min_length=8, max_length=MAX_PASSWORD_BYTES),
    AfterValidator(_check_password_bytes),
]


class LoginRequest(CamelModel):
    """Login payload."""

    email: EmailStr
    password: str = Field(min_length=1, max_length=72)


class RegisterRequest(CamelModel):
    """Self-service registration payload."""

    email: EmailStr
    password: NewPassword
    name: DisplayName = None


class AuthResponse(CamelModel):
    """Issued bearer token with the public user view."""

    user: UserPublic
    token: str


class ForgotPasswordRequest(CamelModel):
    """Request body to initiate a password reset."""

    email: EmailStr


class ForgotPasswordResponse(CamelModel):
    """Always ``ok``; ``token`` is only populated outside production."""

    ok: bool = True
    token: str | None = None


class ResetPasswordRequest(CamelModel):
    """Payload to finalize a password reset."""

    token: str = Field(min_length=1)
    password: NewPassword
    name: DisplayName = None
