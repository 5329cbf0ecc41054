"""Security utilities for hashing and JWT handling."""

from __future__ import annotations

import hashlib
import secrets
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any

import bcrypt
from jose import JWTError, jwt

from taskmanager.core.config import get_settings


class InvalidToken(Exception):
    """Raised when a bearer token cannot be verified."""


@dataclass(frozen=True)
class TokenClaims:
    """Identity carried by a verified bearer token."""

    subject: str
    email: str
    name: str | None = None


MAX_PASSWORD_BYTES = 72
"""bcrypt only reads this many bytes of a password."""


def password_too_long(password: str) -> bool:
    return len(password.encode()) > MAX_PASSWORD_BYTES


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Check a password against its hash using bcrypt."""
    try:
        return bcrypt.checkpw(plain_password.encode(), hashed_password.encode())
    except (ValueError, TypeError):  # guard against malformed hashes
        return False


def get_password_hash(password: str) -> str:
    """Hash a password for storage using bcrypt.

    Raises ``ValueError`` for passwords over ``MAX_PASSWORD_BYTES``.
    """
    if password_too_long(password):
        raise ValueError(
            f"password cannot be longer than {MAX_PASSWORD_BYTES} bytes"
        )
    return bcrypt.hashpw(password.encode(), bcrypt.gensalt()).decode()


def create_access_token(
    subject: str,
    *,
    email: str,
    name: str | None = None,
    expires_delta: timedelta | None = None,
) -> str:
    """Create a signed JWT carrying the subject, email and display name."""
    settings = get_settings()
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.access_token_expire_minutes)
    issued_at = datetime.now(UTC)
    claims: dict[str, Any] = {
        "sub": subject,
        "email": email,
        "name": name,
        "iat": issued_at,
        "exp": issued_at + expires_delta,
    }
    return jwt.encode(claims, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> TokenClaims:
    """Verify a JWT and return its claims, raising InvalidToken on failure."""
    settings = get_settings()
    try:
        payload = jwt.decode(
            token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm]
        )
    except JWTError as exc:
        raise InvalidToken(str(exc)) from exc

    subject = payload.get("sub")
    email = payload.get("email")
    if not isinstance(subject, str) or not isinstance(email, str):
        raise InvalidToken("Token payload is missing identity claims")
    name = payload.get("name")
    return TokenClaims(
        subject=subject, email=email, name=name if isinstance(name, str) else None
    )


def generate_reset_token() -> str:
    """Return a fresh random password reset token."""
    return secrets.token_hex(32)


def hash_reset_token(raw: str) -> str:
    return hashlib.sha256(raw.encode("utf-8")).hexdigest()
