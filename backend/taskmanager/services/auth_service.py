"""Registration, login and password reset flows."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from functools import lru_cache

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from taskmanager.core.config import get_settings
from taskmanager.core.errors import (
    EmailAlreadyExists,
    InvalidCredentials,
    InvalidOrExpiredResetToken,
    ValidationError,
)
from taskmanager.core.security import (
    create_access_token,
    generate_reset_token,
    get_password_hash,
    hash_reset_token,
    password_too_long,
    verify_password,
)
from taskmanager.models.user import User
from taskmanager.services import user_service

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuthResult:
    """A user together with a freshly issued bearer token."""

    user: User
    token: str


def _utcnow() -> datetime:
    return datetime.now(UTC)


@lru_cache
def _dummy_password_hash() -> str:
    return get_password_hash(generate_reset_token()[:32])


def create_access_token_for_user(user: User) -> str:
    """Generate a JWT for a user."""
    return create_access_token(str(user.id), email=user.email, name=user.name)


async def register(
    session: AsyncSession, *, email: str, password: str, name: str | None = None
) -> AuthResult:
    """Create an account and sign the caller in."""
    existing = await user_service.get_user_by_email(session, email=email)
    if existing is not None:
        raise EmailAlreadyExists()
    user = await user_service.create_user(
        session, email=email, password=password, name=name
    )
    logger.info("Registered user %s", user.id)
    return AuthResult(user=user, token=create_access_token_for_user(user))


async def authenticate_user(
    session: AsyncSession, *, email: str, password: str
) -> User | None:
    """Validate credentials and return a user if correct."""
    user = await user_service.get_user_by_email(session, email=email)
    if user is None:
        # unknown emails pay the same bcrypt cost as wrong passwords
        verify_password(password, _dummy_password_hash())
        return None
    if not verify_password(password, user.hashed_password):
        return None
    return user


async def login(session: AsyncSession, *, email: str, password: str) -> AuthResult:
    """Issue a token for valid credentials.

    Unknown emails and wrong passwords raise the same error.
    """
    user = await authenticate_user(session, email=email, password=password)
    if user is None:
        logger.info("Rejected login attempt")
        raise InvalidCredentials()
    return AuthResult(user=user, token=create_access_token_for_user(user))


async def request_password_reset(
    session: AsyncSession, *, email: str
) -> tuple[str, User] | None:
    """Store a new reset token hash for ``email`` and return the raw token.

    Returns ``None`` when no such user exists; callers must answer the same
    way in both cases. Any earlier pending token is overwritten.
    """
    user = await user_service.get_user_by_email(session, email=email)
    if user is None:
        logger.info("Password reset requested for unknown email")
        return None

    ttl = timedelta(minutes=get_settings().password_reset_ttl_minutes)
    raw_token = generate_reset_token()
    user.password_reset_token_hash = hash_reset_token(raw_token)
    user.password_reset_expires = _utcnow() + ttl
    await session.commit()
    logger.info("Password reset requested for user %s", user.id)
    return raw_token, user


async def complete_password_reset(
    session: AsyncSession,
    *,
    token: str,
    password: str,
    name: str | None = None,
) -> AuthResult:
    """Consume a reset token, set the new password and sign the user in.

    The token is cleared by a conditional UPDATE; when concurrent calls
    race on one token only the call whose UPDATE matches a row succeeds.
    """
    if password_too_long(password):
        raise ValidationError("password is too long")
    token_hash = hash_reset_token(token)
    result = await session.execute(
        select(User).where(
            User.password_reset_token_hash == token_hash,
            User.password_reset_expires > _utcnow(),
        )
    )
    user = result.scalar_one_or_none()
    if user is None:
        raise InvalidOrExpiredResetToken()

    values: dict[str, object] = {
        "hashed_password": get_password_hash(password),
        "password_reset_token_hash": None,
        "password_reset_expires": None,
    }
    if name:
        values["name"] = name
    consumed = await session.execute(
        update(User)
        .where(
            User.id == user.id,
            User.password_reset_token_hash == token_hash,
            User.password_reset_expires > _utcnow(),
        )
        .values(**values)
        .execution_options(synchronize_session=False)
    )
    if consumed.rowcount != 1:
        await session.rollback()
        raise InvalidOrExpiredResetToken()
    await session.commit()
    await session.refresh(user)
    logger.info("Password reset completed for user %s", user.id)
    return AuthResult(user=user, token=create_access_token_for_user(user))
