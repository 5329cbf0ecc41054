"""Common API dependencies."""

from __future__ import annotations

import uuid
from collections.abc import AsyncGenerator
from dataclasses import dataclass
from typing import Annotated

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from taskmanager.core.errors import Unauthorized
from taskmanager.core.security import InvalidToken, decode_access_token
from taskmanager.db.session import Database
from taskmanager.integrations import ObjectStore

bearer_scheme = HTTPBearer(auto_error=False, bearerFormat="JWT")


@dataclass(frozen=True)
class Principal:
    """Authenticated caller, derived only from a verified bearer token."""

    id: uuid.UUID
    email: str
    name: str | None = None


def get_database(request: Request) -> Database:
    """Return the database handle opened by the application lifespan."""
    database: Database | None = getattr(request.app.state, "database", None)
    if database is None or not database.is_connected:
        raise RuntimeError("Database handle is not available")
    return database


def get_object_store(request: Request) -> ObjectStore:
    return request.app.state.object_store


async def get_db_session(
    database: Annotated[Database, Depends(get_database)],
) -> AsyncGenerator[AsyncSession, None]:
    """Provide an async database session."""
    async with database.session() as session:
        yield session


async def get_current_principal(
    credentials: Annotated[
        HTTPAuthorizationCredentials | None, Depends(bearer_scheme)
    ],
) -> Principal:
    """Authenticate request via bearer token."""
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise Unauthorized()
    try:
        claims = decode_access_token(credentials.credentials)
        subject = uuid.UUID(claims.subject)
    except (InvalidToken, ValueError) as exc:
        raise Unauthorized() from exc
    return Principal(id=subject, email=claims.email, name=claims.name)


CurrentPrincipal = Annotated[Principal, Depends(get_current_principal)]
DbSession = Annotated[AsyncSession, Depends(get_db_session)]
