"""Registration, login and password reset API tests."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest
from httpx import AsyncClient
from sqlalchemy import select

from taskmanager.core.security import decode_access_token, hash_reset_token
from taskmanager.db.session import Database
from taskmanager.models import User

pytestmark = pytest.mark.asyncio


async def _register(
    client: AsyncClient,
    email: str = "casey@example.com",
    password: str = "Passw0rd!",
    name: str | None = "Casey",
):
    payload = {"email": email, "password": password, "name": name}
    return await client.post("/api/auth/register", json=payload)


async def _forgot(client: AsyncClient, email: str) -> dict:
    response = await client.post("/api/auth/forgot", json={"email": email})
    assert response.status_code == 200
    return response.json()


async def _load_user(database: Database, email: str) -> User:
    async with database.session() as session:
        result = await session.execute(select(User).where(User.email == email))
        return result.scalar_one()


async def test_register_returns_user_and_token(client: AsyncClient) -> None:
    response = await _register(client)
    assert response.status_code == 201
    body = response.json()
    assert body["user"]["email"] == "casey@example.com"
    assert body["user"]["name"] == "Casey"
    assert "hashedPassword" not in body["user"]

    claims = decode_access_token(body["token"])
    assert claims.subject == body["user"]["id"]
    assert claims.email == "casey@example.com"
    assert claims.name == "Casey"


async def test_register_normalises_email_and_blank_name(client: AsyncClient) -> None:
    response = await _register(client, email="Mixed.Case@Example.com", name="   ")
    assert response.status_code == 201
    user = response.json()["user"]
    assert user["email"] == "mixed.case@example.com"
    assert user["name"] is None


async def test_register_duplicate_email_conflicts(client: AsyncClient) -> None:
    assert (await _register(client)).status_code == 201
    duplicate = await _register(client, email="CASEY@example.com")
    assert duplicate.status_code == 409
    assert duplicate.json()["error"] == "EmailAlreadyExists"


@pytest.mark.parametrize(
    "payload",
    [
        {"email": "not-an-email", "password": "Passw0rd!"},
        {"email": "short@example.com", "password": "short"},
        {"password": "Passw0rd!"},
    ],
)
async def test_register_rejects_invalid_payload(
    client: AsyncClient, payload: dict
) -> None:
    response = await client.post("/api/auth/register", json=payload)
    assert response.status_code == 400
    body = response.json()
    assert body["error"] == "ValidationError"
    assert body["details"]


async def test_login_issues_token(client: AsyncClient) -> None:
    await _register(client)
    response = await client.post(
        "/api/auth/login",
        json={"email": "casey@example.com", "password": "Passw0rd!"},
    )
    assert response.status_code == 200
    body = response.json()
    assert body["user"]["email"] == "casey@example.com"
    assert decode_access_token(body["token"]).email == "casey@example.com"


async def test_login_failures_are_indistinguishable(client: AsyncClient) -> None:
    await _register(client)
    wrong_password = await client.post(
        "/api/auth/login",
        json={"email": "casey@example.com", "password": "nope-nope"},
    )
    unknown_email = await client.post(
        "/api/auth/login",
        json={"email": "ghost@example.com", "password": "Passw0rd!"},
    )
    assert wrong_password.status_code == unknown_email.status_code == 401
    assert wrong_password.json() == unknown_email.json()
    assert wrong_password.json()["error"] == "InvalidCredentials"


async def test_forgot_for_unknown_email_is_ok(client: AsyncClient) -> None:
    body = await _forgot(client, "ghost@example.com")
    assert body == {"ok": True}


async def test_forgot_stores_only_token_hash(
    client: AsyncClient, database: Database
) -> None:
    await _register(client)
    body = await _forgot(client, "casey@example.com")
    assert body["ok"] is True
    token = body["token"]

    user = await _load_user(database, "casey@example.com")
    assert user.password_reset_token_hash == hash_reset_token(token)
    assert user.password_reset_token_hash != token
    expires = user.password_reset_expires
    if expires.tzinfo is None:
        expires = expires.replace(tzinfo=timezone.utc)
    remaining = expires - datetime.now(timezone.utc)
    assert timedelta(minutes=55) < remaining <= timedelta(hours=1)


async def test_forgot_hides_token_in_production(
    client: AsyncClient, settings
) -> None:
    await _register(client)
    settings.app_env = "production"
    body = await _forgot(client, "casey@example.com")
    assert body == {"ok": True}


async def test_reset_password_flow(client: AsyncClient, database: Database) -> None:
    await _register(client)
    token = (await _forgot(client, "casey@example.com"))["token"]

    reset = await client.post(
        "/api/auth/reset",
        json={"token": token, "password": "N3wPassword!", "name": "Casey Jones"},
    )
    assert reset.status_code == 200
    body = reset.json()
    assert body["user"]["name"] == "Casey Jones"
    assert decode_access_token(body["token"]).name == "Casey Jones"

    user = await _load_user(database, "casey@example.com")
    assert user.password_reset_token_hash is None
    assert user.password_reset_expires is None

    old_login = await client.post(
        "/api/auth/login",
        json={"email": "casey@example.com", "password": "Passw0rd!"},
    )
    assert old_login.status_code == 401
    new_login = await client.post(
        "/api/auth/login",
        json={"email": "casey@example.com", "password": "N3wPassword!"},
    )
    assert new_login.status_code == 200

    replay = await client.post(
        "/api/auth/reset", json={"token": token, "password": "An0therPass!"}
    )
    assert replay.status_code == 400
    assert replay.json()["error"] == "InvalidOrExpiredResetToken"


async def test_reset_keeps_name_when_omitted(client: AsyncClient) -> None:
    await _register(client)
    token = (await _forgot(client, "casey@example.com"))["token"]
    reset = await client.post(
        "/api/auth/reset", json={"token": token, "password": "N3wPassword!"}
    )
    assert reset.status_code == 200
    assert reset.json()["user"]["name"] == "Casey"


async def test_reset_rejects_unknown_token(client: AsyncClient) -> None:
    response = await client.post(
        "/api/auth/reset", json={"token": "0" * 64, "password": "N3wPassword!"}
    )
    assert response.status_code == 400
    assert response.json()["error"] == "InvalidOrExpiredResetToken"


async def test_reset_rejects_expired_token(
    client: AsyncClient, database: Database
) -> None:
    await _register(client)
    token = (await _forgot(client, "casey@example.com"))["token"]

    async with database.session() as session:
        result = await session.execute(
            select(User).where(User.email == "casey@example.com")
        )
        user = result.scalar_one()
        user.password_reset_expires = datetime.now(timezone.utc) - timedelta(minutes=1)
        await session.commit()

    response = await client.post(
        "/api/auth/reset", json={"token": token, "password": "N3wPassword!"}
    )
    assert response.status_code == 400
    assert response.json()["error"] == "InvalidOrExpiredResetToken"


async def test_new_forgot_request_supersedes_previous_token(
    client: AsyncClient,
) -> None:
    await _register(client)
    first = (await _forgot(client, "casey@example.com"))["token"]
    second = (await _forgot(client, "casey@example.com"))["token"]
    assert first != second

    stale = await client.post(
        "/api/auth/reset", json={"token": first, "password": "N3wPassword!"}
    )
    assert stale.status_code == 400

    fresh = await client.post(
        "/api/auth/reset", json={"token": second, "password": "N3wPassword!"}
    )
    assert fresh.status_code == 200


async def test_register_limits_password_bytes_not_characters(
    client: AsyncClient,
) -> None:
    too_long = await _register(client, password="é" * 40)
    assert too_long.status_code == 400
    assert too_long.json()["error"] == "ValidationError"

    at_limit = await _register(client, password="é" * 36)
    assert at_limit.status_code == 201


async def test_reset_rejects_password_over_byte_limit(client: AsyncClient) -> None:
    await _register(client)
    token = (await _forgot(client, "casey@example.com"))["token"]
    response = await client.post(
        "/api/auth/reset", json={"token": token, "password": "é" * 40}
    )
    assert response.status_code == 400
    assert response.json()["error"] == "ValidationError"
