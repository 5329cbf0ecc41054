"""Profile and theme upload API tests."""

from __future__ import annotations

import asyncio
from io import BytesIO

import pytest
from httpx import AsyncClient
from PIL import Image

from taskmanager.integrations import ObjectStore

pytestmark = pytest.mark.asyncio


def _png_bytes(width: int = 32, height: int = 16) -> bytes:
    image = Image.new("RGB", (width, height), color=(20, 120, 200))
    buffer = BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()


async def _signup(client: AsyncClient) -> tuple[str, dict[str, str]]:
    response = await client.post(
        "/api/auth/register",
        json={"email": "dana@example.com", "password": "Passw0rd!", "name": "Dana"},
    )
    assert response.status_code == 201
    body = response.json()
    return body["user"]["id"], {"Authorization": f"Bearer {body['token']}"}


async def test_me_returns_profile(client: AsyncClient) -> None:
    user_id, headers = await _signup(client)
    response = await client.get("/api/user/me", headers=headers)
    assert response.status_code == 200
    assert response.json() == {
        "id": user_id,
        "email": "dana@example.com",
        "name": "Dana",
        "themeBackgroundUrl": None,
    }


async def test_me_requires_token(client: AsyncClient) -> None:
    response = await client.get("/api/user/me")
    assert response.status_code == 401
    assert response.json()["error"] == "Unauthorized"


async def test_theme_upload_stores_file_and_updates_profile(
    client: AsyncClient, object_store: ObjectStore
) -> None:
    user_id, headers = await _signup(client)
    png = _png_bytes()
    response = await client.post(
        "/api/user/theme",
        files={"image": ("background.png", png, "image/png")},
        headers=headers,
    )
    assert response.status_code == 200, response.text
    body = response.json()
    assert body["ok"] is True
    url = body["themeBackgroundUrl"]
    assert url.startswith(f"/uploads/themes/{user_id}-")
    assert url.endswith(".png")

    stored = object_store.root / url.removeprefix("/uploads/")
    assert stored.read_bytes() == png

    profile = await client.get("/api/user/me", headers=headers)
    assert profile.json()["themeBackgroundUrl"] == url


async def test_theme_upload_uses_detected_format(client: AsyncClient) -> None:
    _, headers = await _signup(client)
    response = await client.post(
        "/api/user/theme",
        files={"image": ("upload.bin", _png_bytes(), "application/octet-stream")},
        headers=headers,
    )
    assert response.status_code == 200
    assert response.json()["themeBackgroundUrl"].endswith(".png")


async def test_theme_upload_requires_file(client: AsyncClient) -> None:
    _, headers = await _signup(client)
    response = await client.post(
        "/api/user/theme", data={"note": "no file"}, headers=headers
    )
    assert response.status_code == 400
    assert response.json()["error"] == "ValidationError"


async def test_theme_upload_rejects_non_image(client: AsyncClient) -> None:
    _, headers = await _signup(client)
    response = await client.post(
        "/api/user/theme",
        files={"image": ("notes.png", b"definitely not pixels", "image/png")},
        headers=headers,
    )
    assert response.status_code == 400


async def test_theme_upload_rejects_oversized_file(
    client: AsyncClient, object_store: ObjectStore, settings
) -> None:
    _, headers = await _signup(client)
    png = _png_bytes(width=256, height=256)
    settings.theme_max_bytes = len(png) - 1

    response = await client.post(
        "/api/user/theme",
        files={"image": ("big.png", png, "image/png")},
        headers=headers,
    )
    assert response.status_code == 400
    assert "limit" in response.json()["detail"]
    assert not (object_store.root / "themes").exists()

    profile = await client.get("/api/user/me", headers=headers)
    assert profile.json()["themeBackgroundUrl"] is None


async def test_theme_upload_requires_token(client: AsyncClient) -> None:
    response = await client.post(
        "/api/user/theme", files={"image": ("bg.png", _png_bytes(), "image/png")}
    )
    assert response.status_code == 401


async def test_new_theme_replaces_previous_file(
    client: AsyncClient, object_store: ObjectStore
) -> None:
    _, headers = await _signup(client)
    first = await client.post(
        "/api/user/theme",
        files={"image": ("one.png", _png_bytes(10, 10), "image/png")},
        headers=headers,
    )
    first_url = first.json()["themeBackgroundUrl"]
    first_path = object_store.root / first_url.removeprefix("/uploads/")
    assert first_path.exists()

    await asyncio.sleep(0.01)
    second = await client.post(
        "/api/user/theme",
        files={"image": ("two.png", _png_bytes(20, 20), "image/png")},
        headers=headers,
    )
    assert second.status_code == 200
    second_url = second.json()["themeBackgroundUrl"]
    assert second_url != first_url

    assert not first_path.exists()
    remaining = list((object_store.root / "themes").iterdir())
    assert [path.name for path in remaining] == [second_url.rsplit("/", 1)[1]]
