"""Health endpoint smoke test."""

import pytest
from httpx import ASGITransport, AsyncClient

from taskmanager.main import app


@pytest.mark.asyncio
async def test_healthcheck_returns_ok() -> None:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        response = await client.get("/api/health")
    assert response.status_code == 200
    payload = response.json()
    assert payload["status"] == "ok"
    assert payload["service"] == "TaskManager API"
    assert payload["environment"] == "test"
    assert response.headers.get("X-Request-ID")


@pytest.mark.asyncio
async def test_root_points_at_docs() -> None:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        response = await client.get("/")
    assert response.status_code == 200
    assert "/api/docs" in response.text
