from __future__ import annotations

from typing import TYPE_CHECKING
from unittest.mock import AsyncMock

from httpx import ASGITransport, AsyncClient
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from vacation_portal.db import get_session
from vacation_portal.main import app

if TYPE_CHECKING:
    from collections.abc import AsyncIterator


async def test_health_ok_with_database(async_client: AsyncClient) -> None:
    response = await async_client.get("/health")
    assert response.status_code == 200
    assert response.json() == {
        "status": "ok",
        "name": "Vacation Portal",
        "version": "0.1.0",
        "environment": "development",
    }


async def test_health_needs_no_identity(async_client: AsyncClient) -> None:
    response = await async_client.get("/health", headers={"X-Role": "nobody"})
    assert response.status_code == 200


async def test_health_degraded_when_database_unreachable() -> None:
    broken = AsyncMock(spec=AsyncSession)
    broken.execute.side_effect = OperationalError("SELECT 1", {}, ConnectionRefusedError("connection refused"))

    async def _broken_session() -> AsyncIterator[AsyncSession]:
        yield broken

    app.dependency_overrides[get_session] = _broken_session
    try:
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
            response = await client.get("/health")
    finally:
        app.dependency_overrides.clear()
    assert response.status_code == 200
    assert response.json()["status"] == "degraded"


async def test_cors_preflight_allows_identity_headers(async_client: AsyncClient) -> None:
    response = await async_client.options(
        "/api/requests",
        headers={
            "Origin": "http://localhost:5173",
            "Access-Control-Request-Method": "POST",
            "Access-Control-Request-Headers": "X-User-Id, X-Role",
        },
    )
    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == "http://localhost:5173"
    allowed = response.headers["access-control-allow-headers"].lower()
    assert "x-user-id" in allowed
    assert "x-role" in allowed


async def test_openapi_lists_api_routes(async_client: AsyncClient) -> None:
    response = await async_client.get("/openapi.json")
    schema = response.json()
    assert schema["info"]["title"] == "Vacation Portal"
    assert "/api/requests/{request_id}/approve" in schema["paths"]
    assert "/api/me/pending-password/respond" in schema["paths"]
    assert "/api/users/{user_id}/proposals" in schema["paths"]
