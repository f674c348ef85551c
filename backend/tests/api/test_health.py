"""
API tests for health probes and request tracing headers.
"""

import pytest
from httpx import AsyncClient


class TestHealth:
    @pytest.mark.asyncio
    async def test_root_health(self, async_client: AsyncClient):
        response = await async_client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["service"] == "autoparts-backend"

    @pytest.mark.asyncio
    async def test_liveness(self, async_client: AsyncClient):
        response = await async_client.get("/api/v1/health/live")

        assert response.status_code == 200
        assert response.json()["status"] == "alive"

    @pytest.mark.asyncio
    async def test_readiness(self, async_client: AsyncClient):
        response = await async_client.get("/api/v1/health/ready")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ready"
        assert data["checks"] == {"database": True}


class TestRequestHeaders:
    @pytest.mark.asyncio
    async def test_request_id_is_echoed(self, async_client: AsyncClient):
        response = await async_client.get(
            "/api/v1/health/live",
            headers={"X-Request-ID": "istek-123"},
        )

        assert response.headers["X-Request-ID"] == "istek-123"
        assert "X-Response-Time" in response.headers

    @pytest.mark.asyncio
    async def test_security_headers(self, async_client: AsyncClient):
        response = await async_client.get("/api/v1/health/live")

        assert response.headers["X-Content-Type-Options"] == "nosniff"
        assert response.headers["X-Frame-Options"] == "DENY"

    @pytest.mark.asyncio
    async def test_error_carries_request_id(self, async_client: AsyncClient):
        response = await async_client.get(
            "/api/v1/vehicles/12345",
            headers={"X-Request-ID": "istek-456"},
        )

        assert response.status_code == 404
        assert response.json()["error"]["request_id"] == "istek-456"
