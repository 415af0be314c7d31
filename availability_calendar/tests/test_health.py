import pytest
from httpx import AsyncClient


class TestHealthCheck:

    @pytest.mark.asyncio
    async def test_health_check(self, async_client: AsyncClient):
        response = await async_client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert "version" in data


class TestAPIDocumentation:

    @pytest.mark.asyncio
    async def test_openapi_schema_lists_availability_routes(self, async_client: AsyncClient):
        response = await async_client.get("/api/openapi.json")

        assert response.status_code == 200
        paths = response.json()["paths"]
        assert "/api/availability/month" in paths
        assert "/api/availability/month/me" in paths
        assert "/api/availability/toggle" in paths

    @pytest.mark.asyncio
    async def test_process_time_header(self, async_client: AsyncClient):
        response = await async_client.get("/health")

        assert "x-process-time" in response.headers
