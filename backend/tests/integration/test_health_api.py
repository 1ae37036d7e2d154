"""
Integration Tests for health and root endpoints
"""
from httpx import AsyncClient


async def test_health(client: AsyncClient):
    response = await client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


async def test_liveness(client: AsyncClient):
    response = await client.get("/health/live")

    assert response.status_code == 200
    assert response.json()["status"] == "alive"


async def test_readiness_with_schema(client: AsyncClient):
    response = await client.get("/health/ready")

    assert response.status_code == 200
    body = response.json()
    assert body["checks"]["database"]["tables_ready"] is True
    assert body["checks"]["email"]["configured"] is False


async def test_root(client: AsyncClient):
    response = await client.get("/")

    assert response.status_code == 200
    assert response.json()["health"] == "/health"


async def test_security_headers(client: AsyncClient):
    response = await client.get("/health/live")

    assert response.headers["X-Content-Type-Options"] == "nosniff"
    assert "X-Request-ID" in response.headers
