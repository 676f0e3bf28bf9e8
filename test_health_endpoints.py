"""Operational endpoints and request tracing."""

from cpa_auth.config import get_settings


async def test_health_endpoint(client):
    response = await client.get("/health")

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["status"] == "healthy"
    assert data["service"] == get_settings().app_name
    assert "version" in data


async def test_readiness_endpoint(client):
    response = await client.get("/health/ready")

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["status"] == "ready"
    assert data["database"] == "connected"


async def test_root_endpoint(client):
    response = await client.get("/")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "running"
    assert body["verification_uri"] == get_settings().oauth.verification_uri
    assert "registration_client_uri" in body


async def test_request_id_generated(client):
    response = await client.get("/health")

    assert response.headers["x-request-id"]


async def test_request_id_propagated(client):
    response = await client.get("/health", headers={"X-Request-ID": "req-123"})

    assert response.headers["x-request-id"] == "req-123"
