"""Tests for health, readiness and correlation ids."""

import uuid

import pytest

pytestmark = pytest.mark.integration


def test_health(api_client):
    response = api_client.get("/api/health")
    assert response.status_code == 200
    assert response.json() == {"status": "healthy", "service": "stagegate"}


def test_health_returns_503_while_draining(api_client):
    api_client.app.state.shutting_down = True
    response = api_client.get("/api/health")
    assert response.status_code == 503


def test_ready(api_client):
    response = api_client.get("/api/ready")
    assert response.status_code == 200
    assert response.json()["checks"] == {"database": True}


def test_response_includes_correlation_id_header(api_client):
    response = api_client.get("/api/health")
    uuid.UUID(response.headers["x-request-id"])


def test_custom_correlation_id_echoed(api_client):
    response = api_client.get("/api/health", headers={"X-Request-ID": "custom-id-123"})
    assert response.headers["x-request-id"] == "custom-id-123"


def test_error_response_includes_debug_id(api_client):
    response = api_client.get(f"/api/projects/{uuid.uuid4()}/history")

    assert response.status_code == 401
    data = response.json()
    uuid.UUID(data["debug_id"])
    assert "traceback" not in response.text.lower()
