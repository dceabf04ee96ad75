"""Tests for the health endpoint and app wiring."""
from fastapi.testclient import TestClient
from apps.api.main import app

client = TestClient(app)


def test_health_returns_200():
    response = client.get("/api/v1/health")
    assert response.status_code == 200


def test_health_returns_status_ok():
    data = client.get("/api/v1/health").json()
    assert data["status"] == "healthy"
    assert data["service"] == "api"


def test_response_carries_request_id():
    response = client.get("/api/v1/health", headers={"X-Request-ID": "req-abc"})
    assert response.headers["X-Request-ID"] == "req-abc"


def test_transactions_route_is_mounted():
    response = client.get("/api/v1/transactions")
    assert response.status_code == 401
    assert response.json()["title"] == "Unauthorized"
