"""Tests for health, info and metrics endpoints."""

from fastapi import status
from fastapi.testclient import TestClient

from weather_reports.config import WeatherReportsConfig
from weather_reports.main import create_app


def test_health_check(client):
    """Test health check endpoint returns healthy status."""
    response = client.get("/health")

    assert response.status_code == status.HTTP_200_OK
    data = response.json()

    assert data["status"] == "healthy"
    assert data["database"] == "in-memory"
    assert "message" in data


def test_health_check_store_closed(client, store):
    """Test health check reports an unavailable store."""
    store.close()

    response = client.get("/health")

    assert response.status_code == status.HTTP_503_SERVICE_UNAVAILABLE
    assert response.json() == {"error": "Database connection failed"}


def test_root_endpoint(client):
    """Test root endpoint returns API information."""
    response = client.get("/")

    assert response.status_code == status.HTTP_200_OK
    data = response.json()

    assert data["service"] == "Weather Reports API"
    assert data["version"] == "1.0.0"
    assert "/docs" in data["documentation"]
    assert "/health" in data["health_check"]


def test_api_info_endpoint(client):
    """Test API info endpoint returns configuration."""
    response = client.get("/api/v1/info")

    assert response.status_code == status.HTTP_200_OK
    data = response.json()

    assert data["endpoints"]["weather"] == "/weather"
    assert "clear" in data["conditions"]
    assert "tornado" in data["conditions"]
    assert data["storage"]["in_memory"] is True


def test_metrics_endpoint(client):
    """Test Prometheus metrics endpoint."""
    client.post("/weather", json={"station": "ORD"})

    response = client.get("/metrics")

    assert response.status_code == status.HTTP_200_OK
    assert "text/plain" in response.headers["content-type"]

    content = response.text
    assert "weather_reports_api_requests_total" in content
    assert "weather_reports_store_operation_duration_seconds" in content


def test_response_headers(client):
    """Test request id and timing headers."""
    response = client.get("/weather")

    assert "X-Request-ID" in response.headers
    assert response.headers["X-Response-Time"].endswith("s")


def test_lifespan_opens_and_closes_owned_store(tmp_path):
    """Test that an app without an injected store manages its own."""
    config = WeatherReportsConfig(db_path=str(tmp_path / "weather.db"))
    app = create_app(config=config)

    with TestClient(app) as test_client:
        assert app.state.store.is_open
        created = test_client.post("/weather", json={"station": "ORD", "rain": True})
        assert created.status_code == status.HTTP_201_CREATED
        assert test_client.get("/health").json()["database"] == "connected"

    assert not app.state.store.is_open
    assert (tmp_path / "weather.db").exists()
