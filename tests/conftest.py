"""Test configuration and fixtures."""

import pytest
from fastapi.testclient import TestClient

from weather_reports.config import MEMORY_DB_PATH, WeatherReportsConfig
from weather_reports.main import create_app
from weather_reports.store import ObservationStore


@pytest.fixture
def test_config():
    """Configuration for an in-memory store."""
    return WeatherReportsConfig(db_path=MEMORY_DB_PATH)


@pytest.fixture(scope="function")
def store():
    """Fresh in-memory observation store."""
    with ObservationStore(db_path=MEMORY_DB_PATH) as observation_store:
        yield observation_store


@pytest.fixture(scope="function")
def client(test_config, store):
    """Create a test client serving the test store."""
    app = create_app(config=test_config, store=store)

    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def sample_reports(store):
    """Create sample reports for two stations."""
    reports = [
        store.create("ORD", {"fog": True}),
        store.create("ORD", {"rain": True, "thunder": True}),
        store.create("ORD"),
        store.create("LAX"),
        store.create("LAX", {"fog": True, "rain": False}),
    ]
    return reports
