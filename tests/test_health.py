"""Tests for health check endpoints."""

from collections.abc import Iterator

import pytest
from fastapi.testclient import TestClient

from gardenshare.api.dependencies import get_uow_factory
from gardenshare.main import app


class UnreachableUnitOfWork:
    """Unit of work whose database never answers."""

    async def __aenter__(self):
        raise ConnectionError("database unreachable")

    async def __aexit__(self, *exc_info) -> None:
        return None


@pytest.fixture
def client(store) -> Iterator[TestClient]:
    """Create test client."""
    app.dependency_overrides[get_uow_factory] = lambda: store.unit_of_work
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_health_check(client: TestClient) -> None:
    """Test health endpoint returns healthy status."""
    response = client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert data["service"] == "gardenshare-api"
    assert "version" in data


def test_readiness_check(client: TestClient) -> None:
    """Test readiness endpoint returns ready status."""
    response = client.get("/ready")
    assert response.status_code == 200
    assert response.json()["status"] == "ready"


def test_readiness_check_without_database(client: TestClient) -> None:
    app.dependency_overrides[get_uow_factory] = lambda: UnreachableUnitOfWork
    response = client.get("/ready")
    assert response.status_code == 503
    assert response.json()["status"] == "unavailable"
