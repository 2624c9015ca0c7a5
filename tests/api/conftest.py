"""Shared fixtures for API tests.

The app runs on the in-memory store with a recording sink and a fixed
clock, swapped in through dependency overrides.
"""

from collections.abc import Iterator

import pytest
from fastapi.testclient import TestClient

from fakes import OWNER_ID, REQUESTER_ID, FixedClock, RecordingSink, auth_headers
from gardenshare.api.dependencies import get_clock, get_sink, get_uow_factory
from gardenshare.infrastructure.unit_of_work import InMemoryStore
from gardenshare.main import app


@pytest.fixture
def client(store: InMemoryStore, sink: RecordingSink, clock: FixedClock) -> Iterator[TestClient]:
    """Create test client without authentication."""
    app.dependency_overrides[get_uow_factory] = lambda: store.unit_of_work
    app.dependency_overrides[get_sink] = lambda: sink
    app.dependency_overrides[get_clock] = lambda: clock
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def owner_headers() -> dict[str, str]:
    return auth_headers(OWNER_ID)


@pytest.fixture
def requester_headers() -> dict[str, str]:
    return auth_headers(REQUESTER_ID)
