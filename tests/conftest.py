"""Shared fixtures: in-memory storage, a recording sink and a fixed clock."""

from collections.abc import Callable
from datetime import date
from decimal import Decimal

import pytest

from fakes import OWNER_ID, REQUESTER_ID, TODAY, FixedClock, RecordingSink
from gardenshare.application.land_request_service import LandRequestService
from gardenshare.domain.entities import Garden, LandRequest
from gardenshare.domain.state_machines import LandRequestStatus
from gardenshare.infrastructure.unit_of_work import InMemoryStore


@pytest.fixture
def store() -> InMemoryStore:
    """Empty in-memory store."""
    return InMemoryStore()


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(TODAY)


@pytest.fixture
def service(store: InMemoryStore, sink: RecordingSink, clock: FixedClock) -> LandRequestService:
    """Land request service over the in-memory store."""
    return LandRequestService(store.unit_of_work, sink, clock=clock)


@pytest.fixture
def seed_garden(store: InMemoryStore) -> Callable[..., Garden]:
    """Put a garden straight into the store."""

    def _seed(total_land: str = "10", allocated_land: str = "0", owner_id: str = OWNER_ID, name: str = "Riverside Plots") -> Garden:
        garden = Garden.create(owner_id=owner_id, name=name, total_land=total_land)
        garden.allocated_land = Decimal(allocated_land).quantize(Decimal("0.01"))
        store.gardens[garden.id] = garden
        return garden

    return _seed


@pytest.fixture
def garden(seed_garden: Callable[..., Garden]) -> Garden:
    """A garden with 10 units of land and nothing allocated."""
    return seed_garden()


@pytest.fixture
def seed_request(store: InMemoryStore) -> Callable[..., LandRequest]:
    """Put a land request straight into the store in any status.

    Land-holding statuses are added to the garden's allocated land so the
    ledger stays consistent.
    """

    def _seed(
        garden: Garden,
        start_date: date,
        end_date: date,
        requested_land: str = "2",
        status: LandRequestStatus = LandRequestStatus.PENDING,
        requester_id: str = REQUESTER_ID,
    ) -> LandRequest:
        request = LandRequest.create(
            garden,
            requester_id=requester_id,
            requested_land=requested_land,
            start_date=start_date,
            end_date=end_date,
        )
        request.collect_events()
        request.status = status
        if status == LandRequestStatus.PENDING_EXTENSION:
            request.pre_extension_status = LandRequestStatus.ACTIVE
            request.previous_end_date = end_date
            request.proposed_end_date = end_date.replace(year=end_date.year + 1)
        if status.holds_land():
            stored = store.gardens[garden.id]
            stored.allocated_land += request.requested_land
        store.land_requests[request.id] = request
        return request

    return _seed
