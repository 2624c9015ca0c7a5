"""Tests for land request API endpoints.

Tests the allocation flow including:
- Reading a request as requester, owner or stranger
- Owner decisions and the resulting garden totals
- Extension requests and decisions
- Listing the caller's allocations
"""

from datetime import date, timedelta
from decimal import Decimal

from fastapi import status

from fakes import OTHER_REQUESTER_ID, REQUESTER_ID, TODAY, auth_headers
from gardenshare.domain.state_machines import LandRequestStatus


# ============================================================================
# Test: Get Land Request
# ============================================================================


class TestGetLandRequest:
    """Tests for GET /requests/{id}."""

    def test_requester_reads_request(self, client, garden, seed_request, requester_headers) -> None:
        request = seed_request(garden, TODAY, TODAY + timedelta(days=30))

        response = client.get(f"/requests/{request.id}", headers=requester_headers)

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["garden_name"] == garden.name

    def test_owner_reads_request(self, client, garden, seed_request, owner_headers) -> None:
        request = seed_request(garden, TODAY, TODAY + timedelta(days=30))

        response = client.get(f"/requests/{request.id}", headers=owner_headers)

        assert response.status_code == status.HTTP_200_OK

    def test_stranger_forbidden(self, client, garden, seed_request) -> None:
        request = seed_request(garden, TODAY, TODAY + timedelta(days=30))

        response = client.get(f"/requests/{request.id}", headers=auth_headers(OTHER_REQUESTER_ID))

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.json()["error_code"] == "UNAUTHORIZED"

    def test_unknown_request(self, client, requester_headers) -> None:
        response = client.get("/requests/missing", headers=requester_headers)

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.json()["error_code"] == "NOT_FOUND"


# ============================================================================
# Test: Decide Land Request
# ============================================================================


class TestDecideLandRequest:
    """Tests for PATCH /requests/{id}."""

    def test_approve_activates_current_request(self, client, store, garden, seed_request, owner_headers) -> None:
        request = seed_request(garden, TODAY, TODAY + timedelta(days=30), requested_land="3")

        response = client.patch(f"/requests/{request.id}", json={"status": "approved"}, headers=owner_headers)

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["status"] == "active"
        assert data["allocated_land"] == "3.00"
        assert data["superseded"] == []
        assert data["decided_at"] is not None
        assert store.gardens[garden.id].allocated_land == Decimal("3.00")

    def test_approve_future_request(self, client, garden, seed_request, owner_headers) -> None:
        request = seed_request(garden, TODAY + timedelta(days=5), TODAY + timedelta(days=30))

        response = client.patch(f"/requests/{request.id}", json={"status": "approved"}, headers=owner_headers)

        assert response.json()["status"] == "approved"

    def test_reject(self, client, garden, seed_request, owner_headers) -> None:
        request = seed_request(garden, TODAY, TODAY + timedelta(days=30))

        response = client.patch(f"/requests/{request.id}", json={"status": "rejected"}, headers=owner_headers)

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["status"] == "rejected"
        assert response.json()["allocated_land"] == "0.00"

    def test_supersede(self, client, garden, seed_request, owner_headers) -> None:
        old = seed_request(
            garden, TODAY - timedelta(days=20), TODAY + timedelta(days=20), status=LandRequestStatus.ACTIVE
        )
        new = seed_request(garden, TODAY, TODAY + timedelta(days=60), requested_land="5")

        response = client.patch(f"/requests/{new.id}", json={"status": "approved"}, headers=owner_headers)

        data = response.json()
        assert data["superseded"] == [old.id]
        assert data["allocated_land"] == "5.00"

    def test_invalid_decision(self, client, garden, seed_request, owner_headers) -> None:
        request = seed_request(garden, TODAY, TODAY + timedelta(days=30))

        response = client.patch(f"/requests/{request.id}", json={"status": "pending"}, headers=owner_headers)

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["error_code"] == "INVALID_DECISION"

    def test_requester_cannot_decide(self, client, garden, seed_request, requester_headers) -> None:
        request = seed_request(garden, TODAY, TODAY + timedelta(days=30))

        response = client.patch(f"/requests/{request.id}", json={"status": "approved"}, headers=requester_headers)

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_already_decided(self, client, garden, seed_request, owner_headers) -> None:
        request = seed_request(garden, TODAY, TODAY + timedelta(days=30), status=LandRequestStatus.REJECTED)

        response = client.patch(f"/requests/{request.id}", json={"status": "approved"}, headers=owner_headers)

        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.json()["error_code"] == "INVALID_STATE"

    def test_no_land_left(self, client, seed_garden, seed_request, owner_headers) -> None:
        garden = seed_garden(total_land="10", allocated_land="8")
        request = seed_request(garden, TODAY, TODAY + timedelta(days=30), requested_land="4")

        response = client.patch(f"/requests/{request.id}", json={"status": "approved"}, headers=owner_headers)

        assert response.status_code == status.HTTP_409_CONFLICT
        data = response.json()
        assert data["error_code"] == "INSUFFICIENT_LAND"
        assert data["details"]["max_available"] == "2.00"


# ============================================================================
# Test: Extensions
# ============================================================================


class TestExtensions:
    """Tests for /requests/{id}/extension."""

    def test_extension_round_trip(self, client, garden, seed_request, requester_headers, owner_headers) -> None:
        request = seed_request(
            garden, TODAY - timedelta(days=10), date(2026, 6, 30), status=LandRequestStatus.ACTIVE
        )

        asked = client.post(
            f"/requests/{request.id}/extension",
            json={"proposed_end_date": "2026-08-31", "message": "Late harvest"},
            headers=requester_headers,
        )
        assert asked.status_code == status.HTTP_200_OK
        assert asked.json()["status"] == "pending_extension"
        assert asked.json()["proposed_end_date"] == "2026-08-31"
        assert asked.json()["end_date"] == "2026-06-30"

        decided = client.patch(
            f"/requests/{request.id}/extension", json={"status": "approved"}, headers=owner_headers
        )
        assert decided.status_code == status.HTTP_200_OK
        assert decided.json()["status"] == "active"
        assert decided.json()["end_date"] == "2026-08-31"
        assert decided.json()["proposed_end_date"] is None

    def test_extension_must_move_end_later(self, client, garden, seed_request, requester_headers) -> None:
        request = seed_request(garden, TODAY, date(2026, 6, 30), status=LandRequestStatus.ACTIVE)

        response = client.post(
            f"/requests/{request.id}/extension",
            json={"proposed_end_date": "2026-06-15"},
            headers=requester_headers,
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["error_code"] == "INVALID_DATE_RANGE"

    def test_owner_cannot_ask_for_extension(self, client, garden, seed_request, owner_headers) -> None:
        request = seed_request(garden, TODAY, date(2026, 6, 30), status=LandRequestStatus.ACTIVE)

        response = client.post(
            f"/requests/{request.id}/extension",
            json={"proposed_end_date": "2026-08-31"},
            headers=owner_headers,
        )

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_decide_without_pending_extension(self, client, garden, seed_request, owner_headers) -> None:
        request = seed_request(garden, TODAY, date(2026, 6, 30), status=LandRequestStatus.ACTIVE)

        response = client.patch(
            f"/requests/{request.id}/extension", json={"status": "rejected"}, headers=owner_headers
        )

        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.json()["error_code"] == "NOT_PENDING_EXTENSION"


# ============================================================================
# Test: Allocations
# ============================================================================


class TestListAllocations:
    """Tests for GET /users/me/allocations."""

    def test_lists_open_allocations(self, client, garden, seed_request, requester_headers) -> None:
        extending = seed_request(
            garden, date(2026, 4, 1), date(2026, 6, 30), status=LandRequestStatus.PENDING_EXTENSION
        )
        pending = seed_request(garden, date(2026, 7, 1), date(2026, 9, 30))
        seed_request(garden, date(2025, 4, 1), date(2025, 6, 30), status=LandRequestStatus.EXPIRED)

        response = client.get("/users/me/allocations", headers=requester_headers)

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["total"] == 2
        first, second = data["items"]
        assert first["request_id"] == extending.id
        assert first["status"] == "pending_extension"
        assert first["end_date"] == "2026-06-30"
        assert first["proposed_end_date"] == "2027-06-30"
        assert first["garden_name"] == garden.name
        assert second["request_id"] == pending.id

    def test_other_users_allocations_hidden(self, client, garden, seed_request) -> None:
        seed_request(garden, date(2026, 7, 1), date(2026, 9, 30), requester_id=REQUESTER_ID)

        response = client.get("/users/me/allocations", headers=auth_headers(OTHER_REQUESTER_ID))

        assert response.json() == {"items": [], "total": 0}
