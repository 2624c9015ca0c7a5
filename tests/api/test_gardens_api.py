"""Tests for garden API endpoints."""

from datetime import timedelta

from fastapi import status

from fakes import OWNER_ID, REQUESTER_ID, TODAY, auth_headers


class TestCreateGarden:
    """Tests for POST /gardens."""

    def test_create_garden(self, client, store, owner_headers) -> None:
        response = client.post(
            "/gardens",
            json={"name": "Riverside Plots", "total_land": "12.5", "latitude": 52.1, "longitude": 4.3},
            headers=owner_headers,
        )

        assert response.status_code == status.HTTP_201_CREATED
        data = response.json()
        assert data["owner_id"] == OWNER_ID
        assert data["total_land"] == "12.50"
        assert data["allocated_land"] == "0.00"
        assert data["available_land"] == "12.50"
        assert data["type"] == "community"
        assert data["id"] in store.gardens

    def test_negative_total_refused(self, client, owner_headers) -> None:
        response = client.post(
            "/gardens", json={"name": "Broken", "total_land": "-1"}, headers=owner_headers
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["error_code"] == "INVALID_LAND_AMOUNT"

    def test_missing_name_is_a_validation_error(self, client, owner_headers) -> None:
        response = client.post("/gardens", json={"total_land": "5"}, headers=owner_headers)

        assert response.status_code == 422

    def test_caller_identity_required(self, client) -> None:
        response = client.post(
            "/gardens", json={"name": "Anonymous", "total_land": "5"}, headers=auth_headers(None)
        )

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.json()["error_code"] == "UNAUTHENTICATED"


class TestGetGarden:
    """Tests for GET /gardens/{id}."""

    def test_get_garden(self, client, seed_garden, requester_headers) -> None:
        garden = seed_garden(total_land="10", allocated_land="7.25")

        response = client.get(f"/gardens/{garden.id}", headers=requester_headers)

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["name"] == garden.name
        assert data["available_land"] == "2.75"

    def test_unknown_garden(self, client, requester_headers) -> None:
        response = client.get("/gardens/missing", headers=requester_headers)

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.json()["error_code"] == "GARDEN_NOT_FOUND"


class TestCreateLandRequest:
    """Tests for POST /gardens/{id}/requests."""

    def test_create_land_request(self, client, store, sink, garden, requester_headers) -> None:
        response = client.post(
            f"/gardens/{garden.id}/requests",
            json={
                "requested_land": "2.5",
                "start_date": str(TODAY + timedelta(days=10)),
                "end_date": str(TODAY + timedelta(days=100)),
                "contact_info": "555-0100",
                "message": "Tomatoes",
            },
            headers=requester_headers,
        )

        assert response.status_code == status.HTTP_201_CREATED
        data = response.json()
        assert data["status"] == "pending"
        assert data["requester_id"] == REQUESTER_ID
        assert data["garden_name"] == garden.name
        assert data["requested_land"] == "2.50"
        assert data["id"] in store.land_requests
        assert sink.notifications[0].recipient_id == OWNER_ID

    def test_sub_hundredth_amount_refused(self, client, store, garden, requester_headers) -> None:
        response = client.post(
            f"/gardens/{garden.id}/requests",
            json={"requested_land": "1.005", "start_date": "2026-07-01", "end_date": "2026-08-01"},
            headers=requester_headers,
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["error_code"] == "INVALID_LAND_AMOUNT"
        assert store.land_requests == {}

    def test_end_before_start(self, client, garden, requester_headers) -> None:
        response = client.post(
            f"/gardens/{garden.id}/requests",
            json={"requested_land": "1", "start_date": "2026-07-01", "end_date": "2026-06-01"},
            headers=requester_headers,
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["error_code"] == "INVALID_DATE_RANGE"

    def test_overlap_conflict(self, client, garden, seed_request, requester_headers) -> None:
        existing = seed_request(garden, TODAY + timedelta(days=10), TODAY + timedelta(days=40))

        response = client.post(
            f"/gardens/{garden.id}/requests",
            json={
                "requested_land": "1",
                "start_date": str(TODAY + timedelta(days=40)),
                "end_date": str(TODAY + timedelta(days=80)),
            },
            headers=requester_headers,
        )

        assert response.status_code == status.HTTP_409_CONFLICT
        data = response.json()
        assert data["error_code"] == "OVERLAPPING_REQUEST"
        assert data["details"]["conflicting_request_id"] == existing.id

    def test_insufficient_land_reports_max_available(self, client, seed_garden, requester_headers) -> None:
        garden = seed_garden(total_land="10", allocated_land="8")

        response = client.post(
            f"/gardens/{garden.id}/requests",
            json={"requested_land": "4", "start_date": "2026-06-01", "end_date": "2026-08-31"},
            headers=requester_headers,
        )

        assert response.status_code == status.HTTP_409_CONFLICT
        data = response.json()
        assert data["error_code"] == "INSUFFICIENT_LAND"
        assert data["details"]["max_available"] == "2.00"
        assert "Max: 2.00" in data["message"]
        assert "X-Request-ID" in response.headers
