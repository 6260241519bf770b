"""Tests for tour CRUD endpoints."""

import uuid

import pytest
from httpx import AsyncClient

pytestmark = pytest.mark.asyncio(loop_scope="session")


def _tour_payload(**overrides) -> dict:
    payload = {
        "tour_code": f"KR-{uuid.uuid4().hex[:6].upper()}",
        "title": "Seoul Nami Island 6D4N",
        "duration_days": 6,
        "duration_nights": 4,
    }
    payload.update(overrides)
    return payload


# ---------------------------------------------------------------------------
# POST /api/v1/tours
# ---------------------------------------------------------------------------


class TestCreateTour:
    """Tests for creating tours."""

    async def test_create_success(self, client: AsyncClient) -> None:
        payload = _tour_payload(description="Palaces and Everland")
        response = await client.post("/api/v1/tours", json=payload)
        assert response.status_code == 201
        data = response.json()
        assert data["tour_code"] == payload["tour_code"]
        assert data["duration_days"] == 6
        assert data["status"] == "active"
        assert "id" in data
        assert "created_at" in data

    async def test_duplicate_code_conflict(self, client: AsyncClient, test_tour: dict) -> None:
        response = await client.post("/api/v1/tours", json=_tour_payload(tour_code=test_tour["tour_code"]))
        assert response.status_code == 409

    async def test_invalid_duration(self, client: AsyncClient) -> None:
        response = await client.post("/api/v1/tours", json=_tour_payload(duration_days=0))
        assert response.status_code == 422


# ---------------------------------------------------------------------------
# GET /api/v1/tours
# ---------------------------------------------------------------------------


class TestListTours:
    """Tests for listing tours."""

    async def test_list_and_search(self, client: AsyncClient, test_tour: dict) -> None:
        response = await client.get("/api/v1/tours", params={"search": test_tour["tour_code"].lower()})
        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 1
        assert data["items"][0]["id"] == test_tour["id"]

    async def test_status_filter(self, client: AsyncClient) -> None:
        await client.post("/api/v1/tours", json=_tour_payload(status="draft"))
        response = await client.get("/api/v1/tours", params={"status": "draft"})
        assert response.status_code == 200
        assert all(item["status"] == "draft" for item in response.json()["items"])

    async def test_pagination(self, client: AsyncClient) -> None:
        for _ in range(3):
            await client.post("/api/v1/tours", json=_tour_payload())
        response = await client.get("/api/v1/tours", params={"skip": 0, "limit": 2})
        data = response.json()
        assert len(data["items"]) == 2
        assert data["total"] >= 3


# ---------------------------------------------------------------------------
# GET / PUT / DELETE /api/v1/tours/{tour_id}
# ---------------------------------------------------------------------------


class TestTourDetail:
    """Tests for single-tour endpoints."""

    async def test_get_success(self, client: AsyncClient, test_tour: dict) -> None:
        response = await client.get(f"/api/v1/tours/{test_tour['id']}")
        assert response.status_code == 200
        assert response.json()["title"] == test_tour["title"]

    async def test_get_not_found(self, client: AsyncClient) -> None:
        response = await client.get(f"/api/v1/tours/{uuid.uuid4()}")
        assert response.status_code == 404

    async def test_update_partial(self, client: AsyncClient, test_tour: dict) -> None:
        response = await client.put(f"/api/v1/tours/{test_tour['id']}", json={"title": "Tokyo Osaka 7D5N"})
        assert response.status_code == 200
        data = response.json()
        assert data["title"] == "Tokyo Osaka 7D5N"
        assert data["tour_code"] == test_tour["tour_code"]

    async def test_update_code_conflict(self, client: AsyncClient, test_tour: dict) -> None:
        other = (await client.post("/api/v1/tours", json=_tour_payload())).json()
        response = await client.put(f"/api/v1/tours/{other['id']}", json={"tour_code": test_tour["tour_code"]})
        assert response.status_code == 409

    async def test_delete_cascades_periods(self, client: AsyncClient, test_tour: dict, test_period: dict) -> None:
        response = await client.delete(f"/api/v1/tours/{test_tour['id']}")
        assert response.status_code == 200
        assert response.json()["message"] == "Tour deleted"

        assert (await client.get(f"/api/v1/tours/{test_tour['id']}")).status_code == 404
        period_response = await client.get(f"/api/v1/tours/{test_tour['id']}/periods/{test_period['id']}")
        assert period_response.status_code == 404


class TestHealth:
    async def test_health(self, client: AsyncClient) -> None:
        response = await client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"
