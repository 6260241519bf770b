"""Tests for period CRUD, status toggle and bulk-update endpoints."""

import uuid
from datetime import date, timedelta
from decimal import Decimal

import pytest
from httpx import AsyncClient
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from tourdesk.models.period import PeriodOffer

pytestmark = pytest.mark.asyncio(loop_scope="session")


def _periods_url(tour: dict) -> str:
    return f"/api/v1/tours/{tour['id']}/periods"


def _start(days: int = 45) -> date:
    return date.today() + timedelta(days=days)


# ---------------------------------------------------------------------------
# POST /api/v1/tours/{tour_id}/periods
# ---------------------------------------------------------------------------


class TestCreatePeriod:
    """Tests for creating periods with their offer."""

    async def test_end_date_from_tour_duration(self, client: AsyncClient, test_tour: dict) -> None:
        start = _start()
        response = await client.post(_periods_url(test_tour), json={"start_date": start.isoformat()})
        assert response.status_code == 201
        data = response.json()
        # 5-day tour: day 1 plus 4
        assert data["end_date"] == (start + timedelta(days=4)).isoformat()
        assert data["capacity"] == 30
        assert data["available"] == 30
        assert data["status"] == "open"
        assert data["sale_status"] == "available"
        assert data["is_visible"] is True
        assert data["is_bookable"] is True
        assert data["offer"]["currency"] == "THB"
        assert data["offer"]["promo_used"] == 0

    async def test_numeric_strings_and_blanks(self, client: AsyncClient, test_tour: dict) -> None:
        response = await client.post(
            _periods_url(test_tour),
            json={
                "start_date": _start().isoformat(),
                "price_adult": "29,900",
                "discount_adult": "",
                "price_single": " 6500 ",
                "price_infant": "",
                "promo_name": "",
            },
        )
        assert response.status_code == 201
        offer = response.json()["offer"]
        assert Decimal(offer["price_adult"]) == Decimal("29900")
        assert Decimal(offer["discount_adult"]) == Decimal("0")
        assert Decimal(offer["price_single"]) == Decimal("6500")
        assert offer["price_infant"] is None
        assert offer["promo_name"] is None

    async def test_unparseable_price_rejected(self, client: AsyncClient, test_tour: dict) -> None:
        response = await client.post(
            _periods_url(test_tour),
            json={"start_date": _start().isoformat(), "price_adult": "lots"},
        )
        assert response.status_code == 422

    async def test_end_before_start_rejected(self, client: AsyncClient, test_tour: dict) -> None:
        start = _start()
        response = await client.post(
            _periods_url(test_tour),
            json={"start_date": start.isoformat(), "end_date": (start - timedelta(days=1)).isoformat()},
        )
        assert response.status_code == 422

    async def test_booked_over_capacity_rejected(self, client: AsyncClient, test_tour: dict) -> None:
        response = await client.post(
            _periods_url(test_tour),
            json={"start_date": _start().isoformat(), "capacity": 10, "booked": 11},
        )
        assert response.status_code == 422

    async def test_full_period_keeps_sale_status_by_default(self, client: AsyncClient, test_tour: dict) -> None:
        response = await client.post(
            _periods_url(test_tour),
            json={"start_date": _start().isoformat(), "capacity": 10, "booked": 10},
        )
        assert response.status_code == 201
        data = response.json()
        assert data["available"] == 0
        assert data["sale_status"] == "available"
        assert data["is_bookable"] is False

    async def test_full_period_sold_out_with_auto_rule(
        self, client: AsyncClient, test_tour: dict, auto_sold_out: None
    ) -> None:
        response = await client.post(
            _periods_url(test_tour),
            json={"start_date": _start().isoformat(), "capacity": 10, "booked": 10},
        )
        assert response.status_code == 201
        assert response.json()["sale_status"] == "sold_out"

    async def test_unknown_tour(self, client: AsyncClient) -> None:
        response = await client.post(
            f"/api/v1/tours/{uuid.uuid4()}/periods",
            json={"start_date": _start().isoformat()},
        )
        assert response.status_code == 404


# ---------------------------------------------------------------------------
# GET /api/v1/tours/{tour_id}/periods
# ---------------------------------------------------------------------------


class TestListPeriods:
    """Tests for listing a tour's periods."""

    async def test_ordered_with_seat_total(self, client: AsyncClient, test_tour: dict, many_periods: list) -> None:
        response = await client.get(_periods_url(test_tour))
        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 5
        assert data["total_available"] == 5 * 25
        starts = [item["start_date"] for item in data["items"]]
        assert starts == sorted(starts)


# ---------------------------------------------------------------------------
# GET / PUT / PATCH / DELETE /api/v1/tours/{tour_id}/periods/{period_id}
# ---------------------------------------------------------------------------


class TestPeriodDetail:
    """Tests for single-period endpoints."""

    async def test_get_success(self, client: AsyncClient, test_tour: dict, test_period: dict) -> None:
        response = await client.get(f"{_periods_url(test_tour)}/{test_period['id']}")
        assert response.status_code == 200
        assert response.json()["offer"]["id"] == test_period["offer"]["id"]

    async def test_get_through_other_tour(self, client: AsyncClient, test_period: dict) -> None:
        other = await client.post(
            "/api/v1/tours",
            json={"tour_code": f"VN-{uuid.uuid4().hex[:6]}", "title": "Da Nang 4D3N", "duration_days": 4},
        )
        response = await client.get(f"/api/v1/tours/{other.json()['id']}/periods/{test_period['id']}")
        assert response.status_code == 404

    async def test_update_period_and_offer(self, client: AsyncClient, test_tour: dict, test_period: dict) -> None:
        response = await client.put(
            f"{_periods_url(test_tour)}/{test_period['id']}",
            json={"booked": 5, "price_adult": "31,000", "discount_adult": "", "net_price_single": "5000"},
        )
        assert response.status_code == 200
        data = response.json()
        assert data["booked"] == 5
        assert data["available"] == 15
        assert Decimal(data["offer"]["price_adult"]) == Decimal("31000")
        assert Decimal(data["offer"]["discount_adult"]) == Decimal("0")
        assert Decimal(data["offer"]["net_price_single"]) == Decimal("5000")
        # Untouched offer fields keep their values.
        assert Decimal(data["offer"]["price_infant"]) == Decimal("7900")

    async def test_update_overbooked_rejected(self, client: AsyncClient, test_tour: dict, test_period: dict) -> None:
        response = await client.put(f"{_periods_url(test_tour)}/{test_period['id']}", json={"booked": 21})
        assert response.status_code == 422
        assert "exceed capacity" in response.json()["detail"]

    async def test_update_inverted_dates_rejected(
        self, client: AsyncClient, test_tour: dict, test_period: dict
    ) -> None:
        start = date.fromisoformat(test_period["start_date"])
        response = await client.put(
            f"{_periods_url(test_tour)}/{test_period['id']}",
            json={"end_date": (start - timedelta(days=2)).isoformat()},
        )
        assert response.status_code == 422

    async def test_toggle_status_round_trip(self, client: AsyncClient, test_tour: dict, test_period: dict) -> None:
        url = f"{_periods_url(test_tour)}/{test_period['id']}/toggle-status"

        closed = await client.patch(url)
        assert closed.status_code == 200
        assert closed.json()["status"] == "closed"
        assert closed.json()["is_bookable"] is False

        reopened = await client.patch(url)
        assert reopened.json()["status"] == "open"

    async def test_delete(self, client: AsyncClient, test_tour: dict, test_period: dict) -> None:
        url = f"{_periods_url(test_tour)}/{test_period['id']}"
        response = await client.delete(url)
        assert response.status_code == 200
        assert (await client.get(url)).status_code == 404


# ---------------------------------------------------------------------------
# Bulk updates
# ---------------------------------------------------------------------------


class TestBulkUpdate:
    """Tests for visibility and sale-status bulk updates."""

    async def test_hide_five_periods(self, client: AsyncClient, test_tour: dict, many_periods: list) -> None:
        ids = [p["id"] for p in many_periods]
        response = await client.post(
            f"{_periods_url(test_tour)}/bulk-update",
            json={"period_ids": ids, "updates": {"is_visible": False}},
        )
        assert response.status_code == 200
        data = response.json()
        assert data["kind"] == "visibility"
        assert data["updated"] == 5
        assert sorted(data["period_ids"]) == sorted(ids)

        items = (await client.get(_periods_url(test_tour))).json()["items"]
        assert all(item["is_visible"] is False for item in items)
        for before, after in zip(
            sorted(many_periods, key=lambda p: p["id"]), sorted(items, key=lambda p: p["id"]), strict=True
        ):
            assert after["sale_status"] == before["sale_status"]
            assert after["status"] == before["status"]
            assert after["capacity"] == before["capacity"]
            assert Decimal(after["offer"]["price_adult"]) == Decimal(before["offer"]["price_adult"])

    async def test_sale_status_on_subset(self, client: AsyncClient, test_tour: dict, many_periods: list) -> None:
        chosen = [p["id"] for p in many_periods[:2]]
        response = await client.post(
            f"{_periods_url(test_tour)}/bulk-update",
            json={"period_ids": chosen, "updates": {"sale_status": "booking"}},
        )
        assert response.status_code == 200

        items = (await client.get(_periods_url(test_tour))).json()["items"]
        statuses = {item["id"]: item["sale_status"] for item in items}
        assert [statuses[i] for i in chosen] == ["booking", "booking"]
        assert sum(status == "available" for status in statuses.values()) == 3

    async def test_unknown_id_writes_nothing(self, client: AsyncClient, test_tour: dict, many_periods: list) -> None:
        ids = [p["id"] for p in many_periods] + [str(uuid.uuid4())]
        response = await client.post(
            f"{_periods_url(test_tour)}/bulk-update",
            json={"period_ids": ids, "updates": {"is_visible": False}},
        )
        assert response.status_code == 404
        assert "Periods not found" in response.json()["detail"]

        items = (await client.get(_periods_url(test_tour))).json()["items"]
        assert all(item["is_visible"] is True for item in items)

    async def test_period_of_other_tour_is_not_found(
        self, client: AsyncClient, test_tour: dict, test_period: dict
    ) -> None:
        other = await client.post(
            "/api/v1/tours",
            json={"tour_code": f"CN-{uuid.uuid4().hex[:6]}", "title": "Beijing 5D4N", "duration_days": 5},
        )
        response = await client.post(
            f"/api/v1/tours/{other.json()['id']}/periods/bulk-update",
            json={"period_ids": [test_period["id"]], "updates": {"is_visible": False}},
        )
        assert response.status_code == 404

    async def test_empty_selection_rejected(self, client: AsyncClient, test_tour: dict) -> None:
        response = await client.post(
            f"{_periods_url(test_tour)}/bulk-update",
            json={"period_ids": [], "updates": {"is_visible": False}},
        )
        assert response.status_code == 422
        assert response.json()["error"] == "BulkUpdateError"

    async def test_mixed_kinds_rejected(self, client: AsyncClient, test_tour: dict, test_period: dict) -> None:
        response = await client.post(
            f"{_periods_url(test_tour)}/bulk-update",
            json={"period_ids": [test_period["id"]], "updates": {"is_visible": False, "sale_status": "booking"}},
        )
        assert response.status_code == 422


class TestMassPromo:
    """Tests for mass promo updates."""

    async def test_promo_overwrites_and_resets_usage(
        self, client: AsyncClient, db_session: AsyncSession, test_tour: dict, many_periods: list
    ) -> None:
        ids = [uuid.UUID(p["id"]) for p in many_periods[:3]]
        result = await db_session.execute(select(PeriodOffer).where(PeriodOffer.period_id.in_(ids)))
        for offer in result.scalars():
            offer.promo_name = "Old Promo"
            offer.promo_used = 4
        await db_session.flush()

        response = await client.post(
            f"{_periods_url(test_tour)}/mass-update-promo",
            json={
                "period_ids": [str(i) for i in ids],
                "promo_name": "Early Bird",
                "promo_start_date": "2026-11-01",
                "promo_end_date": "2026-11-30",
                "promo_quota": 15,
            },
        )
        assert response.status_code == 200
        assert response.json()["updated"] == 3

        items = {item["id"]: item for item in (await client.get(_periods_url(test_tour))).json()["items"]}
        for period_id in ids:
            offer = items[str(period_id)]["offer"]
            assert offer["promo_name"] == "Early Bird"
            assert offer["promo_start_date"] == "2026-11-01"
            assert offer["promo_quota"] == 15
            assert offer["promo_used"] == 0

    async def test_inverted_window_rejected(self, client: AsyncClient, test_tour: dict, test_period: dict) -> None:
        response = await client.post(
            f"{_periods_url(test_tour)}/mass-update-promo",
            json={
                "period_ids": [test_period["id"]],
                "promo_name": "Late",
                "promo_start_date": "2026-12-10",
                "promo_end_date": "2026-12-01",
            },
        )
        assert response.status_code == 422


class TestMassDiscount:
    """Tests for mass discount updates."""

    async def test_discounts_applied_and_priced(
        self, client: AsyncClient, test_tour: dict, many_periods: list
    ) -> None:
        ids = [p["id"] for p in many_periods]
        response = await client.post(
            f"{_periods_url(test_tour)}/mass-update-discount",
            json={
                "period_ids": ids,
                "discount_adult": 2000,
                "discount_single": 500,
                "discount_child_bed": 1000,
                "discount_child_nobed": 0,
            },
        )
        assert response.status_code == 200
        assert response.json()["updated"] == 5

        quote = await client.post(
            "/api/v1/bookings/quote",
            json={"period_id": ids[0], "quantities": {"qty_adult": 2, "qty_twin": 1}},
        )
        assert quote.status_code == 200
        # 29,900 - 2,000 per adult
        assert Decimal(quote.json()["total_amount"]) == Decimal("55800")

    async def test_negative_discount_rejected(self, client: AsyncClient, test_tour: dict, test_period: dict) -> None:
        response = await client.post(
            f"{_periods_url(test_tour)}/mass-update-discount",
            json={"period_ids": [test_period["id"]], "discount_adult": -1},
        )
        assert response.status_code == 422
