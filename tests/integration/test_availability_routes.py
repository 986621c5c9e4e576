from datetime import date
from decimal import Decimal

import pytest

from app.domain.models import AssetQuery, AvailabilityState
from app.domain.services.conflict_verifier import BatchConflictVerifier, ConflictCheckError


def make_asset(asset_id, **overrides):
    data = {
        "id": asset_id,
        "media_asset_code": f"HYD-{asset_id}",
        "city": "Hyderabad",
        "area": "Kondapur",
        "media_type": "Hoarding",
        "card_rate": Decimal("30000"),
        "base_rate": Decimal("20000"),
        "total_sqft": Decimal("400"),
        "status": "Available",
    }
    data.update(overrides)
    return data


def make_campaign(campaign_id, status="Running"):
    return {
        "id": campaign_id,
        "campaign_name": f"Campaign {campaign_id}",
        "client_name": "Acme",
        "start_date": date(2026, 1, 1),
        "end_date": date(2026, 1, 31),
        "status": status,
    }


def make_booking(booking_id, campaign_id, asset_id, start, end):
    return {
        "id": booking_id,
        "campaign_id": campaign_id,
        "asset_id": asset_id,
        "booking_start_date": start,
        "booking_end_date": end,
    }


@pytest.fixture()
async def seeded(seed):
    await seed(
        assets=[
            make_asset("A1"),
            make_asset("A2"),
            make_asset("A3"),
            make_asset("A4", city="Pune"),
            make_asset("A5", status="Maintenance"),
        ],
        campaigns=[make_campaign("C1"), make_campaign("C2", "Upcoming"), make_campaign("C3", "Cancelled")],
        bookings=[
            # A1 frees up mid-window
            make_booking("B1", "C1", "A1", date(2026, 1, 1), date(2026, 1, 15)),
            # A2 held beyond the window
            make_booking("B2", "C1", "A2", date(2026, 1, 1), date(2026, 2, 28)),
            # A3 double-booked
            make_booking("B3", "C1", "A3", date(2026, 1, 1), date(2026, 1, 10)),
            make_booking("B4", "C2", "A3", date(2026, 1, 5), date(2026, 1, 25)),
            # Cancelled campaigns never block
            make_booking("B5", "C3", "A4", date(2026, 1, 1), date(2026, 1, 31)),
        ],
    )


JANUARY = {"start_date": "2026-01-01", "end_date": "2026-01-31"}


@pytest.mark.asyncio
@pytest.mark.integration
async def test_classify_available_soon(client, seeded):
    response = await client.post("/api/v1/availability/classify", json={"asset_id": "A1", **JANUARY})

    assert response.status_code == 200
    data = response.json()
    assert data["state"] == "available_soon"
    assert data["available_from"] == "2026-01-16"
    assert data["blocking_bookings"][0]["campaign_id"] == "C1"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_classify_excluding_own_campaign(client, seeded):
    response = await client.post(
        "/api/v1/availability/classify",
        json={"asset_id": "A2", "exclude_campaign_id": "C1", **JANUARY},
    )

    assert response.json()["state"] == "available"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_classify_uses_intrinsic_status_without_history(client, seeded):
    response = await client.post("/api/v1/availability/classify", json={"asset_id": "A5", **JANUARY})

    data = response.json()
    assert data["state"] == "booked"
    assert data["from_intrinsic_status"] is True


@pytest.mark.asyncio
@pytest.mark.integration
async def test_classify_unknown_asset_404(client, seeded):
    response = await client.post("/api/v1/availability/classify", json={"asset_id": "nope", **JANUARY})

    assert response.status_code == 404


@pytest.mark.asyncio
@pytest.mark.integration
async def test_reversed_interval_400(client, seeded):
    response = await client.post(
        "/api/v1/availability/classify",
        json={"asset_id": "A1", "start_date": "2026-02-01", "end_date": "2026-01-01"},
    )

    assert response.status_code == 400


@pytest.mark.asyncio
@pytest.mark.integration
async def test_verify_returns_every_asset(client, seeded):
    response = await client.post(
        "/api/v1/availability/verify",
        json={"asset_ids": ["A1", "A2", "A3", "A4", "A5"], "concurrency": 2, **JANUARY},
    )

    assert response.status_code == 200
    data = response.json()
    states = {asset_id: r["state"] for asset_id, r in data["results"].items()}
    assert states == {
        "A1": "available_soon",
        "A2": "booked",
        "A3": "conflict",
        "A4": "available",
        "A5": "booked",
    }
    assert data["batches"] == 3
    assert data["unverified_count"] == 0
    assert len(data["results"]["A3"]["blocking_bookings"]) == 2


@pytest.mark.asyncio
@pytest.mark.integration
async def test_verify_requires_asset_ids(client, seeded):
    response = await client.post("/api/v1/availability/verify", json={"asset_ids": [], **JANUARY})

    assert response.status_code == 422


@pytest.mark.asyncio
@pytest.mark.integration
async def test_verify_reports_failed_lookups_as_unverified(app, client, seeded):
    class FlakySource:
        async def fetch_bookings(self, query: AssetQuery):
            if query.asset_id == "A2":
                raise ConflictCheckError(query.asset_id, "upstream timeout")
            return []

    app.state.verifier = BatchConflictVerifier(FlakySource())

    response = await client.post(
        "/api/v1/availability/verify",
        json={"asset_ids": ["A1", "A2"], **JANUARY},
    )

    data = response.json()
    assert data["results"]["A2"]["state"] == AvailabilityState.UNVERIFIED.value
    assert data["results"]["A1"]["state"] == "available"
    assert data["failures"][0]["asset_id"] == "A2"
    assert data["unverified_count"] == 1


@pytest.mark.asyncio
@pytest.mark.integration
async def test_report_buckets_and_summary(client, seeded):
    response = await client.post("/api/v1/availability/report", json=JANUARY)

    assert response.status_code == 200
    data = response.json()
    assert [a["asset_id"] for a in data["available_assets"]] == ["A4"]
    assert [a["asset_id"] for a in data["available_soon_assets"]] == ["A1"]
    assert {a["asset_id"] for a in data["booked_assets"]} == {"A2", "A5"}
    assert [a["asset_id"] for a in data["conflict_assets"]] == ["A3"]

    summary = data["summary"]
    assert summary["total_assets"] == 5
    assert summary["available_count"] == 1
    assert summary["potential_revenue"] == 30000.0
    assert summary["total_sqft_available"] == 400.0
    assert data["available_assets"][0]["city"] == "Pune"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_report_city_filter(client, seeded):
    response = await client.post("/api/v1/availability/report", json={"city": "Pune", **JANUARY})

    data = response.json()
    assert data["summary"]["total_assets"] == 1
    assert data["search_params"]["city"] == "Pune"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_health(client):
    response = await client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


@pytest.mark.asyncio
@pytest.mark.integration
async def test_classify_excluding_own_campaign_ignores_stale_booked_status(client, seed):
    await seed(
        assets=[make_asset("A9", status="Booked")],
        campaigns=[make_campaign("C1")],
        bookings=[make_booking("B9", "C1", "A9", date(2026, 1, 1), date(2026, 1, 31))],
    )

    response = await client.post(
        "/api/v1/availability/classify",
        json={"asset_id": "A9", "exclude_campaign_id": "C1", **JANUARY},
    )

    data = response.json()
    assert data["state"] == "available"
    assert data["from_intrinsic_status"] is False


@pytest.mark.asyncio
@pytest.mark.integration
async def test_verify_unknown_asset_is_unverified(client, seeded):
    response = await client.post(
        "/api/v1/availability/verify",
        json={"asset_ids": ["A4", "DOES-NOT-EXIST"], **JANUARY},
    )

    assert response.status_code == 200
    data = response.json()
    assert data["results"]["A4"]["state"] == "available"
    missing = data["results"]["DOES-NOT-EXIST"]
    assert missing["state"] == "unverified"
    assert missing["error"] == "asset not found"
    assert data["failures"] == [{"asset_id": "DOES-NOT-EXIST", "error": "asset not found"}]
    assert data["unverified_count"] == 1
