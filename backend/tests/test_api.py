"""HTTP API tests against a temporary SQLite database."""

from decimal import Decimal

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from fundbook.api.main import app
from fundbook.core.database import get_db


@pytest_asyncio.fixture
async def client(session_factory):
    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


class TestHealth:
    @pytest.mark.asyncio
    async def test_health(self, client):
        response = await client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

        assert (await client.get("/api/v1/health")).status_code == 200


class TestFundEndpoints:
    @pytest.mark.asyncio
    async def test_nav(self, client, seeded):
        response = await client.get("/api/v1/nav", params={"as_of": "2024-06-30"})
        assert response.status_code == 200
        body = response.json()
        assert Decimal(body["nav"]) == Decimal("475000")
        assert body["as_of"] == "2024-06-30"
        assert [b["type"] for b in body["asset_breakdown"]] == ["real_estate"]

    @pytest.mark.asyncio
    async def test_ownership(self, client, seeded):
        response = await client.get("/api/v1/ownership", params={"as_of": "2024-06-30"})
        assert response.status_code == 200
        percents = [Decimal(o["ownership_percent"]) for o in response.json()]
        assert percents == [Decimal("46.153846"), Decimal("53.846154")]


class TestSnapshotEndpoints:
    @pytest.mark.asyncio
    async def test_create_and_fetch(self, client, seeded):
        response = await client.post(
            "/api/v1/snapshots",
            json={"date": "2024-06-30", "performance_fee_rate": "20", "profit": "75000"},
        )
        assert response.status_code == 201
        created = response.json()
        assert Decimal(created["total_performance_fee"]) == Decimal("15000")
        assert created["profit_base"] == "explicit"
        assert len(created["investor_snapshots"]) == 2

        fetched = await client.get(f"/api/v1/snapshots/{created['id']}")
        assert fetched.status_code == 200
        assert fetched.json()["id"] == created["id"]

        latest = await client.get("/api/v1/snapshots/latest")
        assert latest.json()["id"] == created["id"]

    @pytest.mark.asyncio
    async def test_latest_when_empty(self, client):
        response = await client.get("/api/v1/snapshots/latest")
        assert response.status_code == 200
        assert response.json() is None

    @pytest.mark.asyncio
    async def test_list(self, client, seeded):
        for day in ("2024-04-30", "2024-05-31", "2024-06-30"):
            await client.post("/api/v1/snapshots", json={"date": day})

        response = await client.get("/api/v1/snapshots", params={"limit": 2, "sort_order": "asc"})
        assert response.status_code == 200
        body = response.json()
        assert body["total"] == 3
        assert body["total_pages"] == 2
        assert [s["date"] for s in body["items"]] == ["2024-04-30", "2024-05-31"]

    @pytest.mark.asyncio
    async def test_invalid_fee_rate(self, client, seeded):
        response = await client.post(
            "/api/v1/snapshots", json={"date": "2024-06-30", "performance_fee_rate": "150"}
        )
        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_delete_then_not_found(self, client, seeded):
        created = (await client.post("/api/v1/snapshots", json={"date": "2024-06-30"})).json()

        response = await client.delete(f"/api/v1/snapshots/{created['id']}")
        assert response.status_code == 204

        missing = await client.get(f"/api/v1/snapshots/{created['id']}")
        assert missing.status_code == 404
        assert missing.json() == {
            "error": {
                "code": "NOT_FOUND",
                "message": "Snapshot not found",
                "details": {"id": created["id"]},
            }
        }

    @pytest.mark.asyncio
    async def test_investor_history(self, client, seeded):
        await client.post("/api/v1/snapshots", json={"date": "2024-05-31"})
        await client.post("/api/v1/snapshots", json={"date": "2024-06-30"})

        response = await client.get(f"/api/v1/investors/{seeded['alice'].id}/snapshots")
        assert response.status_code == 200
        assert [row["snapshot_date"] for row in response.json()] == ["2024-06-30", "2024-05-31"]

        unknown = await client.get("/api/v1/investors/999/snapshots")
        assert unknown.status_code == 404


class TestAssetEndpoints:
    @pytest.mark.asyncio
    async def test_record_event(self, client, seeded):
        response = await client.post(
            f"/api/v1/assets/{seeded['house'].id}/events",
            json={"type": "VALUATION", "amount": "510000", "date": "2024-06-01"},
        )
        assert response.status_code == 201
        assert response.json()["type"] == "VALUATION"

        nav = await client.get("/api/v1/nav", params={"as_of": "2024-06-30"})
        assert Decimal(nav.json()["total_asset_value"]) == Decimal("510000")

    @pytest.mark.asyncio
    async def test_note_event_leaves_nav_unchanged(self, client, seeded):
        response = await client.post(
            f"/api/v1/assets/{seeded['house'].id}/events",
            json={"type": "NOTE", "date": "2024-06-01", "note": "Tenant change"},
        )
        assert response.status_code == 201

        nav = await client.get("/api/v1/nav", params={"as_of": "2024-06-30"})
        assert Decimal(nav.json()["nav"]) == Decimal("475000")

    @pytest.mark.asyncio
    async def test_sell_and_sell_again(self, client, seeded):
        url = f"/api/v1/assets/{seeded['house'].id}/sell"

        response = await client.post(url, json={"sale_price": "520000", "sale_date": "2024-06-15"})
        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "SOLD"
        assert Decimal(body["realized_pnl"]) == Decimal("70000")

        again = await client.post(url, json={"sale_price": "1"})
        assert again.status_code == 409
        assert again.json()["error"]["code"] == "INVALID_OPERATION"

    @pytest.mark.asyncio
    async def test_unknown_asset(self, client, seeded):
        response = await client.post("/api/v1/assets/999/sell", json={"sale_price": "1"})
        assert response.status_code == 404


class TestReportEndpoints:
    @pytest.mark.asyncio
    async def test_performance(self, client, seeded):
        await client.post("/api/v1/snapshots", json={"date": "2024-06-30"})
        response = await client.get("/api/v1/reports/performance", params={"date_to": "2024-06-30"})
        assert response.status_code == 200
        body = response.json()
        assert Decimal(body["current_snapshot_nav"]) == Decimal("475000")
        assert body["sold_asset_count"] == 1

    @pytest.mark.asyncio
    async def test_balance(self, client, seeded):
        response = await client.get("/api/v1/reports/balance", params={"as_of": "2024-06-30"})
        assert response.status_code == 200
        body = response.json()
        assert Decimal(body["difference"]) == Decimal("150000")
        assert body["is_balanced"] is False

    @pytest.mark.asyncio
    async def test_investor_report(self, client, seeded):
        response = await client.get("/api/v1/reports/investors", params={"date_to": "2024-06-30"})
        assert response.status_code == 200
        body = response.json()
        assert body["total_investors"] == 2
        assert Decimal(body["total_capital"]) == Decimal("325000")
        assert [i["last_activity"] for i in body["investors"]] == ["2024-03-01", "2024-01-20"]

        missing = await client.get("/api/v1/reports/investors", params={"investor_id": 999})
        assert missing.status_code == 404

    @pytest.mark.asyncio
    async def test_cashflow_report(self, client, seeded):
        response = await client.get(
            "/api/v1/reports/cashflow", params={"date_to": "2024-06-30", "group_by": "quarter"}
        )
        assert response.status_code == 200
        body = response.json()
        assert body["group_by"] == "quarter"
        assert Decimal(body["net_cashflow"]) == Decimal("325000")
        assert [p["period"] for p in body["by_period"]] == ["2024-Q1"]

        invalid = await client.get("/api/v1/reports/cashflow", params={"group_by": "week"})
        assert invalid.status_code == 422
