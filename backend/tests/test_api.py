"""HTTP surface tests."""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager

import pytest
from httpx import ASGITransport, AsyncClient

from erp_metrics.config import AppSettings
from erp_metrics.db.session import Database
from erp_metrics.main import create_app
from erp_metrics.models import InventorySeedClaim, Item, Warehouse

TENANT = "tenant-api"
HEADERS = {"X-Tenant-Id": TENANT}


def _client(database: Database, settings: AppSettings):
    app = create_app(database, settings=settings)

    @asynccontextmanager
    async def _manager():
        async with app.router.lifespan_context(app):
            transport = ASGITransport(app=app)
            async with AsyncClient(transport=transport, base_url="http://test") as client:
                yield client

    return _manager


async def _add_inventory(database: Database) -> None:
    async with database.session() as session:
        session.add_all(
            [
                Item(tenant_id=TENANT, item_number="ITM-001", item_name="Bearing", unit_cost=2.0, reorder_point=500),
                Item(tenant_id=TENANT, item_number="ITM-002", item_name="Gasket", unit_cost=10.0),
                Warehouse(tenant_id=TENANT, warehouse_code="WH-1", warehouse_name="Main"),
            ]
        )
        await session.commit()


def test_health(database: Database, settings: AppSettings):
    async def _scenario():
        async with _client(database, settings)() as api_client:
            response = await api_client.get("/health")
            assert response.status_code == 200
            assert response.json()["status"] == "ok"

    asyncio.run(_scenario())


def test_dashboard_summary_includes_sparklines(database: Database, settings: AppSettings):
    async def _scenario():
        async with _client(database, settings)() as api_client:
            response = await api_client.get("/dashboard/summary")

        assert response.status_code == 200
        payload = response.json()
        assert set(payload) == {"revenue", "orders", "inventoryAlerts", "productionEfficiency"}
        revenue = payload["revenue"]
        assert revenue["formattedValue"] == "$284,750.00"
        assert len(revenue["sparklineData"]) == settings.sparkline_points
        assert revenue["sparklineData"][-1] == 284750
        assert payload["inventoryAlerts"]["trend"] == "down"
        assert payload["inventoryAlerts"]["trendIsPositive"] is True
        assert payload["productionEfficiency"]["formattedValue"] == "87.3%"

    asyncio.run(_scenario())


def test_industry_summary_falls_back_for_unknown_vertical(database: Database, settings: AppSettings):
    async def _scenario():
        async with _client(database, settings)() as api_client:
            unknown = await api_client.get("/dashboard/industry/space-mining")
            automotive = await api_client.get("/dashboard/industry/automotive")

        assert unknown.status_code == 200
        payload = unknown.json()
        assert payload["industry"] == "general-manufacturing"
        assert payload["requestedIndustry"] == "space-mining"
        assert list(payload["kpis"]) == ["revenue", "activeOrders", "inventoryAlerts", "oee"]
        assert payload["modules"][0] == "manufacturing"

        automotive_kpis = automotive.json()["kpis"]
        assert automotive_kpis["ppmDefectRate"]["trendIsPositive"] is True
        assert automotive_kpis["onTimeDelivery"]["formattedValue"] == "96.8%"

    asyncio.run(_scenario())


def test_calculate_kpi_endpoint(database: Database, settings: AppSettings):
    async def _scenario():
        async with _client(database, settings)() as api_client:
            response = await api_client.post(
                "/dashboard/kpi",
                json={"label": "Revenue", "currentValue": 2500, "previousValue": 2000, "formatter": "currency"},
            )
            invalid = await api_client.post("/dashboard/kpi", json={"label": "", "currentValue": 1})

        assert response.status_code == 200
        payload = response.json()
        assert payload["formattedValue"] == "$2,500.00"
        assert payload["changePercent"] == pytest.approx(25.0)
        assert payload["trend"] == "up"
        assert payload["trendIsPositive"] is True
        assert payload["sparklineData"] is None
        assert invalid.status_code == 422

    asyncio.run(_scenario())


def test_inventory_routes_require_tenant(database: Database, settings: AppSettings):
    async def _scenario():
        async with _client(database, settings)() as api_client:
            response = await api_client.get("/inventory/demand-planning")
            assert response.status_code == 400

    asyncio.run(_scenario())


def test_demand_planning_seeds_and_forecasts(database: Database, settings: AppSettings):
    async def _scenario():
        async with _client(database, settings)() as api_client:
            await _add_inventory(database)

            response = await api_client.get("/inventory/demand-planning", params={"asof": "2024-03-15"}, headers=HEADERS)
            assert response.status_code == 200
            payload = response.json()

            bearing, gasket = payload["forecastItems"]
            assert bearing["itemNumber"] == "ITM-001"
            assert bearing["currentStock"] == 1000
            assert bearing["avgMonthlyUsage"] == 750
            assert bearing["stockoutRisk"] == "medium"
            assert bearing["suggestedOrder"] == 1250
            assert bearing["leadTimeDays"] == 7
            assert gasket["currentStock"] == 60
            assert gasket["avgMonthlyUsage"] == 50
            assert gasket["suggestedOrder"] == 90

            months = [point["month"] for point in payload["demandTrend"]]
            assert months == ["Oct", "Nov", "Dec", "Jan", "Feb", "Mar"]
            assert [point["demand"] for point in payload["demandTrend"]] == [1700, 1840, 2000, 2300, 2100, 1900]

            seed = await api_client.post("/inventory/on-hand/seed", headers=HEADERS)
            assert seed.status_code == 200
            assert seed.json()["outcome"] == "already_seeded"

            overview = await api_client.get("/inventory/overview", headers=HEADERS)
            assert overview.json() == {
                "totalItems": 2,
                "totalWarehouses": 1,
                "totalInventoryValue": 2600.0,
                "lowStockAlerts": 0,
            }

    asyncio.run(_scenario())


def test_seed_endpoint_reports_nothing_to_seed(database: Database, settings: AppSettings):
    async def _scenario():
        async with _client(database, settings)() as api_client:
            response = await api_client.post("/inventory/on-hand/seed", headers={"X-Tenant-Id": "empty-tenant"})

        assert response.status_code == 200
        assert response.json() == {
            "tenantId": "empty-tenant",
            "outcome": "nothing_to_seed",
            "rowsInserted": 0,
            "batches": 0,
        }

    asyncio.run(_scenario())


def test_demand_planning_waits_while_another_request_seeds(database: Database, settings: AppSettings):
    async def _scenario():
        async with _client(database, settings)() as api_client:
            await _add_inventory(database)
            async with database.session() as session:
                session.add(InventorySeedClaim(tenant_id=TENANT))
                await session.commit()

            response = await api_client.get("/inventory/demand-planning", headers=HEADERS)
            assert response.status_code == 503
            assert response.headers["retry-after"] == "5"

            seed = await api_client.post("/inventory/on-hand/seed", headers=HEADERS)
            assert seed.json()["outcome"] == "claimed_elsewhere"

    asyncio.run(_scenario())
