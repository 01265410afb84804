"""Schemas for inventory overview, seeding and demand planning."""

from __future__ import annotations

from erp_metrics.services.demand_planning import StockoutRisk
from erp_metrics.services.inventory_seeding import SeedOutcome

from .base import CamelModel


class ForecastItemSchema(CamelModel):
    item_id: str
    item_number: str | None = None
    item_name: str | None = None
    current_stock: float
    avg_monthly_usage: int
    reorder_point: float
    suggested_order: int
    lead_time_days: int
    stockout_risk: StockoutRisk
    months_of_supply: float


class DemandTrendPointSchema(CamelModel):
    month: str
    demand: int
    fulfilled: int


class DemandPlanningResponse(CamelModel):
    forecast_items: list[ForecastItemSchema]
    demand_trend: list[DemandTrendPointSchema]


class InventoryOverviewResponse(CamelModel):
    total_items: int
    total_warehouses: int
    total_inventory_value: float
    low_stock_alerts: int


class SeedResponse(CamelModel):
    tenant_id: str
    outcome: SeedOutcome
    rows_inserted: int
    batches: int


__all__ = [
    "DemandPlanningResponse",
    "DemandTrendPointSchema",
    "ForecastItemSchema",
    "InventoryOverviewResponse",
    "SeedResponse",
]
