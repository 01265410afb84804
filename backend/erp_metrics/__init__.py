"""Metric derivation and demand forecasting for the manufacturing ERP."""

from .calculations.kpi import KpiRecord, calculate_kpi, generate_sparkline
from .calculations.industry import resolve_industry_kpis
from .services.demand_planning import build_demand_plan, forecast_item
from .services.inventory_seeding import ensure_seeded

__version__ = "0.1.0"

__all__ = [
    "KpiRecord",
    "build_demand_plan",
    "calculate_kpi",
    "ensure_seeded",
    "forecast_item",
    "generate_sparkline",
    "resolve_industry_kpis",
]
