"""Pydantic schema exports."""

from .dashboard import DashboardSummaryResponse, IndustrySummaryResponse, KpiCalculateRequest
from .inventory import (
    DemandPlanningResponse,
    DemandTrendPointSchema,
    ForecastItemSchema,
    InventoryOverviewResponse,
    SeedResponse,
)

__all__ = [
    "DashboardSummaryResponse",
    "IndustrySummaryResponse",
    "KpiCalculateRequest",
    "DemandPlanningResponse",
    "DemandTrendPointSchema",
    "ForecastItemSchema",
    "InventoryOverviewResponse",
    "SeedResponse",
]
