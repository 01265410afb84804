"""Schemas for dashboard KPI endpoints."""

from __future__ import annotations

from pydantic import Field

from erp_metrics.calculations.kpi import KpiRecord

from .base import CamelModel


class KpiCalculateRequest(CamelModel):
    label: str = Field(..., min_length=1, max_length=128)
    current_value: float
    previous_value: float
    formatter: str = Field(default="compact", description="currency, percent, number or compact")
    invert_trend: bool = False


class DashboardSummaryResponse(CamelModel):
    revenue: KpiRecord
    orders: KpiRecord
    inventory_alerts: KpiRecord
    production_efficiency: KpiRecord


class IndustrySummaryResponse(CamelModel):
    industry: str
    label: str
    requested_industry: str
    kpis: dict[str, KpiRecord]
    modules: list[str] = Field(default_factory=list)


__all__ = ["DashboardSummaryResponse", "IndustrySummaryResponse", "KpiCalculateRequest"]
