"""Dashboard KPI endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from erp_metrics.api.dependencies import get_catalog, get_settings_dependency
from erp_metrics.calculations.formatters import resolve_formatter
from erp_metrics.calculations.industry import IndustryCatalog, resolve_industry_kpis, top_modules
from erp_metrics.calculations.industry_profiles import DASHBOARD_CARD_MODULES
from erp_metrics.calculations.kpi import KpiRecord, build_dashboard_summary, calculate_kpi
from erp_metrics.config import AppSettings
from erp_metrics.schemas import DashboardSummaryResponse, IndustrySummaryResponse, KpiCalculateRequest

router = APIRouter()

# Metric keys in the default industry's snapshot that feed the headline cards.
_HEADLINE_KEYS = {
    "revenue": "revenue",
    "orders": "activeOrders",
    "inventory_alerts": "inventoryAlerts",
    "oee": "oee",
}


@router.get("/summary", response_model=DashboardSummaryResponse)
async def get_dashboard_summary(
    catalog: IndustryCatalog = Depends(get_catalog),
    settings: AppSettings = Depends(get_settings_dependency),
) -> DashboardSummaryResponse:
    """Return the four headline KPIs with sparklines."""

    metrics = catalog.metrics_for(catalog.default_industry)
    snapshot = {
        name: (metrics[key].current, metrics[key].previous)
        for name, key in _HEADLINE_KEYS.items()
        if key in metrics
    }
    summary = build_dashboard_summary(snapshot, points=settings.sparkline_points)
    return DashboardSummaryResponse(
        revenue=summary["revenue"],
        orders=summary["orders"],
        inventory_alerts=summary["inventoryAlerts"],
        production_efficiency=summary["productionEfficiency"],
    )


@router.get("/industry/{industry_type}", response_model=IndustrySummaryResponse)
async def get_industry_summary(
    industry_type: str,
    catalog: IndustryCatalog = Depends(get_catalog),
) -> IndustrySummaryResponse:
    """Resolve the industry's KPI profile; unknown industries use the default vertical."""

    profile = catalog.profile_for(industry_type)
    return IndustrySummaryResponse(
        industry=profile.id.value,
        label=profile.label,
        requested_industry=industry_type,
        kpis=resolve_industry_kpis(industry_type, catalog),
        modules=top_modules(profile, DASHBOARD_CARD_MODULES),
    )


@router.post("/kpi", response_model=KpiRecord)
async def calculate_single_kpi(request: KpiCalculateRequest) -> KpiRecord:
    """Calculate one KPI record from raw values."""

    return calculate_kpi(
        request.label,
        request.current_value,
        request.previous_value,
        resolve_formatter(request.formatter),
        request.invert_trend,
    )


__all__ = ["calculate_single_kpi", "get_dashboard_summary", "get_industry_summary"]
