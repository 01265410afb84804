"""Request-scoped helpers: tenant, database session and configuration."""

from __future__ import annotations

from typing import AsyncIterator

from fastapi import Header, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from erp_metrics.calculations.industry import IndustryCatalog
from erp_metrics.config import AppSettings
from erp_metrics.services.demand_planning import ForecastConfig


async def get_tenant_id(x_tenant_id: str | None = Header(default=None)) -> str:
    tenant_id = (x_tenant_id or "").strip()
    if not tenant_id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Missing X-Tenant-Id header")
    return tenant_id


async def get_db(request: Request) -> AsyncIterator[AsyncSession]:
    """Yield an AsyncSession for FastAPI dependency usage."""

    async for session in request.app.state.database.get_session():
        yield session


def get_settings_dependency(request: Request) -> AppSettings:
    return request.app.state.settings


def get_catalog(request: Request) -> IndustryCatalog:
    return request.app.state.catalog


def get_forecast_config(request: Request) -> ForecastConfig:
    settings: AppSettings = request.app.state.settings
    return ForecastConfig(
        lead_time_days=settings.forecast_lead_time_days,
        target_months_of_supply=settings.forecast_target_months,
        seasonal_factors=tuple(settings.forecast_seasonal_factors),
        fulfillment_base=settings.forecast_fulfillment_base,
        fulfillment_step=settings.forecast_fulfillment_step,
    )


__all__ = ["get_catalog", "get_db", "get_forecast_config", "get_settings_dependency", "get_tenant_id"]
