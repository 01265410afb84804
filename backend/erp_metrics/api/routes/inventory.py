"""Inventory overview, seeding and demand-planning endpoints."""

from __future__ import annotations

import logging
from datetime import date, timedelta
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from erp_metrics.api.dependencies import get_db, get_forecast_config, get_settings_dependency, get_tenant_id
from erp_metrics.config import AppSettings
from erp_metrics.schemas import (
    DemandPlanningResponse,
    DemandTrendPointSchema,
    ForecastItemSchema,
    InventoryOverviewResponse,
    SeedResponse,
)
from erp_metrics.services.demand_planning import ForecastConfig, aggregate_stock, build_demand_plan
from erp_metrics.services.inventory_seeding import SeedingError, SeedOutcome, SeedResult, ensure_seeded
from erp_metrics.services.inventory_store import SqlInventoryStore

logger = logging.getLogger(__name__)

router = APIRouter()

SEED_RETRY_AFTER_SECONDS = 5


def _store(session: AsyncSession, settings: AppSettings) -> SqlInventoryStore:
    return SqlInventoryStore(session, claim_timeout=timedelta(seconds=settings.seed_claim_timeout_seconds))


async def _seed(store: SqlInventoryStore, tenant_id: str, batch_size: int) -> SeedResult:
    try:
        return await ensure_seeded(tenant_id, store, batch_size=batch_size)
    except IntegrityError as exc:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="On-hand positions already exist for this tenant.",
        ) from exc
    except SeedingError as exc:
        logger.warning("Seeding failed for tenant %s: %s", tenant_id, exc)
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)) from exc


@router.get("/overview", response_model=InventoryOverviewResponse)
async def get_inventory_overview(
    tenant_id: str = Depends(get_tenant_id),
    session: AsyncSession = Depends(get_db),
) -> InventoryOverviewResponse:
    overview = await SqlInventoryStore(session).overview(tenant_id)
    return InventoryOverviewResponse(
        total_items=overview.total_items,
        total_warehouses=overview.total_warehouses,
        total_inventory_value=overview.total_inventory_value,
        low_stock_alerts=overview.low_stock_alerts,
    )


@router.post("/on-hand/seed", response_model=SeedResponse)
async def seed_on_hand(
    tenant_id: str = Depends(get_tenant_id),
    session: AsyncSession = Depends(get_db),
    settings: AppSettings = Depends(get_settings_dependency),
) -> SeedResponse:
    """Create placeholder on-hand positions if the tenant has none."""

    result = await _seed(_store(session, settings), tenant_id, settings.seed_batch_size)
    return SeedResponse(
        tenant_id=result.tenant_id,
        outcome=result.outcome,
        rows_inserted=result.rows_inserted,
        batches=result.batches,
    )


@router.get("/demand-planning", response_model=DemandPlanningResponse)
async def get_demand_planning(
    as_of: Optional[date] = Query(default=None, alias="asof"),
    tenant_id: str = Depends(get_tenant_id),
    session: AsyncSession = Depends(get_db),
    settings: AppSettings = Depends(get_settings_dependency),
    config: ForecastConfig = Depends(get_forecast_config),
) -> DemandPlanningResponse:
    """Forecast stockout risk and reorder quantities for every active item."""

    store = _store(session, settings)
    seeding = await _seed(store, tenant_id, settings.seed_batch_size)
    if seeding.outcome is SeedOutcome.CLAIMED_ELSEWHERE:
        # stock is still being written by another request
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Inventory for this tenant is being seeded; retry shortly.",
            headers={"Retry-After": str(SEED_RETRY_AFTER_SECONDS)},
        )
    items = await store.list_planning_items(tenant_id)
    stock = aggregate_stock(await store.stock_rows(tenant_id))
    plan = build_demand_plan(items, stock, as_of or date.today(), config)
    return DemandPlanningResponse(
        forecast_items=[
            ForecastItemSchema(
                item_id=item.item_id,
                item_number=item.item_number,
                item_name=item.item_name,
                current_stock=item.current_stock,
                avg_monthly_usage=item.avg_monthly_usage,
                reorder_point=item.reorder_point,
                suggested_order=item.suggested_order,
                lead_time_days=item.lead_time_days,
                stockout_risk=item.stockout_risk,
                months_of_supply=item.months_of_supply,
            )
            for item in plan.forecast_items
        ],
        demand_trend=[
            DemandTrendPointSchema(month=point.month, demand=point.demand, fulfilled=point.fulfilled)
            for point in plan.demand_trend
        ],
    )


__all__ = ["get_demand_planning", "get_inventory_overview", "seed_on_hand"]
