"""Demand planning forecast derived from item reorder configuration.

There is no consumption history behind these numbers. Average monthly usage
is estimated from the reorder point (or reorder quantity), and everything
else (months of supply, stockout risk, suggested order, the six-month demand
trend) follows from that estimate and the current on-hand stock.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Iterable, Mapping, Sequence

from erp_metrics.calculations.numeric import round_int

_MONTH_ABBR = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")


class StockoutRisk(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


@dataclass(frozen=True)
class ForecastConfig:
    lead_time_days: int = 7
    target_months_of_supply: float = 3.0
    reorder_point_usage_multiplier: float = 1.5
    default_monthly_usage: float = 50.0
    unlimited_months_of_supply: float = 99.0
    # (upper bound in months, tier), checked in order
    risk_thresholds: tuple[tuple[float, StockoutRisk], ...] = (
        (0.5, StockoutRisk.CRITICAL),
        (1.0, StockoutRisk.HIGH),
        (2.0, StockoutRisk.MEDIUM),
    )
    seasonal_factors: tuple[float, ...] = (0.85, 0.92, 1.00, 1.15, 1.05, 0.95)
    fulfillment_base: float = 0.88
    fulfillment_step: float = 0.02


@dataclass(frozen=True)
class PlanningItem:
    id: str
    reorder_point: float = 0
    reorder_quantity: float | None = None
    unit_cost: float = 0
    item_number: str | None = None
    item_name: str | None = None


@dataclass(frozen=True)
class ForecastItem:
    item_id: str
    current_stock: float
    avg_monthly_usage: int
    reorder_point: float
    suggested_order: int
    lead_time_days: int
    stockout_risk: StockoutRisk
    months_of_supply: float
    unit_cost: float = 0
    item_number: str | None = None
    item_name: str | None = None


@dataclass(frozen=True)
class DemandTrendPoint:
    month: str
    demand: int
    fulfilled: int


@dataclass(frozen=True)
class DemandPlan:
    forecast_items: list[ForecastItem] = field(default_factory=list)
    demand_trend: list[DemandTrendPoint] = field(default_factory=list)


def _usable(value: float | None) -> bool:
    return bool(value) and math.isfinite(value)


def estimate_monthly_usage(item: PlanningItem, config: ForecastConfig = ForecastConfig()) -> int:
    """Usage from the reorder point, else the reorder quantity, else the default.

    Missing or non-finite settings fall through to the next source.
    """

    if _usable(item.reorder_point) and item.reorder_point > 0:
        return round_int(item.reorder_point * config.reorder_point_usage_multiplier)
    if _usable(item.reorder_quantity):
        return round_int(item.reorder_quantity)
    return round_int(config.default_monthly_usage)


def months_of_supply(current_stock: float, avg_monthly_usage: float, config: ForecastConfig = ForecastConfig()) -> float:
    if avg_monthly_usage > 0:
        return current_stock / avg_monthly_usage
    return config.unlimited_months_of_supply


def classify_stockout_risk(months: float, config: ForecastConfig = ForecastConfig()) -> StockoutRisk:
    for upper_bound, tier in config.risk_thresholds:
        if months < upper_bound:
            return tier
    return StockoutRisk.LOW


def suggest_order(
    current_stock: float,
    avg_monthly_usage: float,
    months: float,
    config: ForecastConfig = ForecastConfig(),
) -> int:
    """Units needed to reach the target months of supply; never negative.

    A shortfall that is not a finite number (NaN or infinite stock) orders
    nothing.
    """

    if months >= config.target_months_of_supply:
        return 0
    shortfall = config.target_months_of_supply * avg_monthly_usage - current_stock
    if not math.isfinite(shortfall):
        return 0
    return max(0, math.ceil(shortfall))


def forecast_item(
    item: PlanningItem,
    current_stock_by_item_id: Mapping[str, float],
    config: ForecastConfig = ForecastConfig(),
) -> ForecastItem:
    current_stock = current_stock_by_item_id.get(item.id, 0)
    usage = estimate_monthly_usage(item, config)
    supply = months_of_supply(current_stock, usage, config)
    return ForecastItem(
        item_id=item.id,
        current_stock=current_stock,
        avg_monthly_usage=usage,
        reorder_point=item.reorder_point or 0,
        suggested_order=suggest_order(current_stock, usage, supply, config),
        lead_time_days=config.lead_time_days,
        stockout_risk=classify_stockout_risk(supply, config),
        months_of_supply=supply,
        unit_cost=item.unit_cost or 0,
        item_number=item.item_number,
        item_name=item.item_name,
    )


def _shift_month(as_of: date, months_back: int) -> tuple[int, int]:
    index = as_of.year * 12 + (as_of.month - 1) - months_back
    year, month_index = divmod(index, 12)
    return year, month_index + 1


def build_demand_trend(
    forecast_items: Iterable[ForecastItem],
    as_of: date,
    config: ForecastConfig = ForecastConfig(),
) -> list[DemandTrendPoint]:
    """Project monthly demand value over the months ending with ``as_of``.

    Slots run oldest first; the last slot is the ``as_of`` month.
    """

    total_monthly_demand = sum(item.avg_monthly_usage * item.unit_cost for item in forecast_items)
    slots = len(config.seasonal_factors)
    trend: list[DemandTrendPoint] = []
    for index, factor in enumerate(config.seasonal_factors):
        _, month = _shift_month(as_of, slots - 1 - index)
        demand = round_int(total_monthly_demand * factor)
        fulfilled = round_int(demand * (config.fulfillment_base + index * config.fulfillment_step))
        trend.append(DemandTrendPoint(month=_MONTH_ABBR[month - 1], demand=demand, fulfilled=fulfilled))
    return trend


def aggregate_stock(rows: Iterable[tuple[str, float]]) -> dict[str, float]:
    """Sum on-hand quantities per item across warehouses."""

    totals: dict[str, float] = {}
    for item_id, quantity in rows:
        totals[item_id] = totals.get(item_id, 0) + (quantity or 0)
    return totals


def build_demand_plan(
    items: Sequence[PlanningItem],
    current_stock_by_item_id: Mapping[str, float],
    as_of: date,
    config: ForecastConfig = ForecastConfig(),
) -> DemandPlan:
    forecast_items = [forecast_item(item, current_stock_by_item_id, config) for item in items]
    return DemandPlan(
        forecast_items=forecast_items,
        demand_trend=build_demand_trend(forecast_items, as_of, config),
    )


__all__ = [
    "DemandPlan",
    "DemandTrendPoint",
    "ForecastConfig",
    "ForecastItem",
    "PlanningItem",
    "StockoutRisk",
    "aggregate_stock",
    "build_demand_plan",
    "build_demand_trend",
    "classify_stockout_risk",
    "estimate_monthly_usage",
    "forecast_item",
    "months_of_supply",
    "suggest_order",
]
