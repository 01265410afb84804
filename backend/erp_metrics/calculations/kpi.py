"""KPI calculator and decorative sparkline generator.

``calculate_kpi`` turns a current/previous pair into a :class:`KpiRecord`
with a period-over-period change, a trend classification and whether that
trend is favourable. The calculator never raises: invalid inputs (NaN,
negative values) pass through and produce a record anyway.

Sparklines are cosmetic. Only their final point is guaranteed (it always
equals the KPI value); everything before it is a random walk.
"""

from __future__ import annotations

import random
from enum import Enum
from typing import Mapping, Protocol

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from .formatters import Formatter, format_compact, format_currency, format_number, format_percent
from .numeric import round_half_up

TREND_THRESHOLD_PCT = 0.5
DEFAULT_SPARKLINE_POINTS = 14
DEFAULT_SPARKLINE_VARIANCE_PCT = 15.0
OEE_SPARKLINE_VARIANCE_PCT = 5.0
# Centre of the random draw; below 0.5 so the walk drifts towards the end value.
_SPARKLINE_DRIFT = 0.45


class Trend(str, Enum):
    UP = "up"
    DOWN = "down"
    FLAT = "flat"


class KpiRecord(BaseModel):
    """Immutable KPI snapshot, serialised with camelCase keys."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    label: str
    value: float
    formatted_value: str
    previous_value: float
    change_percent: float
    trend: Trend
    trend_is_positive: bool
    sparkline_data: list[float] | None = None


class RandomSource(Protocol):
    def random(self) -> float:
        ...


def classify_trend(change_percent: float) -> Trend:
    if change_percent > TREND_THRESHOLD_PCT:
        return Trend.UP
    if change_percent < -TREND_THRESHOLD_PCT:
        return Trend.DOWN
    return Trend.FLAT


def percent_change(current_value: float, previous_value: float) -> float:
    """Unrounded percentage change; a zero baseline yields ``0``."""

    if previous_value == 0:
        return 0.0
    return (current_value - previous_value) / previous_value * 100


def calculate_kpi(
    label: str,
    current_value: float,
    previous_value: float,
    formatter: Formatter = format_compact,
    invert_trend: bool = False,
) -> KpiRecord:
    """Build a KPI record from a current and previous value.

    ``invert_trend`` marks metrics where a decrease is good news (defects,
    alerts, lead times). A flat trend is never reported as positive.
    """

    change_percent = round_half_up(percent_change(current_value, previous_value), 1)
    trend = classify_trend(change_percent)
    trend_is_positive = trend is Trend.DOWN if invert_trend else trend is Trend.UP

    return KpiRecord(
        label=label,
        value=current_value,
        formatted_value=formatter(current_value),
        previous_value=previous_value,
        change_percent=change_percent,
        trend=trend,
        trend_is_positive=trend_is_positive,
    )


def generate_sparkline(
    base_value: float,
    points: int,
    variance_pct: float = DEFAULT_SPARKLINE_VARIANCE_PCT,
    rng: RandomSource | None = None,
) -> list[float]:
    """Return ``points`` values of a bounded random walk ending at ``base_value``."""

    if points <= 0:
        return []
    source = rng if rng is not None else random
    step_bound = base_value * variance_pct / 100 / points
    current = base_value * (1 - variance_pct / 100)
    data: list[float] = []
    for _ in range(points):
        current += (source.random() - _SPARKLINE_DRIFT) * step_bound
        data.append(round_half_up(current, 2))
    data[-1] = base_value
    return data


def _with_sparkline(
    record: KpiRecord,
    *,
    points: int,
    variance_pct: float = DEFAULT_SPARKLINE_VARIANCE_PCT,
    rng: RandomSource | None = None,
) -> KpiRecord:
    sparkline = generate_sparkline(record.value, points, variance_pct, rng=rng)
    return record.model_copy(update={"sparkline_data": sparkline})


def calculate_revenue_kpi(
    current: float,
    previous: float,
    *,
    points: int = DEFAULT_SPARKLINE_POINTS,
    rng: RandomSource | None = None,
) -> KpiRecord:
    record = calculate_kpi("Revenue", current, previous, format_currency)
    return _with_sparkline(record, points=points, rng=rng)


def calculate_orders_kpi(
    current: float,
    previous: float,
    *,
    points: int = DEFAULT_SPARKLINE_POINTS,
    rng: RandomSource | None = None,
) -> KpiRecord:
    record = calculate_kpi("Active Orders", current, previous, format_number)
    return _with_sparkline(record, points=points, rng=rng)


def calculate_inventory_alerts_kpi(count: float, previous_count: float) -> KpiRecord:
    return calculate_kpi("Inventory Alerts", count, previous_count, format_number, invert_trend=True)


def calculate_oee_kpi(
    oee: float,
    previous_oee: float,
    *,
    points: int = DEFAULT_SPARKLINE_POINTS,
    rng: RandomSource | None = None,
) -> KpiRecord:
    record = calculate_kpi("OEE", oee, previous_oee, format_percent)
    return _with_sparkline(record, points=points, variance_pct=OEE_SPARKLINE_VARIANCE_PCT, rng=rng)


def build_dashboard_summary(
    snapshot: Mapping[str, tuple[float, float]],
    *,
    points: int = DEFAULT_SPARKLINE_POINTS,
    rng: RandomSource | None = None,
) -> dict[str, KpiRecord]:
    """Compute the four headline KPIs from ``{name: (current, previous)}``.

    Expected keys are ``revenue``, ``orders``, ``inventory_alerts`` and
    ``oee``; a missing key is treated as ``(0, 0)``.
    """

    def pair(key: str) -> tuple[float, float]:
        return snapshot.get(key, (0, 0))

    return {
        "revenue": calculate_revenue_kpi(*pair("revenue"), points=points, rng=rng),
        "orders": calculate_orders_kpi(*pair("orders"), points=points, rng=rng),
        "inventoryAlerts": calculate_inventory_alerts_kpi(*pair("inventory_alerts")),
        "productionEfficiency": calculate_oee_kpi(*pair("oee"), points=points, rng=rng),
    }


__all__ = [
    "KpiRecord",
    "RandomSource",
    "TREND_THRESHOLD_PCT",
    "Trend",
    "build_dashboard_summary",
    "calculate_inventory_alerts_kpi",
    "calculate_kpi",
    "calculate_oee_kpi",
    "calculate_orders_kpi",
    "calculate_revenue_kpi",
    "classify_trend",
    "generate_sparkline",
    "percent_change",
]
