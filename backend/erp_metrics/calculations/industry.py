"""Industry-profile driven KPI resolution.

Each manufacturing vertical declares an ordered list of KPI definitions. The
resolver looks every definition up in a raw metrics table, picks the
formatter named by the definition and delegates to :func:`calculate_kpi`.

Configuration is carried by :class:`IndustryCatalog`, an immutable bundle
passed in explicitly so several tenants can be resolved concurrently.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Iterable, Mapping, Sequence

from .formatters import FORMATTERS, Formatter, resolve_formatter
from .kpi import KpiRecord, calculate_kpi

logger = logging.getLogger(__name__)


class IndustryType(str, Enum):
    GENERAL_MANUFACTURING = "general-manufacturing"
    AUTOMOTIVE = "automotive"
    ELECTRONICS = "electronics"
    AEROSPACE_DEFENSE = "aerospace-defense"
    PHARMACEUTICALS = "pharmaceuticals"
    FOOD_BEVERAGE = "food-beverage"
    CHEMICALS = "chemicals"
    MACHINERY_EQUIPMENT = "machinery-equipment"
    TEXTILES_APPAREL = "textiles-apparel"


@dataclass(frozen=True)
class IndustryKpiDefinition:
    key: str
    label: str
    formatter: str
    invert_trend: bool = False


@dataclass(frozen=True)
class IndustryProfile:
    id: IndustryType
    label: str
    description: str
    dashboard_kpis: tuple[IndustryKpiDefinition, ...]
    module_priority: tuple[str, ...] = ()


@dataclass(frozen=True)
class RawMetric:
    """Current and previous reporting-period values for one metric."""

    current: float
    previous: float


MetricTable = Mapping[str, RawMetric]


@dataclass(frozen=True)
class IndustryCatalog:
    profiles: Mapping[IndustryType, IndustryProfile]
    metrics: Mapping[IndustryType, MetricTable] = field(default_factory=dict)
    default_industry: IndustryType = IndustryType.GENERAL_MANUFACTURING

    def __post_init__(self) -> None:
        if self.default_industry not in self.profiles:
            raise ValueError(f"Default industry {self.default_industry.value} has no profile")
        object.__setattr__(self, "profiles", MappingProxyType(dict(self.profiles)))
        object.__setattr__(
            self,
            "metrics",
            MappingProxyType({key: MappingProxyType(dict(table)) for key, table in self.metrics.items()}),
        )

    def normalize(self, industry_type: IndustryType | str | None) -> IndustryType:
        """Map any input onto a configured industry, degrading to the default."""

        try:
            candidate = IndustryType(industry_type)
        except ValueError:
            logger.debug("Unknown industry %r; using %s", industry_type, self.default_industry.value)
            return self.default_industry
        if candidate not in self.profiles:
            return self.default_industry
        return candidate

    def profile_for(self, industry_type: IndustryType | str | None) -> IndustryProfile:
        return self.profiles[self.normalize(industry_type)]

    def metrics_for(self, industry_type: IndustryType | str | None) -> MetricTable:
        key = self.normalize(industry_type)
        table = self.metrics.get(key)
        if table is None:
            table = self.metrics.get(self.default_industry, MappingProxyType({}))
        return table


def build_kpi_summary(
    definitions: Sequence[IndustryKpiDefinition],
    raw_metrics: Mapping[str, RawMetric],
    formatters: Mapping[str, Formatter] = FORMATTERS,
) -> dict[str, KpiRecord]:
    """Resolve ``definitions`` against ``raw_metrics`` in definition order.

    Definitions without a matching metric are omitted from the result.
    """

    result: dict[str, KpiRecord] = {}
    for definition in definitions:
        values = raw_metrics.get(definition.key)
        if values is None:
            continue
        result[definition.key] = calculate_kpi(
            definition.label,
            values.current,
            values.previous,
            resolve_formatter(definition.formatter, formatters),
            definition.invert_trend,
        )
    return result


def resolve_industry_kpis(
    industry_type: IndustryType | str | None,
    catalog: IndustryCatalog,
    raw_metrics: Mapping[str, RawMetric] | None = None,
    formatters: Mapping[str, Formatter] = FORMATTERS,
) -> dict[str, KpiRecord]:
    """Return the KPI summary for ``industry_type``.

    ``raw_metrics`` overrides the catalog's own snapshot for the industry.
    """

    profile = catalog.profile_for(industry_type)
    table = raw_metrics if raw_metrics is not None else catalog.metrics_for(industry_type)
    return build_kpi_summary(profile.dashboard_kpis, table, formatters)


def top_modules(profile: IndustryProfile, available: Iterable[str], limit: int = 6) -> list[str]:
    """Return the highest-priority module ids that have a dashboard card."""

    known = set(available)
    ranked = [module for module in profile.module_priority if module != "dashboard" and module in known]
    return ranked[:limit]


__all__ = [
    "IndustryCatalog",
    "IndustryKpiDefinition",
    "IndustryProfile",
    "IndustryType",
    "MetricTable",
    "RawMetric",
    "build_kpi_summary",
    "resolve_industry_kpis",
    "top_modules",
]
