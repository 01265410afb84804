"""Pure KPI and industry-dashboard calculations."""

from .formatters import FORMATTERS, format_compact, format_currency, format_number, format_percent
from .industry import (
    IndustryCatalog,
    IndustryKpiDefinition,
    IndustryProfile,
    IndustryType,
    RawMetric,
    build_kpi_summary,
    resolve_industry_kpis,
)
from .industry_profiles import DEFAULT_CATALOG, build_catalog
from .kpi import KpiRecord, Trend, calculate_kpi, generate_sparkline
from .numeric import round_half_up

__all__ = [
    "DEFAULT_CATALOG",
    "FORMATTERS",
    "IndustryCatalog",
    "IndustryKpiDefinition",
    "IndustryProfile",
    "IndustryType",
    "KpiRecord",
    "RawMetric",
    "Trend",
    "build_catalog",
    "build_kpi_summary",
    "calculate_kpi",
    "format_compact",
    "format_currency",
    "format_number",
    "format_percent",
    "generate_sparkline",
    "resolve_industry_kpis",
    "round_half_up",
]
