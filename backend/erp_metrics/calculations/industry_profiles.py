"""Built-in industry profiles and their reference metric snapshot."""

from __future__ import annotations

from .industry import (
    IndustryCatalog,
    IndustryKpiDefinition as Kpi,
    IndustryProfile,
    IndustryType,
    RawMetric,
)

_REVENUE = Kpi("revenue", "Revenue", "currency")

_BASE_MODULES = ("sop", "calendar", "tickets", "seo", "settings")


def _modules(*ordered: str) -> tuple[str, ...]:
    return ("dashboard", *ordered, "reports", "ai", *_BASE_MODULES)


INDUSTRY_PROFILES: dict[IndustryType, IndustryProfile] = {
    IndustryType.GENERAL_MANUFACTURING: IndustryProfile(
        id=IndustryType.GENERAL_MANUFACTURING,
        label="General Manufacturing",
        description="General-purpose manufacturing operations",
        dashboard_kpis=(
            _REVENUE,
            Kpi("activeOrders", "Active Orders", "number"),
            Kpi("inventoryAlerts", "Inventory Alerts", "number", invert_trend=True),
            Kpi("oee", "OEE", "percent"),
        ),
        module_priority=_modules(
            "manufacturing", "inventory", "sales", "procurement", "financial", "hr-payroll", "assets", "projects"
        ),
    ),
    IndustryType.AUTOMOTIVE: IndustryProfile(
        id=IndustryType.AUTOMOTIVE,
        label="Automotive",
        description="Automotive parts and vehicle assembly manufacturing",
        dashboard_kpis=(
            _REVENUE,
            Kpi("ppmDefectRate", "PPM Defect Rate", "number", invert_trend=True),
            Kpi("taktTime", "Takt Time (sec)", "number", invert_trend=True),
            Kpi("oee", "OEE", "percent"),
            Kpi("onTimeDelivery", "On-Time Delivery", "percent"),
        ),
        module_priority=_modules(
            "manufacturing", "inventory", "procurement", "sales", "financial", "assets", "hr-payroll", "projects"
        ),
    ),
    IndustryType.ELECTRONICS: IndustryProfile(
        id=IndustryType.ELECTRONICS,
        label="Electronics",
        description="Electronic components and PCB assembly manufacturing",
        dashboard_kpis=(
            _REVENUE,
            Kpi("firstPassYield", "First Pass Yield", "percent"),
            Kpi("smtDefectRate", "SMT Defect Rate", "number", invert_trend=True),
            Kpi("throughput", "Throughput (units/hr)", "number"),
            Kpi("componentLeadTime", "Avg Lead Time (days)", "number", invert_trend=True),
        ),
        module_priority=_modules(
            "manufacturing", "inventory", "procurement", "sales", "financial", "projects", "hr-payroll", "assets"
        ),
    ),
    IndustryType.AEROSPACE_DEFENSE: IndustryProfile(
        id=IndustryType.AEROSPACE_DEFENSE,
        label="Aerospace & Defense",
        description="Aerospace components and defense systems manufacturing",
        dashboard_kpis=(
            _REVENUE,
            Kpi("as9100Compliance", "AS9100 Compliance", "percent"),
            Kpi("nonConformanceRate", "NCR Rate", "number", invert_trend=True),
            Kpi("onTimeDelivery", "On-Time Delivery", "percent"),
            Kpi("certStatus", "Cert. Active", "number"),
        ),
        module_priority=_modules(
            "manufacturing", "procurement", "inventory", "financial", "projects", "sales", "assets", "hr-payroll"
        ),
    ),
    IndustryType.PHARMACEUTICALS: IndustryProfile(
        id=IndustryType.PHARMACEUTICALS,
        label="Pharmaceuticals",
        description="Pharmaceutical and biotech drug manufacturing",
        dashboard_kpis=(
            _REVENUE,
            Kpi("gmpCompliance", "GMP Compliance", "percent"),
            Kpi("batchYield", "Batch Yield", "percent"),
            Kpi("deviationCount", "Open Deviations", "number", invert_trend=True),
            Kpi("rightFirstTime", "Right First Time", "percent"),
        ),
        module_priority=_modules(
            "manufacturing", "inventory", "financial", "procurement", "hr-payroll", "sales", "assets", "projects"
        ),
    ),
    IndustryType.FOOD_BEVERAGE: IndustryProfile(
        id=IndustryType.FOOD_BEVERAGE,
        label="Food & Beverage",
        description="Food processing and beverage production",
        dashboard_kpis=(
            _REVENUE,
            Kpi("haccpCompliance", "HACCP Compliance", "percent"),
            Kpi("shelfLifeYield", "Shelf Life Yield", "percent"),
            Kpi("contaminationIncidents", "Contamination Incidents", "number", invert_trend=True),
            Kpi("oee", "OEE", "percent"),
        ),
        module_priority=_modules(
            "manufacturing", "inventory", "procurement", "sales", "financial", "hr-payroll", "assets", "projects"
        ),
    ),
    IndustryType.CHEMICALS: IndustryProfile(
        id=IndustryType.CHEMICALS,
        label="Chemicals",
        description="Chemical processing and specialty chemicals manufacturing",
        dashboard_kpis=(
            _REVENUE,
            Kpi("yieldPercent", "Yield %", "percent"),
            Kpi("safetyIncidents", "Safety Incidents", "number", invert_trend=True),
            Kpi("regulatoryCompliance", "Reg. Compliance", "percent"),
            Kpi("reactorUptime", "Reactor Uptime", "percent"),
        ),
        module_priority=_modules(
            "manufacturing", "inventory", "procurement", "financial", "hr-payroll", "sales", "assets", "projects"
        ),
    ),
    IndustryType.MACHINERY_EQUIPMENT: IndustryProfile(
        id=IndustryType.MACHINERY_EQUIPMENT,
        label="Machinery & Equipment",
        description="Industrial machinery and heavy equipment manufacturing",
        dashboard_kpis=(
            _REVENUE,
            Kpi("projectCompletion", "Project Completion", "percent"),
            Kpi("warrantyClaims", "Warranty Claims", "number", invert_trend=True),
            Kpi("engineeringChanges", "Open ECOs", "number", invert_trend=True),
            Kpi("onTimeDelivery", "On-Time Delivery", "percent"),
        ),
        module_priority=_modules(
            "manufacturing", "projects", "procurement", "inventory", "sales", "financial", "assets", "hr-payroll"
        ),
    ),
    IndustryType.TEXTILES_APPAREL: IndustryProfile(
        id=IndustryType.TEXTILES_APPAREL,
        label="Textiles & Apparel",
        description="Textile processing and garment manufacturing",
        dashboard_kpis=(
            _REVENUE,
            Kpi("fabricYield", "Fabric Yield", "percent"),
            Kpi("orderFillRate", "Order Fill Rate", "percent"),
            Kpi("avgLeadTime", "Avg Lead Time (days)", "number", invert_trend=True),
            Kpi("defectRate", "Defect Rate", "percent", invert_trend=True),
        ),
        module_priority=_modules(
            "sales", "manufacturing", "inventory", "procurement", "financial", "hr-payroll", "projects", "assets"
        ),
    ),
}


def _table(**pairs: tuple[float, float]) -> dict[str, RawMetric]:
    return {key: RawMetric(current=current, previous=previous) for key, (current, previous) in pairs.items()}


# Reference snapshot used for trials and for tenants without live counters.
INDUSTRY_METRICS: dict[IndustryType, dict[str, RawMetric]] = {
    IndustryType.GENERAL_MANUFACTURING: _table(
        revenue=(284750, 261200),
        activeOrders=(47, 42),
        inventoryAlerts=(8, 12),
        oee=(87.3, 84.1),
    ),
    IndustryType.AUTOMOTIVE: _table(
        revenue=(1245000, 1180000),
        ppmDefectRate=(42, 58),
        taktTime=(47, 52),
        oee=(89.1, 86.5),
        onTimeDelivery=(96.8, 94.2),
    ),
    IndustryType.ELECTRONICS: _table(
        revenue=(892000, 845000),
        firstPassYield=(96.2, 94.8),
        smtDefectRate=(145, 180),
        throughput=(1240, 1180),
        componentLeadTime=(12, 15),
    ),
    IndustryType.AEROSPACE_DEFENSE: _table(
        revenue=(3450000, 3280000),
        as9100Compliance=(99.2, 98.7),
        nonConformanceRate=(3, 5),
        onTimeDelivery=(94.5, 92.8),
        certStatus=(12, 11),
    ),
    IndustryType.PHARMACEUTICALS: _table(
        revenue=(2180000, 2050000),
        gmpCompliance=(99.8, 99.5),
        batchYield=(97.2, 96.1),
        deviationCount=(4, 7),
        rightFirstTime=(94.5, 92.8),
    ),
    IndustryType.FOOD_BEVERAGE: _table(
        revenue=(567000, 534000),
        haccpCompliance=(99.5, 99.1),
        shelfLifeYield=(96.8, 95.3),
        contaminationIncidents=(0, 1),
        oee=(85.4, 83.2),
    ),
    IndustryType.CHEMICALS: _table(
        revenue=(1890000, 1760000),
        yieldPercent=(94.7, 93.2),
        safetyIncidents=(1, 3),
        regulatoryCompliance=(98.9, 97.8),
        reactorUptime=(91.3, 88.7),
    ),
    IndustryType.MACHINERY_EQUIPMENT: _table(
        revenue=(4200000, 3950000),
        projectCompletion=(87.5, 82.3),
        warrantyClaims=(6, 9),
        engineeringChanges=(11, 15),
        onTimeDelivery=(91.2, 88.5),
    ),
    IndustryType.TEXTILES_APPAREL: _table(
        revenue=(345000, 328000),
        fabricYield=(88.5, 86.2),
        orderFillRate=(94.1, 91.8),
        avgLeadTime=(18, 22),
        defectRate=(2.8, 3.5),
    ),
}

DASHBOARD_CARD_MODULES = (
    "financial",
    "manufacturing",
    "sales",
    "inventory",
    "procurement",
    "hr-payroll",
    "assets",
    "projects",
)


def build_catalog(default_industry: IndustryType | str = IndustryType.GENERAL_MANUFACTURING) -> IndustryCatalog:
    """Build a catalog from the built-in profiles with the given default vertical."""

    try:
        default = IndustryType(default_industry)
    except ValueError:
        default = IndustryType.GENERAL_MANUFACTURING
    return IndustryCatalog(profiles=INDUSTRY_PROFILES, metrics=INDUSTRY_METRICS, default_industry=default)


DEFAULT_CATALOG = build_catalog()


__all__ = [
    "DASHBOARD_CARD_MODULES",
    "DEFAULT_CATALOG",
    "INDUSTRY_METRICS",
    "INDUSTRY_PROFILES",
    "build_catalog",
]
