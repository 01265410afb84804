from __future__ import annotations

import math
import random

import pytest
from pydantic import ValidationError

from erp_metrics.calculations.formatters import format_currency, format_number, format_percent
from erp_metrics.calculations.kpi import (
    Trend,
    build_dashboard_summary,
    calculate_inventory_alerts_kpi,
    calculate_kpi,
    calculate_oee_kpi,
    calculate_revenue_kpi,
    classify_trend,
    generate_sparkline,
    percent_change,
)


class FixedRandom:
    """Always returns the same draw."""

    def __init__(self, value: float):
        self.value = value

    def random(self) -> float:
        return self.value


def test_revenue_increase_is_positive_uptrend():
    record = calculate_kpi("Revenue", 2500, 2000, format_currency)

    assert record.formatted_value == "$2,500.00"
    assert record.change_percent == pytest.approx(25.0)
    assert record.trend is Trend.UP
    assert record.trend_is_positive is True
    assert record.sparkline_data is None


def test_zero_previous_value_reports_no_change():
    record = calculate_kpi("Orders", 40, 0, format_number)

    assert record.change_percent == 0
    assert record.trend is Trend.FLAT
    assert record.trend_is_positive is False


@pytest.mark.parametrize(
    ("change", "expected"),
    [(0.5, Trend.FLAT), (-0.5, Trend.FLAT), (0.51, Trend.UP), (-0.51, Trend.DOWN), (0.0, Trend.FLAT)],
)
def test_trend_threshold_is_exclusive(change, expected):
    assert classify_trend(change) is expected


def test_half_percent_moves_are_flat():
    assert calculate_kpi("x", 100.5, 100).trend is Trend.FLAT
    assert calculate_kpi("x", 995, 1000).trend is Trend.FLAT
    assert calculate_kpi("x", 1006, 1000).trend is Trend.UP


def test_trend_follows_rounded_change_percent():
    # 0.54% rounds to 0.5%, which is inside the flat band
    record = calculate_kpi("x", 1005.4, 1000)

    assert record.change_percent == pytest.approx(0.5)
    assert record.trend is Trend.FLAT


def test_invert_trend_flips_polarity():
    rising = calculate_kpi("Defects", 110, 100, invert_trend=True)
    falling = calculate_kpi("Defects", 90, 100, invert_trend=True)

    assert rising.trend is Trend.UP and rising.trend_is_positive is False
    assert falling.trend is Trend.DOWN and falling.trend_is_positive is True
    assert calculate_kpi("Defects", 90, 100).trend_is_positive is False


def test_flat_trend_is_never_positive():
    assert calculate_kpi("x", 100, 100).trend_is_positive is False
    assert calculate_kpi("x", 100, 100, invert_trend=True).trend_is_positive is False


def test_change_percent_rounds_half_up():
    # 1/8 = 12.5% exactly; 0.25% rounds to 0.3
    assert calculate_kpi("x", 112.5, 100).change_percent == pytest.approx(12.5)
    assert calculate_kpi("x", 100.25, 100).change_percent == pytest.approx(0.3)


def test_percent_change_is_unrounded():
    assert percent_change(4, 3) == pytest.approx(33.333333, rel=1e-6)


def test_invalid_inputs_do_not_raise():
    record = calculate_kpi("x", float("nan"), 100)
    assert math.isnan(record.change_percent)
    assert record.trend is Trend.FLAT

    negative = calculate_kpi("x", -50, 100, format_number)
    assert negative.formatted_value == "-50"
    assert negative.trend is Trend.DOWN


def test_record_is_immutable_and_serialises_camel_case():
    record = calculate_kpi("Revenue", 2500, 2000, format_currency)

    with pytest.raises(ValidationError):
        record.value = 1  # type: ignore[misc]

    payload = record.model_dump(by_alias=True)
    assert payload["formattedValue"] == "$2,500.00"
    assert payload["trendIsPositive"] is True
    assert payload["changePercent"] == pytest.approx(25.0)


def test_sparkline_ends_at_base_value():
    for seed in range(25):
        data = generate_sparkline(1234.56, 14, rng=random.Random(seed))
        assert len(data) == 14
        assert data[-1] == 1234.56


def test_sparkline_degenerate_lengths():
    assert generate_sparkline(100, 0) == []
    assert generate_sparkline(100, -3) == []
    assert generate_sparkline(100, 1, rng=random.Random(1)) == [100]


def test_sparkline_neutral_draw_stays_at_start():
    data = generate_sparkline(100, 5, rng=FixedRandom(0.45))

    assert data == [85.0, 85.0, 85.0, 85.0, 100]


def test_sparkline_values_rounded_to_cents():
    data = generate_sparkline(987.654, 10, rng=random.Random(7))

    for value in data[:-1]:
        assert value == round(value, 2)


def test_specialised_kpis():
    rng = random.Random(3)
    revenue = calculate_revenue_kpi(2500, 2000, points=7, rng=rng)
    assert revenue.label == "Revenue"
    assert revenue.formatted_value == "$2,500.00"
    assert len(revenue.sparkline_data) == 7
    assert revenue.sparkline_data[-1] == 2500

    oee = calculate_oee_kpi(87.3, 84.1, rng=rng)
    assert oee.formatted_value == "87.3%"
    assert oee.sparkline_data[-1] == 87.3
    # OEE walks within a 5% band of its start point
    assert min(oee.sparkline_data[:-1]) > 87.3 * 0.9

    alerts = calculate_inventory_alerts_kpi(8, 12)
    assert alerts.trend is Trend.DOWN
    assert alerts.trend_is_positive is True
    assert alerts.sparkline_data is None


def test_dashboard_summary_keys_and_missing_pairs():
    summary = build_dashboard_summary(
        {"revenue": (284750, 261200), "oee": (87.3, 84.1)},
        points=5,
        rng=random.Random(11),
    )

    assert list(summary) == ["revenue", "orders", "inventoryAlerts", "productionEfficiency"]
    assert summary["revenue"].change_percent == pytest.approx(9.0)
    assert summary["orders"].value == 0
    assert summary["orders"].trend is Trend.FLAT
    assert summary["productionEfficiency"].formatted_value == format_percent(87.3)
