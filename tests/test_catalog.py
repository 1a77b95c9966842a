"""Tests for the static metric catalog."""
from app.services.catalog import (
    OPTIONAL_SECTIONS,
    PREDEFINED_BY_ID,
    SITE_VISIT_CRITERIA,
    default_metric_settings,
    dropdown_label,
    infer_optional_sections,
    predefined_metric,
    sort_categories,
)
from app.services.scoring import DropdownMetric


def test_predefined_metrics_cover_every_dropdown():
    assert len(PREDEFINED_BY_ID) == 18
    for metric in DropdownMetric:
        assert metric.value in PREDEFINED_BY_ID


def test_ten_site_visit_criteria():
    assert len(SITE_VISIT_CRITERIA) == 10
    assert "delivery_condition" in SITE_VISIT_CRITERIA


def test_predefined_metric_lookup():
    wage = predefined_metric("expenses_effective_wage")
    assert wage["higher_is_better"] is False
    assert wage["category"] == "Expenses"
    assert predefined_metric("made_up") is None


def test_dropdown_label():
    assert dropdown_label("demand_supply_balance", 100) == "Positive Demand"
    assert dropdown_label("market_saturation_heat_map_intersection", 0) == "Hot Spot"
    assert dropdown_label("demand_supply_balance", 42) is None
    assert dropdown_label("demand_supply_balance", None) is None
    assert dropdown_label("traffic_annual_visits", 100) is None


def test_sort_categories():
    assert sort_categories(["Zeta", "Expenses", "Traffic", "Alpha", "Site Visit"]) == [
        "Traffic", "Expenses", "Site Visit", "Alpha", "Zeta",
    ]


def test_default_settings_all_sections():
    settings = default_metric_settings()
    assert len(settings) == 18
    assert all(s["target_value"] == 0 for s in settings)


def test_default_settings_required_only():
    settings = default_metric_settings([])
    assert len(settings) == 12
    assert not any(s["category"] in OPTIONAL_SECTIONS for s in settings)


def test_default_settings_one_optional_section():
    settings = default_metric_settings(["Expenses"])
    assert len(settings) == 14


def test_infer_optional_sections():
    categories = ["Traffic", "Expenses", "Custom", "Demand & Spending", "Expenses"]
    assert infer_optional_sections(categories) == ["Demand & Spending", "Expenses"]
    assert infer_optional_sections(iter(["Traffic"])) == []
