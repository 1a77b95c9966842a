"""Static metric catalog — predefined metrics, dropdown options, and site-visit criteria."""

from typing import Optional

from app.services.scoring import DropdownMetric


# ─── SECTIONS ───────────────────────────────────────────────────────────────

REQUIRED_SECTIONS = ["Traffic", "Trade Area", "Financial Performance"]
OPTIONAL_SECTIONS = ["Market Coverage & Saturation", "Demand & Spending", "Expenses"]
VISITOR_PROFILE_SECTION = "Visitor Profile"
SITE_VISIT_SECTION = "Site Visit"

SECTION_ORDER = REQUIRED_SECTIONS + OPTIONAL_SECTIONS + [VISITOR_PROFILE_SECTION, SITE_VISIT_SECTION]


def sort_categories(categories: list[str]) -> list[str]:
    """Known sections in display order, then anything else alphabetically."""
    known = [c for c in SECTION_ORDER if c in categories]
    unknown = sorted(c for c in set(categories) if c not in SECTION_ORDER)
    return known + unknown


def enabled_categories(enabled_optional: Optional[list[str]] = None) -> list[str]:
    if enabled_optional is None:
        enabled_optional = OPTIONAL_SECTIONS
    return REQUIRED_SECTIONS + [s for s in OPTIONAL_SECTIONS if s in enabled_optional]


def infer_optional_sections(categories) -> list[str]:
    """Optional sections that appear among a set's metric categories."""
    present = set(categories)
    return [s for s in OPTIONAL_SECTIONS if s in present]


# ─── PREDEFINED METRICS ─────────────────────────────────────────────────────

# (metric_identifier, label, category, higher_is_better, description)
PREDEFINED_METRICS = [
    # Traffic
    ("traffic_annual_visits", "Annual Visits", "Traffic", True,
     "Total number of visits annually."),
    ("traffic_unique_visitors", "Unique Visitors", "Traffic", True,
     "Number of distinct individuals visiting."),
    ("traffic_visit_frequency", "Visit Frequency", "Traffic", True,
     "Average number of visits per unique visitor."),
    ("traffic_dwell_time", "Dwell Time (minutes)", "Traffic", True,
     "Average duration of a visit."),
    # Trade Area
    ("trade_area_size_sqmi", "Size (sq mi)", "Trade Area", True,
     "Geographical size of the trade area."),
    ("trade_area_population", "Population", "Trade Area", True,
     "Total population within the trade area."),
    ("trade_area_daytime_population", "Daytime Population", "Trade Area", True,
     "Population present during daytime hours."),
    # Market Coverage & Saturation
    (DropdownMetric.TRADE_AREA_OVERLAP.value, "Trade Area Overlap",
     "Market Coverage & Saturation", True,
     "Overlap with competitor trade areas. No Overlap = 100, Some = 50, Major = 0."),
    (DropdownMetric.HEAT_MAP_INTERSECTION.value, "Heat Map Intersection",
     "Market Coverage & Saturation", True,
     "Intersection with market hot spots. Cold Spot = 100, Warm = 50, Hot Spot = 0."),
    # Demand & Spending
    (DropdownMetric.SUPPLY_DEMAND_BALANCE.value, "Supply/Demand Balance",
     "Demand & Spending", True,
     "Balance between supply and demand. Positive = 100, Equal = 50, Negative = 0."),
    ("demand_supply_consumer_spending_index", "Consumer Spending Index",
     "Demand & Spending", True,
     "Index representing consumer spending potential."),
    # Expenses
    ("expenses_effective_wage", "Effective Wage ($/hr)", "Expenses", False,
     "Average effective hourly wage."),
    ("expenses_construction_cost_multiplier", "Construction Cost Multiplier", "Expenses", False,
     "Multiplier for construction costs relative to a baseline."),
    # Financial Performance
    ("financial_occupancy_rate", "Occupancy Rate (%)", "Financial Performance", False,
     "Percentage of space occupied; lower is treated as better."),
    ("financial_initial_investment", "Initial Investment ($)", "Financial Performance", False,
     "Total initial capital required."),
    ("financial_top_line_revenue", "Top-Line Revenue ($)", "Financial Performance", True,
     "Total revenue generated."),
    ("financial_profitability", "Profitability ($ or %)", "Financial Performance", True,
     "Measure of profit."),
    ("financial_payback_period_years", "Payback Period (years)", "Financial Performance", False,
     "Time to recoup initial investment."),
]

PREDEFINED_BY_ID = {
    metric_id: {
        "metric_identifier": metric_id,
        "label": label,
        "category": category,
        "higher_is_better": higher,
        "description": description,
    }
    for metric_id, label, category, higher, description in PREDEFINED_METRICS
}


def predefined_metric(metric_identifier: str) -> Optional[dict]:
    return PREDEFINED_BY_ID.get(metric_identifier)


def default_metric_settings(enabled_optional: Optional[list[str]] = None) -> list[dict]:
    """Starter settings for a new metric set. Targets default to 0 until edited."""
    categories = enabled_categories(enabled_optional)
    return [
        {
            "metric_identifier": m["metric_identifier"],
            "label": m["label"],
            "category": m["category"],
            "higher_is_better": m["higher_is_better"],
            "target_value": 0,
            "measurement_type": None,
        }
        for m in PREDEFINED_BY_ID.values()
        if m["category"] in categories
    ]


# ─── DROPDOWN OPTIONS ───────────────────────────────────────────────────────

DROPDOWN_OPTIONS: dict[DropdownMetric, list[tuple[str, int]]] = {
    DropdownMetric.TRADE_AREA_OVERLAP: [
        ("No Overlap", 100), ("Some Overlap", 50), ("Major Overlap", 0),
    ],
    DropdownMetric.HEAT_MAP_INTERSECTION: [
        ("Cold Spot", 100), ("Warm Spot", 50), ("Hot Spot", 0),
    ],
    DropdownMetric.SUPPLY_DEMAND_BALANCE: [
        ("Positive Demand", 100), ("Equal Demand", 50), ("Negative Demand", 0),
    ],
}


def dropdown_label(metric_identifier: str, value: Optional[float]) -> Optional[str]:
    """Display label for a dropdown metric's stored value, if it has one."""
    metric = DropdownMetric.lookup(metric_identifier)
    if metric is None or value is None:
        return None
    for label, option_value in DROPDOWN_OPTIONS[metric]:
        if option_value == value:
            return label
    return None


# ─── SITE VISIT CRITERIA ────────────────────────────────────────────────────

SITE_VISIT_GRADES = ("A", "B", "C", "D", "F")

SITE_VISIT_CRITERIA = {
    "visibility": ("Visibility", "How easily can the site be seen?"),
    "signage": ("Signage", "What are the signage options and quality?"),
    "accessibility": ("Accessibility", "How easy is it for customers to access the site?"),
    "parking": ("Parking", "What is the parking situation like?"),
    "loading": ("Loading", "What are the loading/unloading facilities?"),
    "safety": ("Safety", "How safe does the area feel?"),
    "aesthetics": ("Aesthetics", "What is the visual appeal of the site?"),
    "storefront_traffic": (
        "Storefront Traffic",
        "What is the volume and type of traffic passing the storefront?",
    ),
    "layout_size_of_space": (
        "Layout & Size of Space",
        "How well does the layout and size suit the intended use?",
    ),
    "delivery_condition": (
        "Delivery Condition",
        "What is the condition of the space upon delivery?",
    ),
}


# ─── SITE STATUS ────────────────────────────────────────────────────────────

SITE_STATUSES = [
    "Prospect",
    "LOI",
    "Lease",
    "Development",
    "Open",
    "Closed",
]
DEFAULT_SITE_STATUS = "Prospect"
