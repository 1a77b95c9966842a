"""Site signal scoring engine.

Converts entered metric values into 0-100 signal scores against a target,
aggregates them into an overall site signal, and computes assessment
completion. Everything here is pure: no I/O, no logging, no shared state.
Insufficient data is reported as ``None`` rather than raised.
"""

import math
from enum import Enum
from typing import Iterable, NamedTuple, Optional, Union


Number = Union[int, float]


# ─── TYPES ──────────────────────────────────────────────────────────────────

class MetricScoreInput(NamedTuple):
    """One entered measurement against one target for one assessment."""
    entered_value: Optional[Number]
    target_value: Optional[Number]
    higher_is_better: bool


class DropdownMetric(str, Enum):
    """Metrics whose entered value is already a 0-100 score."""
    TRADE_AREA_OVERLAP = "market_saturation_trade_area_overlap"
    HEAT_MAP_INTERSECTION = "market_saturation_heat_map_intersection"
    SUPPLY_DEMAND_BALANCE = "demand_supply_balance"

    @classmethod
    def lookup(cls, metric_identifier: Optional[str]) -> Optional["DropdownMetric"]:
        if metric_identifier is None:
            return None
        try:
            return cls(metric_identifier)
        except ValueError:
            return None


# ─── HELPERS ────────────────────────────────────────────────────────────────

def _round_half_up(value: float) -> int:
    # 62.5 -> 63, -2.5 -> -2
    return int(math.floor(value + 0.5))


def _clamp(value: float, low: float = 0, high: float = 100) -> Optional[float]:
    if math.isnan(value):
        return None
    return max(low, min(value, high))


def _to_score(raw: float) -> Optional[int]:
    clamped = _clamp(raw)
    if clamped is None:
        return None
    return _round_half_up(clamped)


# ─── METRIC SCORE ───────────────────────────────────────────────────────────

def _ratio_score(entered: float, target: float, higher_is_better: bool) -> Optional[int]:
    if target == 0:
        if higher_is_better:
            return 100 if entered >= 0 else 0
        return 100 if entered == 0 else 0

    if entered == 0:
        if higher_is_better:
            return 0
        return 100 if target > 0 else 0

    if higher_is_better:
        if target > 0 and entered < 0:
            return 0
        raw = (entered / target) * 100
    else:
        # Going negative against a positive target beats it outright
        if target > 0 and entered < 0:
            return 100
        if target < 0 and entered > 0:
            return 0
        raw = (target / entered) * 100

    return _to_score(raw)


def metric_signal_score(
    data: MetricScoreInput,
    metric_identifier: Optional[str] = None,
) -> Optional[Number]:
    """Score one metric on a 0-100 scale, or ``None`` if it can't be scored.

    Dropdown metrics bypass the target comparison: their entered value is
    clamped and returned as-is, without rounding. For everything else the
    score is the entered/target ratio (inverted when lower is better) as a
    rounded percentage, with fixed answers for zero and mixed-sign cases.
    """
    entered, target, higher_is_better = data
    if entered is None:
        return None

    try:
        if DropdownMetric.lookup(metric_identifier) is not None:
            return _clamp(float(entered))

        if target is None:
            return None

        return _ratio_score(float(entered), float(target), bool(higher_is_better))
    except (ArithmeticError, TypeError, ValueError):
        return None


# ─── AGGREGATES ─────────────────────────────────────────────────────────────

def overall_signal_score(scores: Iterable[Optional[Number]]) -> Optional[int]:
    """Mean of the non-null metric scores, or ``None`` when there are none."""
    valid = [s for s in scores if s is not None and not math.isnan(s)]
    if not valid:
        return None
    return _to_score(sum(valid) / len(valid))


def completion_percentage(total_items: Number, completed_items: Number) -> int:
    """Share of completable items that have a recorded value, 0-100."""
    if total_items <= 0:
        return 0
    result = _to_score(completed_items / total_items * 100)
    return result if result is not None else 0


# ─── SIGNAL STATUS ──────────────────────────────────────────────────────────

DEFAULT_GOOD_THRESHOLD = 0.75
DEFAULT_BAD_THRESHOLD = 0.50


class SignalStatus(str, Enum):
    GOOD = "Good"
    NEUTRAL = "Neutral"
    BAD = "Bad"
    UNKNOWN = "N/A"


def signal_status(
    score: Optional[Number],
    good_threshold: Optional[float] = None,
    bad_threshold: Optional[float] = None,
) -> SignalStatus:
    """Bucket a 0-100 score using fractional thresholds (0.75 == 75%)."""
    if score is None:
        return SignalStatus.UNKNOWN

    good = DEFAULT_GOOD_THRESHOLD if good_threshold is None else good_threshold
    bad = DEFAULT_BAD_THRESHOLD if bad_threshold is None else bad_threshold
    fraction = score / 100

    if fraction >= good:
        return SignalStatus.GOOD
    if fraction <= bad:
        return SignalStatus.BAD
    return SignalStatus.NEUTRAL


def validate_thresholds(good_threshold: float, bad_threshold: float) -> None:
    """Raise ValueError unless 0 <= bad < good <= 1."""
    for name, value in (("good", good_threshold), ("bad", bad_threshold)):
        if not 0 <= value <= 1:
            raise ValueError(f"{name} threshold must be between 0 and 1, got {value}")
    if bad_threshold >= good_threshold:
        raise ValueError("bad threshold must be less than good threshold")
