"""
Comparable price adjustments.

Converts a comparable's sale price into a subject-adjusted price. Factors
are applied as compounding ratios in this order:
1. Area - 80% pass-through of the area ratio
2. Age - 0.5% per building year, clamped to +/-20%
3. Condition - difference of the condition table values
4. Floor - 2% per floor, clamped to +/-15% (only when both floors are known)

The returned breakdown reports each factor as a percentage of the original
sale price. It is kept distinct from the compounded result on purpose:
display logic relies on the percentage reading.
"""

from typing import Tuple

from .models import AdjustmentBreakdown, Comparable, Condition, Subject, round_half_up


# =============================================================================
# Configuration Constants
# =============================================================================

AREA_PASS_THROUGH = 0.8

AGE_RATE_PER_YEAR = 0.005
AGE_CAP = 0.20

FLOOR_RATE_PER_FLOOR = 0.02
FLOOR_CAP = 0.15

CONDITION_ADJUSTMENTS = {
    Condition.POOR: -0.15,
    Condition.FAIR: -0.05,
    Condition.GOOD: 0.0,
    Condition.EXCELLENT: 0.10,
}


def _clamp(value: float, cap: float) -> float:
    return max(min(value, cap), -cap)


def area_factor(subject: Subject, comparable: Comparable) -> float:
    """Fractional area adjustment (0.8 of the ratio delta)."""
    ratio = subject.area / comparable.area
    return AREA_PASS_THROUGH * (ratio - 1)


def age_factor(subject: Subject, comparable: Comparable) -> float:
    """Fractional age adjustment; newer subjects adjust upward."""
    year_diff = subject.building_year - comparable.building_year
    return _clamp(year_diff * AGE_RATE_PER_YEAR, AGE_CAP)


def condition_factor(subject: Subject, comparable: Comparable) -> float:
    return CONDITION_ADJUSTMENTS[subject.condition] - CONDITION_ADJUSTMENTS[comparable.condition]


def floor_factor(subject: Subject, comparable: Comparable) -> float:
    """Fractional floor adjustment, zero when either floor is unknown."""
    if subject.floor is None or comparable.floor is None:
        return 0.0
    return _clamp((subject.floor - comparable.floor) * FLOOR_RATE_PER_FLOOR, FLOOR_CAP)


def adjust(comparable: Comparable, subject: Subject) -> Tuple[int, AdjustmentBreakdown]:
    """
    Adjust a comparable's sale price to the subject.

    Args:
        comparable: Comparable sale
        subject: The property being valued

    Returns:
        Tuple of:
        - Adjusted price, rounded to a whole currency unit
        - Breakdown of percentage adjustments
    """
    area = area_factor(subject, comparable)
    age = age_factor(subject, comparable)
    condition = condition_factor(subject, comparable)
    floor = floor_factor(subject, comparable)

    adjusted_price = float(comparable.sale_price)
    adjusted_price *= 1 + area
    adjusted_price *= 1 + age
    adjusted_price *= 1 + condition
    adjusted_price *= 1 + floor

    breakdown = AdjustmentBreakdown.from_percentages(
        area=area * 100,
        condition=condition * 100,
        floor=floor * 100,
        age=age * 100,
    )

    return round_half_up(adjusted_price), breakdown
