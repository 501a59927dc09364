"""
Comparable filtering and sorting.

Filters are optional bounds; an unset bound never excludes a comparable.
A comparable must pass ALL set bounds to be kept.
"""

from dataclasses import dataclass
from datetime import date
from typing import List, Optional, Sequence

from .confidence import sale_age_months
from .geo import distance
from .models import Comparable, Condition, PropertyType, Subject


SORT_FIELDS = ("price", "price_per_m2", "similarity", "distance", "sale_date")


@dataclass(frozen=True)
class ComparableFilters:
    """Optional selection bounds for comparable sales."""
    min_price: Optional[int] = None
    max_price: Optional[int] = None
    min_area: Optional[float] = None
    max_area: Optional[float] = None
    min_rooms: Optional[int] = None
    max_rooms: Optional[int] = None
    min_year: Optional[int] = None
    max_year: Optional[int] = None
    condition: Optional[Condition] = None
    property_type: Optional[PropertyType] = None
    max_distance_km: Optional[float] = None
    max_age_months: Optional[float] = None
    verified_only: bool = False
    sources: Optional[Sequence[str]] = None

    def __post_init__(self):
        if isinstance(self.condition, str):
            object.__setattr__(self, "condition", _parse(Condition, self.condition, "condition"))
        if isinstance(self.property_type, str):
            object.__setattr__(
                self, "property_type", _parse(PropertyType, self.property_type, "property_type")
            )
        if self.min_price is not None and self.max_price is not None and self.max_price < self.min_price:
            raise ValueError("max_price must be >= min_price")
        if self.min_area is not None and self.max_area is not None and self.max_area < self.min_area:
            raise ValueError("max_area must be >= min_area")
        if self.max_distance_km is not None and self.max_distance_km < 0:
            raise ValueError("max_distance_km cannot be negative")


def _parse(enum_cls, value: str, field_name: str):
    member = enum_cls.from_string(value)
    if member is None:
        raise ValueError(f"Invalid {field_name}: {value}")
    return member


def _distance_km(comp: Comparable, subject: Optional[Subject]) -> float:
    if subject is not None:
        return distance(subject.coordinates, comp.coordinates)
    return comp.distance_to_subject / 1000.0


def matches(
    comp: Comparable,
    filters: ComparableFilters,
    subject: Optional[Subject] = None,
    reference_date: Optional[date] = None,
) -> bool:
    """Check whether a single comparable passes every set bound."""
    if filters.min_price is not None and comp.sale_price < filters.min_price:
        return False
    if filters.max_price is not None and comp.sale_price > filters.max_price:
        return False
    if filters.min_area is not None and comp.area < filters.min_area:
        return False
    if filters.max_area is not None and comp.area > filters.max_area:
        return False
    if filters.min_rooms is not None and comp.rooms < filters.min_rooms:
        return False
    if filters.max_rooms is not None and comp.rooms > filters.max_rooms:
        return False
    if filters.min_year is not None and comp.building_year < filters.min_year:
        return False
    if filters.max_year is not None and comp.building_year > filters.max_year:
        return False
    if filters.condition is not None and comp.condition != filters.condition:
        return False
    if filters.property_type is not None and comp.property_type != filters.property_type:
        return False
    if filters.max_distance_km is not None and _distance_km(comp, subject) > filters.max_distance_km:
        return False
    if filters.verified_only and not comp.verified:
        return False
    if filters.sources is not None and comp.source not in filters.sources:
        return False
    if filters.max_age_months is not None:
        reference_date = reference_date or date.today()
        if sale_age_months(comp.sale_date, reference_date) > filters.max_age_months:
            return False
    return True


def filter_comparables(
    comps: List[Comparable],
    filters: Optional[ComparableFilters],
    subject: Optional[Subject] = None,
    reference_date: Optional[date] = None,
) -> List[Comparable]:
    """
    Filter comparables to those passing every set bound.

    Args:
        comps: Candidate comparables
        filters: Selection bounds (None keeps everything)
        subject: Subject to measure distance from; without it the
            comparable's derived distance_to_subject is used
        reference_date: Date to measure sale age from (default: today)

    Returns:
        New list of matching comparables, input order preserved
    """
    if filters is None:
        return list(comps)
    return [c for c in comps if matches(c, filters, subject, reference_date)]


def sort_comparables(
    comps: List[Comparable],
    field: str = "similarity",
    direction: str = "desc",
) -> List[Comparable]:
    """
    Sort comparables by the given field.

    Args:
        comps: Comparables to sort
        field: One of price, price_per_m2, similarity, distance, sale_date
        direction: "asc" or "desc"

    Returns:
        New sorted list (stable for equal keys)
    """
    keys = {
        "price": lambda c: c.sale_price,
        "price_per_m2": lambda c: c.price_per_m2,
        "similarity": lambda c: c.similarity,
        "distance": lambda c: c.distance_to_subject,
        "sale_date": lambda c: c.sale_date,
    }
    if field not in keys:
        raise ValueError(f"Unknown sort field: {field} (expected one of: {', '.join(SORT_FIELDS)})")
    if direction not in ("asc", "desc"):
        raise ValueError(f"Unknown sort direction: {direction}")

    return sorted(comps, key=keys[field], reverse=(direction == "desc"))
