"""
Derive distance, similarity and adjustments for a comparable.
"""

from dataclasses import replace
from typing import List

from .adjustments import adjust
from .geo import distance_meters
from .models import Comparable, Subject
from .similarity import similarity


def enrich_comparable(subject: Subject, comp: Comparable) -> Comparable:
    """
    Return a copy of the comparable with its derived fields filled in.

    The source record is left untouched.
    """
    adjusted_price, breakdown = adjust(comp, subject)
    return replace(
        comp,
        distance_to_subject=round(distance_meters(subject.coordinates, comp.coordinates), 1),
        similarity=similarity(subject, comp),
        adjustments=breakdown,
        adjusted_price=adjusted_price,
    )


def enrich_comparables(subject: Subject, comps: List[Comparable]) -> List[Comparable]:
    return [enrich_comparable(subject, c) for c in comps]


def ensure_enriched(subject: Subject, comps: List[Comparable]) -> List[Comparable]:
    """Enrich only the comparables that have not been enriched yet."""
    return [c if c.is_enriched else enrich_comparable(subject, c) for c in comps]
