"""
AVM Engine - Core Business Logic

This module provides the comparable-based valuation pipeline:
1. Enrichment (distance, similarity, adjustments)
2. Selection (radius, recency and caller filters)
3. Market statistics and confidence
4. Pricing models (one ValuationResult each)
5. Ensemble combination (single weighted estimate)
"""

from .avm import (
    ValuationError,
    InvalidCoordinates,
    InvalidSubject,
    InvalidComparable,
    InsufficientComparables,
    ComputationError,
    Coordinates,
    Condition,
    PropertyType,
    MarketPosition,
    Subject,
    Comparable,
    AdjustmentBreakdown,
    ValuationResult,
    WeightedValuation,
    MarketStatistics,
    distance,
    distance_meters,
    similarity,
    adjust,
    stats,
    confidence,
    combine,
    ComparableFilters,
    AvmSettings,
    AVMValuationEngine,
    AVMReport,
    InMemoryComparableSource,
)

__all__ = [
    "ValuationError",
    "InvalidCoordinates",
    "InvalidSubject",
    "InvalidComparable",
    "InsufficientComparables",
    "ComputationError",
    "Coordinates",
    "Condition",
    "PropertyType",
    "MarketPosition",
    "Subject",
    "Comparable",
    "AdjustmentBreakdown",
    "ValuationResult",
    "WeightedValuation",
    "MarketStatistics",
    "distance",
    "distance_meters",
    "similarity",
    "adjust",
    "stats",
    "confidence",
    "combine",
    "ComparableFilters",
    "AvmSettings",
    "AVMValuationEngine",
    "AVMReport",
    "InMemoryComparableSource",
]
