"""
AVM Engine v1.0

Comparable-based automated valuation: similarity scoring, price
adjustments, market statistics, confidence estimation and ensemble
combination of pricing model outputs.

Every operation is a pure function over immutable inputs.
"""

from .errors import (
    ValuationError,
    InvalidCoordinates,
    InvalidSubject,
    InvalidComparable,
    InsufficientComparables,
    ComputationError,
)
from .models import (
    Coordinates,
    Condition,
    PropertyType,
    MarketPosition,
    RiskImpact,
    RiskSeverity,
    Subject,
    Comparable,
    AdjustmentBreakdown,
    ConfidenceRange,
    ValueBreakdown,
    ComparableSummary,
    MarketMetrics,
    RiskFactor,
    ValuationResult,
    ModelContribution,
    WeightedValuation,
)
from .geo import distance, distance_meters
from .similarity import similarity
from .adjustments import adjust
from .market_stats import MarketStatistics, stats
from .confidence import confidence
from .ensemble import combine
from .filters import ComparableFilters, filter_comparables, sort_comparables
from .settings import AvmSettings
from .pricing import (
    PricingContext,
    PricingModel,
    AdjustedCompsModel,
    PricePerM2Model,
    NearestNeighbourModel,
    default_models,
)
from .sources import ComparableSource, InMemoryComparableSource
from .valuation import AVMValuationEngine, AVMReport, CompSelectionResult, ValuationRequest
from .portfolio import PortfolioSummary, portfolio_risk, summarize_portfolio

__all__ = [
    # Errors
    "ValuationError",
    "InvalidCoordinates",
    "InvalidSubject",
    "InvalidComparable",
    "InsufficientComparables",
    "ComputationError",
    # Models
    "Coordinates",
    "Condition",
    "PropertyType",
    "MarketPosition",
    "RiskImpact",
    "RiskSeverity",
    "Subject",
    "Comparable",
    "AdjustmentBreakdown",
    "ConfidenceRange",
    "ValueBreakdown",
    "ComparableSummary",
    "MarketMetrics",
    "RiskFactor",
    "ValuationResult",
    "ModelContribution",
    "WeightedValuation",
    "MarketStatistics",
    # Core operations
    "distance",
    "distance_meters",
    "similarity",
    "adjust",
    "stats",
    "confidence",
    "combine",
    # Selection
    "ComparableFilters",
    "filter_comparables",
    "sort_comparables",
    # Pricing models
    "AvmSettings",
    "PricingContext",
    "PricingModel",
    "AdjustedCompsModel",
    "PricePerM2Model",
    "NearestNeighbourModel",
    "default_models",
    # Sources
    "ComparableSource",
    "InMemoryComparableSource",
    # Engine
    "AVMValuationEngine",
    "AVMReport",
    "CompSelectionResult",
    "ValuationRequest",
    # Portfolio
    "PortfolioSummary",
    "portfolio_risk",
    "summarize_portfolio",
]

__version__ = "1.0"
