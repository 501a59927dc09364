"""
Data models for the AVM engine.

Defines the subject property, comparable sales, adjustment breakdowns and
the valuation outputs produced by pricing models and the ensemble.

All models are immutable. Derivations return new instances via
dataclasses.replace; nothing in the engine mutates a record in place.
"""

import math
from dataclasses import asdict, dataclass
from datetime import date
from enum import Enum
from typing import Optional, Tuple, Union

from .errors import InvalidComparable, InvalidCoordinates, InvalidSubject


# Earliest building year accepted for subjects and comparables
MIN_BUILDING_YEAR = 1800


class Condition(Enum):
    """
    Physical condition of a property.

    Ordinal ranking (poor=1 .. excellent=4) is used by the similarity
    scorer; the adjustment engine uses its own percentage table.
    """
    EXCELLENT = "excellent"
    GOOD = "good"
    FAIR = "fair"
    POOR = "poor"

    @property
    def rank(self) -> int:
        """Ordinal rank, poor=1 through excellent=4."""
        return _CONDITION_RANKS[self]

    @classmethod
    def from_string(cls, value: str) -> Optional["Condition"]:
        """Convert string to Condition, case-insensitive."""
        normalised = value.lower().strip()
        for member in cls:
            if member.value == normalised:
                return member
        return None


_CONDITION_RANKS = {
    Condition.POOR: 1,
    Condition.FAIR: 2,
    Condition.GOOD: 3,
    Condition.EXCELLENT: 4,
}


class PropertyType(Enum):
    """Property type classification."""
    APARTMENT = "apartment"
    HOUSE = "house"
    PENTHOUSE = "penthouse"
    STUDIO = "studio"
    DUPLEX = "duplex"

    @classmethod
    def from_string(cls, value: str) -> Optional["PropertyType"]:
        """Convert string to PropertyType, case-insensitive."""
        normalised = value.lower().strip()
        for member in cls:
            if member.value == normalised:
                return member
        return None


class MarketPosition(Enum):
    """Where an estimate sits relative to the comparable market average."""
    BELOW = "below"
    AT = "at"
    ABOVE = "above"


class RiskImpact(Enum):
    POSITIVE = "positive"
    NEGATIVE = "negative"
    NEUTRAL = "neutral"


class RiskSeverity(Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


@dataclass(frozen=True)
class Coordinates:
    """
    A WGS84 point.

    Out-of-range values (including NaN) raise InvalidCoordinates on
    construction; they are never clamped.
    """
    lat: float
    lng: float

    def __post_init__(self):
        if not isinstance(self.lat, (int, float)) or not -90.0 <= self.lat <= 90.0:
            raise InvalidCoordinates(f"latitude must be between -90 and 90, got {self.lat!r}")
        if not isinstance(self.lng, (int, float)) or not -180.0 <= self.lng <= 180.0:
            raise InvalidCoordinates(f"longitude must be between -180 and 180, got {self.lng!r}")

    @classmethod
    def of(cls, value: Union["Coordinates", Tuple[float, float]]) -> "Coordinates":
        """Coerce a (lat, lng) pair into Coordinates."""
        if isinstance(value, cls):
            return value
        try:
            lat, lng = value
        except (TypeError, ValueError):
            raise InvalidCoordinates(f"expected a (lat, lng) pair, got {value!r}") from None
        return cls(lat=lat, lng=lng)

    def as_tuple(self) -> Tuple[float, float]:
        return (self.lat, self.lng)


def _coerce_enum(enum_cls, value, error_cls, field_name: str):
    """Accept an enum member or its string value."""
    if isinstance(value, enum_cls):
        return value
    if isinstance(value, str):
        member = enum_cls.from_string(value)
        if member is not None:
            return member
    allowed = ", ".join(m.value for m in enum_cls)
    raise error_cls(f"Invalid {field_name}: {value!r} (expected one of: {allowed})")


def _coerce_coordinates(value, error_cls):
    try:
        return Coordinates.of(value)
    except InvalidCoordinates as exc:
        raise error_cls(str(exc)) from exc


@dataclass(frozen=True)
class Subject:
    """
    The property being valued.

    Created by the caller from user input and validated on construction,
    so no scoring ever runs against a malformed subject.
    """
    id: str
    coordinates: Coordinates
    area: float  # m²
    building_year: int
    rooms: int
    bathrooms: int
    condition: Condition
    property_type: PropertyType

    # Optional attributes
    floor: Optional[int] = None
    features: Tuple[str, ...] = ()
    address: str = ""

    def __post_init__(self):
        """Validate and normalise fields after initialization."""
        if not self.id or not str(self.id).strip():
            raise InvalidSubject("id is required")

        object.__setattr__(self, "coordinates", _coerce_coordinates(self.coordinates, InvalidSubject))
        object.__setattr__(self, "condition", _coerce_enum(Condition, self.condition, InvalidSubject, "condition"))
        object.__setattr__(
            self,
            "property_type",
            _coerce_enum(PropertyType, self.property_type, InvalidSubject, "property_type"),
        )
        object.__setattr__(self, "features", tuple(self.features or ()))

        if not _is_finite_number(self.area) or self.area <= 0:
            raise InvalidSubject(f"area must be positive, got {self.area!r}")
        if not _is_finite_number(self.building_year) or self.building_year < MIN_BUILDING_YEAR:
            raise InvalidSubject(f"building_year must be >= {MIN_BUILDING_YEAR}")
        if not _is_finite_number(self.rooms) or self.rooms < 0:
            raise InvalidSubject(f"rooms must be a non-negative number, got {self.rooms!r}")
        # Studios are the only type allowed to report zero rooms
        if self.rooms == 0 and self.property_type != PropertyType.STUDIO:
            raise InvalidSubject("rooms must be positive for non-studio properties")
        if not _is_finite_number(self.bathrooms) or self.bathrooms <= 0:
            raise InvalidSubject("bathrooms must be positive")


@dataclass(frozen=True)
class AdjustmentBreakdown:
    """
    Per-comparable adjustments as signed percentages of the sale price.

    These are reported for explainability only. The adjustment engine
    applies the factors as compounding ratios, so the total here is not
    the compounded price effect.
    """
    area: float = 0.0
    condition: float = 0.0
    floor: float = 0.0
    age: float = 0.0
    features: float = 0.0
    location: float = 0.0
    total: float = 0.0

    @classmethod
    def from_percentages(
        cls,
        area: float = 0.0,
        condition: float = 0.0,
        floor: float = 0.0,
        age: float = 0.0,
        features: float = 0.0,
        location: float = 0.0,
    ) -> "AdjustmentBreakdown":
        """Build a breakdown whose total is the sum of the named parts."""
        return cls(
            area=area,
            condition=condition,
            floor=floor,
            age=age,
            features=features,
            location=location,
            total=area + condition + floor + age + features + location,
        )

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class Comparable:
    """
    A closed or verified sale used as pricing evidence.

    The derived fields (distance_to_subject, similarity, adjustments,
    adjusted_price) are filled in by the engine on an enriched copy.
    """
    id: str
    coordinates: Coordinates
    area: float  # m²
    building_year: int
    rooms: int
    bathrooms: int
    sale_price: int
    sale_date: date
    days_on_market: int
    condition: Condition
    property_type: PropertyType

    # Optional attributes
    floor: Optional[int] = None
    address: str = ""
    source: str = "manual"
    verified: bool = False
    reliability: float = 1.0

    # Derived by the engine
    distance_to_subject: float = 0.0  # metres
    similarity: float = 0.0
    adjustments: Optional[AdjustmentBreakdown] = None
    adjusted_price: Optional[int] = None

    def __post_init__(self):
        """Validate and normalise fields after initialization."""
        if not self.id or not str(self.id).strip():
            raise InvalidComparable("id is required")

        object.__setattr__(self, "coordinates", _coerce_coordinates(self.coordinates, InvalidComparable))
        object.__setattr__(
            self, "condition", _coerce_enum(Condition, self.condition, InvalidComparable, "condition")
        )
        object.__setattr__(
            self,
            "property_type",
            _coerce_enum(PropertyType, self.property_type, InvalidComparable, "property_type"),
        )

        if not _is_finite_number(self.area) or self.area <= 0:
            raise InvalidComparable(f"{self.id}: area must be positive")
        if not _is_finite_number(self.sale_price) or self.sale_price <= 0:
            raise InvalidComparable(f"{self.id}: sale_price must be positive")
        if not _is_finite_number(self.building_year) or self.building_year < MIN_BUILDING_YEAR:
            raise InvalidComparable(f"{self.id}: building_year must be >= {MIN_BUILDING_YEAR}")
        if not (_is_finite_number(self.rooms) and _is_finite_number(self.bathrooms)):
            raise InvalidComparable(f"{self.id}: room counts must be numbers")
        if self.rooms < 0 or self.bathrooms < 0:
            raise InvalidComparable(f"{self.id}: room counts cannot be negative")
        if not _is_finite_number(self.days_on_market) or self.days_on_market < 0:
            raise InvalidComparable(f"{self.id}: days_on_market cannot be negative")
        if not _is_finite_number(self.reliability) or not 0.0 <= self.reliability <= 1.0:
            raise InvalidComparable(f"{self.id}: reliability must be between 0 and 1")

    @property
    def price_per_m2(self) -> int:
        """Sale price per square metre, rounded to a whole unit."""
        return round_half_up(self.sale_price / self.area)

    @property
    def is_enriched(self) -> bool:
        """Whether the engine has derived adjustments for this comparable."""
        return self.adjusted_price is not None


@dataclass(frozen=True)
class ConfidenceRange:
    low: int
    high: int
    percentage: int  # e.g. 95 for a 95% band


@dataclass(frozen=True)
class ValueBreakdown:
    """
    Value contributions of a single model estimate.

    base_value + location_adjustment + condition_adjustment
    + feature_adjustments + market_adjustment == final
    """
    base_value: int
    location_adjustment: int
    condition_adjustment: int
    feature_adjustments: int
    market_adjustment: int
    final: int


@dataclass(frozen=True)
class ComparableSummary:
    used: int
    total: int
    avg_price: int
    avg_price_per_m2: int


@dataclass(frozen=True)
class MarketMetrics:
    median_price: int
    avg_days_on_market: int
    price_appreciation: float  # % change, recent vs older sales
    liquidity_index: float  # 0-1


@dataclass(frozen=True)
class RiskFactor:
    factor: str
    impact: RiskImpact
    severity: RiskSeverity
    description: str


@dataclass(frozen=True)
class ValuationResult:
    """
    Output of one pricing model for one subject.

    Treated as immutable evidence by the ensemble combiner.
    """
    subject_id: str
    model_id: str
    estimated_value: int
    confidence: float  # 0-1
    confidence_range: ConfidenceRange
    price_per_m2: int
    market_position: MarketPosition
    breakdown: ValueBreakdown
    comparables: ComparableSummary
    market_metrics: MarketMetrics
    risk_factors: Tuple[RiskFactor, ...] = ()
    valid_until: Optional[date] = None

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON output."""
        return {
            "subject_id": self.subject_id,
            "model_id": self.model_id,
            "estimated_value": self.estimated_value,
            "confidence": self.confidence,
            "confidence_range": asdict(self.confidence_range),
            "price_per_m2": self.price_per_m2,
            "market_position": self.market_position.value,
            "breakdown": asdict(self.breakdown),
            "comparables": asdict(self.comparables),
            "market_metrics": asdict(self.market_metrics),
            "risk_factors": [
                {
                    "factor": rf.factor,
                    "impact": rf.impact.value,
                    "severity": rf.severity.value,
                    "description": rf.description,
                }
                for rf in self.risk_factors
            ],
            "valid_until": self.valid_until.isoformat() if self.valid_until else None,
        }


@dataclass(frozen=True)
class ModelContribution:
    model_id: str
    weight: float
    value: int
    confidence: float


@dataclass(frozen=True)
class WeightedValuation:
    """
    Ensemble output.

    With no contributing results, value and confidence are both zero and
    contributions is empty.
    """
    value: int = 0
    confidence: float = 0.0
    contributions: Tuple[ModelContribution, ...] = ()

    def to_dict(self) -> dict:
        return {
            "value": self.value,
            "confidence": self.confidence,
            "contributions": [asdict(c) for c in self.contributions],
        }


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero."""
    if value >= 0:
        return int(math.floor(value + 0.5))
    return -int(math.floor(-value + 0.5))


def _is_finite_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)
