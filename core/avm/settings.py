"""
Tunable settings for comparable selection and result construction.
"""

from dataclasses import dataclass, field
from typing import Dict


ALLOWED_CONFIDENCE_LEVELS = (90, 95, 99)


@dataclass(frozen=True)
class AvmSettings:
    """Settings shared by the valuation engine and the pricing models."""
    default_radius_km: float = 2.0
    min_comparables: int = 3
    max_comparables: int = 10
    max_age_months: int = 12
    confidence_level: int = 95
    confidence_spread: float = 0.10  # half-width of the range, fraction of value
    model_weights: Dict[str, float] = field(default_factory=dict)

    def __post_init__(self):
        """Validate settings after initialization."""
        if self.default_radius_km <= 0:
            raise ValueError("default_radius_km must be positive")
        if self.min_comparables < 1:
            raise ValueError("min_comparables must be at least 1")
        if self.max_comparables < self.min_comparables:
            raise ValueError("max_comparables must be >= min_comparables")
        if self.max_age_months <= 0:
            raise ValueError("max_age_months must be positive")
        if self.confidence_level not in ALLOWED_CONFIDENCE_LEVELS:
            raise ValueError(f"confidence_level must be one of {ALLOWED_CONFIDENCE_LEVELS}")
        if not 0 <= self.confidence_spread < 1:
            raise ValueError("confidence_spread must be between 0 and 1")
        for model_id, weight in self.model_weights.items():
            if not 0 <= weight <= 1:
                raise ValueError(f"weight for {model_id} must be between 0 and 1")
