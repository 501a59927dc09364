"""
Shared fixtures for AVM engine tests.
"""

import sys
from datetime import date
from pathlib import Path

import pytest

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from core.avm import (
    Comparable,
    ComparableSummary,
    Condition,
    ConfidenceRange,
    Coordinates,
    MarketMetrics,
    MarketPosition,
    PropertyType,
    Subject,
    ValuationResult,
    ValueBreakdown,
)


SUBJECT_COORDS = Coordinates(lat=40.4168, lng=-3.7038)


@pytest.fixture
def reference_date():
    """Fixed reference date for deterministic tests."""
    return date(2024, 6, 1)


@pytest.fixture
def make_subject():
    """Factory fixture for creating subjects."""
    def _create(**overrides) -> Subject:
        fields = dict(
            id="subject-1",
            coordinates=SUBJECT_COORDS,
            area=100.0,
            building_year=2000,
            rooms=3,
            bathrooms=2,
            condition=Condition.GOOD,
            property_type=PropertyType.APARTMENT,
            address="Calle Mayor 1, Madrid",
        )
        fields.update(overrides)
        return Subject(**fields)
    return _create


@pytest.fixture
def subject(make_subject):
    """Standard subject property for testing."""
    return make_subject()


@pytest.fixture
def make_comp(reference_date):
    """
    Factory fixture for creating comparable sales.

    Defaults describe a comparable identical to the standard subject,
    sold on the reference date.
    """
    counter = {"n": 0}

    def _create(**overrides) -> Comparable:
        counter["n"] += 1
        fields = dict(
            id=f"comp-{counter['n']}",
            coordinates=SUBJECT_COORDS,
            area=100.0,
            building_year=2000,
            rooms=3,
            bathrooms=2,
            sale_price=300000,
            sale_date=reference_date,
            days_on_market=30,
            condition=Condition.GOOD,
            property_type=PropertyType.APARTMENT,
            source="idealista",
            verified=True,
            reliability=0.9,
        )
        fields.update(overrides)
        return Comparable(**fields)
    return _create


@pytest.fixture
def make_result():
    """Factory fixture for minimal valuation results."""
    def _create(model_id: str, value: int, confidence: float, subject_id: str = "subject-1") -> ValuationResult:
        return ValuationResult(
            subject_id=subject_id,
            model_id=model_id,
            estimated_value=value,
            confidence=confidence,
            confidence_range=ConfidenceRange(low=value, high=value, percentage=95),
            price_per_m2=0,
            market_position=MarketPosition.AT,
            breakdown=ValueBreakdown(
                base_value=value,
                location_adjustment=0,
                condition_adjustment=0,
                feature_adjustments=0,
                market_adjustment=0,
                final=value,
            ),
            comparables=ComparableSummary(used=0, total=0, avg_price=0, avg_price_per_m2=0),
            market_metrics=MarketMetrics(
                median_price=0,
                avg_days_on_market=0,
                price_appreciation=0.0,
                liquidity_index=0.0,
            ),
        )
    return _create
