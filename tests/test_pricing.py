"""
Tests for the pricing models and valuation result construction.
"""

from datetime import timedelta

import pytest

from core.avm import (
    AdjustedCompsModel,
    AvmSettings,
    InsufficientComparables,
    MarketPosition,
    NearestNeighbourModel,
    PricePerM2Model,
    PricingContext,
    RiskSeverity,
    default_models,
)
from core.avm.pricing import (
    classify_market_position,
    feature_premium_rate,
    liquidity_index,
    price_appreciation,
)


@pytest.fixture
def context(reference_date):
    return PricingContext(reference_date=reference_date, settings=AvmSettings())


@pytest.fixture
def identical_comps(make_comp):
    return [make_comp() for _ in range(3)]


def _risk_names(result):
    return {r.factor for r in result.risk_factors}


class TestAdjustedCompsModel:

    def test_identical_evidence(self, subject, identical_comps, context, reference_date):
        result = AdjustedCompsModel().estimate(subject, identical_comps, context)
        assert result.model_id == "comps-adjusted"
        assert result.estimated_value == 300000
        assert result.price_per_m2 == 3000
        assert result.market_position == MarketPosition.AT
        assert result.confidence == 0.95
        assert result.confidence_range.low == 270000
        assert result.confidence_range.high == 330000
        assert result.confidence_range.percentage == 95
        assert result.valid_until == reference_date + timedelta(days=7)
        assert result.comparables.used == 3
        assert result.comparables.total == 3

    def test_similarity_weighting(self, subject, make_comp, context):
        close = make_comp(sale_price=300000)
        # Type mismatch lowers similarity but not the adjusted price
        distant_match = make_comp(sale_price=300000, property_type="house")
        result = AdjustedCompsModel().estimate(subject, [close, distant_match], context)
        assert result.estimated_value == 300000

    def test_empty_comparables_raise(self, subject, context):
        with pytest.raises(InsufficientComparables):
            AdjustedCompsModel().estimate(subject, [], context)


class TestBreakdown:

    @pytest.mark.parametrize("features", [(), ("pool",), ("pool", "gym", "lift", "terrace", "garage", "storage")])
    def test_parts_sum_to_final(self, make_subject, make_comp, context, features):
        subject = make_subject(features=features, condition="excellent")
        comps = [
            make_comp(sale_price=280000, area=95, condition="fair"),
            make_comp(sale_price=310000, building_year=1985),
            make_comp(sale_price=335000, area=110, floor=3),
        ]
        for model in default_models().values():
            b = model.estimate(subject, comps, context).breakdown
            total = (
                b.base_value
                + b.location_adjustment
                + b.condition_adjustment
                + b.feature_adjustments
                + b.market_adjustment
            )
            assert total == b.final

    def test_feature_premium(self, make_subject, identical_comps, context):
        subject = make_subject(features=("pool", "gym"))
        result = AdjustedCompsModel().estimate(subject, identical_comps, context)
        assert result.estimated_value == 312000
        assert result.breakdown.feature_adjustments == 12000
        assert result.breakdown.market_adjustment == 0
        assert result.market_position == MarketPosition.AT

    def test_feature_premium_is_capped(self, make_subject, identical_comps, context):
        subject = make_subject(features=tuple(f"f{i}" for i in range(8)))
        assert feature_premium_rate(subject) == 0.10
        result = AdjustedCompsModel().estimate(subject, identical_comps, context)
        assert result.estimated_value == 330000
        assert result.market_position == MarketPosition.ABOVE

    def test_location_adjustment_is_zero(self, subject, identical_comps, context):
        result = AdjustedCompsModel().estimate(subject, identical_comps, context)
        assert result.breakdown.location_adjustment == 0


class TestPricePerM2Model:

    def test_upper_median_rate(self, subject, make_comp, context):
        comps = [make_comp(sale_price=p) for p in (280000, 300000, 320000, 340000)]
        result = PricePerM2Model().estimate(subject, comps, context)
        assert result.model_id == "comps-ppm2"
        assert result.estimated_value == 320000


class TestNearestNeighbourModel:

    def test_uses_top_k(self, subject, make_comp, context):
        comps = [make_comp(area=a) for a in (100, 105, 150, 200)]
        result = NearestNeighbourModel(k=2).estimate(subject, comps, context)
        assert result.model_id == "knn-weighted"
        assert result.comparables.used == 2

    def test_invalid_k(self):
        with pytest.raises(ValueError):
            NearestNeighbourModel(k=0)


class TestMarketPosition:

    def test_within_band_is_at(self):
        assert classify_market_position(3000, 3100) == MarketPosition.AT

    def test_market_above_estimate(self):
        assert classify_market_position(3000, 3200) == MarketPosition.BELOW

    def test_market_below_estimate(self):
        assert classify_market_position(3000, 2800) == MarketPosition.ABOVE


class TestMarketMetrics:

    def test_price_appreciation(self, make_comp, reference_date):
        comps = [
            make_comp(sale_price=330000, sale_date=reference_date - timedelta(days=30)),
            make_comp(sale_price=300000, sale_date=reference_date - timedelta(days=300)),
        ]
        assert price_appreciation(comps, reference_date) == pytest.approx(10.0)

    def test_price_appreciation_needs_both_groups(self, make_comp, reference_date):
        assert price_appreciation([make_comp()], reference_date) == 0.0

    def test_liquidity_index(self):
        assert liquidity_index(0) == 1.0
        assert liquidity_index(73) == 0.8
        assert liquidity_index(500) == 0.0


class TestRiskFactors:

    def test_clean_evidence_has_no_risks(self, subject, identical_comps, context):
        result = AdjustedCompsModel().estimate(subject, identical_comps, context)
        assert result.risk_factors == ()

    def test_risk_factors_are_tuple(self, make_subject, identical_comps, context):
        result = AdjustedCompsModel().estimate(make_subject(building_year=1950), identical_comps, context)
        assert isinstance(result.risk_factors, tuple)
        assert result.risk_factors

    def test_old_building(self, make_subject, identical_comps, context):
        subject = make_subject(building_year=1950)
        result = AdjustedCompsModel().estimate(subject, identical_comps, context)
        risk = next(r for r in result.risk_factors if r.factor == "building_age")
        assert risk.severity == RiskSeverity.HIGH

    def test_thin_evidence(self, subject, make_comp, context):
        result = AdjustedCompsModel().estimate(subject, [make_comp()], context)
        risk = next(r for r in result.risk_factors if r.factor == "thin_evidence")
        assert risk.severity == RiskSeverity.HIGH

    def test_unverified_evidence(self, subject, make_comp, context):
        comps = [make_comp(verified=False) for _ in range(3)]
        result = AdjustedCompsModel().estimate(subject, comps, context)
        assert "unverified_evidence" in _risk_names(result)

    def test_slow_market(self, subject, make_comp, context):
        comps = [make_comp(days_on_market=200) for _ in range(3)]
        result = AdjustedCompsModel().estimate(subject, comps, context)
        assert "market_liquidity" in _risk_names(result)

    def test_price_dispersion(self, subject, make_comp, context):
        comps = [make_comp(sale_price=100000), make_comp(sale_price=500000), make_comp(sale_price=300000)]
        result = AdjustedCompsModel().estimate(subject, comps, context)
        assert "price_dispersion" in _risk_names(result)


class TestDefaultModels:

    def test_registered_ids(self):
        assert set(default_models()) == {"comps-adjusted", "comps-ppm2", "knn-weighted"}
