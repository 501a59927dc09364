"""
Tests for the portfolio roll-up.

Verifies:
- Totals and price per m² over valued subjects
- Market exposure and diversification by segment
- Risk score bounds
"""

import pytest

from core.avm import (
    AVMValuationEngine,
    AVMReport,
    CompSelectionResult,
    MarketStatistics,
    PortfolioSummary,
    PropertyType,
    ValuationRequest,
    WeightedValuation,
    portfolio_risk,
    summarize_portfolio,
)


@pytest.fixture
def make_report(make_subject):
    """Factory fixture for reports with a fixed weighted value."""
    counter = {"n": 0}

    def _create(value: int, area: float = 100.0, **subject_overrides) -> AVMReport:
        counter["n"] += 1
        subject_overrides.setdefault("id", f"subject-{counter['n']}")
        return AVMReport(
            subject=make_subject(area=area, **subject_overrides),
            selection=CompSelectionResult(comps=[], total_candidates=0, radius_km=2.0, max_age_months=12),
            statistics=MarketStatistics(),
            confidence=0.5,
            weighted=WeightedValuation(value=value, confidence=0.5),
        )
    return _create


class TestSummarizePortfolio:

    def test_two_segments(self, make_report):
        reports = [
            make_report(300000, area=100),
            make_report(300000, area=200, property_type=PropertyType.HOUSE),
        ]
        summary = summarize_portfolio(reports)
        assert summary.property_count == 2
        assert summary.total_value == 600000
        assert summary.total_area == 300
        assert summary.avg_price_per_m2 == 2000
        assert summary.market_exposure == {
            "apartment": pytest.approx(50.0),
            "house": pytest.approx(50.0),
        }
        assert summary.diversification_index == pytest.approx(0.5)
        assert summary.risk_score == pytest.approx(5.5)

    def test_single_property_is_concentrated(self, make_report):
        summary = summarize_portfolio([make_report(250000)])
        assert summary.market_exposure == {"apartment": pytest.approx(100.0)}
        assert summary.diversification_index == pytest.approx(0.0)
        assert summary.risk_score == pytest.approx(8.0)

    def test_exposure_is_value_weighted(self, make_report):
        reports = [make_report(300000), make_report(100000, property_type=PropertyType.STUDIO, rooms=0)]
        summary = summarize_portfolio(reports)
        assert summary.market_exposure["apartment"] == pytest.approx(75.0)
        assert summary.market_exposure["studio"] == pytest.approx(25.0)
        assert summary.diversification_index == pytest.approx(0.375)

    def test_unvalued_reports_are_skipped(self, make_report):
        summary = summarize_portfolio([make_report(300000), make_report(0)])
        assert summary.property_count == 1
        assert summary.total_value == 300000
        assert summary.total_area == 100

    def test_empty_portfolio(self, make_report):
        assert summarize_portfolio([]) == PortfolioSummary()
        assert summarize_portfolio([make_report(0)]) == PortfolioSummary()

    def test_custom_segment_key(self, make_report):
        reports = [make_report(200000, address="Madrid"), make_report(200000, address="Sevilla")]
        summary = summarize_portfolio(reports, key=lambda s: s.address)
        assert set(summary.market_exposure) == {"Madrid", "Sevilla"}
        assert summary.diversification_index == pytest.approx(0.5)

    def test_from_batch_valuation(self, reference_date, make_subject, make_comp):
        engine = AVMValuationEngine(reference_date=reference_date)
        requests = [
            ValuationRequest(subject=make_subject(id="a"), candidates=[make_comp() for _ in range(3)]),
            ValuationRequest(subject=make_subject(id="b"), candidates=[]),
        ]
        summary = summarize_portfolio(engine.valuate_batch(requests))
        assert summary.property_count == 1
        assert summary.total_value > 0

    def test_to_dict(self, make_report):
        d = summarize_portfolio([make_report(300000)]).to_dict()
        assert d["total_value"] == 300000
        assert d["market_exposure"] == {"apartment": pytest.approx(100.0)}


class TestPortfolioRisk:

    def test_reference_values(self):
        assert portfolio_risk(0.5, 50.0) == pytest.approx(5.5)
        assert portfolio_risk(0.0, 100.0) == pytest.approx(8.0)

    def test_clamped_to_scale(self):
        assert portfolio_risk(5.0, 0.0) == 1.0
        assert portfolio_risk(-5.0, 100.0) == 10.0
