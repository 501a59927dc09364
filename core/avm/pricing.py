"""
Pricing models.

A pricing model turns a subject and its adjusted comparables into one
ValuationResult. Production deployments may plug in external models
(gradient boosting, hedonic regression) through the PricingModel protocol;
the deterministic comparable-based models below ship with the engine.
"""

import statistics
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Dict, List, Optional, Protocol

from .confidence import confidence
from .enrichment import ensure_enriched
from .errors import InsufficientComparables
from .market_stats import stats
from .models import (
    Comparable,
    ComparableSummary,
    ConfidenceRange,
    MarketMetrics,
    MarketPosition,
    RiskFactor,
    RiskImpact,
    RiskSeverity,
    Subject,
    ValuationResult,
    ValueBreakdown,
    round_half_up,
)
from .settings import AvmSettings


# =============================================================================
# Configuration Constants
# =============================================================================

# Feature premium: 2% per listed feature, capped at 10%
FEATURE_PREMIUM_PER_FEATURE = 0.02
FEATURE_PREMIUM_CAP = 0.10

# Market position band around the market average price per m²
MARKET_POSITION_BAND = 0.05

# Results are valid for one week from the reference date
RESULT_VALIDITY_DAYS = 7

# Sales within this window count as "recent" for price appreciation
RECENT_SALES_DAYS = 180

# Risk thresholds
OLD_BUILDING_YEAR = 1980
VERY_OLD_BUILDING_YEAR = 1960
LOW_VERIFICATION_RATIO = 0.5
SLOW_MARKET_DAYS = 120
HIGH_DISPERSION_CV = 0.25


@dataclass(frozen=True)
class PricingContext:
    """Inputs shared by every model run for one subject."""
    reference_date: date
    settings: AvmSettings = field(default_factory=AvmSettings)
    total_candidates: Optional[int] = None


class PricingModel(Protocol):
    """Produces one ValuationResult per subject."""

    model_id: str

    def estimate(
        self,
        subject: Subject,
        comparables: List[Comparable],
        context: PricingContext,
    ) -> ValuationResult:
        ...


# =============================================================================
# Result Construction
# =============================================================================

def feature_premium_rate(subject: Subject) -> float:
    return min(len(subject.features) * FEATURE_PREMIUM_PER_FEATURE, FEATURE_PREMIUM_CAP)


def classify_market_position(estimate_per_m2: float, market_per_m2: float) -> MarketPosition:
    """
    Classify an estimate against the market average price per m².

    The market sitting more than 5% above the estimate places the subject
    below market, and vice versa.
    """
    if market_per_m2 > estimate_per_m2 * (1 + MARKET_POSITION_BAND):
        return MarketPosition.BELOW
    if market_per_m2 < estimate_per_m2 * (1 - MARKET_POSITION_BAND):
        return MarketPosition.ABOVE
    return MarketPosition.AT


def price_appreciation(comps: List[Comparable], reference_date: date) -> float:
    """
    Percentage change in mean price per m², recent sales vs older sales.

    Returns 0.0 unless both groups are non-empty.
    """
    cutoff = reference_date - timedelta(days=RECENT_SALES_DAYS)
    recent = [c.price_per_m2 for c in comps if c.sale_date >= cutoff]
    older = [c.price_per_m2 for c in comps if c.sale_date < cutoff]
    if not recent or not older:
        return 0.0
    return round((statistics.mean(recent) / statistics.mean(older) - 1) * 100, 2)


def liquidity_index(avg_days_on_market: float) -> float:
    return round(max(0.0, min(1.0, 1 - avg_days_on_market / 365)), 3)


def assess_risks(
    subject: Subject,
    comps: List[Comparable],
    settings: AvmSettings,
    avg_days_on_market: int,
) -> List[RiskFactor]:
    """Derive qualitative risk factors from the subject and its evidence."""
    risks = []

    if subject.building_year < OLD_BUILDING_YEAR:
        risks.append(RiskFactor(
            factor="building_age",
            impact=RiskImpact.NEGATIVE,
            severity=RiskSeverity.HIGH if subject.building_year < VERY_OLD_BUILDING_YEAR else RiskSeverity.MEDIUM,
            description=f"Building constructed in {subject.building_year}",
        ))

    if len(comps) < settings.min_comparables:
        risks.append(RiskFactor(
            factor="thin_evidence",
            impact=RiskImpact.NEGATIVE,
            severity=RiskSeverity.HIGH if len(comps) <= 1 else RiskSeverity.MEDIUM,
            description=f"Only {len(comps)} comparable(s); {settings.min_comparables} expected",
        ))

    verified_ratio = sum(1 for c in comps if c.verified) / len(comps)
    if verified_ratio < LOW_VERIFICATION_RATIO:
        risks.append(RiskFactor(
            factor="unverified_evidence",
            impact=RiskImpact.NEGATIVE,
            severity=RiskSeverity.MEDIUM,
            description=f"{verified_ratio:.0%} of comparables are verified",
        ))

    if avg_days_on_market > SLOW_MARKET_DAYS:
        risks.append(RiskFactor(
            factor="market_liquidity",
            impact=RiskImpact.NEGATIVE,
            severity=RiskSeverity.MEDIUM,
            description=f"Comparables averaged {avg_days_on_market} days on market",
        ))

    adjusted = [c.adjusted_price for c in comps]
    if len(adjusted) >= 2:
        mean_price = statistics.mean(adjusted)
        dispersion = statistics.pstdev(adjusted) / mean_price if mean_price else 0.0
        if dispersion > HIGH_DISPERSION_CV:
            risks.append(RiskFactor(
                factor="price_dispersion",
                impact=RiskImpact.NEGATIVE,
                severity=RiskSeverity.MEDIUM,
                description=f"Adjusted prices vary by {dispersion:.0%} around their mean",
            ))

    return risks


def build_valuation_result(
    subject: Subject,
    model_id: str,
    model_value: float,
    comps: List[Comparable],
    context: PricingContext,
) -> ValuationResult:
    """
    Assemble a ValuationResult around a model's raw estimate.

    The breakdown parts always sum to the final value: the market
    adjustment absorbs whatever the base, condition and feature parts do
    not explain.
    """
    settings = context.settings
    market = stats(comps)

    feature_adj = model_value * feature_premium_rate(subject)
    final = round_half_up(model_value + feature_adj)

    base_value = round_half_up(subject.area * market.avg_price_per_m2)
    mean_condition_pct = statistics.mean(c.adjustments.condition for c in comps)
    condition_adj = round_half_up(base_value * mean_condition_pct / 100)
    feature_adjustments = round_half_up(feature_adj)
    location_adj = 0
    market_adj = final - base_value - condition_adj - feature_adjustments - location_adj

    price_per_m2 = round_half_up(final / subject.area)
    spread = settings.confidence_spread

    return ValuationResult(
        subject_id=subject.id,
        model_id=model_id,
        estimated_value=final,
        confidence=confidence(comps, subject, context.reference_date),
        confidence_range=ConfidenceRange(
            low=round_half_up(final * (1 - spread)),
            high=round_half_up(final * (1 + spread)),
            percentage=settings.confidence_level,
        ),
        price_per_m2=price_per_m2,
        market_position=classify_market_position(price_per_m2, market.avg_price_per_m2),
        breakdown=ValueBreakdown(
            base_value=base_value,
            location_adjustment=location_adj,
            condition_adjustment=condition_adj,
            feature_adjustments=feature_adjustments,
            market_adjustment=market_adj,
            final=final,
        ),
        comparables=ComparableSummary(
            used=len(comps),
            total=context.total_candidates if context.total_candidates is not None else len(comps),
            avg_price=market.avg_price,
            avg_price_per_m2=market.avg_price_per_m2,
        ),
        market_metrics=MarketMetrics(
            median_price=market.median_price,
            avg_days_on_market=market.avg_days_on_market,
            price_appreciation=price_appreciation(comps, context.reference_date),
            liquidity_index=liquidity_index(market.avg_days_on_market),
        ),
        risk_factors=tuple(assess_risks(subject, comps, settings, market.avg_days_on_market)),
        valid_until=context.reference_date + timedelta(days=RESULT_VALIDITY_DAYS),
    )


def _prepare(subject: Subject, comparables: List[Comparable], model_id: str) -> List[Comparable]:
    if not comparables:
        raise InsufficientComparables(f"{model_id} requires at least one comparable")
    return ensure_enriched(subject, comparables)


# =============================================================================
# Models
# =============================================================================

class AdjustedCompsModel:
    """Similarity-weighted mean of adjusted comparable prices."""

    model_id = "comps-adjusted"

    def estimate(
        self,
        subject: Subject,
        comparables: List[Comparable],
        context: PricingContext,
    ) -> ValuationResult:
        comps = _prepare(subject, comparables, self.model_id)
        total_similarity = sum(c.similarity for c in comps)
        value = sum(c.adjusted_price * c.similarity for c in comps) / total_similarity
        return build_valuation_result(subject, self.model_id, value, comps, context)


class PricePerM2Model:
    """Median adjusted price per m² applied to the subject area."""

    model_id = "comps-ppm2"

    def estimate(
        self,
        subject: Subject,
        comparables: List[Comparable],
        context: PricingContext,
    ) -> ValuationResult:
        comps = _prepare(subject, comparables, self.model_id)
        rates = sorted(c.adjusted_price / c.area for c in comps)
        value = rates[len(rates) // 2] * subject.area
        return build_valuation_result(subject, self.model_id, value, comps, context)


class NearestNeighbourModel:
    """
    k nearest comparables by similarity, weighted by similarity and
    inverse distance.
    """

    model_id = "knn-weighted"

    def __init__(self, k: int = 5):
        if k < 1:
            raise ValueError("k must be at least 1")
        self.k = k

    def estimate(
        self,
        subject: Subject,
        comparables: List[Comparable],
        context: PricingContext,
    ) -> ValuationResult:
        comps = _prepare(subject, comparables, self.model_id)
        neighbours = sorted(comps, key=lambda c: c.similarity, reverse=True)[:self.k]

        weights = [c.similarity / (1 + c.distance_to_subject / 1000.0) for c in neighbours]
        value = sum(c.adjusted_price * w for c, w in zip(neighbours, weights)) / sum(weights)
        return build_valuation_result(subject, self.model_id, value, neighbours, context)


def default_models() -> Dict[str, PricingModel]:
    """The built-in models keyed by model id."""
    models = [AdjustedCompsModel(), PricePerM2Model(), NearestNeighbourModel()]
    return {m.model_id: m for m in models}
