"""
Valuation Engine for the AVM

Implements the complete valuation pipeline:
- Enrichment (distance, similarity, adjustments per comparable)
- Selection (radius and age bounds, caller filters, similarity ranking)
- Market statistics and confidence over the selected set
- One ValuationResult per pricing model
- Ensemble combination into a single weighted estimate
"""

import logging
from dataclasses import dataclass, field, replace
from datetime import date
from typing import Dict, List, Optional, Sequence

from .confidence import confidence
from .enrichment import enrich_comparables
from .ensemble import combine
from .filters import ComparableFilters, filter_comparables, sort_comparables
from .market_stats import MarketStatistics, stats
from .models import Comparable, Subject, ValuationResult, WeightedValuation
from .pricing import PricingContext, PricingModel, default_models
from .settings import AvmSettings
from .sources import ComparableSource


logger = logging.getLogger(__name__)


@dataclass
class CompSelectionResult:
    """
    Result of comp selection process.

    Contains selected comps and metadata about the selection.
    """
    comps: List[Comparable]
    total_candidates: int
    radius_km: float
    max_age_months: float

    @property
    def comp_count(self) -> int:
        """Number of comps after all filtering."""
        return len(self.comps)

    @property
    def excluded_count(self) -> int:
        return self.total_candidates - self.comp_count


@dataclass
class ValuationRequest:
    """One subject to value within a batch."""
    subject: Subject
    candidates: List[Comparable]
    model_ids: Optional[Sequence[str]] = None
    filters: Optional[ComparableFilters] = None


@dataclass
class AVMReport:
    """
    Complete valuation output for a subject.

    Bundles the selected evidence, its statistics and confidence, every
    model result and the weighted ensemble estimate.
    """
    subject: Subject
    selection: CompSelectionResult
    statistics: MarketStatistics
    confidence: float
    results: List[ValuationResult] = field(default_factory=list)
    weighted: WeightedValuation = field(default_factory=WeightedValuation)

    @property
    def is_sufficient(self) -> bool:
        return bool(self.results)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON output."""
        return {
            "subject_id": self.subject.id,
            "comparables_used": self.selection.comp_count,
            "comparables_total": self.selection.total_candidates,
            "radius_km": self.selection.radius_km,
            "statistics": self.statistics.to_dict(),
            "confidence": self.confidence,
            "results": [r.to_dict() for r in self.results],
            "weighted": self.weighted.to_dict(),
        }


class AVMValuationEngine:
    """
    Complete valuation pipeline for comparable-based AVM.

    Pipeline order:
    1. ENRICH - Derive distance, similarity and adjusted price per comp
    2. SELECT - Apply radius/age bounds and filters, rank by similarity
    3. MEASURE - Market statistics and confidence over the selection
    4. PRICE - Run each pricing model
    5. COMBINE - Weighted ensemble of model results
    """

    def __init__(
        self,
        settings: AvmSettings = None,
        models: Dict[str, PricingModel] = None,
        reference_date: date = None,
    ):
        """
        Initialize valuation engine.

        Args:
            settings: Selection and result settings (default: AvmSettings())
            models: Pricing models keyed by model id (default: built-in models)
            reference_date: Reference date for sale age (default: today)
        """
        self._settings = settings or AvmSettings()
        self._models = dict(models) if models is not None else default_models()
        self._reference_date = reference_date or date.today()

    @property
    def settings(self) -> AvmSettings:
        return self._settings

    @property
    def model_ids(self) -> List[str]:
        return list(self._models)

    def enrich(self, subject: Subject, comparables: List[Comparable]) -> List[Comparable]:
        """Return enriched copies of the comparables."""
        return enrich_comparables(subject, comparables)

    def select_comparables(
        self,
        subject: Subject,
        candidates: List[Comparable],
        filters: ComparableFilters = None,
    ) -> CompSelectionResult:
        """
        Select the comparables used for valuation.

        Radius and age bounds default to the engine settings unless the
        caller's filters set their own.

        Args:
            subject: The property being valued
            candidates: All potential comparable sales
            filters: Optional caller filters

        Returns:
            CompSelectionResult with ranked, enriched comps
        """
        filters = filters or ComparableFilters()
        if filters.max_distance_km is None:
            filters = replace(filters, max_distance_km=self._settings.default_radius_km)
        if filters.max_age_months is None:
            filters = replace(filters, max_age_months=self._settings.max_age_months)

        enriched = self.enrich(subject, candidates)
        eligible = filter_comparables(
            enriched, filters, subject=subject, reference_date=self._reference_date
        )
        ranked = sort_comparables(eligible, "similarity", "desc")
        selected = ranked[:self._settings.max_comparables]

        logger.info(
            "Selected %d of %d comparables for %s (%d eligible, radius %.1f km)",
            len(selected),
            len(candidates),
            subject.id,
            len(eligible),
            filters.max_distance_km,
        )

        return CompSelectionResult(
            comps=selected,
            total_candidates=len(candidates),
            radius_km=filters.max_distance_km,
            max_age_months=filters.max_age_months,
        )

    def valuate(
        self,
        subject: Subject,
        candidates: List[Comparable],
        model_ids: Sequence[str] = None,
        filters: ComparableFilters = None,
    ) -> AVMReport:
        """
        Perform complete valuation for a subject property.

        Args:
            subject: The property being valued
            candidates: Candidate comparable sales
            model_ids: Models to run (default: all registered)
            filters: Optional caller filters

        Returns:
            AVMReport; with no selected comps the report carries no model
            results and a zero weighted valuation
        """
        models = self._resolve_models(model_ids)

        selection = self.select_comparables(subject, candidates, filters)
        comps = selection.comps

        report = AVMReport(
            subject=subject,
            selection=selection,
            statistics=stats(comps),
            confidence=confidence(comps, subject, self._reference_date),
        )

        if not comps:
            logger.warning("No comparables selected for %s; skipping pricing models", subject.id)
            return report

        context = PricingContext(
            reference_date=self._reference_date,
            settings=self._settings,
            total_candidates=selection.total_candidates,
        )
        report.results = [model.estimate(subject, comps, context) for model in models]
        report.weighted = combine(report.results, self._settings.model_weights)

        logger.info(
            "Valued %s at %d (confidence %.2f) from %d model(s)",
            subject.id,
            report.weighted.value,
            report.weighted.confidence,
            len(report.results),
        )
        return report

    def valuate_from_source(
        self,
        subject: Subject,
        source: ComparableSource,
        model_ids: Sequence[str] = None,
        filters: ComparableFilters = None,
    ) -> AVMReport:
        """Fetch candidates from a source, then valuate."""
        candidates = source.search(subject, filters)
        return self.valuate(subject, candidates, model_ids=model_ids, filters=filters)

    def valuate_batch(self, requests: List[ValuationRequest]) -> List[AVMReport]:
        """
        Valuate several subjects independently.

        Returns one report per request, in request order.
        """
        return [
            self.valuate(r.subject, r.candidates, model_ids=r.model_ids, filters=r.filters)
            for r in requests
        ]

    def _resolve_models(self, model_ids: Optional[Sequence[str]]) -> List[PricingModel]:
        if model_ids is None:
            return list(self._models.values())
        unknown = [m for m in model_ids if m not in self._models]
        if unknown:
            raise ValueError(f"Unknown model id(s): {', '.join(unknown)}")
        return [self._models[m] for m in model_ids]
