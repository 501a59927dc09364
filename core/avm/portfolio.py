"""
Portfolio roll-up over a batch of valuation reports.

Aggregates weighted values into totals, market exposure by segment, a
diversification index (1 minus the Herfindahl concentration of value
shares) and a 1-10 risk score.
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, Optional

from .models import Subject, round_half_up
from .valuation import AVMReport


logger = logging.getLogger(__name__)


BASE_RISK = 5.0
DIVERSIFICATION_CREDIT = 2.0
CONCENTRATION_PENALTY = 3.0
MIN_RISK = 1.0
MAX_RISK = 10.0


@dataclass(frozen=True)
class PortfolioSummary:
    """
    Aggregate view of a set of valued properties.

    market_exposure maps each segment to its percentage of total value.
    An empty portfolio has every figure at zero.
    """
    property_count: int = 0
    total_value: int = 0
    total_area: float = 0.0
    avg_price_per_m2: int = 0
    market_exposure: Dict[str, float] = field(default_factory=dict)
    diversification_index: float = 0.0
    risk_score: float = 0.0

    def to_dict(self) -> dict:
        return {
            "property_count": self.property_count,
            "total_value": self.total_value,
            "total_area": self.total_area,
            "avg_price_per_m2": self.avg_price_per_m2,
            "market_exposure": dict(self.market_exposure),
            "diversification_index": self.diversification_index,
            "risk_score": self.risk_score,
        }


def _property_type_key(subject: Subject) -> str:
    return subject.property_type.value


def portfolio_risk(diversification_index: float, max_exposure_pct: float) -> float:
    """
    Risk score on a 1-10 scale.

    Starts from 5, earns up to 2 points back for diversification and
    loses up to 3 for concentration in the largest segment.
    """
    risk = (
        BASE_RISK
        - diversification_index * DIVERSIFICATION_CREDIT
        + max_exposure_pct / 100 * CONCENTRATION_PENALTY
    )
    return max(MIN_RISK, min(MAX_RISK, risk))


def summarize_portfolio(
    reports: Iterable[AVMReport],
    key: Optional[Callable[[Subject], str]] = None,
) -> PortfolioSummary:
    """
    Roll up valued subjects into a portfolio summary.

    Args:
        reports: Reports from valuate or valuate_batch
        key: Segment for market exposure (default: property type)

    Returns:
        PortfolioSummary over the reports with a positive weighted value
    """
    key = key or _property_type_key
    valued = [r for r in reports if r.weighted.value > 0]
    if not valued:
        return PortfolioSummary()

    total_value = sum(r.weighted.value for r in valued)
    total_area = sum(r.subject.area for r in valued)

    segment_values: Dict[str, int] = {}
    for report in valued:
        segment = key(report.subject)
        segment_values[segment] = segment_values.get(segment, 0) + report.weighted.value

    shares = {segment: value / total_value for segment, value in segment_values.items()}
    diversification = 1 - sum(share ** 2 for share in shares.values())
    exposure = {segment: share * 100 for segment, share in shares.items()}

    logger.debug(
        "Portfolio of %d properties: value=%d segments=%d",
        len(valued),
        total_value,
        len(exposure),
    )

    return PortfolioSummary(
        property_count=len(valued),
        total_value=total_value,
        total_area=total_area,
        avg_price_per_m2=round_half_up(total_value / total_area),
        market_exposure=exposure,
        diversification_index=diversification,
        risk_score=portfolio_risk(diversification, max(exposure.values())),
    )
