"""
Confidence estimation for a comparable-based valuation.

Base confidence of 0.5, adjusted by:
+ Count bonus: up to 0.20 for 10+ comparables
+ Similarity bonus: average similarity x 0.25
+ Verification bonus: verified ratio x 0.15
- Distance penalty: up to 0.10 (average km / 5)
- Recency penalty: up to 0.15 (average sale age in months / 12)

Clamped to [0.1, 0.95]. An empty comparable set is a special case and
returns the floor directly.
"""

from datetime import date
from typing import List, Optional

from .geo import distance
from .models import Comparable, Subject
from .similarity import similarity


# =============================================================================
# Configuration Constants
# =============================================================================

BASE_CONFIDENCE = 0.5
EMPTY_SET_CONFIDENCE = 0.1

MIN_CONFIDENCE = 0.1
MAX_CONFIDENCE = 0.95

COUNT_DIVISOR = 10
COUNT_BONUS_CAP = 0.2
SIMILARITY_WEIGHT = 0.25
VERIFICATION_WEIGHT = 0.15
DISTANCE_DIVISOR_KM = 5.0
DISTANCE_PENALTY_CAP = 0.1
RECENCY_DIVISOR_MONTHS = 12
RECENCY_PENALTY_CAP = 0.15

DAYS_PER_MONTH = 30


def sale_age_months(sale_date: date, reference_date: date) -> float:
    """
    Age of a sale in 30-day months.

    Sales dated after the reference date count as age zero.
    """
    return max((reference_date - sale_date).days, 0) / DAYS_PER_MONTH


def confidence(
    comparables: List[Comparable],
    subject: Subject,
    reference_date: Optional[date] = None,
) -> float:
    """
    Calculate confidence score based on comparables quality.

    Similarity and distance are recomputed from the subject rather than
    read from derived fields.

    Args:
        comparables: Comparables used for the valuation
        subject: The property being valued
        reference_date: Date to measure sale age from (default: today)

    Returns:
        Confidence in [0.1, 0.95]
    """
    if not comparables:
        return EMPTY_SET_CONFIDENCE

    reference_date = reference_date or date.today()
    n = len(comparables)

    score = BASE_CONFIDENCE

    score += min(n / COUNT_DIVISOR, COUNT_BONUS_CAP)

    avg_similarity = sum(similarity(subject, c) for c in comparables) / n
    score += avg_similarity * SIMILARITY_WEIGHT

    verified_ratio = sum(1 for c in comparables if c.verified) / n
    score += verified_ratio * VERIFICATION_WEIGHT

    avg_distance_km = sum(distance(subject.coordinates, c.coordinates) for c in comparables) / n
    score -= min(avg_distance_km / DISTANCE_DIVISOR_KM, DISTANCE_PENALTY_CAP)

    avg_age = sum(sale_age_months(c.sale_date, reference_date) for c in comparables) / n
    score -= min(avg_age / RECENCY_DIVISOR_MONTHS, RECENCY_PENALTY_CAP)

    return max(min(score, MAX_CONFIDENCE), MIN_CONFIDENCE)
