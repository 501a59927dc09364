"""
Ensemble combination of per-model valuation results.

Each result contributes value x (model weight x confidence). Both the
weighted value and the weighted confidence are divided by the sum of the
raw model weights, not the confidence-scaled contributions.
"""

import logging
import math
from typing import List, Mapping, Optional

from .errors import ComputationError
from .models import ModelContribution, ValuationResult, WeightedValuation, round_half_up


logger = logging.getLogger(__name__)

DEFAULT_MODEL_WEIGHT = 1.0


def _check_finite(label: str, value: float) -> None:
    if not math.isfinite(value):
        raise ComputationError(f"{label} is not a finite number: {value!r}")


def combine(
    results: List[ValuationResult],
    weights: Optional[Mapping[str, float]] = None,
) -> WeightedValuation:
    """
    Calculate weighted valuation from multiple models.

    Args:
        results: One ValuationResult per pricing model; only model_id,
            estimated_value and confidence are read
        weights: Model id -> weight; models not listed get weight 1

    Returns:
        WeightedValuation (zero valuation if there are no results or the
        weights sum to zero)

    Raises:
        ComputationError: on negative or non-finite weights, values or
        confidences
    """
    if not results:
        return WeightedValuation()

    weights = weights or {}

    total_weighted_value = 0.0
    total_weighted_confidence = 0.0
    total_weight = 0.0
    contributions = []

    for result in results:
        weight = weights.get(result.model_id, DEFAULT_MODEL_WEIGHT)
        if not isinstance(weight, (int, float)):
            raise ComputationError(f"weight for {result.model_id} is not numeric: {weight!r}")
        _check_finite(f"weight for {result.model_id}", weight)
        if weight < 0:
            raise ComputationError(f"weight for {result.model_id} cannot be negative: {weight}")
        _check_finite(f"value from {result.model_id}", result.estimated_value)
        _check_finite(f"confidence from {result.model_id}", result.confidence)

        contribution = weight * result.confidence

        total_weighted_value += result.estimated_value * contribution
        total_weighted_confidence += result.confidence * weight
        total_weight += weight

        contributions.append(ModelContribution(
            model_id=result.model_id,
            weight=weight,
            value=result.estimated_value,
            confidence=result.confidence,
        ))

    if total_weight == 0:
        logger.debug("All %d model weights are zero; returning empty valuation", len(results))
        return WeightedValuation()

    weighted_value = total_weighted_value / total_weight
    weighted_confidence = total_weighted_confidence / total_weight
    _check_finite("weighted value", weighted_value)
    _check_finite("weighted confidence", weighted_confidence)

    logger.debug(
        "Combined %d model results: value=%.0f confidence=%.3f",
        len(results),
        weighted_value,
        weighted_confidence,
    )

    return WeightedValuation(
        value=round_half_up(weighted_value),
        confidence=weighted_confidence,
        contributions=tuple(contributions),
    )
