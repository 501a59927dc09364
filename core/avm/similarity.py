"""
Similarity scoring between a subject and a comparable sale.

Starts from 1.0 and subtracts weighted penalty terms:
- Area (30%): relative area difference, not capped
- Age (20%): building year gap over 50 years, capped at 0.20
- Rooms (15%): relative room difference, capped at 0.15
- Property type: flat 0.20 penalty on mismatch
- Condition (10%): ordinal gap over 3
- Distance (5%): km over 5, capped at 1

The result is floored at 0.1 so no comparable is ever treated as
irrelevant. Because the area term is uncapped, large area mismatches can
drive the raw score below the floor, where they all tie at 0.1.
"""

from .geo import distance
from .models import Comparable, Subject


# =============================================================================
# Configuration Constants
# =============================================================================

WEIGHT_AREA = 0.30
WEIGHT_AGE = 0.20
WEIGHT_ROOMS = 0.15
WEIGHT_CONDITION = 0.10
WEIGHT_DISTANCE = 0.05

PROPERTY_TYPE_PENALTY = 0.20

AGE_NORMALISATION_YEARS = 50
AGE_DIFF_CAP = 0.20
ROOMS_DIFF_CAP = 0.15
CONDITION_RANK_SPAN = 3
DISTANCE_NORMALISATION_KM = 5.0

MIN_SIMILARITY = 0.1
MAX_SIMILARITY = 1.0


def similarity(subject: Subject, comparable: Comparable) -> float:
    """
    Calculate similarity score between subject and comparable.

    Distance is measured between the two records' coordinates, so the
    score does not depend on previously derived fields.

    Args:
        subject: The property being valued
        comparable: Candidate comparable sale

    Returns:
        Similarity in [0.1, 1.0]
    """
    score = 1.0

    area_diff = abs(subject.area - comparable.area) / subject.area
    score -= area_diff * WEIGHT_AREA

    age_diff = abs(subject.building_year - comparable.building_year) / AGE_NORMALISATION_YEARS
    score -= min(age_diff, AGE_DIFF_CAP) * WEIGHT_AGE

    rooms_diff = abs(subject.rooms - comparable.rooms) / max(subject.rooms, 1)
    score -= min(rooms_diff, ROOMS_DIFF_CAP) * WEIGHT_ROOMS

    if subject.property_type != comparable.property_type:
        score -= PROPERTY_TYPE_PENALTY

    condition_diff = abs(subject.condition.rank - comparable.condition.rank) / CONDITION_RANK_SPAN
    score -= condition_diff * WEIGHT_CONDITION

    distance_km = distance(subject.coordinates, comparable.coordinates)
    score -= min(distance_km / DISTANCE_NORMALISATION_KM, 1.0) * WEIGHT_DISTANCE

    return min(max(score, MIN_SIMILARITY), MAX_SIMILARITY)
