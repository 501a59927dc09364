"""
Great-circle distance between coordinates.
"""

import math
from typing import Tuple, Union

from .models import Coordinates

# Mean Earth radius in kilometres
EARTH_RADIUS_KM = 6371.0

CoordinatesLike = Union[Coordinates, Tuple[float, float]]


def distance(a: CoordinatesLike, b: CoordinatesLike) -> float:
    """
    Calculate distance between two points in kilometres using Haversine formula.

    Args:
        a: First point, Coordinates or (lat, lng) in degrees
        b: Second point, Coordinates or (lat, lng) in degrees

    Returns:
        Distance in kilometres

    Raises:
        InvalidCoordinates: if either point is out of range
    """
    p1 = Coordinates.of(a)
    p2 = Coordinates.of(b)

    lat1_rad = math.radians(p1.lat)
    lat2_rad = math.radians(p2.lat)
    dlat = math.radians(p2.lat - p1.lat)
    dlon = math.radians(p2.lng - p1.lng)

    h = (
        math.sin(dlat / 2) ** 2
        + math.cos(lat1_rad) * math.cos(lat2_rad) * math.sin(dlon / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))

    return EARTH_RADIUS_KM * c


def distance_meters(a: CoordinatesLike, b: CoordinatesLike) -> float:
    """Distance between two points in metres."""
    return distance(a, b) * 1000.0
