"""
Geographic utility functions.

This is the SINGLE SOURCE OF TRUTH for geographic calculations.
DO NOT duplicate these functions elsewhere.
"""
import math
from typing import Iterable, Tuple

# Earth radius in kilometers
EARTH_RADIUS_KM = 6371.0


def haversine(
    lat1: float, lon1: float,
    lat2: float, lon2: float
) -> float:
    """
    Calculate great-circle distance between two points.

    Args:
        lat1, lon1: First point coordinates (degrees)
        lat2, lon2: Second point coordinates (degrees)

    Returns:
        Distance in kilometers
    """
    lat1_rad = math.radians(lat1)
    lat2_rad = math.radians(lat2)
    delta_lat = math.radians(lat2 - lat1)
    delta_lon = math.radians(lon2 - lon1)

    a = (
        math.sin(delta_lat / 2) ** 2 +
        math.cos(lat1_rad) * math.cos(lat2_rad) *
        math.sin(delta_lon / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

    return EARTH_RADIUS_KM * c


def haversine_m(
    lat1: float, lon1: float,
    lat2: float, lon2: float
) -> float:
    """Great-circle distance in meters."""
    return haversine(lat1, lon1, lat2, lon2) * 1000


def is_valid_coordinate(lat: float, lon: float) -> bool:
    """
    Check that a coordinate pair is finite and inside WGS84 ranges.

    Latitude must be in [-90, 90], longitude in [-180, 180].
    """
    if lat is None or lon is None:
        return False
    if not (math.isfinite(lat) and math.isfinite(lon)):
        return False
    return -90.0 <= lat <= 90.0 and -180.0 <= lon <= 180.0


def calculate_total_distance(points: Iterable[Tuple[float, float]]) -> float:
    """
    Calculate total distance for a path.

    Args:
        points: Iterable of (lat, lon) tuples

    Returns:
        Total distance in kilometers
    """
    total = 0.0
    previous = None

    for lat, lon in points:
        if previous is not None:
            total += haversine(previous[0], previous[1], lat, lon)
        previous = (lat, lon)

    return total
