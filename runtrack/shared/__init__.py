"""
Shared utilities (NOT business logic).

Usage:
    from runtrack.shared import haversine, calculate_elevation_changes
    from runtrack.shared.formatters import format_pace
"""
from .geo import (
    haversine,
    haversine_m,
    is_valid_coordinate,
    calculate_total_distance,
    EARTH_RADIUS_KM,
)
from .elevation import calculate_elevation_changes
from .formatters import (
    format_pace,
    format_duration,
    format_distance,
    format_elevation,
)
from .formulas import (
    pace_from_speed,
    speed_from_pace,
    running_met,
    estimate_running_calories,
)
from .constants import (
    DistanceUnit,
    SignalQuality,
    Sex,
    KM_PER_MILE,
    SPLIT_DISTANCE_KM,
)

__all__ = [
    # geo
    "haversine",
    "haversine_m",
    "is_valid_coordinate",
    "calculate_total_distance",
    "EARTH_RADIUS_KM",
    # elevation
    "calculate_elevation_changes",
    # formatters
    "format_pace",
    "format_duration",
    "format_distance",
    "format_elevation",
    # formulas
    "pace_from_speed",
    "speed_from_pace",
    "running_met",
    "estimate_running_calories",
    # constants
    "DistanceUnit",
    "SignalQuality",
    "Sex",
    "KM_PER_MILE",
    "SPLIT_DISTANCE_KM",
]
