"""
Formatting utilities for display.

Used by the CLI and API consumers.
"""

from .constants import DistanceUnit, KM_PER_MILE


def format_pace(pace_s_per_km: float | None, unit: DistanceUnit = DistanceUnit.KM) -> str:
    """
    Format pace as 'M:SS'.

    Args:
        pace_s_per_km: Pace in seconds per km
        unit: Display unit (pace is converted to seconds per mile for mi)

    Returns:
        Formatted string (e.g., '5:30'), '--:--' when unknown
    """
    if not pace_s_per_km or pace_s_per_km <= 0:
        return "--:--"

    pace = pace_s_per_km * KM_PER_MILE if unit == DistanceUnit.MI else pace_s_per_km
    total_seconds = int(round(pace))
    minutes = total_seconds // 60
    seconds = total_seconds % 60

    return f"{minutes}:{seconds:02d}"


def format_duration(seconds: float) -> str:
    """
    Format duration as 'M:SS' or 'H:MM:SS'.

    Args:
        seconds: Duration in seconds

    Returns:
        Formatted string (e.g., '25:04' or '1:02:09')
    """
    total = max(0, int(round(seconds)))
    h = total // 3600
    m = (total % 3600) // 60
    s = total % 60

    if h > 0:
        return f"{h}:{m:02d}:{s:02d}"
    return f"{m}:{s:02d}"


def format_distance(km: float, unit: DistanceUnit = DistanceUnit.KM) -> str:
    """
    Format distance in the session unit.

    Args:
        km: Distance in kilometers

    Returns:
        Formatted string (e.g., '12.50 km' or '3.11 mi')
    """
    if unit == DistanceUnit.MI:
        return f"{km / KM_PER_MILE:.2f} mi"
    return f"{km:.2f} km"


def format_elevation(meters: float) -> str:
    """
    Format elevation with sign.

    Returns:
        Formatted string (e.g., '+85 m')
    """
    if meters >= 0:
        return f"+{int(round(meters))} m"
    return f"{int(round(meters))} m"
