"""
Formulas for pace conversion and calorie estimation.

These formulas are used by the session engine and the outer surfaces.
Centralizing them here eliminates duplication and ensures consistency.
"""

from typing import Optional

from .constants import Sex


# MET values by running speed (upper bound km/h, MET).
# Source: 2024 Compendium of Physical Activities.
RUNNING_MET_TABLE: list[tuple[float, float]] = [
    (6.4, 6.0),     # very slow jog
    (8.0, 8.3),     # ~5 mph
    (9.7, 9.8),     # ~6 mph
    (11.3, 11.0),   # ~7 mph
    (12.9, 12.3),   # ~8 mph
    (14.5, 14.5),   # ~9 mph
]
SPRINT_MET = 16.0   # 10+ mph

OLDER_AGE_THRESHOLD = 60
OLDER_AGE_FACTOR = 1.10
YOUNGER_AGE_THRESHOLD = 25
YOUNGER_AGE_FACTOR = 0.95
FEMALE_FACTOR = 0.90


def pace_from_speed(speed_kmh: float) -> Optional[float]:
    """
    Convert speed to pace.

    Args:
        speed_kmh: Speed in km/h

    Returns:
        Pace in seconds per km, or None when not moving
    """
    if speed_kmh <= 0:
        return None
    return 3600.0 / speed_kmh


def speed_from_pace(pace_s_per_km: Optional[float]) -> float:
    """Convert pace (seconds per km) to speed in km/h."""
    if not pace_s_per_km or pace_s_per_km <= 0:
        return 0.0
    return 3600.0 / pace_s_per_km


def running_met(speed_kmh: float) -> float:
    """
    Select the MET value for a running speed.

    Bands are half-open: a speed equal to a band's upper bound falls into
    the next band.
    """
    for upper_kmh, met in RUNNING_MET_TABLE:
        if speed_kmh < upper_kmh:
            return met
    return SPRINT_MET


def estimate_running_calories(
    weight_kg: float,
    speed_kmh: float,
    duration_hours: float,
    age: int,
    sex: Sex = Sex.MALE
) -> float:
    """
    Estimate calories burned while running.

    Formula: MET(speed) * weight_kg * hours * age_factor * sex_factor

    Args:
        weight_kg: Body mass
        speed_kmh: Average speed over the duration
        duration_hours: Moving time
        age: Age in years
        sex: Used for a coarse metabolic correction

    Returns:
        Estimated kcal

    Notes:
        - This is an estimate, not a physiological measurement
        - Age factor: +10% above 60, -5% below 25
        - Sex factor: -10% for female profiles
    """
    if duration_hours <= 0 or weight_kg <= 0:
        return 0.0

    met = running_met(speed_kmh)

    if age > OLDER_AGE_THRESHOLD:
        age_factor = OLDER_AGE_FACTOR
    elif age < YOUNGER_AGE_THRESHOLD:
        age_factor = YOUNGER_AGE_FACTOR
    else:
        age_factor = 1.0

    sex_factor = FEMALE_FACTOR if sex == Sex.FEMALE else 1.0

    return met * weight_kg * duration_hours * age_factor * sex_factor
