"""
Unified constants for units, signal quality and tracking defaults.

Every tuning value used by the sensor adapter and the session engine is
named here so callers never pass magic numbers around.
"""

from enum import Enum


class DistanceUnit(str, Enum):
    """Distance unit a session reports splits in."""
    KM = "km"
    MI = "mi"


class SignalQuality(str, Enum):
    """Classification of a fix's horizontal accuracy."""
    EXCELLENT = "excellent"
    GOOD = "good"
    FAIR = "fair"
    POOR = "poor"
    UNAVAILABLE = "unavailable"


class Sex(str, Enum):
    """Sex used by the calorie estimate."""
    MALE = "male"
    FEMALE = "female"


# =============================================================================
# Units
# =============================================================================

KM_PER_MILE = 1.609344

# Split distance in km for each unit
SPLIT_DISTANCE_KM: dict[DistanceUnit, float] = {
    DistanceUnit.KM: 1.0,
    DistanceUnit.MI: KM_PER_MILE,
}


# =============================================================================
# Signal quality thresholds (accuracy in meters, upper bound inclusive)
# =============================================================================

SIGNAL_QUALITY_THRESHOLDS: list[tuple[float, SignalQuality]] = [
    (5.0, SignalQuality.EXCELLENT),
    (10.0, SignalQuality.GOOD),
    (20.0, SignalQuality.FAIR),
    (50.0, SignalQuality.POOR),
]


# =============================================================================
# Sensor adapter defaults
# =============================================================================

DEFAULT_FIX_TIMEOUT_SECONDS = 15.0
DEFAULT_MAX_FIX_AGE_SECONDS = 1.0
DEFAULT_MIN_MOVEMENT_M = 3.0
DEFAULT_SENSOR_MAX_ACCURACY_M = 20.0
DEFAULT_FIX_MAX_RETRIES = 3
DEFAULT_FIX_RETRY_DELAY_SECONDS = 2.0


# =============================================================================
# Session engine defaults
# =============================================================================

DEFAULT_SESSION_MAX_ACCURACY_M = 30.0

# Realistic speed ceilings (km/h). Short intervals get a larger allowance
# because GPS snap-back between two close fixes inflates the implied speed.
DEFAULT_MAX_SPEED_KMH = 60.0
DEFAULT_MEDIUM_INTERVAL_MAX_SPEED_KMH = 80.0
DEFAULT_SHORT_INTERVAL_MAX_SPEED_KMH = 100.0
MEDIUM_INTERVAL_SECONDS = 10.0
SHORT_INTERVAL_SECONDS = 3.0

DEFAULT_PACE_ALPHA = 0.3
DEFAULT_PACE_WINDOW_SECONDS = 15.0
DEFAULT_MIN_ELEVATION_CHANGE_M = 3.0


# =============================================================================
# Calorie model defaults
# =============================================================================

DEFAULT_WEIGHT_KG = 70.0
DEFAULT_AGE = 30
