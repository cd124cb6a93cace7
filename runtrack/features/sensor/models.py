"""
Sensor data models.

Fix is the raw observation shared by the sensor adapter and the session
engine. Kept free of feature imports to avoid circular dependencies.
"""

import math
from dataclasses import dataclass
from typing import Optional

from runtrack.shared.constants import (
    SignalQuality,
    SIGNAL_QUALITY_THRESHOLDS,
    DEFAULT_FIX_TIMEOUT_SECONDS,
    DEFAULT_MAX_FIX_AGE_SECONDS,
    DEFAULT_MIN_MOVEMENT_M,
    DEFAULT_SENSOR_MAX_ACCURACY_M,
    DEFAULT_FIX_MAX_RETRIES,
    DEFAULT_FIX_RETRY_DELAY_SECONDS,
)
from runtrack.shared.geo import is_valid_coordinate


@dataclass(frozen=True)
class Fix:
    """
    A single raw location observation.

    Attributes:
        lat: Latitude in decimal degrees
        lon: Longitude in decimal degrees
        timestamp_ms: Epoch (or monotonic) milliseconds
        accuracy_m: Horizontal accuracy in meters, if reported
        altitude_m: Altitude in meters, if reported
        speed_mps: Ground speed in m/s, if reported
    """
    lat: float
    lon: float
    timestamp_ms: int
    accuracy_m: Optional[float] = None
    altitude_m: Optional[float] = None
    speed_mps: Optional[float] = None

    @property
    def has_valid_coordinates(self) -> bool:
        """Coordinates are finite and inside WGS84 ranges."""
        return is_valid_coordinate(self.lat, self.lon)

    @property
    def has_valid_accuracy(self) -> bool:
        """Accuracy is unreported or a finite number."""
        return self.accuracy_m is None or math.isfinite(self.accuracy_m)


@dataclass
class SensorOptions:
    """Options for fix acquisition and watch filtering."""
    high_accuracy: bool = True
    timeout_seconds: float = DEFAULT_FIX_TIMEOUT_SECONDS
    max_fix_age_seconds: float = DEFAULT_MAX_FIX_AGE_SECONDS
    min_movement_m: float = DEFAULT_MIN_MOVEMENT_M
    max_acceptable_accuracy_m: float = DEFAULT_SENSOR_MAX_ACCURACY_M
    max_retries: int = DEFAULT_FIX_MAX_RETRIES
    retry_delay_seconds: float = DEFAULT_FIX_RETRY_DELAY_SECONDS


@dataclass(frozen=True)
class SensorStatus:
    """Point-in-time view of the sensor adapter."""
    available: bool
    has_permission: bool
    is_tracking: bool
    last_update_ms: Optional[int]
    signal_quality: SignalQuality


def classify_signal(accuracy_m: Optional[float]) -> SignalQuality:
    """
    Classify horizontal accuracy into a signal quality bucket.

    <=5m excellent, <=10m good, <=20m fair, <=50m poor, otherwise
    (or unknown) unavailable.
    """
    if accuracy_m is None or accuracy_m < 0:
        return SignalQuality.UNAVAILABLE

    for upper_m, quality in SIGNAL_QUALITY_THRESHOLDS:
        if accuracy_m <= upper_m:
            return quality
    return SignalQuality.UNAVAILABLE
