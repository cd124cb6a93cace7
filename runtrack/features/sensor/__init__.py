"""
Location sensor module.

Usage:
    from runtrack.features.sensor import SensorAdapter, Fix
    from runtrack.features.sensor import ReplayLocationProvider

Components:
- Fix: Raw location observation
- LocationProvider: Platform location primitive (abstract)
- ReplayLocationProvider: Scripted provider for replays and tests
- SensorAdapter: Pull/push fixes with retry and filtering
- load_fixes_from_gpx: GPX track -> fixes
"""

from .errors import SensorError, SensorUnavailable, PermissionDenied, AcquisitionTimeout
from .models import Fix, SensorOptions, SensorStatus, classify_signal
from .provider import LocationProvider, ReplayLocationProvider
from .adapter import SensorAdapter, WatchHandle
from .gpx import load_fixes_from_gpx

__all__ = [
    # Errors
    "SensorError",
    "SensorUnavailable",
    "PermissionDenied",
    "AcquisitionTimeout",
    # Models
    "Fix",
    "SensorOptions",
    "SensorStatus",
    "classify_signal",
    # Providers
    "LocationProvider",
    "ReplayLocationProvider",
    # Adapter
    "SensorAdapter",
    "WatchHandle",
    # GPX
    "load_fixes_from_gpx",
]
