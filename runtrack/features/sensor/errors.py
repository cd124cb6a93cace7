"""
Sensor adapter errors.

These are the only errors the tracking core surfaces to a consumer.
All of them are recoverable: the UI should explain the problem and offer
a retry or a manual-entry fallback.
"""


class SensorError(Exception):
    """Base location sensor error."""
    pass


class SensorUnavailable(SensorError):
    """The platform has no location capability (or it is switched off)."""
    pass


class PermissionDenied(SensorError):
    """The user refused location access."""
    pass


class AcquisitionTimeout(SensorError):
    """No fix arrived within the configured timeout."""
    pass
