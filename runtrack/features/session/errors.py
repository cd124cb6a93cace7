"""
Session errors and sample rejection reasons.

Noisy input never raises: a rejected sample is reported through
RejectionReason and a counter. InvalidConfiguration is the only
condition that fails fast, at construction time.
"""

from enum import Enum


class SessionError(Exception):
    """Base session error."""
    pass


class InvalidConfiguration(SessionError):
    """Session options that can never produce a valid run."""
    pass


class RejectionReason(str, Enum):
    """Why a fix was not accepted into the sample ledger."""
    NOT_RUNNING = "not_running"
    INVALID_COORDINATES = "invalid_coordinates"
    LOW_ACCURACY = "low_accuracy"
    OUT_OF_ORDER = "out_of_order"
    UNREALISTIC_SPEED = "unrealistic_speed"
