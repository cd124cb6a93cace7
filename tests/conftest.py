"""
Shared test fixtures.

Fixes are laid out on the equator so that moving east by N meters is a
pure longitude offset.
"""

import math

import pytest

from runtrack.features.sensor.models import Fix


T0_MS = 1_000_000

# Meters per degree on the 6371 km sphere
M_PER_DEG = 6371000 * math.pi / 180


class FakeClock:
    """Manually advanced millisecond clock."""

    def __init__(self, start_ms: int = T0_MS):
        self.now_ms = start_ms

    def __call__(self) -> int:
        return self.now_ms

    def advance(self, seconds: float) -> None:
        self.now_ms += int(round(seconds * 1000))

    def set(self, seconds_since_t0: float) -> None:
        self.now_ms = T0_MS + int(round(seconds_since_t0 * 1000))


def build_fix(
    east_m: float = 0.0,
    t_s: float = 0.0,
    accuracy_m=5.0,
    altitude_m=None,
    north_m: float = 0.0
) -> Fix:
    """Fix `east_m` meters east of (0, 0) at T0 + t_s seconds."""
    return Fix(
        lat=north_m / M_PER_DEG,
        lon=east_m / M_PER_DEG,
        timestamp_ms=T0_MS + int(round(t_s * 1000)),
        accuracy_m=accuracy_m,
        altitude_m=altitude_m,
    )


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def make_fix():
    return build_fix
