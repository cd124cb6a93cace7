"""
Tests for display formatters.
"""

from runtrack.shared.constants import DistanceUnit
from runtrack.shared.formatters import (
    format_pace,
    format_duration,
    format_distance,
    format_elevation,
)


class TestFormatPace:

    def test_km(self):
        assert format_pace(330.0) == "5:30"

    def test_rounding(self):
        assert format_pace(299.6) == "5:00"

    def test_mile_conversion(self):
        """5:00/km is 8:03/mi."""
        assert format_pace(300.0, DistanceUnit.MI) == "8:03"

    def test_unknown(self):
        assert format_pace(None) == "--:--"
        assert format_pace(0) == "--:--"
        assert format_pace(-5.0) == "--:--"


class TestFormatDuration:

    def test_minutes(self):
        assert format_duration(1504) == "25:04"

    def test_hours(self):
        assert format_duration(3729) == "1:02:09"

    def test_negative_clamped(self):
        assert format_duration(-3) == "0:00"


class TestFormatDistance:

    def test_km(self):
        assert format_distance(12.5) == "12.50 km"

    def test_miles(self):
        assert format_distance(5.0, DistanceUnit.MI) == "3.11 mi"


class TestFormatElevation:

    def test_signs(self):
        assert format_elevation(85.4) == "+85 m"
        assert format_elevation(0) == "+0 m"
        assert format_elevation(-12) == "-12 m"
