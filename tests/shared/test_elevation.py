"""
Tests for elevation gain/loss calculation.
"""

import math

import pytest

from runtrack.shared.elevation import calculate_elevation_changes


class TestElevationChanges:
    """Tests for calculate_elevation_changes."""

    def test_empty(self):
        assert calculate_elevation_changes([]) == (0.0, 0.0)
        assert calculate_elevation_changes([100.0]) == (0.0, 0.0)

    def test_no_threshold(self):
        """Without a threshold every delta counts."""
        gain, loss = calculate_elevation_changes([100.0, 101.0, 99.5, 105.0])
        assert gain == pytest.approx(6.5)
        assert loss == pytest.approx(1.5)

    def test_below_threshold_ignored(self):
        """Deltas under the threshold contribute nothing."""
        gain, loss = calculate_elevation_changes([100.0, 102.0, 104.0, 102.5], 3.0)
        assert gain == 0.0
        assert loss == 0.0

    def test_at_threshold_counts_in_full(self):
        """A delta at the threshold counts with its full magnitude."""
        gain, loss = calculate_elevation_changes([100.0, 103.0, 98.0], 3.0)
        assert gain == pytest.approx(3.0)
        assert loss == pytest.approx(5.0)

    def test_missing_values_skipped(self):
        """Pairs with an unknown elevation are skipped."""
        gain, loss = calculate_elevation_changes([100.0, None, 120.0, 130.0], 3.0)
        assert gain == pytest.approx(10.0)
        assert loss == 0.0

    def test_non_finite_values_skipped(self):
        """NaN and infinite elevations behave like unknown ones."""
        gain, loss = calculate_elevation_changes(
            [100.0, math.nan, 110.0, 120.0, math.inf, 115.0], 3.0
        )
        assert gain == pytest.approx(10.0)
        assert loss == 0.0
