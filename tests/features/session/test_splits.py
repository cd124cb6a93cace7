"""
Tests for split detection on plain Sample sequences.
"""

import pytest

from runtrack.features.session import Sample, build_laps, expected_lap_count, split_markers


def samples_at(distances_km, interval_s=150, elevations=None):
    elevations = elevations or [None] * len(distances_km)
    return [
        Sample(
            index=i,
            lat=0.0,
            lon=d / 111.195,
            timestamp_ms=i * interval_s * 1000,
            cumulative_distance_km=d,
            elevation_m=elevations[i],
        )
        for i, d in enumerate(distances_km)
    ]


class TestExpectedLapCount:

    @pytest.mark.parametrize("distance,split,expected", [
        (0.0, 1.0, 0),
        (0.999, 1.0, 0),
        (1.0, 1.0, 1),
        (3.7, 1.0, 3),
        (3.3, 1.609344, 2),
        (5.0, 0.0, 0),
    ])
    def test_floor(self, distance, split, expected):
        assert expected_lap_count(distance, split) == expected


class TestBuildLaps:
    """Tests for build_laps."""

    def test_no_samples(self):
        assert build_laps([], [], 1.0) == []

    def test_below_first_split(self):
        assert build_laps(samples_at([0.0, 0.4, 0.9]), [], 1.0) == []

    def test_consecutive_laps(self):
        samples = samples_at([0.0, 0.5, 1.05, 1.6, 2.2])

        first = build_laps(samples[:3], [], 1.0)
        assert len(first) == 1
        lap = first[0]
        assert (lap.index, lap.start_sample_index, lap.end_sample_index) == (1, 0, 2)
        assert lap.distance_km == pytest.approx(1.05)
        assert lap.duration_s == 300.0
        assert lap.avg_pace == pytest.approx(300 / 1.05)
        assert lap.completed_at_ms == samples[2].timestamp_ms

        second = build_laps(samples, first, 1.0)
        assert len(second) == 1
        lap = second[0]
        assert (lap.index, lap.start_sample_index, lap.end_sample_index) == (2, 3, 4)
        assert lap.distance_km == pytest.approx(1.15)
        assert lap.duration_s == 300.0

    def test_existing_laps_not_rebuilt(self):
        samples = samples_at([0.0, 1.2, 1.5])
        laps = build_laps(samples, [], 1.0)

        assert build_laps(samples, laps, 1.0) == []

    def test_one_segment_crossing_several_splits(self):
        """Each threshold gets its own lap; the extra ones are empty."""
        samples = samples_at([0.0, 2.5])

        laps = build_laps(samples, [], 1.0)

        assert [lap.index for lap in laps] == [1, 2]
        assert laps[0].distance_km == pytest.approx(2.5)
        assert (laps[1].start_sample_index, laps[1].end_sample_index) == (1, 1)
        assert laps[1].distance_km == 0.0
        assert laps[1].duration_s == 0.0
        assert laps[1].avg_pace is None

    def test_lap_elevation_threshold(self):
        samples = samples_at(
            [0.0, 0.5, 1.1],
            elevations=[100.0, 102.0, 110.0],
        )

        lap = build_laps(samples, [], 1.0, min_elevation_change_m=3.0)[0]

        assert lap.elevation_gain_m == pytest.approx(8.0)
        assert lap.elevation_loss_m == 0.0


class TestSplitMarkers:

    def test_markers_at_lap_ends(self):
        samples = samples_at([0.0, 0.6, 1.1, 1.7, 2.3])
        laps = build_laps(samples, [], 1.0)

        markers = split_markers(samples, laps, 1.0)

        assert [m.lap_index for m in markers] == [1, 2]
        assert [m.distance_km for m in markers] == [1.0, 2.0]
        assert markers[0].lon == samples[2].lon
        assert markers[1].lon == samples[4].lon
