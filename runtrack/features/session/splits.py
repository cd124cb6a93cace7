"""
Automatic split (lap) detection.

A lap closes at the first sample whose cumulative distance reaches
lap_index * split_distance. Laps are measured from the previous lap's
end sample, so every segment between two consecutive samples belongs to
exactly one lap and lap distances may overshoot the nominal split by at
most one segment.
"""

import math
from dataclasses import dataclass
from typing import List, Optional, Sequence

from runtrack.shared.elevation import calculate_elevation_changes

from .models import Lap, Sample


@dataclass(frozen=True)
class SplitMarker:
    """Where a split was crossed, for map display."""
    lat: float
    lon: float
    distance_km: float
    lap_index: int


def expected_lap_count(cumulative_distance_km: float, split_distance_km: float) -> int:
    """Number of laps a distance should have produced."""
    if split_distance_km <= 0:
        return 0
    return int(math.floor(cumulative_distance_km / split_distance_km))


def _first_index_reaching(
    samples: Sequence[Sample],
    target_km: float,
    start: int
) -> Optional[int]:
    for i in range(start, len(samples)):
        if samples[i].cumulative_distance_km >= target_km:
            return i
    return None


def build_laps(
    samples: Sequence[Sample],
    laps: Sequence[Lap],
    split_distance_km: float,
    min_elevation_change_m: float = 0.0
) -> List[Lap]:
    """
    Materialize laps that the current distance has completed.

    Normally returns zero or one lap; a single long segment crossing
    several thresholds yields one lap per threshold.

    Args:
        samples: Accepted samples so far
        laps: Laps already recorded
        split_distance_km: Nominal lap length
        min_elevation_change_m: Elevation noise threshold

    Returns:
        Newly completed laps, in order
    """
    if not samples:
        return []

    expected = expected_lap_count(samples[-1].cumulative_distance_km, split_distance_km)
    recorded = list(laps)
    created: List[Lap] = []

    while len(recorded) < expected:
        lap_index = len(recorded) + 1
        target_km = lap_index * split_distance_km

        base_idx = recorded[-1].end_sample_index if recorded else 0
        end_idx = _first_index_reaching(samples, target_km, base_idx)
        if end_idx is None:
            break

        start_idx = min(base_idx + 1 if recorded else 0, end_idx)

        base = samples[base_idx]
        end = samples[end_idx]
        distance_km = end.cumulative_distance_km - base.cumulative_distance_km
        duration_s = (end.timestamp_ms - base.timestamp_ms) / 1000

        if distance_km > 0 and duration_s > 0:
            avg_pace = duration_s / distance_km
        else:
            avg_pace = None

        gain, loss = calculate_elevation_changes(
            [s.elevation_m for s in samples[base_idx:end_idx + 1]],
            min_elevation_change_m
        )

        lap = Lap(
            index=lap_index,
            start_sample_index=start_idx,
            end_sample_index=end_idx,
            distance_km=distance_km,
            duration_s=duration_s,
            avg_pace=avg_pace,
            elevation_gain_m=gain,
            elevation_loss_m=loss,
            completed_at_ms=end.timestamp_ms,
        )
        recorded.append(lap)
        created.append(lap)

    return created


def split_markers(
    samples: Sequence[Sample],
    laps: Sequence[Lap],
    split_distance_km: float
) -> List[SplitMarker]:
    """Position of every completed split."""
    markers = []
    for lap in laps:
        sample = samples[lap.end_sample_index]
        markers.append(SplitMarker(
            lat=sample.lat,
            lon=sample.lon,
            distance_km=lap.index * split_distance_km,
            lap_index=lap.index,
        ))
    return markers
