"""
Elevation processing utilities.

This is the SINGLE SOURCE OF TRUTH for elevation calculations.
"""
import math
from typing import Optional, Sequence, Tuple


def calculate_elevation_changes(
    elevations: Sequence[Optional[float]],
    min_change_m: float = 0.0
) -> Tuple[float, float]:
    """
    Calculate total elevation gain and loss.

    Deltas smaller than ``min_change_m`` are GPS noise and are ignored
    entirely. Deltas at or above the threshold count with their full
    magnitude. Pairs where either value is missing or not finite
    contribute nothing.

    Args:
        elevations: Elevation values in meters (None = unknown)
        min_change_m: Minimum absolute delta that counts

    Returns:
        Tuple of (gain_m, loss_m)
    """
    gain = 0.0
    loss = 0.0

    for i in range(1, len(elevations)):
        prev = elevations[i - 1]
        curr = elevations[i]
        if prev is None or curr is None:
            continue
        if not (math.isfinite(prev) and math.isfinite(curr)):
            continue

        diff = curr - prev
        if abs(diff) < min_change_m or diff == 0:
            continue

        if diff > 0:
            gain += diff
        else:
            loss += abs(diff)

    return gain, loss
