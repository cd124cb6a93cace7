"""
GPX loading.

Turns a recorded GPX track into Fix objects so a run can be replayed
through the sensor adapter and the session engine.
"""

import logging
from typing import List, Optional

import gpxpy
import gpxpy.gpx

from .models import Fix

logger = logging.getLogger(__name__)


def load_fixes_from_gpx(
    content: bytes,
    default_interval_s: float = 1.0,
    accuracy_m: Optional[float] = 5.0,
    start_ms: int = 0
) -> List[Fix]:
    """
    Parse GPX content into fixes.

    Points come from tracks, or from routes if the file has no tracks.
    Points without a timestamp are placed default_interval_s after the
    previous point.

    Args:
        content: GPX file content as bytes
        default_interval_s: Spacing for points without a time
        accuracy_m: Accuracy to attach (GPX has none)
        start_ms: Timestamp used when the first point has no time

    Returns:
        List of Fix in file order

    Raises:
        ValueError: If GPX is invalid or has no points
    """
    try:
        gpx = gpxpy.parse(content.decode('utf-8'))
    except Exception as e:
        logger.error(f"Failed to parse GPX: {e}")
        raise ValueError(f"Invalid GPX file: {e}")

    points: List[gpxpy.gpx.GPXTrackPoint] = []
    for track in gpx.tracks:
        for segment in track.segments:
            points.extend(segment.points)

    if not points:
        for route in gpx.routes:
            points.extend(route.points)

    if not points:
        raise ValueError("GPX file contains no track or route points")

    fixes: List[Fix] = []
    step_ms = int(default_interval_s * 1000)
    previous_ms: Optional[int] = None

    for point in points:
        if point.time is not None:
            timestamp_ms = int(point.time.timestamp() * 1000)
        elif previous_ms is None:
            timestamp_ms = start_ms
        else:
            timestamp_ms = previous_ms + step_ms

        fixes.append(Fix(
            lat=point.latitude,
            lon=point.longitude,
            timestamp_ms=timestamp_ms,
            accuracy_m=accuracy_m,
            altitude_m=point.elevation,
        ))
        previous_ms = timestamp_ms

    logger.info(f"Loaded {len(fixes)} fixes from GPX")
    return fixes
