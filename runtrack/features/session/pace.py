"""
Pace smoothing.

Two views of "current pace":
- EMA of instant paces (smoothed = a * instant + (1 - a) * previous)
- Rolling window pace over the last N seconds of movement

Paces are seconds per km.
"""

from collections import deque
from typing import Deque, Optional, Tuple

from runtrack.shared.constants import DEFAULT_PACE_ALPHA, DEFAULT_PACE_WINDOW_SECONDS


class PaceSmoother:
    """
    Example (alpha=0.3):
        update(300) -> 300        (seeded by first instant pace)
        update(360) -> 318        (0.3 * 360 + 0.7 * 300)
        update(None) -> 318       (no movement: carry previous value)
    """

    def __init__(
        self,
        alpha: float = DEFAULT_PACE_ALPHA,
        window_seconds: float = DEFAULT_PACE_WINDOW_SECONDS
    ):
        self.alpha = alpha
        self.window_ms = int(window_seconds * 1000)
        self._smoothed: Optional[float] = None
        # (timestamp_ms, cumulative_distance_km)
        self._window: Deque[Tuple[int, float]] = deque()

    @property
    def smoothed(self) -> Optional[float]:
        return self._smoothed

    def update(
        self,
        instant_pace: Optional[float],
        timestamp_ms: int,
        cumulative_distance_km: float
    ) -> Optional[float]:
        """
        Feed one accepted sample.

        Returns:
            Smoothed pace after this sample (None until the first instant pace)
        """
        if instant_pace is not None:
            if self._smoothed is None:
                self._smoothed = instant_pace
            else:
                self._smoothed = (
                    self.alpha * instant_pace + (1 - self.alpha) * self._smoothed
                )

        self._window.append((timestamp_ms, cumulative_distance_km))
        self._trim(timestamp_ms)
        return self._smoothed

    def _trim(self, now_ms: int) -> None:
        # Keep one entry at or before the cutoff as the window anchor
        cutoff = now_ms - self.window_ms
        while len(self._window) >= 2 and self._window[1][0] <= cutoff:
            self._window.popleft()

    def rolling_pace(self) -> Optional[float]:
        """Pace over the rolling window, None without movement."""
        if len(self._window) < 2:
            return None

        start_ms, start_km = self._window[0]
        end_ms, end_km = self._window[-1]
        distance_km = end_km - start_km
        elapsed_s = (end_ms - start_ms) / 1000

        if distance_km <= 0 or elapsed_s <= 0:
            return None
        return elapsed_s / distance_km

    def reset(self) -> None:
        self._smoothed = None
        self._window.clear()
