"""
Session data models.

Samples, laps and snapshots are frozen: once produced they never change,
so a snapshot can be handed to a UI thread while the engine keeps
writing.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple

from runtrack.shared.constants import (
    DistanceUnit,
    SignalQuality,
    Sex,
    SPLIT_DISTANCE_KM,
    DEFAULT_SESSION_MAX_ACCURACY_M,
    DEFAULT_MAX_SPEED_KMH,
    DEFAULT_MEDIUM_INTERVAL_MAX_SPEED_KMH,
    DEFAULT_SHORT_INTERVAL_MAX_SPEED_KMH,
    DEFAULT_PACE_ALPHA,
    DEFAULT_PACE_WINDOW_SECONDS,
    DEFAULT_MIN_ELEVATION_CHANGE_M,
    DEFAULT_WEIGHT_KG,
    DEFAULT_AGE,
)

from .errors import InvalidConfiguration


class SessionState(str, Enum):
    """
    Session lifecycle.

    idle -> running <-> paused -> stopped (terminal until reset)
    """
    IDLE = "idle"
    RUNNING = "running"
    PAUSED = "paused"
    STOPPED = "stopped"


@dataclass(frozen=True)
class Sample:
    """
    A fix accepted into a session.

    Paces are in seconds per km. instant_pace is derived from the
    previous sample only; smoothed_pace is the EMA up to this sample.
    """
    index: int
    lat: float
    lon: float
    timestamp_ms: int
    cumulative_distance_km: float
    instant_pace: Optional[float] = None
    smoothed_pace: Optional[float] = None
    elevation_m: Optional[float] = None
    accuracy_m: Optional[float] = None


@dataclass(frozen=True)
class Lap:
    """
    One completed split.

    Covers samples [start_sample_index, end_sample_index]; distance,
    duration and elevation are measured from the previous lap's end
    sample (or the first sample) to end_sample_index.
    """
    index: int
    start_sample_index: int
    end_sample_index: int
    distance_km: float
    duration_s: float
    avg_pace: Optional[float]
    elevation_gain_m: float
    elevation_loss_m: float
    completed_at_ms: int


@dataclass(frozen=True)
class Totals:
    """Running totals for a session."""
    distance_km: float = 0.0
    duration_s: float = 0.0
    elevation_gain_m: float = 0.0
    elevation_loss_m: float = 0.0
    avg_pace: Optional[float] = None
    calories: float = 0.0


@dataclass(frozen=True)
class UserProfile:
    """Body data used by the calorie estimate."""
    weight_kg: float = DEFAULT_WEIGHT_KG
    age: int = DEFAULT_AGE
    sex: Sex = Sex.MALE


@dataclass
class SessionConfig:
    """
    Per-session tracking options.

    The unit is fixed for the life of a session; split_distance_km
    defaults to 1 km or 1 mile and may be overridden.

    Raises:
        InvalidConfiguration: On options that can never track a run
    """
    unit: DistanceUnit = DistanceUnit.KM
    split_distance_km: Optional[float] = None
    max_accuracy_m: float = DEFAULT_SESSION_MAX_ACCURACY_M
    max_speed_kmh: float = DEFAULT_MAX_SPEED_KMH
    medium_interval_max_speed_kmh: float = DEFAULT_MEDIUM_INTERVAL_MAX_SPEED_KMH
    short_interval_max_speed_kmh: float = DEFAULT_SHORT_INTERVAL_MAX_SPEED_KMH
    pace_alpha: float = DEFAULT_PACE_ALPHA
    pace_window_seconds: float = DEFAULT_PACE_WINDOW_SECONDS
    min_elevation_change_m: float = DEFAULT_MIN_ELEVATION_CHANGE_M

    def __post_init__(self):
        try:
            self.unit = DistanceUnit(self.unit)
        except ValueError:
            raise InvalidConfiguration(f"Unknown distance unit: {self.unit!r}")

        if self.split_distance_km is None:
            self.split_distance_km = SPLIT_DISTANCE_KM[self.unit]

        if self.split_distance_km <= 0:
            raise InvalidConfiguration(
                f"split_distance_km must be positive, got {self.split_distance_km}"
            )
        if not 0 < self.pace_alpha <= 1:
            raise InvalidConfiguration(f"pace_alpha must be in (0, 1], got {self.pace_alpha}")
        if self.pace_window_seconds <= 0:
            raise InvalidConfiguration("pace_window_seconds must be positive")
        if self.max_accuracy_m <= 0:
            raise InvalidConfiguration("max_accuracy_m must be positive")
        if min(
            self.max_speed_kmh,
            self.medium_interval_max_speed_kmh,
            self.short_interval_max_speed_kmh,
        ) <= 0:
            raise InvalidConfiguration("speed ceilings must be positive")
        if self.min_elevation_change_m < 0:
            raise InvalidConfiguration("min_elevation_change_m must not be negative")

    @classmethod
    def from_settings(cls, settings=None, **overrides) -> "SessionConfig":
        """Build a config from application settings plus explicit overrides."""
        if settings is None:
            from runtrack.config import settings

        values = dict(
            unit=settings.default_unit,
            max_accuracy_m=settings.max_accuracy_m,
            max_speed_kmh=settings.max_speed_kmh,
            medium_interval_max_speed_kmh=settings.medium_interval_max_speed_kmh,
            short_interval_max_speed_kmh=settings.short_interval_max_speed_kmh,
            pace_alpha=settings.pace_alpha,
            pace_window_seconds=settings.pace_window_seconds,
            min_elevation_change_m=settings.min_elevation_change_m,
        )
        values.update(overrides)
        return cls(**values)


@dataclass(frozen=True)
class SessionSnapshot:
    """Immutable copy-on-read view of a session."""
    session_id: str
    unit: DistanceUnit
    split_distance_km: float
    state: SessionState
    started_at_ms: Optional[int]
    paused_total_ms: int
    paused_at_ms: Optional[int] = None
    stopped_at_ms: Optional[int] = None
    samples: Tuple[Sample, ...] = field(default_factory=tuple)
    laps: Tuple[Lap, ...] = field(default_factory=tuple)
    totals: Totals = field(default_factory=Totals)
    rolling_pace: Optional[float] = None
    rejected_samples: int = 0

    @property
    def is_paused(self) -> bool:
        return self.state == SessionState.PAUSED

    @property
    def last_sample(self) -> Optional[Sample]:
        return self.samples[-1] if self.samples else None

    def duration_s(self, now_ms: int) -> float:
        """
        Moving time in seconds at now_ms.

        Wall-clock time since start minus every pause, including one
        still open. Frozen at the stop instant once stopped.
        """
        return moving_duration_s(
            self.started_at_ms,
            self.paused_total_ms,
            self.paused_at_ms,
            self.stopped_at_ms,
            now_ms,
        )


def moving_duration_s(
    started_at_ms: Optional[int],
    paused_total_ms: int,
    paused_at_ms: Optional[int],
    stopped_at_ms: Optional[int],
    now_ms: int
) -> float:
    """Elapsed seconds since start, excluding closed and open pauses."""
    if started_at_ms is None:
        return 0.0

    end_ms = stopped_at_ms if stopped_at_ms is not None else now_ms
    paused_ms = paused_total_ms
    if paused_at_ms is not None:
        paused_ms += max(0, end_ms - paused_at_ms)

    return max(0.0, (end_ms - started_at_ms - paused_ms) / 1000)


@dataclass(frozen=True)
class RunningStats:
    """Live statistics for display."""
    distance_km: float
    duration_s: float
    avg_speed_kmh: float
    avg_pace: Optional[float]
    current_pace: Optional[float]
    rolling_pace: Optional[float]
    calories: float
    sample_count: int
    elevation_gain_m: float
    elevation_loss_m: float
    total_laps: int
    current_lap: int
    gps_quality: SignalQuality
