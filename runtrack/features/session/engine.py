"""
Session Engine

Owns a run's lifecycle and derived state: cumulative distance, smoothed
pace, automatic laps, elevation gain/loss and calorie estimate.

Pipeline for every fix (add_sample):
1. Reject unless running
2. Coordinate and accuracy checks
3. Ordering check and haversine increment from the previous sample
4. Realistic-speed gate, tiered by elapsed time
5. Instant pace, EMA + rolling-window pace
6. Append the sample
7. Split detection
8. Elevation gain/loss with a noise threshold

Noisy input never raises: rejected fixes are counted per reason and
reported through on_sample_rejected.
"""

import logging
import math
import threading
import time
import uuid
from collections import Counter
from dataclasses import replace
from typing import Callable, Dict, List, Optional

from runtrack.shared.constants import (
    DistanceUnit,
    SignalQuality,
    MEDIUM_INTERVAL_SECONDS,
    SHORT_INTERVAL_SECONDS,
)
from runtrack.shared.elevation import calculate_elevation_changes
from runtrack.shared.formulas import estimate_running_calories
from runtrack.shared.geo import haversine
from runtrack.features.sensor.models import Fix

from .errors import RejectionReason
from .events import EventDispatcher, SessionListener
from .models import (
    Lap,
    RunningStats,
    Sample,
    SessionConfig,
    SessionSnapshot,
    SessionState,
    Totals,
    UserProfile,
    moving_duration_s,
)
from .pace import PaceSmoother
from .splits import SplitMarker, build_laps, split_markers

logger = logging.getLogger(__name__)


def wall_clock_ms() -> int:
    """Current wall-clock time in epoch milliseconds."""
    return int(time.time() * 1000)


def _new_session_id() -> str:
    return f"run_{uuid.uuid4().hex[:12]}"


def _finite_or_none(value: Optional[float]) -> Optional[float]:
    """Non-finite altitudes count as unknown."""
    if value is None or not math.isfinite(value):
        return None
    return value


class SessionEngine:
    """
    One running session.

    Mutations are serialized by a per-session lock; readers get an
    immutable SessionSnapshot that is swapped in after each mutation, so
    snapshot() and get_stats() never wait on a write.

    Usage:
        engine = SessionEngine(SessionConfig(unit=DistanceUnit.KM))
        engine.add_listener(my_listener)
        engine.start()
        engine.add_sample(fix)
        stats = engine.get_stats(profile)
        final = engine.stop()
    """

    def __init__(
        self,
        config: Optional[SessionConfig] = None,
        profile: Optional[UserProfile] = None,
        clock: Optional[Callable[[], int]] = None,
        sensor=None,
        session_id: Optional[str] = None
    ):
        """
        Args:
            config: Tracking options (validated on construction)
            profile: Default body data for calorie estimates
            clock: Returns current time in ms (wall clock by default)
            sensor: Optional SensorAdapter for gps_quality passthrough
            session_id: Fixed identifier (generated if None)
        """
        self.config = config or SessionConfig()
        self.profile = profile or UserProfile()
        self.sensor = sensor
        self._clock = clock or wall_clock_ms
        self._events = EventDispatcher()
        self._lock = threading.RLock()
        self._init_state(session_id or _new_session_id())

    def _init_state(self, session_id: str) -> None:
        self._id = session_id
        self._state = SessionState.IDLE
        self._started_at_ms: Optional[int] = None
        self._paused_at_ms: Optional[int] = None
        self._stopped_at_ms: Optional[int] = None
        self._paused_total_ms = 0
        self._samples: List[Sample] = []
        self._laps: List[Lap] = []
        self._elevation_gain_m = 0.0
        self._elevation_loss_m = 0.0
        self._totals = Totals()
        self._pace = PaceSmoother(self.config.pace_alpha, self.config.pace_window_seconds)
        self._rejections: Counter = Counter()
        self._snapshot = self._build_snapshot()

    # =========================================================================
    # Properties
    # =========================================================================

    @property
    def session_id(self) -> str:
        return self._id

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def unit(self) -> DistanceUnit:
        return self.config.unit

    @property
    def split_distance_km(self) -> float:
        return self.config.split_distance_km

    @property
    def is_running(self) -> bool:
        return self._state == SessionState.RUNNING

    @property
    def is_paused(self) -> bool:
        return self._state == SessionState.PAUSED

    @property
    def samples(self):
        return self._snapshot.samples

    @property
    def laps(self):
        return self._snapshot.laps

    @property
    def totals(self) -> Totals:
        return self._snapshot.totals

    @property
    def rejected_samples(self) -> int:
        return self._snapshot.rejected_samples

    @property
    def rejection_counts(self) -> Dict[RejectionReason, int]:
        with self._lock:
            return dict(self._rejections)

    def snapshot(self) -> SessionSnapshot:
        """Latest immutable view. Never blocks."""
        return self._snapshot

    # =========================================================================
    # Listeners
    # =========================================================================

    def add_listener(self, listener: SessionListener) -> None:
        self._events.add(listener)

    def remove_listener(self, listener: SessionListener) -> None:
        self._events.remove(listener)

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def start(self) -> bool:
        """
        Start from idle, or resume from paused.

        Returns:
            True if the state changed
        """
        with self._lock:
            now = self._clock()

            if self._state == SessionState.IDLE:
                self._started_at_ms = now
                self._state = SessionState.RUNNING
                self._publish()
                logger.info(f"Session {self._id} started")
                return True

            if self._state == SessionState.PAUSED:
                self._paused_total_ms += max(0, now - self._paused_at_ms)
                self._paused_at_ms = None
                self._state = SessionState.RUNNING
                self._publish()
                logger.info(f"Session {self._id} resumed")
                self._events.emit("on_resume")
                return True

            logger.debug(f"Session {self._id}: start() ignored in state {self._state.value}")
            return False

    def resume(self) -> bool:
        """Resume a paused session."""
        with self._lock:
            if self._state != SessionState.PAUSED:
                return False
            return self.start()

    def pause(self) -> bool:
        """Pause a running session. Fixes are dropped until resumed."""
        with self._lock:
            if self._state != SessionState.RUNNING:
                return False

            self._paused_at_ms = self._clock()
            self._state = SessionState.PAUSED
            self._publish()
            logger.info(f"Session {self._id} paused")
            self._events.emit("on_pause")
            return True

    def stop(self) -> SessionSnapshot:
        """
        Finalize a running or paused session.

        Duration is frozen at the stop instant. Calling stop() in any other
        state returns the current snapshot unchanged.
        """
        with self._lock:
            if self._state not in (SessionState.RUNNING, SessionState.PAUSED):
                return self._snapshot

            now = self._clock()
            if self._paused_at_ms is not None:
                self._paused_total_ms += max(0, now - self._paused_at_ms)
                self._paused_at_ms = None
            self._stopped_at_ms = now
            self._state = SessionState.STOPPED

            self._update_totals()
            self._publish()
            logger.info(
                f"Session {self._id} stopped: {self._totals.distance_km:.3f} km, "
                f"{len(self._laps)} laps, {self.rejected_samples} rejected"
            )
            self._events.emit("on_stats_update", self._totals)
            return self._snapshot

    def reset(self) -> None:
        """Discard samples, laps and totals. Keeps unit, config and listeners."""
        with self._lock:
            old_id = self._id
            self._init_state(_new_session_id())
            logger.info(f"Session {old_id} reset as {self._id}")

    # =========================================================================
    # Samples
    # =========================================================================

    def add_sample(self, fix: Fix) -> Optional[Sample]:
        """
        Offer one fix to the session.

        Returns:
            The accepted Sample, or None if the fix was rejected
        """
        with self._lock:
            if self._state != SessionState.RUNNING:
                return self._reject(RejectionReason.NOT_RUNNING, fix)

            if not fix.has_valid_coordinates:
                return self._reject(RejectionReason.INVALID_COORDINATES, fix)

            if not fix.has_valid_accuracy or (
                fix.accuracy_m is not None and fix.accuracy_m > self.config.max_accuracy_m
            ):
                return self._reject(RejectionReason.LOW_ACCURACY, fix)

            previous = self._samples[-1] if self._samples else None
            increment_km = 0.0
            instant_pace = None

            if previous is not None:
                elapsed_s = (fix.timestamp_ms - previous.timestamp_ms) / 1000
                if elapsed_s < 0:
                    return self._reject(RejectionReason.OUT_OF_ORDER, fix)

                increment_km = haversine(previous.lat, previous.lon, fix.lat, fix.lon)

                if increment_km > 0:
                    if elapsed_s == 0:
                        return self._reject(RejectionReason.UNREALISTIC_SPEED, fix)

                    speed_kmh = increment_km / (elapsed_s / 3600)
                    if speed_kmh > self._speed_ceiling(elapsed_s):
                        return self._reject(RejectionReason.UNREALISTIC_SPEED, fix)

                    instant_pace = elapsed_s / increment_km

            cumulative_km = (previous.cumulative_distance_km if previous else 0.0) + increment_km
            smoothed = self._pace.update(instant_pace, fix.timestamp_ms, cumulative_km)

            sample = Sample(
                index=len(self._samples),
                lat=fix.lat,
                lon=fix.lon,
                timestamp_ms=fix.timestamp_ms,
                cumulative_distance_km=cumulative_km,
                instant_pace=instant_pace,
                smoothed_pace=smoothed,
                elevation_m=_finite_or_none(fix.altitude_m),
                accuracy_m=fix.accuracy_m,
            )
            self._samples.append(sample)

            new_laps = build_laps(
                self._samples,
                self._laps,
                self.config.split_distance_km,
                self.config.min_elevation_change_m,
            )
            self._laps.extend(new_laps)

            if previous is not None:
                self._accumulate_elevation(previous.elevation_m, sample.elevation_m)

            self._update_totals()
            self._publish()

            self._events.emit("on_sample", sample)
            for lap in new_laps:
                logger.info(
                    f"Session {self._id}: lap {lap.index} completed "
                    f"({lap.distance_km:.3f} km in {lap.duration_s:.0f}s)"
                )
                self._events.emit("on_split", lap)
            self._events.emit("on_stats_update", self._totals)

            return sample

    def _speed_ceiling(self, elapsed_s: float) -> float:
        if elapsed_s < SHORT_INTERVAL_SECONDS:
            return self.config.short_interval_max_speed_kmh
        if elapsed_s < MEDIUM_INTERVAL_SECONDS:
            return self.config.medium_interval_max_speed_kmh
        return self.config.max_speed_kmh

    def _reject(self, reason: RejectionReason, fix: Fix) -> None:
        self._rejections[reason] += 1
        logger.debug(
            f"Session {self._id}: rejected fix ({fix.lat}, {fix.lon}) "
            f"@{fix.timestamp_ms}: {reason.value}"
        )
        self._publish()
        self._events.emit("on_sample_rejected", reason)
        return None

    def _accumulate_elevation(
        self,
        previous_m: Optional[float],
        current_m: Optional[float]
    ) -> None:
        if previous_m is None or current_m is None:
            return
        gain, loss = calculate_elevation_changes(
            [previous_m, current_m], self.config.min_elevation_change_m
        )
        self._elevation_gain_m += gain
        self._elevation_loss_m += loss

    # =========================================================================
    # Elevation refinement
    # =========================================================================

    def samples_missing_elevation(self) -> List[Sample]:
        """Samples that still have no elevation."""
        return [s for s in self._snapshot.samples if s.elevation_m is None]

    def apply_elevations(
        self,
        elevations: Dict[int, Optional[float]],
        session_id: Optional[str] = None
    ) -> int:
        """
        Fill in elevations looked up after the fact.

        Only samples without an elevation are touched. Distance and laps
        are never changed; total gain/loss is recomputed.

        Args:
            elevations: sample index -> elevation in meters (None = unknown)
            session_id: If given, ignore results meant for an earlier session

        Returns:
            Number of samples updated
        """
        with self._lock:
            if session_id is not None and session_id != self._id:
                logger.debug(f"Dropping elevations for stale session {session_id}")
                return 0

            updated = 0
            for index, elevation_m in elevations.items():
                elevation_m = _finite_or_none(elevation_m)
                if elevation_m is None or not 0 <= index < len(self._samples):
                    continue
                sample = self._samples[index]
                if sample.elevation_m is not None:
                    continue
                self._samples[index] = replace(sample, elevation_m=elevation_m)
                updated += 1

            if updated:
                self._elevation_gain_m, self._elevation_loss_m = calculate_elevation_changes(
                    [s.elevation_m for s in self._samples],
                    self.config.min_elevation_change_m,
                )
                self._update_totals()
                self._publish()
                self._events.emit("on_stats_update", self._totals)

            return updated

    # =========================================================================
    # Totals and stats
    # =========================================================================

    def _update_totals(self) -> None:
        distance_km = self._samples[-1].cumulative_distance_km if self._samples else 0.0
        now = self._stopped_at_ms if self._stopped_at_ms is not None else self._clock()
        duration_s = moving_duration_s(
            self._started_at_ms,
            self._paused_total_ms,
            self._paused_at_ms,
            self._stopped_at_ms,
            now,
        )

        self._totals = Totals(
            distance_km=distance_km,
            duration_s=duration_s,
            elevation_gain_m=self._elevation_gain_m,
            elevation_loss_m=self._elevation_loss_m,
            avg_pace=_avg_pace(distance_km, duration_s),
            calories=_calories(self.profile, distance_km, duration_s),
        )

    def _build_snapshot(self) -> SessionSnapshot:
        return SessionSnapshot(
            session_id=self._id,
            unit=self.config.unit,
            split_distance_km=self.config.split_distance_km,
            state=self._state,
            started_at_ms=self._started_at_ms,
            paused_total_ms=self._paused_total_ms,
            paused_at_ms=self._paused_at_ms,
            stopped_at_ms=self._stopped_at_ms,
            samples=tuple(self._samples),
            laps=tuple(self._laps),
            totals=self._totals,
            rolling_pace=self._pace.rolling_pace(),
            rejected_samples=sum(self._rejections.values()),
        )

    def _publish(self) -> None:
        self._snapshot = self._build_snapshot()

    def get_stats(self, profile: Optional[UserProfile] = None) -> RunningStats:
        """
        Live statistics computed from the latest snapshot.

        Args:
            profile: Body data for calories (session profile if None)
        """
        snap = self._snapshot
        profile = profile or self.profile

        duration_s = snap.duration_s(self._clock())
        distance_km = snap.totals.distance_km
        avg_pace = _avg_pace(distance_km, duration_s)
        avg_speed = distance_km / (duration_s / 3600) if duration_s > 0 else 0.0

        last = snap.last_sample
        current_pace = last.smoothed_pace if last and last.smoothed_pace else avg_pace

        if self.sensor is not None:
            gps_quality = self.sensor.signal_quality
        else:
            gps_quality = SignalQuality.UNAVAILABLE

        return RunningStats(
            distance_km=distance_km,
            duration_s=duration_s,
            avg_speed_kmh=avg_speed,
            avg_pace=avg_pace,
            current_pace=current_pace,
            rolling_pace=snap.rolling_pace,
            calories=_calories(profile, distance_km, duration_s),
            sample_count=len(snap.samples),
            elevation_gain_m=snap.totals.elevation_gain_m,
            elevation_loss_m=snap.totals.elevation_loss_m,
            total_laps=len(snap.laps),
            current_lap=len(snap.laps) + 1,
            gps_quality=gps_quality,
        )

    def split_markers(self) -> List[SplitMarker]:
        snap = self._snapshot
        return split_markers(snap.samples, snap.laps, snap.split_distance_km)


def _avg_pace(distance_km: float, duration_s: float) -> Optional[float]:
    if distance_km <= 0 or duration_s <= 0:
        return None
    return duration_s / distance_km


def _calories(profile: UserProfile, distance_km: float, duration_s: float) -> float:
    if duration_s <= 0:
        return 0.0
    hours = duration_s / 3600
    return estimate_running_calories(
        weight_kg=profile.weight_kg,
        speed_kmh=distance_km / hours,
        duration_hours=hours,
        age=profile.age,
        sex=profile.sex,
    )
