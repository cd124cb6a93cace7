"""
Session schemas.

Pydantic schemas for API request/response serialization.
"""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from runtrack.shared.constants import (
    DEFAULT_AGE,
    DEFAULT_WEIGHT_KG,
    DistanceUnit,
    SignalQuality,
    Sex,
)
from runtrack.shared.formatters import format_duration, format_pace
from runtrack.features.sensor.models import Fix

from .models import RunningStats, SessionConfig, SessionSnapshot, UserProfile


class ProfileIn(BaseModel):
    """Body data for the calorie estimate."""
    weight_kg: float = Field(default=DEFAULT_WEIGHT_KG, gt=0)
    age: int = Field(default=DEFAULT_AGE, ge=0, le=120)
    sex: Sex = Sex.MALE

    def to_profile(self) -> UserProfile:
        return UserProfile(weight_kg=self.weight_kg, age=self.age, sex=self.sex)


class SessionCreateRequest(BaseModel):
    """Request to open a new session."""
    unit: DistanceUnit = DistanceUnit.KM
    split_distance_km: Optional[float] = Field(
        default=None, description="Override the 1 km / 1 mi split"
    )
    max_accuracy_m: Optional[float] = None
    max_speed_kmh: Optional[float] = None
    profile: Optional[ProfileIn] = None

    def to_config(self) -> SessionConfig:
        overrides = {"unit": self.unit, "split_distance_km": self.split_distance_km}
        if self.max_accuracy_m is not None:
            overrides["max_accuracy_m"] = self.max_accuracy_m
        if self.max_speed_kmh is not None:
            overrides["max_speed_kmh"] = self.max_speed_kmh
        return SessionConfig.from_settings(**overrides)


class FixIn(BaseModel):
    """
    One raw fix.

    Coordinates are not range-checked here: out-of-range fixes reach the
    engine and are counted as rejected.
    """
    lat: float
    lon: float
    timestamp_ms: int
    accuracy_m: Optional[float] = None
    altitude_m: Optional[float] = None
    speed_mps: Optional[float] = None

    def to_fix(self) -> Fix:
        return Fix(
            lat=self.lat,
            lon=self.lon,
            timestamp_ms=self.timestamp_ms,
            accuracy_m=self.accuracy_m,
            altitude_m=self.altitude_m,
            speed_mps=self.speed_mps,
        )


class FixBatchRequest(BaseModel):
    fixes: List[FixIn] = Field(..., max_length=1000)


class TotalsOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    distance_km: float
    duration_s: float
    elevation_gain_m: float
    elevation_loss_m: float
    avg_pace: Optional[float] = None
    calories: float


class LapOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    index: int
    start_sample_index: int
    end_sample_index: int
    distance_km: float
    duration_s: float
    avg_pace: Optional[float] = None
    elevation_gain_m: float
    elevation_loss_m: float
    completed_at_ms: int


class SampleOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    index: int
    lat: float
    lon: float
    timestamp_ms: int
    cumulative_distance_km: float
    instant_pace: Optional[float] = None
    smoothed_pace: Optional[float] = None
    elevation_m: Optional[float] = None
    accuracy_m: Optional[float] = None


class SplitMarkerOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    lat: float
    lon: float
    distance_km: float
    lap_index: int


class FixBatchResponse(BaseModel):
    accepted: int
    rejected: int
    distance_km: float
    completed_laps: List[LapOut] = Field(default_factory=list)


class SessionResponse(BaseModel):
    """Session state summary."""
    session_id: str
    unit: DistanceUnit
    split_distance_km: float
    state: str
    started_at_ms: Optional[int] = None
    paused_total_ms: int
    sample_count: int
    lap_count: int
    rejected_samples: int
    totals: TotalsOut

    @classmethod
    def from_snapshot(cls, snap: SessionSnapshot) -> "SessionResponse":
        return cls(
            session_id=snap.session_id,
            unit=snap.unit,
            split_distance_km=snap.split_distance_km,
            state=snap.state.value,
            started_at_ms=snap.started_at_ms,
            paused_total_ms=snap.paused_total_ms,
            sample_count=len(snap.samples),
            lap_count=len(snap.laps),
            rejected_samples=snap.rejected_samples,
            totals=TotalsOut.model_validate(snap.totals),
        )


class StatsOut(BaseModel):
    """Live statistics with display strings."""
    model_config = ConfigDict(from_attributes=True)

    distance_km: float
    duration_s: float
    avg_speed_kmh: float
    avg_pace: Optional[float] = None
    current_pace: Optional[float] = None
    rolling_pace: Optional[float] = None
    calories: float
    sample_count: int
    elevation_gain_m: float
    elevation_loss_m: float
    total_laps: int
    current_lap: int
    gps_quality: SignalQuality
    duration_formatted: str = ""
    avg_pace_formatted: str = ""
    current_pace_formatted: str = ""

    @classmethod
    def from_stats(cls, stats: RunningStats, unit: DistanceUnit) -> "StatsOut":
        out = cls.model_validate(stats)
        out.duration_formatted = format_duration(stats.duration_s)
        out.avg_pace_formatted = format_pace(stats.avg_pace, unit)
        out.current_pace_formatted = format_pace(stats.current_pace, unit)
        return out
