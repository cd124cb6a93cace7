"""
Application Configuration

Uses Pydantic Settings for type-safe configuration.
"""

import logging

from pydantic_settings import BaseSettings
from pydantic import Field, field_validator, ConfigDict

from runtrack.shared.constants import (
    DistanceUnit,
    DEFAULT_SESSION_MAX_ACCURACY_M,
    DEFAULT_MAX_SPEED_KMH,
    DEFAULT_MEDIUM_INTERVAL_MAX_SPEED_KMH,
    DEFAULT_SHORT_INTERVAL_MAX_SPEED_KMH,
    DEFAULT_PACE_ALPHA,
    DEFAULT_PACE_WINDOW_SECONDS,
    DEFAULT_MIN_ELEVATION_CHANGE_M,
)


class Settings(BaseSettings):
    """Application settings with validation."""

    # === Core ===
    debug: bool = Field(default=False, description="Enable debug mode")
    log_level: str = Field(default="INFO", description="Logging level")

    # === Elevation API ===
    elevation_api_url: str = Field(
        default="https://api.open-elevation.com/api/v1/lookup",
        description="Elevation API endpoint"
    )
    elevation_timeout_seconds: float = Field(default=10.0)
    elevation_batch_size: int = Field(default=100, description="Max points per lookup call")
    elevation_cache_precision: int = Field(
        default=4,
        description="Decimal places coordinates are rounded to for caching (~11 m)"
    )
    elevation_cache_max_size: int = Field(default=10000)
    elevation_max_retries: int = Field(default=3)
    elevation_retry_delay_seconds: float = Field(default=1.0)

    # === Tracking defaults ===
    default_unit: DistanceUnit = Field(default=DistanceUnit.KM)
    max_accuracy_m: float = Field(
        default=DEFAULT_SESSION_MAX_ACCURACY_M,
        description="Samples with worse accuracy are rejected"
    )
    max_speed_kmh: float = Field(
        default=DEFAULT_MAX_SPEED_KMH,
        description="Realistic speed ceiling for intervals of 10 s or more"
    )
    medium_interval_max_speed_kmh: float = Field(
        default=DEFAULT_MEDIUM_INTERVAL_MAX_SPEED_KMH,
        description="Speed ceiling for intervals of 3 to 10 s"
    )
    short_interval_max_speed_kmh: float = Field(
        default=DEFAULT_SHORT_INTERVAL_MAX_SPEED_KMH,
        description="Speed ceiling for intervals under 3 s"
    )
    pace_alpha: float = Field(default=DEFAULT_PACE_ALPHA, description="EMA smoothing factor")
    pace_window_seconds: float = Field(default=DEFAULT_PACE_WINDOW_SECONDS)
    min_elevation_change_m: float = Field(default=DEFAULT_MIN_ELEVATION_CHANGE_M)

    @field_validator('default_unit', mode='before')
    @classmethod
    def normalize_unit(cls, v):
        """Accept 'KM', ' mi ' and similar spellings."""
        if isinstance(v, str):
            return v.strip().lower()
        return v

    @field_validator('log_level')
    @classmethod
    def check_log_level(cls, v: str) -> str:
        """Reject unknown logging levels early."""
        level = v.upper()
        if level not in logging.getLevelNamesMapping():
            raise ValueError(f"Unknown log level: {v}")
        return level

    model_config = ConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )


# Global settings instance
settings = Settings()
