"""
Running session module.

Usage:
    from runtrack.features.session import SessionEngine, SessionConfig
    from runtrack.features.session import SessionListener

Components:
- SessionEngine: Lifecycle + distance/pace/lap/elevation/calorie pipeline
- SessionConfig: Per-session tracking options
- SessionListener: Event hooks (sample, split, pause, resume, stats, rejection)
- PaceSmoother: EMA and rolling-window pace
- build_laps: Split detection
- SessionRegistry: In-memory sessions for the API
"""

from .errors import SessionError, InvalidConfiguration, RejectionReason
from .models import (
    Sample,
    Lap,
    Totals,
    UserProfile,
    SessionConfig,
    SessionSnapshot,
    SessionState,
    RunningStats,
)
from .events import SessionListener, EventDispatcher
from .pace import PaceSmoother
from .splits import SplitMarker, build_laps, expected_lap_count, split_markers
from .engine import SessionEngine, wall_clock_ms
from .registry import SessionRegistry, get_session_registry

__all__ = [
    # Errors
    "SessionError",
    "InvalidConfiguration",
    "RejectionReason",
    # Models
    "Sample",
    "Lap",
    "Totals",
    "UserProfile",
    "SessionConfig",
    "SessionSnapshot",
    "SessionState",
    "RunningStats",
    # Events
    "SessionListener",
    "EventDispatcher",
    # Calculators
    "PaceSmoother",
    "SplitMarker",
    "build_laps",
    "expected_lap_count",
    "split_markers",
    # Engine
    "SessionEngine",
    "wall_clock_ms",
    # Registry
    "SessionRegistry",
    "get_session_registry",
]
