"""
Elevation lookup module.

Usage:
    from runtrack.features.elevation import ElevationClient, ElevationRefiner

Components:
- ElevationClient: Batched, cached Open-Elevation lookups
- ElevationRefiner: Back-fills sample elevations for a session
"""

from .schemas import (
    ElevationPoint,
    ElevationResult,
    ElevationLookupRequest,
    ElevationLookupResponse,
)
from .client import ElevationClient, ElevationError, ElevationLookupError, get_elevation_client
from .refiner import ElevationRefiner

__all__ = [
    # Schemas
    "ElevationPoint",
    "ElevationResult",
    "ElevationLookupRequest",
    "ElevationLookupResponse",
    # Client
    "ElevationClient",
    "ElevationError",
    "ElevationLookupError",
    "get_elevation_client",
    # Refiner
    "ElevationRefiner",
]
