"""
Elevation lookup schemas.

Pydantic schemas for the lookup API and the client's results.
"""

from typing import List, Optional

from pydantic import BaseModel, Field


class ElevationPoint(BaseModel):
    """A coordinate to look up."""
    lat: float = Field(..., ge=-90, le=90)
    lon: float = Field(..., ge=-180, le=180)


class ElevationResult(BaseModel):
    """Lookup result. elevation_m is None when the lookup failed."""
    lat: float
    lon: float
    elevation_m: Optional[float] = None


class ElevationLookupRequest(BaseModel):
    locations: List[ElevationPoint] = Field(..., max_length=1000)


class ElevationLookupResponse(BaseModel):
    success: bool
    results: List[ElevationResult]
    count: int
