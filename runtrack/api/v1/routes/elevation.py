"""
Elevation Routes

Batched elevation lookup for clients that record without altitude.
"""

from fastapi import APIRouter, Depends

from runtrack.features.elevation import (
    ElevationClient,
    ElevationLookupRequest,
    ElevationLookupResponse,
    get_elevation_client,
)

router = APIRouter()


@router.post("", response_model=ElevationLookupResponse)
async def lookup_elevations(
    request: ElevationLookupRequest,
    client: ElevationClient = Depends(get_elevation_client)
):
    """
    Look up elevations for a list of coordinates.

    Points the upstream API could not resolve come back with
    elevation_m=null and success=false.
    """
    results = await client.get_elevations(request.locations)
    return ElevationLookupResponse(
        success=all(r.elevation_m is not None for r in results),
        results=results,
        count=len(results),
    )
