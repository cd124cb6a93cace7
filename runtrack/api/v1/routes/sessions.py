"""
Session Routes

Endpoints for driving live running sessions. Sessions live in memory
only.
"""

from typing import List

from fastapi import APIRouter, Depends, HTTPException

from runtrack.features.session import (
    InvalidConfiguration,
    SessionEngine,
    SessionRegistry,
    get_session_registry,
)
from runtrack.features.session.schemas import (
    FixBatchRequest,
    FixBatchResponse,
    LapOut,
    SampleOut,
    SessionCreateRequest,
    SessionResponse,
    SplitMarkerOut,
    StatsOut,
)

router = APIRouter()


def _get_engine(session_id: str, registry: SessionRegistry) -> SessionEngine:
    engine = registry.get(session_id)
    if engine is None:
        raise HTTPException(status_code=404, detail="Session not found")
    return engine


@router.post("", response_model=SessionResponse, status_code=201)
async def create_session(
    request: SessionCreateRequest,
    registry: SessionRegistry = Depends(get_session_registry)
):
    """Open a new idle session."""
    try:
        config = request.to_config()
    except InvalidConfiguration as e:
        raise HTTPException(status_code=400, detail=str(e))

    profile = request.profile.to_profile() if request.profile else None
    engine = registry.create(config=config, profile=profile)
    return SessionResponse.from_snapshot(engine.snapshot())


@router.get("/{session_id}", response_model=SessionResponse)
async def get_session(
    session_id: str,
    registry: SessionRegistry = Depends(get_session_registry)
):
    """Get session state and totals."""
    engine = _get_engine(session_id, registry)
    return SessionResponse.from_snapshot(engine.snapshot())


@router.delete("/{session_id}")
async def delete_session(
    session_id: str,
    registry: SessionRegistry = Depends(get_session_registry)
):
    """Forget a session."""
    if not registry.remove(session_id):
        raise HTTPException(status_code=404, detail="Session not found")
    return {"success": True}


# =============================================================================
# Lifecycle
# =============================================================================

@router.post("/{session_id}/start", response_model=SessionResponse)
async def start_session(
    session_id: str,
    registry: SessionRegistry = Depends(get_session_registry)
):
    """Start (or resume) a session."""
    engine = _get_engine(session_id, registry)
    engine.start()
    return SessionResponse.from_snapshot(engine.snapshot())


@router.post("/{session_id}/pause", response_model=SessionResponse)
async def pause_session(
    session_id: str,
    registry: SessionRegistry = Depends(get_session_registry)
):
    engine = _get_engine(session_id, registry)
    engine.pause()
    return SessionResponse.from_snapshot(engine.snapshot())


@router.post("/{session_id}/resume", response_model=SessionResponse)
async def resume_session(
    session_id: str,
    registry: SessionRegistry = Depends(get_session_registry)
):
    engine = _get_engine(session_id, registry)
    engine.resume()
    return SessionResponse.from_snapshot(engine.snapshot())


@router.post("/{session_id}/stop", response_model=SessionResponse)
async def stop_session(
    session_id: str,
    registry: SessionRegistry = Depends(get_session_registry)
):
    """Stop a session and return the final state."""
    engine = _get_engine(session_id, registry)
    return SessionResponse.from_snapshot(engine.stop())


@router.post("/{session_id}/reset", response_model=SessionResponse)
async def reset_session(
    session_id: str,
    registry: SessionRegistry = Depends(get_session_registry)
):
    """
    Reset a session.

    The session gets a new id; the old id stops resolving.
    """
    engine = _get_engine(session_id, registry)
    engine.reset()
    registry.rekey(session_id, engine)
    return SessionResponse.from_snapshot(engine.snapshot())


# =============================================================================
# Fixes and stats
# =============================================================================

@router.post("/{session_id}/fixes", response_model=FixBatchResponse)
async def add_fixes(
    session_id: str,
    request: FixBatchRequest,
    registry: SessionRegistry = Depends(get_session_registry)
):
    """
    Feed fixes in arrival order.

    Rejected fixes are counted, never reported as errors.
    """
    engine = _get_engine(session_id, registry)
    laps_before = len(engine.laps)

    accepted = 0
    for fix_in in request.fixes:
        if engine.add_sample(fix_in.to_fix()) is not None:
            accepted += 1

    snap = engine.snapshot()
    return FixBatchResponse(
        accepted=accepted,
        rejected=len(request.fixes) - accepted,
        distance_km=snap.totals.distance_km,
        completed_laps=[LapOut.model_validate(lap) for lap in snap.laps[laps_before:]],
    )


@router.get("/{session_id}/stats", response_model=StatsOut)
async def get_stats(
    session_id: str,
    registry: SessionRegistry = Depends(get_session_registry)
):
    """Live statistics."""
    engine = _get_engine(session_id, registry)
    return StatsOut.from_stats(engine.get_stats(), engine.unit)


@router.get("/{session_id}/laps", response_model=List[LapOut])
async def get_laps(
    session_id: str,
    registry: SessionRegistry = Depends(get_session_registry)
):
    engine = _get_engine(session_id, registry)
    return [LapOut.model_validate(lap) for lap in engine.laps]


@router.get("/{session_id}/samples", response_model=List[SampleOut])
async def get_samples(
    session_id: str,
    offset: int = 0,
    registry: SessionRegistry = Depends(get_session_registry)
):
    """Samples from `offset` on (for incremental map updates)."""
    engine = _get_engine(session_id, registry)
    return [SampleOut.model_validate(s) for s in engine.samples[max(0, offset):]]


@router.get("/{session_id}/splits/markers", response_model=List[SplitMarkerOut])
async def get_split_markers(
    session_id: str,
    registry: SessionRegistry = Depends(get_session_registry)
):
    engine = _get_engine(session_id, registry)
    return [SplitMarkerOut.model_validate(m) for m in engine.split_markers()]
