"""
API Router v1

Combines all route modules.
"""

from fastapi import APIRouter

from runtrack.api.v1.routes import elevation, sessions

api_router = APIRouter()

api_router.include_router(sessions.router, prefix="/sessions", tags=["Sessions"])
api_router.include_router(elevation.router, prefix="/elevation", tags=["Elevation"])
