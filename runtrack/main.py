"""
RunTrack API

FastAPI application exposing live running sessions and elevation lookup.
"""

from contextlib import asynccontextmanager
import logging
import sys

from fastapi import FastAPI

from runtrack import __version__
from runtrack.config import settings
from runtrack.api.v1.router import api_router
from runtrack.features.session import get_session_registry


# === Logging Setup ===
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper()),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.StreamHandler(sys.stdout),
    ]
)
logger = logging.getLogger(__name__)


# === Lifespan ===
@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    logger.info("Starting RunTrack API...")
    yield
    logger.info(f"Shutting down with {len(get_session_registry())} live sessions...")


# === App Creation ===
app = FastAPI(
    title="RunTrack API",
    description="Real-time running session tracking with splits, pace and elevation",
    version=__version__,
    lifespan=lifespan,
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
)


# === Routes ===
app.include_router(api_router, prefix="/api/v1")


# === Health Check ===
@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "version": __version__}
