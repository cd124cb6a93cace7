"""
Elevation refinement.

Listens to a session, remembers samples that arrived without an
altitude, and looks them up later. Lookups never gate sample acceptance;
results only refine total elevation gain/loss.
"""

import asyncio
import logging
import threading
from typing import List, Optional, Tuple

from runtrack.features.session.engine import SessionEngine
from runtrack.features.session.events import SessionListener
from runtrack.features.session.models import Sample

from .client import ElevationClient
from .schemas import ElevationPoint

logger = logging.getLogger(__name__)

# (session_id, sample_index, lat, lon)
PendingPoint = Tuple[str, int, float, float]


class ElevationRefiner(SessionListener):
    """
    Fire-and-forget elevation lookups for a session.

    Usage:
        refiner = ElevationRefiner(engine, ElevationClient())
        ...
        await refiner.flush()            # on demand
        await refiner.start(5.0)         # or periodically
        await refiner.stop()
    """

    def __init__(self, engine: SessionEngine, client: ElevationClient):
        self.engine = engine
        self.client = client
        self._pending: List[PendingPoint] = []
        # on_sample runs on the engine's thread, flush() on the event loop
        self._pending_lock = threading.Lock()
        self._running = False
        self._task: Optional[asyncio.Task] = None
        # Keep strong references to scheduled flushes to prevent GC
        self._flush_tasks: set[asyncio.Task] = set()
        engine.add_listener(self)

    @property
    def pending(self) -> int:
        with self._pending_lock:
            return len(self._pending)

    def on_sample(self, sample: Sample) -> None:
        if sample.elevation_m is not None:
            return
        with self._pending_lock:
            self._pending.append(
                (self.engine.session_id, sample.index, sample.lat, sample.lon)
            )

    async def flush(self) -> int:
        """
        Look up every pending sample and apply the results.

        Returns:
            Number of samples that got an elevation
        """
        with self._pending_lock:
            batch, self._pending = self._pending, []

        current_id = self.engine.session_id
        batch = [p for p in batch if p[0] == current_id]
        if not batch:
            return 0

        try:
            results = await self.client.get_elevations(
                [ElevationPoint(lat=lat, lon=lon) for _, _, lat, lon in batch]
            )
        except asyncio.CancelledError:
            # Put the batch back so the next flush retries it
            with self._pending_lock:
                self._pending[:0] = batch
            raise

        elevations = {
            index: result.elevation_m
            for (_, index, _, _), result in zip(batch, results)
        }

        updated = self.engine.apply_elevations(elevations, session_id=current_id)
        failed = sum(1 for r in results if r.elevation_m is None)
        logger.debug(
            f"Elevation refinement for {current_id}: {updated} updated, {failed} unavailable"
        )
        return updated

    def schedule_flush(self) -> asyncio.Task:
        """Start a flush without waiting for it. Needs a running loop."""
        task = asyncio.create_task(self.flush())
        self._flush_tasks.add(task)
        task.add_done_callback(self._flush_tasks.discard)
        return task

    async def start(self, interval_seconds: float = 5.0) -> None:
        """Start the periodic flush loop."""
        if self._running:
            return

        self._running = True
        self._task = asyncio.create_task(self._run_loop(interval_seconds))
        logger.info("Elevation refinement started")

    async def stop(self) -> None:
        """Stop the loop and flush what is left."""
        self._running = False
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        await self.flush()
        logger.info("Elevation refinement stopped")

    async def _run_loop(self, interval_seconds: float) -> None:
        while self._running:
            try:
                await self.flush()
            except Exception as e:
                logger.error(f"Elevation refinement error: {e}")

            await asyncio.sleep(interval_seconds)
