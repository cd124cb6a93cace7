"""
Fix channel.

A bounded queue between a location source and the single consumer task
that owns a session. Fixes are drained strictly one at a time in arrival
order, so the engine never sees concurrent writers.
"""

import asyncio
import logging
from typing import Optional

from runtrack.features.sensor.adapter import SensorAdapter, WatchHandle
from runtrack.features.sensor.models import Fix, SensorOptions
from runtrack.features.session.engine import SessionEngine

logger = logging.getLogger(__name__)

DEFAULT_CHANNEL_SIZE = 256

_CLOSE = object()


class FixChannel:
    """
    Bounded fix queue drained into a SessionEngine.

    Usage:
        channel = FixChannel(engine)
        consumer = asyncio.create_task(channel.run())
        handle = channel.attach(adapter, threadsafe=True)
        ...
        adapter.stop_watch(handle)
        channel.close()
        await consumer
    """

    def __init__(self, engine: SessionEngine, maxsize: int = DEFAULT_CHANNEL_SIZE):
        self.engine = engine
        self.maxsize = maxsize
        self._queue: asyncio.Queue = asyncio.Queue(maxsize=maxsize)
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._closed = False
        self.dropped = 0
        self.processed = 0

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def size(self) -> int:
        return self._queue.qsize()

    def offer(self, fix: Fix) -> bool:
        """
        Enqueue without blocking. Must run on the channel's loop thread.

        Returns:
            False if the channel is closed or full (the fix is dropped)
        """
        if self._closed:
            return False
        try:
            self._queue.put_nowait(fix)
        except asyncio.QueueFull:
            self.dropped += 1
            logger.warning(f"Fix channel full ({self.maxsize}), dropping fix")
            return False
        return True

    def offer_threadsafe(self, fix: Fix) -> None:
        """Enqueue from a platform thread."""
        if self._loop is None:
            raise RuntimeError("FixChannel is not running")
        self._loop.call_soon_threadsafe(self.offer, fix)

    def attach(
        self,
        adapter: SensorAdapter,
        options: Optional[SensorOptions] = None,
        threadsafe: bool = False
    ) -> WatchHandle:
        """Route a sensor watch into this channel."""
        if threadsafe:
            self._loop = asyncio.get_running_loop()
            return adapter.start_watch(self.offer_threadsafe, options)
        return adapter.start_watch(self.offer, options)

    def close(self) -> None:
        """Stop accepting fixes; run() returns after draining the queue."""
        if self._closed:
            return
        self._closed = True
        try:
            self._queue.put_nowait(_CLOSE)
        except asyncio.QueueFull:
            # run() notices _closed once the queue drains
            pass

    async def run(self) -> int:
        """
        Drain fixes into the engine until closed.

        Returns:
            Number of fixes handed to the engine
        """
        self._loop = asyncio.get_running_loop()

        while not (self._closed and self._queue.empty()):
            item = await self._queue.get()
            if item is _CLOSE:
                break
            self.engine.add_sample(item)
            self.processed += 1

        logger.info(
            f"Fix channel for {self.engine.session_id} closed "
            f"(processed={self.processed}, dropped={self.dropped})"
        )
        return self.processed
