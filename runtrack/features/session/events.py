"""
Session events.

Consumers subscribe a SessionListener and override the hooks they care
about. Events fire synchronously on the thread that processed the
triggering call.
"""

import logging
from typing import List

from .errors import RejectionReason
from .models import Lap, Sample, Totals

logger = logging.getLogger(__name__)


class SessionListener:
    """Base listener; every hook is a no-op."""

    def on_sample(self, sample: Sample) -> None:
        pass

    def on_split(self, lap: Lap) -> None:
        pass

    def on_pause(self) -> None:
        pass

    def on_resume(self) -> None:
        pass

    def on_stats_update(self, totals: Totals) -> None:
        pass

    def on_sample_rejected(self, reason: RejectionReason) -> None:
        pass


class EventDispatcher:
    """
    Fan-out of session events to listeners.

    A failing listener is logged and skipped so one broken consumer
    cannot corrupt the session or starve the others.
    """

    def __init__(self):
        self._listeners: List[SessionListener] = []

    def add(self, listener: SessionListener) -> None:
        if listener not in self._listeners:
            self._listeners.append(listener)

    def remove(self, listener: SessionListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def __len__(self) -> int:
        return len(self._listeners)

    def emit(self, event: str, *args) -> None:
        """Call hook `event` on every listener."""
        for listener in list(self._listeners):
            try:
                getattr(listener, event)(*args)
            except Exception:
                logger.exception(f"Session listener {listener!r} failed in {event}")
