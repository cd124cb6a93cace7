"""
In-memory session registry.

Keeps live SessionEngine objects for the HTTP API. Nothing is
persisted: a restart drops every session.
"""

import logging
import threading
from typing import Callable, Dict, List, Optional

from .engine import SessionEngine
from .models import SessionConfig, UserProfile

logger = logging.getLogger(__name__)


class SessionRegistry:
    """Thread-safe map of session id -> SessionEngine."""

    def __init__(self, clock: Optional[Callable[[], int]] = None, sensor=None):
        self._sessions: Dict[str, SessionEngine] = {}
        self._lock = threading.Lock()
        self._clock = clock
        self._sensor = sensor

    def create(
        self,
        config: Optional[SessionConfig] = None,
        profile: Optional[UserProfile] = None
    ) -> SessionEngine:
        """Create and register a new idle session."""
        engine = SessionEngine(
            config=config,
            profile=profile,
            clock=self._clock,
            sensor=self._sensor,
        )
        with self._lock:
            self._sessions[engine.session_id] = engine
        logger.info(f"Registered session {engine.session_id}")
        return engine

    def get(self, session_id: str) -> Optional[SessionEngine]:
        with self._lock:
            return self._sessions.get(session_id)

    def rekey(self, old_id: str, engine: SessionEngine) -> None:
        """Move an engine to its new id after reset()."""
        with self._lock:
            self._sessions.pop(old_id, None)
            self._sessions[engine.session_id] = engine

    def remove(self, session_id: str) -> bool:
        with self._lock:
            removed = self._sessions.pop(session_id, None)
        if removed:
            logger.info(f"Removed session {session_id}")
        return removed is not None

    def list_ids(self) -> List[str]:
        with self._lock:
            return list(self._sessions)

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)


# Global instance (lazy initialization)
_registry: Optional[SessionRegistry] = None


def get_session_registry() -> SessionRegistry:
    """Get or create the global SessionRegistry."""
    global _registry
    if _registry is None:
        _registry = SessionRegistry()
    return _registry
