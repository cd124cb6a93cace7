"""
Location provider abstraction.

The platform's location primitive (browser geolocation, a phone SDK, a
serial GPS) is hidden behind LocationProvider. The adapter only talks to
this interface, so everything above it can be tested without a device.
"""

import itertools
import logging
from abc import ABC, abstractmethod
from collections import deque
from typing import Callable, Dict, Iterable, Optional, Tuple, Union

from .errors import AcquisitionTimeout, PermissionDenied, SensorError, SensorUnavailable
from .models import Fix, SensorOptions

logger = logging.getLogger(__name__)

FixCallback = Callable[[Fix], None]
ErrorCallback = Callable[[SensorError], None]


class LocationProvider(ABC):
    """Platform location primitive."""

    @abstractmethod
    def is_available(self) -> bool:
        """Whether the platform has location capability at all."""

    @abstractmethod
    def request_fix(self, options: SensorOptions) -> Fix:
        """
        Block until one fix is available.

        Raises:
            SensorUnavailable: No location capability
            PermissionDenied: Access refused
            AcquisitionTimeout: Nothing within options.timeout_seconds
        """

    @abstractmethod
    def subscribe(
        self,
        on_fix: FixCallback,
        on_error: ErrorCallback,
        options: SensorOptions
    ) -> int:
        """Start pushing fixes to on_fix. Returns a subscription token."""

    @abstractmethod
    def unsubscribe(self, token: int) -> None:
        """Stop pushing to the subscription. Unknown tokens are ignored."""


class ReplayLocationProvider(LocationProvider):
    """
    Deterministic provider backed by a scripted list of fixes.

    Items may be Fix objects or SensorError instances; errors are raised
    from request_fix() or passed to subscribers' on_error during play().

    Usage:
        provider = ReplayLocationProvider(fixes)
        handle = adapter.start_watch(engine.add_sample)
        provider.play()
    """

    def __init__(
        self,
        items: Optional[Iterable[Union[Fix, SensorError]]] = None,
        available: bool = True,
        permission_granted: bool = True
    ):
        self._pending: deque = deque(items or [])
        self.available = available
        self.permission_granted = permission_granted
        self._subscribers: Dict[int, Tuple[FixCallback, ErrorCallback]] = {}
        self._tokens = itertools.count(1)
        self.requests = 0

    def push(self, item: Union[Fix, SensorError]) -> None:
        """Queue another fix or error."""
        self._pending.append(item)

    @property
    def pending(self) -> int:
        return len(self._pending)

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def is_available(self) -> bool:
        return self.available

    def request_fix(self, options: SensorOptions) -> Fix:
        self.requests += 1

        if not self.available:
            raise SensorUnavailable("Location is not available on this device")
        if not self.permission_granted:
            raise PermissionDenied("Location permission was denied")
        if not self._pending:
            raise AcquisitionTimeout(
                f"No fix within {options.timeout_seconds:.0f}s"
            )

        item = self._pending.popleft()
        if isinstance(item, SensorError):
            raise item
        return item

    def subscribe(
        self,
        on_fix: FixCallback,
        on_error: ErrorCallback,
        options: SensorOptions
    ) -> int:
        if not self.available:
            raise SensorUnavailable("Location is not available on this device")
        if not self.permission_granted:
            raise PermissionDenied("Location permission was denied")

        token = next(self._tokens)
        self._subscribers[token] = (on_fix, on_error)
        logger.debug(f"Replay subscription {token} registered")
        return token

    def unsubscribe(self, token: int) -> None:
        self._subscribers.pop(token, None)

    def emit(self, item: Union[Fix, SensorError]) -> None:
        """Deliver one item to every current subscriber."""
        for on_fix, on_error in list(self._subscribers.values()):
            if isinstance(item, SensorError):
                on_error(item)
            else:
                on_fix(item)

    def play(self, limit: Optional[int] = None) -> int:
        """
        Deliver queued items serially, in order.

        Args:
            limit: Stop after this many items (None = drain the queue)

        Returns:
            Number of items delivered
        """
        delivered = 0
        while self._pending and (limit is None or delivered < limit):
            self.emit(self._pending.popleft())
            delivered += 1
        return delivered
