"""
Sensor Adapter

Produces trustworthy location fixes and hides platform/sensor flakiness
from the session engine.

Two modes:
- pull: get_current_fix() with bounded retries for low-accuracy fixes
- push: start_watch() with accuracy and minimum-movement filtering

GPS jitter is expected, not exceptional: filtered fixes are logged and
counted, never raised.
"""

import itertools
import logging
import threading
import time
from dataclasses import dataclass, field
from typing import Callable, Dict, Optional

from runtrack.shared.constants import SignalQuality
from runtrack.shared.geo import haversine_m

from .errors import AcquisitionTimeout, PermissionDenied, SensorError, SensorUnavailable
from .models import Fix, SensorOptions, SensorStatus, classify_signal
from .provider import LocationProvider

logger = logging.getLogger(__name__)


@dataclass
class WatchHandle:
    """Subscription handle returned by start_watch()."""
    watch_id: int
    options: SensorOptions
    provider_token: Optional[int] = None
    active: bool = True
    last_accepted: Optional[Fix] = field(default=None, repr=False)
    accepted: int = 0
    dropped: int = 0


class SensorAdapter:
    """
    Wraps a LocationProvider.

    Usage:
        adapter = SensorAdapter(provider)
        fix = adapter.get_current_fix()
        handle = adapter.start_watch(engine.add_sample)
        ...
        adapter.stop_watch(handle)
    """

    def __init__(
        self,
        provider: LocationProvider,
        options: Optional[SensorOptions] = None,
        sleep: Callable[[float], None] = time.sleep
    ):
        self.provider = provider
        self.options = options or SensorOptions()
        self._sleep = sleep

        # Guards status fields and watch handles. Reentrant so a fix
        # callback may stop its own watch.
        self._lock = threading.RLock()
        self._watches: Dict[int, WatchHandle] = {}
        self._watch_ids = itertools.count(1)

        self._available = provider.is_available()
        self._has_permission = False
        self._last_update_ms: Optional[int] = None
        self._signal_quality = SignalQuality.UNAVAILABLE
        self.dropped_fixes = 0

    # =========================================================================
    # Status
    # =========================================================================

    def status(self) -> SensorStatus:
        """Current availability, permission and signal classification."""
        with self._lock:
            return SensorStatus(
                available=self._available,
                has_permission=self._has_permission,
                is_tracking=any(h.active for h in self._watches.values()),
                last_update_ms=self._last_update_ms,
                signal_quality=self._signal_quality,
            )

    @property
    def signal_quality(self) -> SignalQuality:
        return self._signal_quality

    def _record_accepted(self, fix: Fix) -> None:
        self._has_permission = True
        self._available = True
        self._last_update_ms = fix.timestamp_ms
        self._signal_quality = classify_signal(fix.accuracy_m)

    def _record_error(self, error: SensorError) -> None:
        self._signal_quality = SignalQuality.UNAVAILABLE
        if isinstance(error, PermissionDenied):
            self._has_permission = False

    # =========================================================================
    # Pull mode
    # =========================================================================

    def get_current_fix(self, options: Optional[SensorOptions] = None) -> Fix:
        """
        Read one fix now.

        Low-accuracy fixes are retried up to options.max_retries times with
        options.retry_delay_seconds between attempts; when the budget is
        exhausted the last fix is accepted anyway. Timeouts share the same
        budget and are raised once it runs out.

        Raises:
            SensorUnavailable: No location capability
            PermissionDenied: Access refused
            AcquisitionTimeout: No fix in time (after retries)
        """
        options = options or self.options

        if not self.provider.is_available():
            with self._lock:
                self._available = False
                self._signal_quality = SignalQuality.UNAVAILABLE
            raise SensorUnavailable("Location is not available on this device")

        attempt = 0
        while True:
            try:
                fix = self.provider.request_fix(options)
            except SensorUnavailable:
                with self._lock:
                    self._available = False
                    self._signal_quality = SignalQuality.UNAVAILABLE
                raise
            except PermissionDenied as e:
                with self._lock:
                    self._record_error(e)
                raise
            except AcquisitionTimeout as e:
                with self._lock:
                    self._record_error(e)
                if attempt >= options.max_retries:
                    raise
                attempt += 1
                logger.warning(
                    f"Location timeout, retrying ({attempt}/{options.max_retries})"
                )
                self._sleep(options.retry_delay_seconds)
                continue

            if not (fix.has_valid_coordinates and fix.has_valid_accuracy):
                logger.warning(
                    f"Provider returned an invalid fix: {fix.lat}, {fix.lon} "
                    f"(accuracy {fix.accuracy_m})"
                )
                if attempt >= options.max_retries:
                    raise AcquisitionTimeout("No valid fix after retries")
                attempt += 1
                self._sleep(options.retry_delay_seconds)
                continue

            too_coarse = (
                fix.accuracy_m is not None
                and fix.accuracy_m > options.max_acceptable_accuracy_m
            )
            if too_coarse:
                if attempt < options.max_retries:
                    attempt += 1
                    logger.warning(
                        f"GPS accuracy too low ({fix.accuracy_m}m), "
                        f"retrying ({attempt}/{options.max_retries})"
                    )
                    self._sleep(options.retry_delay_seconds)
                    continue
                logger.warning(
                    f"GPS accuracy still low after {options.max_retries} retries, "
                    f"accepting {fix.accuracy_m}m fix"
                )

            with self._lock:
                self._record_accepted(fix)
            return fix

    # =========================================================================
    # Push mode
    # =========================================================================

    def start_watch(
        self,
        callback: Callable[[Fix], None],
        options: Optional[SensorOptions] = None,
        on_error: Optional[Callable[[SensorError], None]] = None
    ) -> WatchHandle:
        """
        Begin a push subscription.

        Each raw fix is forwarded to callback only if its accuracy is within
        max_acceptable_accuracy_m and it moved at least min_movement_m from
        the last accepted fix of this watch (the first fix always passes).

        Args:
            callback: Receives accepted fixes
            options: Watch options (adapter defaults if None)
            on_error: Receives provider errors during the watch

        Returns:
            WatchHandle for stop_watch()

        Raises:
            SensorUnavailable: No location capability
            PermissionDenied: Access refused at subscription time
        """
        options = options or self.options

        if not self.provider.is_available():
            with self._lock:
                self._available = False
            raise SensorUnavailable("Location is not available on this device")

        handle = WatchHandle(watch_id=next(self._watch_ids), options=options)

        def on_fix(fix: Fix) -> None:
            with self._lock:
                if not handle.active:
                    return
                if not self._accept(handle, fix):
                    handle.dropped += 1
                    self.dropped_fixes += 1
                    return
                handle.last_accepted = fix
                handle.accepted += 1
                self._record_accepted(fix)
                callback(fix)

        def on_provider_error(error: SensorError) -> None:
            with self._lock:
                if not handle.active:
                    return
                self._record_error(error)
                if on_error is not None:
                    on_error(error)
                else:
                    logger.warning(f"Location watch error: {error}")

        with self._lock:
            self._watches[handle.watch_id] = handle
            try:
                handle.provider_token = self.provider.subscribe(
                    on_fix, on_provider_error, options
                )
            except SensorError as e:
                handle.active = False
                del self._watches[handle.watch_id]
                self._record_error(e)
                raise

        logger.info(f"Location watch {handle.watch_id} started")
        return handle

    def _accept(self, handle: WatchHandle, fix: Fix) -> bool:
        """Apply the watch filters. Caller holds the lock."""
        options = handle.options

        if not fix.has_valid_coordinates:
            logger.warning(f"Skipping fix with invalid coordinates: {fix.lat}, {fix.lon}")
            return False

        if not fix.has_valid_accuracy:
            logger.warning(f"Skipping fix with invalid accuracy: {fix.accuracy_m}")
            return False

        if fix.accuracy_m is not None and fix.accuracy_m > options.max_acceptable_accuracy_m:
            logger.debug(f"Skipping fix with low accuracy: {fix.accuracy_m}m")
            return False

        last = handle.last_accepted
        if last is not None and options.min_movement_m > 0:
            moved_m = haversine_m(last.lat, last.lon, fix.lat, fix.lon)
            if moved_m < options.min_movement_m:
                logger.debug(
                    f"Skipping fix - moved {moved_m:.1f}m < {options.min_movement_m}m filter"
                )
                return False

        return True

    def stop_watch(self, handle: WatchHandle) -> None:
        """
        Cancel a subscription. Idempotent.

        Takes the delivery lock, so once this returns no further callback
        for the handle will run.
        """
        with self._lock:
            if not handle.active:
                return
            handle.active = False
            self._watches.pop(handle.watch_id, None)
            if handle.provider_token is not None:
                self.provider.unsubscribe(handle.provider_token)

        logger.info(
            f"Location watch {handle.watch_id} stopped "
            f"(accepted={handle.accepted}, dropped={handle.dropped})"
        )
