"""
Mock geolocation platform.

In production, this would wrap the device's location services (foreground
permission prompt, one-shot fixes and a position watch). The mock adds
failure injection and an optional gate so tests can hold a fix in flight.
"""

import asyncio
import itertools
import logging
from collections import deque
from datetime import datetime, timezone
from typing import Callable, Optional, Union

from trainer_core.errors import LocationUnavailableError, PermissionDeniedError
from trainer_core.schemas.presence_schema import Coordinate, LocationSample, PermissionResult

logger = logging.getLogger(__name__)

# Boston, MA; matches the sample profile's service area
DEFAULT_COORDINATE = Coordinate(latitude=42.3601, longitude=-71.0589)

FixOutcome = Union[LocationSample, Coordinate, Exception]


class MockGeolocationService:
    """In-memory stand-in for the device location API."""

    def __init__(
        self,
        permission: PermissionResult = PermissionResult.GRANTED,
        default_coordinate: Coordinate = DEFAULT_COORDINATE,
    ) -> None:
        self.permission = permission
        self.default_coordinate = default_coordinate
        self.permission_requests = 0
        self.fix_requests = 0
        self.permission_gate: Optional[asyncio.Event] = None
        self.fix_gate: Optional[asyncio.Event] = None
        self._queued: deque[FixOutcome] = deque()
        self._subscribers: dict[str, Callable[[LocationSample], None]] = {}
        self._handles = itertools.count(1)

    # ------------------------------------------------------------------ #
    # Test controls
    # ------------------------------------------------------------------ #

    def queue_fix(self, outcome: FixOutcome) -> None:
        """Queue the result of the next get_current_fix call."""
        self._queued.append(outcome)

    def push_position(self, coordinate: Coordinate, recorded_at: Optional[datetime] = None) -> None:
        """Simulate the device reporting movement to every watcher."""
        sample = LocationSample(
            coordinate=coordinate,
            recorded_at=recorded_at or datetime.now(timezone.utc),
        )
        for callback in list(self._subscribers.values()):
            callback(sample)

    def revoke_permission(self) -> None:
        self.permission = PermissionResult.DENIED

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    # ------------------------------------------------------------------ #
    # GeolocationService
    # ------------------------------------------------------------------ #

    async def request_permission(self) -> PermissionResult:
        self.permission_requests += 1
        if self.permission_gate is not None:
            await self.permission_gate.wait()
        logger.debug("Permission prompt answered: %s", self.permission.value)
        return self.permission

    async def get_current_fix(self, high_accuracy: bool = True) -> LocationSample:
        self.fix_requests += 1
        if self.fix_gate is not None:
            await self.fix_gate.wait()
        if self.permission is PermissionResult.DENIED:
            raise PermissionDeniedError("Location permission has been revoked")

        outcome: FixOutcome = self._queued.popleft() if self._queued else self.default_coordinate
        if isinstance(outcome, Exception):
            raise outcome
        if isinstance(outcome, Coordinate):
            return LocationSample(coordinate=outcome, accuracy_m=5.0 if high_accuracy else 50.0)
        return outcome

    def subscribe(self, callback: Callable[[LocationSample], None]) -> str:
        handle = f"watch-{next(self._handles)}"
        self._subscribers[handle] = callback
        return handle

    def unsubscribe(self, handle: str) -> None:
        self._subscribers.pop(handle, None)


def failing_fix(reason: str = "No GPS signal") -> LocationUnavailableError:
    """Convenience for queue_fix: a transient positioning failure."""
    return LocationUnavailableError(reason)
