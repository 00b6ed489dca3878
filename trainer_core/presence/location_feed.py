"""
Supervised location sampling while the trainer is online.

On start the feed takes one immediate high-accuracy fix, then keeps
sampling on a dual trigger: a minimum time interval OR a minimum
displacement reported by the platform's position watch, whichever comes
first. Failures are reported and the feed waits for the next trigger.

Every run carries a generation number. ``stop()`` bumps it before
cancelling, so a fix that completes after stop (or after a restart) is
discarded instead of emitted.
"""

import asyncio
from typing import Callable, Optional

from trainer_core.config import settings
from trainer_core.errors import (
    LocationUnavailableError,
    PermissionDeniedError,
    PresenceError,
)
from trainer_core.logging_context import get_session_logger
from trainer_core.schemas.presence_schema import LocationSample
from trainer_core.tools.base import GeolocationService
from trainer_core.utils import distance_m

logger = get_session_logger(__name__)


class LocationFeed:
    """Periodic + displacement-triggered sampler feeding one consumer."""

    def __init__(
        self,
        geolocation: GeolocationService,
        on_sample: Callable[[LocationSample], None],
        on_error: Optional[Callable[[PresenceError], None]] = None,
        min_interval_sec: float = settings.location.min_interval_sec,
        min_distance_m: float = settings.location.min_distance_m,
        fix_timeout_sec: float = settings.location.fix_timeout_sec,
    ) -> None:
        self._geolocation = geolocation
        self._on_sample = on_sample
        self._on_error = on_error
        self._min_interval = min_interval_sec
        self._min_distance = min_distance_m
        self._fix_timeout = fix_timeout_sec

        self._generation = 0
        self._task: Optional[asyncio.Task] = None
        self._watch_handle: Optional[str] = None
        self._interval_reset: Optional[asyncio.Event] = None
        self._last_sample: Optional[LocationSample] = None
        self._emitted = 0
        self._errors = 0

    @property
    def is_running(self) -> bool:
        return self._task is not None

    @property
    def emitted_count(self) -> int:
        return self._emitted

    @property
    def error_count(self) -> int:
        return self._errors

    @property
    def last_sample(self) -> Optional[LocationSample]:
        return self._last_sample

    def start(self) -> None:
        """Begin sampling. A running feed is stopped first. Needs a running loop."""
        if self.is_running:
            self.stop()
        self._generation += 1
        generation = self._generation
        self._interval_reset = asyncio.Event()
        self._last_sample = None
        self._watch_handle = self._geolocation.subscribe(
            lambda sample: self._on_watch(sample, generation)
        )
        self._task = asyncio.get_running_loop().create_task(self._run(generation))
        logger.debug("Location feed started (generation %d)", generation)

    def stop(self) -> None:
        """Stop sampling. No emission happens after this returns."""
        self._generation += 1
        if self._task is not None:
            self._task.cancel()
            self._task = None
        if self._watch_handle is not None:
            self._geolocation.unsubscribe(self._watch_handle)
            self._watch_handle = None
        logger.debug("Location feed stopped")

    def _is_current(self, generation: int) -> bool:
        return generation == self._generation

    async def _run(self, generation: int) -> None:
        await self._sample(generation)
        while self._is_current(generation):
            reset = self._interval_reset
            try:
                # displacement emissions set the event, restarting the interval
                await asyncio.wait_for(reset.wait(), timeout=self._min_interval)
                reset.clear()
                continue
            except asyncio.TimeoutError:
                pass
            await self._sample(generation)

    async def _sample(self, generation: int) -> None:
        try:
            sample = await asyncio.wait_for(
                self._geolocation.get_current_fix(high_accuracy=True),
                timeout=self._fix_timeout,
            )
        except asyncio.TimeoutError:
            self._report(LocationUnavailableError("Location fix timed out"), generation)
            return
        except (LocationUnavailableError, PermissionDeniedError) as exc:
            self._report(exc, generation)
            return
        except Exception as exc:
            self._report(
                LocationUnavailableError(f"Location fix failed: {type(exc).__name__}: {exc}"),
                generation,
            )
            return
        self._emit(sample, generation)

    def _on_watch(self, sample: LocationSample, generation: int) -> None:
        if not self._is_current(generation):
            return
        last = self._last_sample
        if last is not None:
            moved = distance_m(
                last.coordinate.latitude, last.coordinate.longitude,
                sample.coordinate.latitude, sample.coordinate.longitude,
            )
            if moved < self._min_distance:
                return
        if self._emit(sample, generation) and self._interval_reset is not None:
            self._interval_reset.set()

    def _emit(self, sample: LocationSample, generation: int) -> bool:
        if not self._is_current(generation):
            logger.debug("Discarding fix from stale feed generation %d", generation)
            return False
        if self._last_sample is not None and sample.recorded_at < self._last_sample.recorded_at:
            logger.debug(
                "Discarding out-of-order fix recorded at %s", sample.recorded_at.isoformat()
            )
            return False
        self._last_sample = sample
        self._emitted += 1
        self._on_sample(sample)
        return True

    def _report(self, error: PresenceError, generation: int) -> None:
        if not self._is_current(generation):
            return
        self._errors += 1
        logger.warning("Location sampling failed: %s", error)
        if self._on_error is not None:
            self._on_error(error)
