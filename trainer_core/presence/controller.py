"""
Presence controller: the single authority for whether a trainer is online.

``set_online`` is optimistic-then-confirm. The displayed flag flips at
once, the backend sync runs afterwards, and a failed sync reverts the flag
to the last value the backend actually accepted. Each call takes a new
generation number; a call that finishes after a newer one was issued is
marked superseded and never touches the displayed state. Backend syncs are
serialized in issue order, so the committed value always equals the last
call whose sync succeeded.

Location sampling follows the displayed flag: the feed starts once
permission is confirmed for an online transition and stops synchronously
on every offline transition.
"""

import asyncio
from dataclasses import replace
from typing import Callable, Optional

from trainer_core.config import settings
from trainer_core.errors import (
    BackendError,
    OperationResult,
    PermissionDeniedError,
    PresenceError,
    SyncFailedError,
)
from trainer_core.logging_context import get_session_logger
from trainer_core.optimistic import OptimisticUpdate
from trainer_core.presence.location_feed import LocationFeed
from trainer_core.schemas.presence_schema import (
    Coordinate,
    LocationSample,
    PermissionResult,
    PresenceState,
)
from trainer_core.tools.base import GeolocationService, ProfileBackend

logger = get_session_logger(__name__)

PresenceListener = Callable[[PresenceState], None]


class PresenceController:
    """Owns PresenceState for one trainer session."""

    def __init__(
        self,
        trainer_id: str,
        geolocation: GeolocationService,
        backend: ProfileBackend,
        on_permission_denied: Optional[Callable[[], None]] = None,
        min_interval_sec: float = settings.location.min_interval_sec,
        min_distance_m: float = settings.location.min_distance_m,
        fix_timeout_sec: float = settings.location.fix_timeout_sec,
        permission_timeout_sec: float = settings.location.permission_timeout_sec,
        sync_timeout_sec: float = settings.sync.presence_sync_timeout_sec,
    ) -> None:
        self._trainer_id = trainer_id
        self._geolocation = geolocation
        self._backend = backend
        self._on_permission_denied = on_permission_denied
        self._permission_timeout = permission_timeout_sec
        self._sync_timeout = sync_timeout_sec
        self._feed = LocationFeed(
            geolocation,
            on_sample=self._apply_sample,
            on_error=self._on_location_error,
            min_interval_sec=min_interval_sec,
            min_distance_m=min_distance_m,
            fix_timeout_sec=fix_timeout_sec,
        )

        self._state = PresenceState()
        self._committed_online = False
        self._permission: Optional[PermissionResult] = None
        self._generation = 0
        self._sync_lock = asyncio.Lock()
        self._listeners: list[PresenceListener] = []
        self.last_location_error: Optional[PresenceError] = None

    # ------------------------------------------------------------------ #
    # Reads
    # ------------------------------------------------------------------ #

    @property
    def state(self) -> PresenceState:
        return self._state

    @property
    def is_online(self) -> bool:
        return self._state.is_online

    @property
    def committed_online(self) -> bool:
        """Last value the backend accepted."""
        return self._committed_online

    @property
    def permission(self) -> Optional[PermissionResult]:
        return self._permission

    @property
    def feed(self) -> LocationFeed:
        return self._feed

    def get_location(self) -> Optional[Coordinate]:
        return self._state.current_location

    def add_listener(self, listener: PresenceListener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: PresenceListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    # ------------------------------------------------------------------ #
    # Operations
    # ------------------------------------------------------------------ #

    async def request_permission(self) -> PermissionResult:
        """Prompt for foreground location access. A timeout counts as denied."""
        result = await self._prompt_permission()
        if result is PermissionResult.DENIED:
            self._notify_denied()
        return result

    async def set_online(self, online: bool) -> OperationResult:
        """
        Toggle presence.

        Returns:
            OperationResult with ``error`` set to PermissionDeniedError or
            SyncFailedError on failure. A rollback has already completed
            when a failure is returned.
        """
        self._generation += 1
        generation = self._generation
        update = OptimisticUpdate(
            label=f"presence[{generation}]:{'online' if online else 'offline'}",
            apply=lambda: self._show(online),
            revert=self._show_committed,
        )
        update.apply()

        if online:
            if self._permission is PermissionResult.GRANTED:
                permission = PermissionResult.GRANTED
            else:
                permission = await self._prompt_permission()

            # a stale toggle never surfaces the settings prompt
            if not self._is_current(generation):
                update.supersede()
                return OperationResult(
                    success=False, superseded=True, message="Superseded by a newer toggle."
                )
            if permission is PermissionResult.DENIED:
                self._notify_denied()
                update.roll_back()
                error = PermissionDeniedError(
                    "Location access is required to show your availability to nearby clients."
                )
                return OperationResult(success=False, error=error, message=str(error))
            self._feed.start()

        sync_error = await self._sync(online)

        if not self._is_current(generation):
            update.supersede()
            logger.debug("Presence sync %d finished after a newer toggle", generation)
            return OperationResult(
                success=sync_error is None,
                error=sync_error,
                superseded=True,
                message="Superseded by a newer toggle.",
            )
        if sync_error is not None:
            update.roll_back()
            return OperationResult(success=False, error=sync_error, message=str(sync_error))

        update.commit()
        return OperationResult(
            success=True, message=f"You're {'online' if online else 'offline'}."
        )

    def close(self) -> None:
        """Stop sampling without touching the committed value."""
        self._feed.stop()

    # ------------------------------------------------------------------ #
    # Internals
    # ------------------------------------------------------------------ #

    def _is_current(self, generation: int) -> bool:
        return generation == self._generation

    async def _prompt_permission(self) -> PermissionResult:
        try:
            result = await asyncio.wait_for(
                self._geolocation.request_permission(), timeout=self._permission_timeout
            )
        except asyncio.TimeoutError:
            logger.warning("Location permission prompt timed out")
            result = PermissionResult.DENIED
        # the platform answer is cached even for a stale toggle
        self._permission = result
        return result

    def _notify_denied(self) -> None:
        logger.info("Location permission denied")
        if self._on_permission_denied is not None:
            self._on_permission_denied()

    async def _sync(self, online: bool) -> Optional[SyncFailedError]:
        async with self._sync_lock:
            try:
                await asyncio.wait_for(
                    self._backend.update_online_status(self._trainer_id, online),
                    timeout=self._sync_timeout,
                )
            except asyncio.TimeoutError:
                logger.error("Presence sync timed out after %.1fs", self._sync_timeout)
                return SyncFailedError("Failed to update online status: backend timed out.")
            except BackendError as exc:
                logger.error("Presence sync failed: %s", exc)
                return SyncFailedError(f"Failed to update online status: {exc}")
            except Exception as exc:
                logger.error("Unexpected error syncing presence: %r", exc)
                return SyncFailedError(
                    f"Failed to update online status: {type(exc).__name__}: {exc}"
                )
            self._committed_online = online
            return None

    def _show(self, online: bool) -> None:
        if online:
            self._set_state(replace(self._state, is_online=True, location_pending=True))
        else:
            self._feed.stop()
            self._set_state(replace(self._state, is_online=False, location_pending=False))

    def _show_committed(self) -> None:
        self._show(self._committed_online)
        if self._committed_online and not self._feed.is_running:
            self._feed.start()

    def _apply_sample(self, sample: LocationSample) -> None:
        if not self._state.is_online:
            return
        self._set_state(
            replace(self._state, current_location=sample.coordinate, location_pending=False)
        )

    def _on_location_error(self, error: PresenceError) -> None:
        self.last_location_error = error
        if isinstance(error, PermissionDeniedError):
            # ask again on the next online transition
            self._permission = None

    def _set_state(self, state: PresenceState) -> None:
        if state == self._state:
            return
        self._state = state
        for listener in list(self._listeners):
            listener(state)
