"""
Session orchestrator: composes presence, bookings and availability for
one signed-in trainer.

Routing follows the session lifecycle:
LOADING (auth check or data load) -> AUTH -> PROFILE_SETUP -> MAIN.

Presence gates visibility only. New requests are ingested whether or not
the trainer is online; the UI uses ``accepting_new_work`` to tell the
trainer they are not soliciting them.
"""

import asyncio
from enum import Enum
from typing import Callable, Optional, Union

from trainer_core.bookings.store import BookingRequestStore
from trainer_core.config import AppConfig, settings
from trainer_core.display.messages import presence_description
from trainer_core.errors import BackendError, OperationResult
from trainer_core.logging_context import get_session_logger, set_session_id
from trainer_core.presence.controller import PresenceController
from trainer_core.schemas.availability_schema import WeeklyAvailability
from trainer_core.schemas.booking_schema import BookingRequest, ResponseAction
from trainer_core.schemas.profile_schema import TrainerProfile
from trainer_core.session.auth import AuthContext
from trainer_core.tools.base import BookingInbox, GeolocationService, ProfileBackend

logger = get_session_logger(__name__)


class Screen(str, Enum):
    LOADING = "loading"
    AUTH = "auth"
    PROFILE_SETUP = "profile_setup"
    MAIN = "main"


class SessionNotStartedError(RuntimeError):
    """Raised when session components are used before initialize()."""


class SessionOrchestrator:
    """Wires collaborators into the presence and booking components."""

    def __init__(
        self,
        auth: AuthContext,
        backend: ProfileBackend,
        geolocation: GeolocationService,
        inbox: Optional[BookingInbox] = None,
        config: AppConfig = settings,
        on_permission_denied: Optional[Callable[[], None]] = None,
    ) -> None:
        self.auth = auth
        self._backend = backend
        self._geolocation = geolocation
        self._inbox = inbox
        self._config = config
        self._on_permission_denied = on_permission_denied

        self.profile: Optional[TrainerProfile] = None
        self.availability: Optional[WeeklyAvailability] = None
        self.last_error: Optional[str] = None
        self._loading = True
        self._presence: Optional[PresenceController] = None
        self._bookings: Optional[BookingRequestStore] = None

    # ------------------------------------------------------------------ #
    # Components
    # ------------------------------------------------------------------ #

    @property
    def presence(self) -> PresenceController:
        if self._presence is None:
            raise SessionNotStartedError("Session not initialized")
        return self._presence

    @property
    def bookings(self) -> BookingRequestStore:
        if self._bookings is None:
            raise SessionNotStartedError("Session not initialized")
        return self._bookings

    @property
    def started(self) -> bool:
        return self._presence is not None

    # ------------------------------------------------------------------ #
    # Routing
    # ------------------------------------------------------------------ #

    def current_screen(self) -> Screen:
        state = self.auth.state
        if state.is_loading:
            return Screen.LOADING
        if not state.is_authenticated:
            return Screen.AUTH
        if self._loading:
            return Screen.LOADING
        if self.profile is None or not self.profile.is_verified:
            return Screen.PROFILE_SETUP
        return Screen.MAIN

    # ------------------------------------------------------------------ #
    # Lifecycle
    # ------------------------------------------------------------------ #

    async def initialize(self) -> bool:
        """Load profile, schedule and existing requests, then ask for location access.

        Failures are logged and kept in ``last_error``; the caller shows
        them instead of catching.
        """
        user = self.auth.user
        if user is None:
            raise SessionNotStartedError("Cannot initialize without a signed-in user")

        set_session_id(user.id)
        await self._release_presence()
        self._build_components(user.id)
        self._loading = True
        self.last_error = None
        try:
            self.profile = await self._backend.fetch_profile(user.id)
            self._project_online()
            self.availability, existing = await asyncio.gather(
                self._backend.fetch_availability(user.id),
                self._backend.fetch_booking_requests(user.id),
            )
            for request in existing:
                self.bookings.ingest(request)
            if self._inbox is not None:
                self._inbox.connect(self.receive_request)
            await self.presence.request_permission()
        except BackendError as exc:
            logger.error("Error initializing trainer session: %s", exc)
            self.last_error = "Failed to load trainer data. Please try again."
            return False
        finally:
            self._loading = False
        logger.info(
            "Session ready for %s with %d pending requests",
            user.id, len(self.bookings.list_pending()),
        )
        return True

    def complete_profile(
        self, profile: TrainerProfile, availability: Optional[WeeklyAvailability] = None
    ) -> None:
        """Accept the result of the profile setup flow."""
        if self._presence is not None:
            profile = profile.model_copy(update={"is_online": self._presence.committed_online})
        self.profile = profile
        if availability is not None:
            self.availability = availability

    async def logout(self) -> None:
        """Go offline, stop sampling and sign out."""
        await self._release_presence()
        if self._inbox is not None:
            self._inbox.disconnect()
        self.auth.logout()
        self.profile = None
        self.availability = None
        self._bookings = None
        self._loading = True

    # ------------------------------------------------------------------ #
    # Presence
    # ------------------------------------------------------------------ #

    async def set_online(self, online: bool) -> OperationResult:
        result = await self.presence.set_online(online)
        self._project_online()
        return result

    @property
    def accepting_new_work(self) -> bool:
        return self._presence is not None and self._presence.is_online

    def visibility_message(self) -> str:
        return presence_description(self.accepting_new_work)

    def _project_online(self) -> None:
        # profile mirror follows the committed value, never the optimistic one
        if self.profile is not None and self._presence is not None:
            committed = self._presence.committed_online
            if self.profile.is_online != committed:
                self.profile = self.profile.model_copy(update={"is_online": committed})

    # ------------------------------------------------------------------ #
    # Bookings
    # ------------------------------------------------------------------ #

    def receive_request(self, request: BookingRequest) -> bool:
        """Ingest a pushed request. Not gated on presence."""
        added = self.bookings.ingest(request)
        if added and not self.accepting_new_work:
            logger.info("Request %s queued while offline", request.id)
        return added

    async def respond(
        self,
        request_id: str,
        action: Union[ResponseAction, str],
        message: Optional[str] = None,
    ) -> OperationResult:
        return await self.bookings.respond(request_id, action, message)

    def request_fits_schedule(self, request: BookingRequest) -> Optional[bool]:
        """Whether the preferred slot is inside the weekly window. Informational only."""
        if self.availability is None:
            return None
        return self.availability.covers(request.preferred_date, request.preferred_time)

    async def _release_presence(self) -> None:
        """Take the current controller offline on the backend, then stop it."""
        if self._presence is None:
            return
        if self._presence.is_online or self._presence.committed_online:
            result = await self.set_online(False)
            if not result.success and not result.superseded:
                logger.warning("Releasing session while still marked online: %s", result.message)
        self._presence.close()
        self._presence = None

    def _build_components(self, trainer_id: str) -> None:
        location = self._config.location
        self._presence = PresenceController(
            trainer_id,
            self._geolocation,
            self._backend,
            on_permission_denied=self._on_permission_denied,
            min_interval_sec=location.min_interval_sec,
            min_distance_m=location.min_distance_m,
            fix_timeout_sec=location.fix_timeout_sec,
            permission_timeout_sec=location.permission_timeout_sec,
            sync_timeout_sec=self._config.sync.presence_sync_timeout_sec,
        )
        self._bookings = BookingRequestStore(
            self._backend,
            response_timeout_sec=self._config.sync.booking_response_timeout_sec,
        )
