"""Protocols for the external collaborators the core talks to."""

from typing import Callable, Optional, Protocol, runtime_checkable

from trainer_core.schemas.availability_schema import WeeklyAvailability
from trainer_core.schemas.booking_schema import BookingRequest, ResponseAction
from trainer_core.schemas.presence_schema import LocationSample, PermissionResult
from trainer_core.schemas.profile_schema import TrainerProfile


@runtime_checkable
class GeolocationService(Protocol):
    """Host platform positioning. Fallible and possibly slow."""

    async def request_permission(self) -> PermissionResult:
        """Ask for foreground location access."""
        ...

    async def get_current_fix(self, high_accuracy: bool = True) -> LocationSample:
        """Take one fix.

        Raises:
            LocationUnavailableError: transient positioning failure
            PermissionDeniedError: access was revoked
        """
        ...

    def subscribe(self, callback: Callable[[LocationSample], None]) -> str:
        """Register for continuous position updates. Returns a handle."""
        ...

    def unsubscribe(self, handle: str) -> None:
        ...


@runtime_checkable
class ProfileBackend(Protocol):
    """Remote store for trainer data. Every method may raise BackendError."""

    async def update_online_status(self, trainer_id: str, is_online: bool) -> None:
        ...

    async def fetch_profile(self, trainer_id: str) -> TrainerProfile:
        ...

    async def fetch_availability(self, trainer_id: str) -> WeeklyAvailability:
        ...

    async def fetch_booking_requests(self, trainer_id: str) -> list[BookingRequest]:
        ...

    async def send_booking_response(
        self, request_id: str, action: ResponseAction, message: Optional[str] = None
    ) -> None:
        """Deliver an accept/decline to the client-facing side."""
        ...


@runtime_checkable
class BookingInbox(Protocol):
    """Push source of new booking requests."""

    def connect(self, handler: Callable[[BookingRequest], object]) -> None:
        ...

    def disconnect(self) -> None:
        ...
