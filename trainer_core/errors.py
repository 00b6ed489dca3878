"""Error kinds raised or returned by the presence and booking components."""

from dataclasses import dataclass
from typing import Optional


class TrainerCoreError(Exception):
    """Base class for every error this package reports."""

    kind = "error"


class PresenceError(TrainerCoreError):
    """Failure of a presence operation."""


class PermissionDeniedError(PresenceError):
    """Location permission was refused or revoked."""

    kind = "permission_denied"


class LocationUnavailableError(PresenceError):
    """A positioning attempt failed; the feed retries on the next trigger."""

    kind = "location_unavailable"


class SyncFailedError(PresenceError):
    """Persisting the online flag failed; the toggle was rolled back."""

    kind = "sync_failed"


class ResponseError(TrainerCoreError):
    """Failure of a booking response."""


class InvalidTransitionError(ResponseError):
    """The request does not exist or is no longer pending."""

    kind = "invalid_transition"


class ResponseTransportFailedError(ResponseError):
    """The accept/decline could not be delivered; the status was rolled back."""

    kind = "response_transport_failed"


class BackendError(TrainerCoreError):
    """Raised by backend collaborators when a call is rejected or unreachable."""

    kind = "backend_error"


class IllegalPhaseError(TrainerCoreError):
    """An optimistic update was driven through a phase change it does not allow."""

    kind = "illegal_phase"


@dataclass
class OperationResult:
    """Outcome of an asynchronous state-changing operation.

    ``superseded`` is set when a newer call of the same kind was issued
    before this one finished, so its result was not applied.
    """

    success: bool
    error: Optional[TrainerCoreError] = None
    message: str = ""
    superseded: bool = False
