"""
In-memory store of the booking requests visible in one trainer session.

The store is the only writer of request status. ``respond`` validates and
applies the optimistic status change without yielding to the event loop,
so when two responses race for the same request the first one to run
claims it and the second sees a non-pending status. If delivery to the
backend fails the status is rolled back to pending.
"""

import asyncio
from datetime import datetime, timezone
from typing import Callable, Optional, Union

from trainer_core.bookings.lifecycle import is_resolved, next_status
from trainer_core.config import settings
from trainer_core.display.messages import response_confirmation
from trainer_core.errors import (
    BackendError,
    InvalidTransitionError,
    OperationResult,
    ResponseTransportFailedError,
)
from trainer_core.logging_context import get_session_logger
from trainer_core.optimistic import OptimisticUpdate
from trainer_core.schemas.booking_schema import BookingRequest, BookingStatus, ResponseAction
from trainer_core.tools.base import ProfileBackend

logger = get_session_logger(__name__)

StoreListener = Callable[[BookingRequest], None]


class BookingRequestStore:
    """Authoritative set of booking requests for the session."""

    def __init__(
        self,
        backend: ProfileBackend,
        response_timeout_sec: float = settings.sync.booking_response_timeout_sec,
    ) -> None:
        self._backend = backend
        self._response_timeout = response_timeout_sec
        self._requests: dict[str, BookingRequest] = {}
        self._listeners: list[StoreListener] = []

    def __len__(self) -> int:
        return len(self._requests)

    def __contains__(self, request_id: object) -> bool:
        return request_id in self._requests

    def add_listener(self, listener: StoreListener) -> None:
        self._listeners.append(listener)

    # ------------------------------------------------------------------ #
    # Writes
    # ------------------------------------------------------------------ #

    def ingest(self, request: BookingRequest) -> bool:
        """Add a new request as pending.

        A request whose id is already stored is ignored, so redelivery
        from the inbox cannot reset a resolved request.

        Returns:
            True if the request was added.
        """
        if request.id in self._requests:
            logger.debug("Ignoring duplicate booking request %s", request.id)
            return False
        if request.status is not BookingStatus.PENDING:
            logger.debug(
                "Booking request %s arrived as %s, storing as pending",
                request.id, request.status.value,
            )
            request = request.model_copy(
                update={"status": BookingStatus.PENDING, "response_message": None, "responded_at": None}
            )
        self._put(request)
        logger.info("New booking request %s from %s", request.id, request.client_name)
        return True

    async def respond(
        self,
        request_id: str,
        action: Union[ResponseAction, str],
        message: Optional[str] = None,
    ) -> OperationResult:
        """Accept or decline a pending request.

        Returns:
            OperationResult with InvalidTransitionError when the request is
            missing or not pending (nothing changes), or
            ResponseTransportFailedError when delivery failed (status is
            back to pending when this returns).
        """
        action = ResponseAction(action)
        current = self._requests.get(request_id)
        if current is None:
            error = InvalidTransitionError(f"Booking request {request_id} not found.")
            return OperationResult(success=False, error=error, message=str(error))
        try:
            target = next_status(current.status, action)
        except InvalidTransitionError as error:
            logger.info("Rejected %s on booking %s: %s", action.value, request_id, error)
            return OperationResult(success=False, error=error, message=str(error))

        text = message.strip() if message and message.strip() else None
        update = OptimisticUpdate(
            label=f"booking[{request_id}]:{target.value}",
            apply=lambda: self._put(current.model_copy(update={
                "status": target,
                "response_message": text,
                "responded_at": datetime.now(timezone.utc),
            })),
            revert=lambda: self._put(current),
        )
        update.apply()

        try:
            await asyncio.wait_for(
                self._backend.send_booking_response(request_id, action, text),
                timeout=self._response_timeout,
            )
        except Exception as exc:
            # any delivery failure leaves the request pending
            update.roll_back()
            if isinstance(exc, (BackendError, asyncio.TimeoutError)):
                logger.error(
                    "Error responding to booking %s: %s", request_id, str(exc) or "timed out"
                )
            else:
                logger.error("Unexpected error responding to booking %s: %r", request_id, exc)
            error = ResponseTransportFailedError(
                "Failed to respond to booking request. Please try again."
            )
            return OperationResult(success=False, error=error, message=str(error))

        update.commit()
        return OperationResult(
            success=True, message=response_confirmation(action)
        )

    # ------------------------------------------------------------------ #
    # Reads
    # ------------------------------------------------------------------ #

    def get(self, request_id: str) -> Optional[BookingRequest]:
        return self._requests.get(request_id)

    def list_pending(self) -> list[BookingRequest]:
        """Pending requests, longest-waiting first."""
        pending = [r for r in self._requests.values() if not is_resolved(r.status)]
        return sorted(pending, key=lambda r: r.created_at)

    def list_resolved(self) -> list[BookingRequest]:
        """Everything no longer pending, newest first."""
        resolved = [r for r in self._requests.values() if is_resolved(r.status)]
        return sorted(resolved, key=lambda r: r.created_at, reverse=True)

    def list_all(self) -> list[BookingRequest]:
        return self.list_pending() + self.list_resolved()

    def _put(self, request: BookingRequest) -> None:
        self._requests[request.id] = request
        for listener in list(self._listeners):
            listener(request)
