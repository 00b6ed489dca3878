"""
Mock booking inbox.

In production, new requests would arrive through the backend's realtime
channel or a push notification handler. Here they are pushed by hand.
"""

import logging
from typing import Callable, Optional

from trainer_core.schemas.booking_schema import BookingRequest

logger = logging.getLogger(__name__)


class MockBookingInbox:
    """Delivers pushed requests to whoever is connected; drops them otherwise."""

    def __init__(self) -> None:
        self._handler: Optional[Callable[[BookingRequest], object]] = None
        self.dropped: list[BookingRequest] = []

    @property
    def connected(self) -> bool:
        return self._handler is not None

    def connect(self, handler: Callable[[BookingRequest], object]) -> None:
        self._handler = handler

    def disconnect(self) -> None:
        self._handler = None

    def push(self, request: BookingRequest) -> None:
        if self._handler is None:
            logger.debug("No session connected, dropping request %s", request.id)
            self.dropped.append(request)
            return
        self._handler(request)
