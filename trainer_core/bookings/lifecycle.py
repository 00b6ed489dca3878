"""
Booking request lifecycle.

Only PENDING has outgoing transitions here. COMPLETED and CANCELLED are
part of the type but are driven by session execution, not by the trainer's
response, so nothing in this table reaches them.
"""

from dataclasses import dataclass

from trainer_core.errors import InvalidTransitionError
from trainer_core.schemas.booking_schema import BookingStatus, ResponseAction


@dataclass(frozen=True)
class RequestTransition:
    """A single valid status transition."""
    from_status: BookingStatus
    action: ResponseAction
    to_status: BookingStatus


TRANSITIONS: list[RequestTransition] = [
    RequestTransition(BookingStatus.PENDING, ResponseAction.ACCEPT, BookingStatus.ACCEPTED),
    RequestTransition(BookingStatus.PENDING, ResponseAction.DECLINE, BookingStatus.DECLINED),
]


def next_status(current: BookingStatus, action: ResponseAction) -> BookingStatus:
    """Resolve the status an action leads to.

    Raises:
        InvalidTransitionError: If the action is not allowed from ``current``.
    """
    for t in TRANSITIONS:
        if t.from_status == current and t.action == action:
            return t.to_status
    raise InvalidTransitionError(
        f"Cannot {action.value} a request that is {current.value}."
    )


def is_resolved(status: BookingStatus) -> bool:
    return status is not BookingStatus.PENDING
