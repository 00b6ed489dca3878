from trainer_core.schemas.availability_schema import DayWindow, WeeklyAvailability, Weekday
from trainer_core.schemas.booking_schema import BookingRequest, BookingStatus, ResponseAction
from trainer_core.schemas.presence_schema import (
    Coordinate,
    LocationSample,
    PermissionResult,
    PresenceState,
)
from trainer_core.schemas.profile_schema import AuthState, TrainerProfile, User

__all__ = [
    "DayWindow", "WeeklyAvailability", "Weekday",
    "BookingRequest", "BookingStatus", "ResponseAction",
    "Coordinate", "LocationSample", "PermissionResult", "PresenceState",
    "AuthState", "TrainerProfile", "User",
]
