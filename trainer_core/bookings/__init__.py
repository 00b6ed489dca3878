from trainer_core.bookings.lifecycle import next_status
from trainer_core.bookings.store import BookingRequestStore

__all__ = ["BookingRequestStore", "next_status"]
