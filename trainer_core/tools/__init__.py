from trainer_core.tools.backend import MockProfileBackend, sample_profile, sample_requests
from trainer_core.tools.base import BookingInbox, GeolocationService, ProfileBackend
from trainer_core.tools.geolocation import MockGeolocationService, failing_fix
from trainer_core.tools.inbox import MockBookingInbox

__all__ = [
    "GeolocationService", "ProfileBackend", "BookingInbox",
    "MockGeolocationService", "MockProfileBackend", "MockBookingInbox",
    "failing_fix", "sample_profile", "sample_requests",
]
