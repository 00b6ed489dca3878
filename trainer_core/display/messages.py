"""User-facing text for presence and booking state.

Pure functions: the UI layer passes in state snapshots and renders the
strings as-is.
"""

from datetime import datetime, timezone
from typing import Optional

from trainer_core.config import settings
from trainer_core.schemas.availability_schema import DayWindow
from trainer_core.schemas.booking_schema import BookingRequest, ResponseAction
from trainer_core.schemas.presence_schema import PresenceState

MINUTES_PER_DAY = 1440


def presence_status_text(state: PresenceState, toggling: bool = False) -> str:
    if toggling:
        return "Updating..."
    if state.location_pending:
        return "Getting location..."
    return "You're Online" if state.is_online else "You're Offline"


def presence_description(is_online: bool) -> str:
    if is_online:
        return "Clients can see you and send booking requests"
    return "You won't receive new booking requests"


def location_text(state: PresenceState) -> str:
    location = state.current_location
    if location is None:
        return "Getting location..."
    return f"Location: {location.latitude:.4f}, {location.longitude:.4f}"


def format_currency(amount: float) -> str:
    return f"${amount:.2f}"


def time_ago(created_at: datetime, now: Optional[datetime] = None) -> str:
    """Render request age the way the request list shows it.

    Examples:
        "5 minutes ago", "1 hour ago", "3 days ago"
    """
    now = now or datetime.now(timezone.utc)
    minutes = max(int((now - created_at).total_seconds() // 60), 0)
    if minutes < settings.display.time_ago_recent_minutes:
        return f"{minutes} minutes ago"
    if minutes < MINUTES_PER_DAY:
        hours = minutes // 60
        return f"{hours} hour{'s' if hours > 1 else ''} ago"
    days = minutes // MINUTES_PER_DAY
    return f"{days} day{'s' if days > 1 else ''} ago"


def _clock(moment) -> str:
    hour = moment.hour % 12 or 12
    meridiem = "AM" if moment.hour < 12 else "PM"
    return f"{hour}:{moment.minute:02d} {meridiem}"


def schedule_line(window: DayWindow) -> str:
    """Render a day as e.g. 6:00 AM - 8:00 PM, or Closed."""
    if not window.available:
        return "Closed"
    return f"{_clock(window.start)} - {_clock(window.end)}"


def request_summary(request: BookingRequest) -> str:
    return (
        f"{request.session_type}: {request.preferred_date} at {request.preferred_time}"
        f" - {request.duration} min - {format_currency(request.rate)}/session"
    )


def response_confirmation(action: ResponseAction) -> str:
    verb = "accepted" if action is ResponseAction.ACCEPT else "declined"
    return f"Booking request {verb} successfully!"
