"""Shared utilities used across the trainer core."""

import math
import re
from datetime import datetime, time, timezone

EARTH_RADIUS_M = 6_371_000.0

_CLOCK_12H = re.compile(r"^\s*(\d{1,2}):(\d{2})\s*([AaPp][Mm])\s*$")


def distance_m(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance in meters between two lat/lon points.

    Examples:
        >>> distance_m(0.0, 0.0, 0.0, 0.0)
        0.0
    """
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    dphi = math.radians(lat2 - lat1)
    dlmb = math.radians(lon2 - lon1)
    a = math.sin(dphi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(dlmb / 2) ** 2
    return 2 * EARTH_RADIUS_M * math.asin(math.sqrt(a))


def parse_clock_time(value: str) -> time:
    """Parse "HH:MM" or "H:MM AM/PM" into a time.

    Examples:
        >>> parse_clock_time("18:30")
        datetime.time(18, 30)
        >>> parse_clock_time("7:00 AM")
        datetime.time(7, 0)
    """
    match = _CLOCK_12H.match(value)
    if match:
        hour, minute, meridiem = int(match.group(1)), int(match.group(2)), match.group(3).upper()
        if not 1 <= hour <= 12:
            raise ValueError(f"Invalid 12-hour time: {value!r}")
        hour = hour % 12 + (12 if meridiem == "PM" else 0)
        return time(hour, minute)
    return datetime.strptime(value.strip(), "%H:%M").time()


def ensure_utc(value: datetime) -> datetime:
    """Treat a naive datetime as UTC so request and fix timestamps stay comparable.

    Examples:
        >>> ensure_utc(datetime(2025, 7, 13, 8, 0)).isoformat()
        '2025-07-13T08:00:00+00:00'
    """
    if value.tzinfo is None or value.tzinfo.utcoffset(value) is None:
        return value.replace(tzinfo=timezone.utc)
    return value
