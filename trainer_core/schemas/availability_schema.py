"""Weekly availability data models."""

from datetime import date, datetime, time
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, model_validator

from trainer_core.utils import parse_clock_time


class Weekday(str, Enum):
    """Weekday identifiers, ordered Monday first as ``date.weekday()`` is."""
    MONDAY = "monday"
    TUESDAY = "tuesday"
    WEDNESDAY = "wednesday"
    THURSDAY = "thursday"
    FRIDAY = "friday"
    SATURDAY = "saturday"
    SUNDAY = "sunday"

    @classmethod
    def of(cls, day: date) -> "Weekday":
        return list(cls)[day.weekday()]


class DayWindow(BaseModel):
    """A single day's working window."""

    model_config = ConfigDict(frozen=True)

    start: time
    end: time
    available: bool = True

    @model_validator(mode="after")
    def _check_order(self) -> "DayWindow":
        if self.available and not self.start < self.end:
            raise ValueError(
                f"Window start {self.start:%H:%M} must be before end {self.end:%H:%M}"
            )
        return self

    def contains(self, moment: time) -> bool:
        """True when the day is available and ``moment`` is inside [start, end)."""
        return self.available and self.start <= moment < self.end


class WeeklyAvailability(BaseModel):
    """One window per weekday. Read-only to presence and booking logic."""

    model_config = ConfigDict(frozen=True)

    monday: DayWindow
    tuesday: DayWindow
    wednesday: DayWindow
    thursday: DayWindow
    friday: DayWindow
    saturday: DayWindow
    sunday: DayWindow

    def window_for(self, day: Weekday) -> DayWindow:
        return getattr(self, day.value)

    def available_days(self) -> list[Weekday]:
        return [day for day in Weekday if self.window_for(day).available]

    def is_available_at(self, moment: datetime) -> bool:
        return self.window_for(Weekday.of(moment.date())).contains(moment.time())

    def covers(self, preferred_date: str, preferred_time: str) -> Optional[bool]:
        """Check a request's preferred slot against the schedule.

        Returns None when the date or time string cannot be parsed.
        """
        try:
            day = datetime.strptime(preferred_date.strip(), "%Y-%m-%d").date()
            moment = parse_clock_time(preferred_time)
        except ValueError:
            return None
        return self.window_for(Weekday.of(day)).contains(moment)

    @classmethod
    def default(cls) -> "WeeklyAvailability":
        """Weekdays 06:00-20:00, Saturday 08:00-18:00, Sunday closed."""
        weekday = DayWindow(start=time(6, 0), end=time(20, 0))
        return cls(
            monday=weekday,
            tuesday=weekday,
            wednesday=weekday,
            thursday=weekday,
            friday=weekday,
            saturday=DayWindow(start=time(8, 0), end=time(18, 0)),
            sunday=DayWindow(start=time(8, 0), end=time(18, 0), available=False),
        )
