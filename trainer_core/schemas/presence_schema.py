"""Location and presence data models."""

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from trainer_core.utils import ensure_utc


class PermissionResult(str, Enum):
    GRANTED = "granted"
    DENIED = "denied"


class Coordinate(BaseModel):
    """A WGS84 position."""

    model_config = ConfigDict(frozen=True)

    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)


class LocationSample(BaseModel):
    """A single fix reported by the geolocation platform."""

    model_config = ConfigDict(frozen=True)

    coordinate: Coordinate
    recorded_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    accuracy_m: Optional[float] = None

    @field_validator("recorded_at")
    @classmethod
    def _as_utc(cls, value: datetime) -> datetime:
        return ensure_utc(value)


@dataclass(frozen=True)
class PresenceState:
    """
    Snapshot of the trainer's presence as shown to the UI.

    ``current_location`` is only fresh while ``is_online`` is True;
    ``location_pending`` stays set until the first fix after going online.
    """
    is_online: bool = False
    current_location: Optional[Coordinate] = None
    location_pending: bool = False
