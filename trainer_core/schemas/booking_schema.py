"""Booking request data models."""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from trainer_core.utils import ensure_utc


class BookingStatus(str, Enum):
    """Lifecycle status of a booking request."""
    PENDING = "pending"
    ACCEPTED = "accepted"
    DECLINED = "declined"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class ResponseAction(str, Enum):
    """Trainer's answer to a pending request."""
    ACCEPT = "accept"
    DECLINE = "decline"


class BookingRequest(BaseModel):
    """A client's request for a session.

    Frozen: the store replaces records on status changes, so any copy a
    reader holds is a stable snapshot.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    client_id: str
    client_name: str
    client_photo: str = ""
    session_type: str
    preferred_date: str  # YYYY-MM-DD
    preferred_time: str  # HH:MM or H:MM AM/PM
    duration: int = Field(gt=0)  # minutes
    location: str
    address: str
    rate: float = Field(ge=0)
    message: str = ""
    status: BookingStatus = BookingStatus.PENDING
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    response_message: Optional[str] = None
    responded_at: Optional[datetime] = None

    @field_validator("created_at", "responded_at")
    @classmethod
    def _as_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        return None if value is None else ensure_utc(value)
