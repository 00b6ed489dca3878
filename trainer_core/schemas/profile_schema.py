"""Trainer profile and auth session models."""

from dataclasses import dataclass
from typing import Optional

from pydantic import BaseModel, Field


class TrainerProfile(BaseModel):
    """Trainer profile record from the backend.

    ``is_online`` mirrors the presence controller's committed value and is
    never read back by presence logic.
    """
    id: str
    name: str
    email: str
    phone: Optional[str] = None
    specialties: list[str] = Field(default_factory=list)
    certifications: list[str] = Field(default_factory=list)
    hourly_rate: float = 0.0
    bio: str = ""
    rating: float = 0.0
    total_reviews: int = 0
    is_verified: bool = False
    is_online: bool = False
    service_radius: float = 10.0  # miles
    preferred_locations: list[str] = Field(default_factory=list)


@dataclass(frozen=True)
class User:
    id: str
    name: str
    email: str


@dataclass(frozen=True)
class AuthState:
    """Authentication snapshot. Starts loading until the session check completes."""
    is_authenticated: bool = False
    user: Optional[User] = None
    is_loading: bool = True
