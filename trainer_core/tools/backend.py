"""
Mock trainer backend.

In production, this would be the backend-as-a-service the mobile client
talks to (profile documents, booking collection, messaging to clients).
Seeded with a verified sample trainer, the default weekly schedule and
two pending requests.
"""

import asyncio
import logging
from collections import deque
from datetime import datetime, timezone
from typing import Optional, Union

from trainer_core.errors import BackendError
from trainer_core.schemas.availability_schema import WeeklyAvailability
from trainer_core.schemas.booking_schema import BookingRequest, ResponseAction
from trainer_core.schemas.profile_schema import TrainerProfile

logger = logging.getLogger(__name__)

Outcome = Union[bool, Exception]


def sample_profile(trainer_id: str = "1", name: str = "John Smith") -> TrainerProfile:
    return TrainerProfile(
        id=trainer_id,
        name=name,
        email="john@example.com",
        phone="+1 (555) 123-4567",
        specialties=["Weight Training", "Cardio", "Nutrition"],
        certifications=["NASM-CPT", "ACSM", "Nutrition Specialist"],
        hourly_rate=75,
        bio="Experienced personal trainer specializing in strength training and weight loss.",
        rating=4.8,
        total_reviews=127,
        is_verified=True,
        service_radius=10,
        preferred_locations=["Gyms", "Client Home", "Outdoor Parks"],
    )


def sample_requests() -> list[BookingRequest]:
    return [
        BookingRequest(
            id="1",
            client_id="client1",
            client_name="Sarah Johnson",
            session_type="Weight Training",
            preferred_date="2025-07-15",
            preferred_time="10:00 AM",
            duration=60,
            location="Client Home",
            address="123 Oak Street, Boston, MA",
            rate=75,
            message="Looking for help with strength training for beginners.",
            created_at=datetime(2025, 7, 13, 8, 30, tzinfo=timezone.utc),
        ),
        BookingRequest(
            id="2",
            client_id="client2",
            client_name="Mike Chen",
            session_type="Cardio",
            preferred_date="2025-07-14",
            preferred_time="7:00 AM",
            duration=45,
            location="Local Gym",
            address="FitLife Gym, 456 Main St, Boston, MA",
            rate=75,
            message="Need help with cardio routine and motivation.",
            created_at=datetime(2025, 7, 13, 9, 15, tzinfo=timezone.utc),
        ),
    ]


class MockProfileBackend:
    """In-memory backend with scripted failures and optional gates."""

    def __init__(
        self,
        profile: Optional[TrainerProfile] = None,
        availability: Optional[WeeklyAvailability] = None,
        requests: Optional[list[BookingRequest]] = None,
    ) -> None:
        self.profile = profile or sample_profile()
        self.availability = availability or WeeklyAvailability.default()
        self.requests = list(requests) if requests is not None else sample_requests()
        self.persisted_online: Optional[bool] = None
        self.sync_calls: list[bool] = []
        self.responses: list[tuple[str, ResponseAction, Optional[str]]] = []
        self.sync_gate: Optional[asyncio.Event] = None
        self.response_gate: Optional[asyncio.Event] = None
        self.fail_fetch = False
        self._sync_outcomes: deque[Outcome] = deque()
        self._response_outcomes: deque[Outcome] = deque()

    def script_syncs(self, *outcomes: Outcome) -> None:
        """Queue success (True), BackendError (False) or a given exception for upcoming syncs."""
        self._sync_outcomes.extend(outcomes)

    def script_responses(self, *outcomes: Outcome) -> None:
        """Queue success (True), BackendError (False) or a given exception for upcoming responses."""
        self._response_outcomes.extend(outcomes)

    async def update_online_status(self, trainer_id: str, is_online: bool) -> None:
        self.sync_calls.append(is_online)
        if self.sync_gate is not None:
            await self.sync_gate.wait()
        ok = self._sync_outcomes.popleft() if self._sync_outcomes else True
        if isinstance(ok, Exception):
            raise ok
        if not ok:
            raise BackendError(f"Could not update online status for trainer {trainer_id}")
        self.persisted_online = is_online
        logger.info("Trainer %s is now %s", trainer_id, "online" if is_online else "offline")

    async def fetch_profile(self, trainer_id: str) -> TrainerProfile:
        self._check_fetch()
        return self.profile.model_copy(update={"id": trainer_id})

    async def fetch_availability(self, trainer_id: str) -> WeeklyAvailability:
        self._check_fetch()
        return self.availability

    async def fetch_booking_requests(self, trainer_id: str) -> list[BookingRequest]:
        self._check_fetch()
        return list(self.requests)

    async def send_booking_response(
        self, request_id: str, action: ResponseAction, message: Optional[str] = None
    ) -> None:
        if self.response_gate is not None:
            await self.response_gate.wait()
        ok = self._response_outcomes.popleft() if self._response_outcomes else True
        if isinstance(ok, Exception):
            raise ok
        if not ok:
            raise BackendError(f"Could not deliver response for booking {request_id}")
        self.responses.append((request_id, action, message))
        logger.info("Booking %s %s", request_id, action.value)

    def _check_fetch(self) -> None:
        if self.fail_fetch:
            raise BackendError("Backend unreachable")
