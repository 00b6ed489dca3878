"""Shared test fixtures and helpers."""

import asyncio
from datetime import datetime, timedelta, timezone
from typing import Optional

import pytest
import pytest_asyncio

from trainer_core.bookings.store import BookingRequestStore
from trainer_core.config import AppConfig, LocationConfig, SyncConfig
from trainer_core.presence.controller import PresenceController
from trainer_core.schemas.booking_schema import BookingRequest, BookingStatus
from trainer_core.session.auth import AuthContext
from trainer_core.session.orchestrator import SessionOrchestrator
from trainer_core.tools.backend import MockProfileBackend
from trainer_core.tools.geolocation import MockGeolocationService
from trainer_core.tools.inbox import MockBookingInbox

T0 = datetime(2025, 7, 13, 8, 0, tzinfo=timezone.utc)

FAST_LOCATION = LocationConfig(
    min_interval_sec=0.05,
    min_distance_m=10.0,
    fix_timeout_sec=0.5,
    permission_timeout_sec=0.5,
)
FAST_SYNC = SyncConfig(presence_sync_timeout_sec=0.5, booking_response_timeout_sec=0.5)


@pytest.fixture
def geolocation():
    return MockGeolocationService()


@pytest.fixture
def backend():
    return MockProfileBackend(requests=[])


@pytest.fixture
def store(backend):
    return BookingRequestStore(backend, response_timeout_sec=0.5)


@pytest.fixture
def fast_config():
    return AppConfig(location=FAST_LOCATION, sync=FAST_SYNC)


@pytest_asyncio.fixture
async def make_presence(geolocation, backend):
    """Factory for controllers wired to the mocks; stops every feed on teardown."""
    created: list[PresenceController] = []

    def factory(**overrides) -> PresenceController:
        options = dict(
            min_interval_sec=FAST_LOCATION.min_interval_sec,
            min_distance_m=FAST_LOCATION.min_distance_m,
            fix_timeout_sec=FAST_LOCATION.fix_timeout_sec,
            permission_timeout_sec=FAST_LOCATION.permission_timeout_sec,
            sync_timeout_sec=FAST_SYNC.presence_sync_timeout_sec,
        )
        options.update(overrides)
        controller = PresenceController("trainer-1", geolocation, backend, **options)
        created.append(controller)
        return controller

    yield factory
    for controller in created:
        controller.close()
    await asyncio.sleep(0)


@pytest_asyncio.fixture
async def presence(make_presence):
    return make_presence()


@pytest.fixture
def seeded_backend():
    """Backend with the sample trainer, default schedule and two pending requests."""
    return MockProfileBackend()


@pytest.fixture
def inbox():
    return MockBookingInbox()


@pytest_asyncio.fixture
async def orchestrator(geolocation, seeded_backend, inbox, fast_config):
    session = SessionOrchestrator(
        AuthContext(), seeded_backend, geolocation, inbox=inbox, config=fast_config
    )
    yield session
    if session.started:
        session.presence.close()
    await asyncio.sleep(0)


def make_request(
    request_id: str = "r1",
    created_at: Optional[datetime] = None,
    status: BookingStatus = BookingStatus.PENDING,
    preferred_date: str = "2025-07-15",
    preferred_time: str = "10:00 AM",
    client_name: str = "Sarah Johnson",
) -> BookingRequest:
    """Helper to create a BookingRequest with sensible defaults."""
    return BookingRequest(
        id=request_id,
        client_id=f"client-{request_id}",
        client_name=client_name,
        session_type="Weight Training",
        preferred_date=preferred_date,
        preferred_time=preferred_time,
        duration=60,
        location="Client Home",
        address="123 Oak Street, Boston, MA",
        rate=75,
        message="Looking for help with strength training for beginners.",
        status=status,
        created_at=created_at or T0,
    )


def minutes_after(minutes: int) -> datetime:
    return T0 + timedelta(minutes=minutes)
