"""
Offline console demo: runs a full trainer session without a backend.

Drives the real orchestrator, presence controller, location feed and
booking store against the mock collaborators. No network, no device.

Usage:
    python console_demo.py
    python console_demo.py --scenario sync-failure
    python console_demo.py --scenario permission-denied
"""

import argparse
import asyncio
from datetime import datetime, timezone

from trainer_core.display.messages import (
    location_text,
    presence_status_text,
    request_summary,
    schedule_line,
    time_ago,
)
from trainer_core.schemas.availability_schema import Weekday
from trainer_core.schemas.booking_schema import BookingRequest
from trainer_core.schemas.presence_schema import Coordinate, PermissionResult
from trainer_core.schemas.profile_schema import User
from trainer_core.session.auth import AuthContext
from trainer_core.session.orchestrator import SessionOrchestrator
from trainer_core.tools.backend import MockProfileBackend
from trainer_core.tools.geolocation import MockGeolocationService, failing_fix
from trainer_core.tools.inbox import MockBookingInbox

GREEN = "\033[92m"
YELLOW = "\033[93m"
RED = "\033[91m"
DIM = "\033[2m"
RESET = "\033[0m"
BOLD = "\033[1m"

SCENARIOS = ["happy-path", "sync-failure", "permission-denied"]


class ConsoleSession:
    """Plays one scripted trainer session in the terminal."""

    def __init__(self, scenario: str) -> None:
        self.scenario = scenario
        self.backend = MockProfileBackend()
        permission = (
            PermissionResult.DENIED if scenario == "permission-denied" else PermissionResult.GRANTED
        )
        self.geolocation = MockGeolocationService(permission=permission)
        self.inbox = MockBookingInbox()
        self.auth = AuthContext()
        self.session = SessionOrchestrator(
            self.auth,
            self.backend,
            self.geolocation,
            inbox=self.inbox,
            on_permission_denied=lambda: self.say(
                "Location Required: open Settings to allow location access.", RED
            ),
        )

    def say(self, text: str, color: str = GREEN) -> None:
        print(f"{color}{text}{RESET}")

    def system_log(self, text: str) -> None:
        print(f"{DIM}  >> {text}{RESET}")

    def show_presence(self) -> None:
        state = self.session.presence.state
        self.say(f"{BOLD}{presence_status_text(state)}{RESET} {DIM}{location_text(state)}")
        self.system_log(self.session.visibility_message())

    def show_requests(self) -> None:
        pending = self.session.bookings.list_pending()
        resolved = self.session.bookings.list_resolved()
        self.say(f"Pending Requests ({len(pending)})", YELLOW)
        for request in pending:
            self.system_log(
                f"[{request.id}] {request.client_name} - {request_summary(request)}"
                f" ({time_ago(request.created_at)})"
            )
        if resolved:
            self.say("Recent Activity", YELLOW)
            for request in resolved:
                self.system_log(f"[{request.id}] {request.client_name} - {request.status.value.upper()}")

    async def run(self) -> None:
        self.system_log(f"screen: {self.session.current_screen().value}")
        self.auth.login(User(id="1", name="John Smith", email="john@example.com"))
        ok = await self.session.initialize()
        self.system_log(f"initialized={ok} screen: {self.session.current_screen().value}")

        if self.session.availability is not None:
            self.say("Weekly Schedule", YELLOW)
            for day in Weekday:
                window = self.session.availability.window_for(day)
                self.system_log(f"{day.value.capitalize():<10} {schedule_line(window)}")

        if self.scenario == "sync-failure":
            self.backend.script_syncs(False)
        self.geolocation.queue_fix(failing_fix())

        result = await self.session.set_online(True)
        if not result.success:
            self.say(f"Error: {result.message}", RED)
        await asyncio.sleep(0.05)
        self.show_presence()

        if self.session.accepting_new_work:
            self.geolocation.push_position(Coordinate(latitude=42.3611, longitude=-71.0570))
            await asyncio.sleep(0.05)
            self.show_presence()

        self.inbox.push(BookingRequest(
            id="3",
            client_id="client3",
            client_name="Priya Patel",
            session_type="HIIT",
            preferred_date="2025-07-19",
            preferred_time="9:00 AM",
            duration=30,
            location="Outdoor Park",
            address="Boston Common, Boston, MA",
            rate=60,
            message="Short morning sessions please.",
            created_at=datetime.now(timezone.utc),
        ))
        self.show_requests()

        for request_id, action, message in [
            ("2", "accept", None),
            ("1", "decline", "Fully booked that morning, sorry!"),
            ("2", "decline", None),
        ]:
            result = await self.session.respond(request_id, action, message)
            color = GREEN if result.success else RED
            self.say(f"{action} {request_id}: {result.message}", color)
        self.show_requests()

        await self.session.logout()
        self.system_log(f"logged out, screen: {self.session.current_screen().value}")
        self.system_log(f"backend online flag: {self.backend.persisted_online}")


def main() -> None:
    parser = argparse.ArgumentParser(description="Offline trainer session demo")
    parser.add_argument(
        "--scenario",
        choices=SCENARIOS,
        default="happy-path",
        help="Which scripted session to play",
    )
    args = parser.parse_args()
    asyncio.run(ConsoleSession(args.scenario).run())


if __name__ == "__main__":
    main()
