"""Tests for the presence controller's optimistic toggle and location wiring."""

import asyncio

import pytest

from trainer_core.errors import LocationUnavailableError, PermissionDeniedError, SyncFailedError
from trainer_core.schemas.presence_schema import PermissionResult, PresenceState
from trainer_core.tools.geolocation import DEFAULT_COORDINATE, failing_fix


class TestGoingOnline:
    @pytest.mark.asyncio
    async def test_starts_offline(self, presence):
        assert presence.state == PresenceState()
        assert not presence.committed_online
        assert presence.permission is None

    @pytest.mark.asyncio
    async def test_online_success(self, presence, backend):
        result = await presence.set_online(True)
        assert result.success
        assert result.message == "You're online."
        assert presence.is_online
        assert presence.committed_online
        assert backend.persisted_online is True
        assert presence.feed.is_running

    @pytest.mark.asyncio
    async def test_location_arrives_after_going_online(self, presence):
        await presence.set_online(True)
        await asyncio.sleep(0.01)
        assert presence.get_location() == DEFAULT_COORDINATE
        assert not presence.state.location_pending

    @pytest.mark.asyncio
    async def test_permission_is_asked_once(self, presence, geolocation):
        await presence.set_online(True)
        await presence.set_online(False)
        await presence.set_online(True)
        assert geolocation.permission_requests == 1
        assert presence.permission is PermissionResult.GRANTED

    @pytest.mark.asyncio
    async def test_permission_denied_rolls_back_without_sync(self, make_presence, geolocation, backend):
        denied = []
        geolocation.permission = PermissionResult.DENIED
        presence = make_presence(on_permission_denied=lambda: denied.append(True))

        result = await presence.set_online(True)
        assert not result.success
        assert isinstance(result.error, PermissionDeniedError)
        assert result.error.kind == "permission_denied"
        assert not presence.is_online
        assert backend.sync_calls == []
        assert denied == [True]
        assert not presence.feed.is_running

    @pytest.mark.asyncio
    async def test_denied_permission_is_asked_again(self, presence, geolocation):
        geolocation.permission = PermissionResult.DENIED
        await presence.set_online(True)
        geolocation.permission = PermissionResult.GRANTED
        result = await presence.set_online(True)
        assert result.success
        assert geolocation.permission_requests == 2

    @pytest.mark.asyncio
    async def test_sync_failure_reverts_to_offline(self, presence, backend):
        backend.script_syncs(False)
        result = await presence.set_online(True)
        assert isinstance(result.error, SyncFailedError)
        assert result.message.startswith("Failed to update online status")
        assert not presence.is_online
        assert not presence.committed_online
        assert backend.persisted_online is None
        assert not presence.feed.is_running


class TestGoingOffline:
    @pytest.mark.asyncio
    async def test_offline_success_stops_feed(self, presence, backend):
        await presence.set_online(True)
        result = await presence.set_online(False)
        assert result.success
        assert result.message == "You're offline."
        assert not presence.is_online
        assert backend.persisted_online is False
        assert not presence.feed.is_running

    @pytest.mark.asyncio
    async def test_last_known_location_is_kept(self, presence):
        await presence.set_online(True)
        await asyncio.sleep(0.01)
        await presence.set_online(False)
        assert presence.get_location() == DEFAULT_COORDINATE

    @pytest.mark.asyncio
    async def test_offline_sync_failure_reverts_to_online(self, presence, backend):
        await presence.set_online(True)
        backend.script_syncs(False)
        result = await presence.set_online(False)
        assert isinstance(result.error, SyncFailedError)
        assert presence.is_online
        assert presence.committed_online
        assert presence.feed.is_running

    @pytest.mark.asyncio
    async def test_in_flight_fix_not_applied_after_offline(self, presence, geolocation):
        geolocation.fix_gate = asyncio.Event()
        await presence.set_online(True)
        await asyncio.sleep(0.01)
        await presence.set_online(False)
        geolocation.fix_gate.set()
        await asyncio.sleep(0.02)
        assert presence.get_location() is None
        assert geolocation.fix_requests >= 1


class TestLocationFailures:
    @pytest.mark.asyncio
    async def test_sampling_failure_keeps_trainer_online(self, make_presence, geolocation):
        presence = make_presence(min_interval_sec=10.0)
        geolocation.queue_fix(failing_fix())
        result = await presence.set_online(True)
        await asyncio.sleep(0.01)
        assert result.success
        assert presence.is_online
        assert presence.state.location_pending
        assert presence.get_location() is None
        assert isinstance(presence.last_location_error, LocationUnavailableError)

    @pytest.mark.asyncio
    async def test_revoked_permission_is_asked_again(self, presence, geolocation):
        await presence.set_online(True)
        geolocation.revoke_permission()
        await asyncio.sleep(0.1)
        assert presence.permission is None
        assert isinstance(presence.last_location_error, PermissionDeniedError)
        assert presence.is_online


class TestSuperseding:
    @pytest.mark.asyncio
    async def test_stale_success_does_not_override_newer_toggle(self, presence, backend):
        backend.sync_gate = asyncio.Event()
        first = asyncio.create_task(presence.set_online(True))
        await asyncio.sleep(0.01)
        second = asyncio.create_task(presence.set_online(False))
        await asyncio.sleep(0.01)
        assert not presence.is_online

        backend.sync_gate.set()
        r1, r2 = await asyncio.gather(first, second)
        assert r1.superseded
        assert r1.success
        assert r2.success
        assert not r2.superseded
        assert not presence.is_online
        assert not presence.committed_online
        assert backend.sync_calls == [True, False]
        assert backend.persisted_online is False

    @pytest.mark.asyncio
    async def test_last_successful_sync_wins(self, presence, backend):
        backend.sync_gate = asyncio.Event()
        backend.script_syncs(True, False)
        first = asyncio.create_task(presence.set_online(True))
        await asyncio.sleep(0.01)
        second = asyncio.create_task(presence.set_online(False))
        await asyncio.sleep(0.01)

        backend.sync_gate.set()
        r1, r2 = await asyncio.gather(first, second)
        assert r1.superseded
        assert isinstance(r2.error, SyncFailedError)
        assert presence.is_online
        assert presence.committed_online
        assert backend.persisted_online is True
        assert presence.feed.is_running

    @pytest.mark.asyncio
    async def test_superseded_while_waiting_for_permission(self, presence, geolocation, backend):
        geolocation.permission_gate = asyncio.Event()
        first = asyncio.create_task(presence.set_online(True))
        await asyncio.sleep(0.01)
        second = asyncio.create_task(presence.set_online(False))
        await asyncio.sleep(0.01)

        geolocation.permission_gate.set()
        r1, r2 = await asyncio.gather(first, second)
        assert r1.superseded
        assert r2.success
        assert backend.sync_calls == [False]
        assert not presence.is_online
        assert not presence.feed.is_running


class TestTimeoutsAndListeners:
    @pytest.mark.asyncio
    async def test_permission_timeout_counts_as_denied(self, make_presence, geolocation, backend):
        geolocation.permission_gate = asyncio.Event()
        presence = make_presence(permission_timeout_sec=0.02)
        result = await presence.set_online(True)
        assert isinstance(result.error, PermissionDeniedError)
        assert presence.permission is PermissionResult.DENIED
        assert backend.sync_calls == []

    @pytest.mark.asyncio
    async def test_sync_timeout_reverts(self, make_presence, backend):
        backend.sync_gate = asyncio.Event()
        presence = make_presence(sync_timeout_sec=0.02)
        result = await presence.set_online(True)
        assert isinstance(result.error, SyncFailedError)
        assert "timed out" in result.message
        assert not presence.is_online

    @pytest.mark.asyncio
    async def test_listeners_see_optimistic_state_first(self, presence):
        states = []
        presence.add_listener(states.append)
        await presence.set_online(True)
        assert states[0].is_online
        assert states[0].location_pending

    @pytest.mark.asyncio
    async def test_removed_listener_is_not_called(self, presence):
        states = []
        presence.add_listener(states.append)
        presence.remove_listener(states.append)
        await presence.set_online(True)
        assert states == []

    @pytest.mark.asyncio
    async def test_request_permission_reports_denial(self, make_presence, geolocation):
        denied = []
        geolocation.permission = PermissionResult.DENIED
        presence = make_presence(on_permission_denied=lambda: denied.append(True))
        assert await presence.request_permission() is PermissionResult.DENIED
        assert denied == [True]


class TestUnexpectedBackendErrors:
    @pytest.mark.asyncio
    async def test_connection_error_rolls_back_online(self, presence, backend):
        backend.script_syncs(ConnectionError("connection reset"))
        result = await presence.set_online(True)
        assert isinstance(result.error, SyncFailedError)
        assert "ConnectionError" in result.message
        assert not presence.is_online
        assert not presence.committed_online
        assert not presence.feed.is_running

    @pytest.mark.asyncio
    async def test_os_error_rolls_back_offline(self, presence, backend):
        await presence.set_online(True)
        backend.script_syncs(OSError("network unreachable"))
        result = await presence.set_online(False)
        assert isinstance(result.error, SyncFailedError)
        assert presence.is_online
        assert presence.committed_online
        assert presence.feed.is_running

    @pytest.mark.asyncio
    async def test_next_toggle_works_after_unexpected_error(self, presence, backend):
        backend.script_syncs(ConnectionError("connection reset"))
        await presence.set_online(True)
        result = await presence.set_online(True)
        assert result.success
        assert backend.persisted_online is True


class TestStalePermissionAnswers:
    @pytest.mark.asyncio
    async def test_superseded_denial_does_not_prompt(self, make_presence, geolocation, backend):
        denied = []
        geolocation.permission = PermissionResult.DENIED
        geolocation.permission_gate = asyncio.Event()
        presence = make_presence(on_permission_denied=lambda: denied.append(True))

        first = asyncio.create_task(presence.set_online(True))
        await asyncio.sleep(0.01)
        second = asyncio.create_task(presence.set_online(False))
        await asyncio.sleep(0.01)
        geolocation.permission_gate.set()
        r1, r2 = await asyncio.gather(first, second)

        assert r1.superseded
        assert r1.error is None
        assert r2.success
        assert denied == []
        assert presence.permission is PermissionResult.DENIED
        assert not presence.is_online

    @pytest.mark.asyncio
    async def test_current_denial_prompts_once(self, make_presence, geolocation):
        denied = []
        geolocation.permission = PermissionResult.DENIED
        presence = make_presence(on_permission_denied=lambda: denied.append(True))
        await presence.set_online(True)
        assert denied == [True]
