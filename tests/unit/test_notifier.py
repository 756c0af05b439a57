"""
Unit tests for the permission gate and notification emitter.
"""

import asyncio
from datetime import timedelta
from unittest.mock import AsyncMock, MagicMock

import pytest

from scheduler.notifier import NotificationEmitter
from scheduler.permission import PermissionGate, PermissionOutcome, PermissionState


class TestPermissionGate:
    """Test the tri-state permission gate."""

    def test_reads_host_every_time(self, permission_host):
        """Test the gate never caches the host state."""
        gate = PermissionGate(permission_host)
        assert gate.current() is PermissionState.GRANTED

        permission_host.state = PermissionState.DENIED
        assert gate.current() is PermissionState.DENIED
        assert gate.is_granted() is False

    def test_missing_capability_is_denied(self):
        """Test a missing host reads as denied."""
        gate = PermissionGate(None)
        assert gate.current() is PermissionState.DENIED

    @pytest.mark.asyncio
    async def test_request_without_capability(self):
        """Test requesting without a host returns denied and never raises."""
        gate = PermissionGate(None)
        assert await gate.request() is PermissionOutcome.DENIED

    @pytest.mark.asyncio
    async def test_request_grants(self, permission_host):
        """Test a granted request changes the state."""
        permission_host.state = PermissionState.UNSET
        gate = PermissionGate(permission_host)

        assert await gate.request() is PermissionOutcome.GRANTED
        assert gate.current() is PermissionState.GRANTED

    @pytest.mark.asyncio
    async def test_dismissed_keeps_unset(self, permission_host):
        """Test a dismissed prompt leaves the state unset."""
        permission_host.state = PermissionState.UNSET
        permission_host.outcome = PermissionOutcome.DISMISSED
        gate = PermissionGate(permission_host)

        assert await gate.request() is PermissionOutcome.DISMISSED
        assert gate.current() is PermissionState.UNSET

    @pytest.mark.asyncio
    async def test_host_error_is_denied(self):
        """Test host failures are reported as denied."""
        host = MagicMock()
        host.available = True
        host.request = AsyncMock(side_effect=RuntimeError("prompt crashed"))
        gate = PermissionGate(host)

        assert await gate.request() is PermissionOutcome.DENIED

    @pytest.mark.asyncio
    async def test_concurrent_requests_share_one_prompt(self, permission_host):
        """Test a request in flight is reused."""
        gate = PermissionGate(permission_host)

        results = await asyncio.gather(gate.request(), gate.request())

        assert results == [PermissionOutcome.GRANTED, PermissionOutcome.GRANTED]
        assert permission_host.requests == 1


class TestNotificationEmitter:
    """Test the notification emitter."""

    @pytest.fixture
    def emitter(self, notification_host, permission_host, timers):
        return NotificationEmitter(
            notification_host, PermissionGate(permission_host), timers, timedelta(seconds=10)
        )

    @pytest.mark.asyncio
    async def test_emit_shows_tagged_notification(self, emitter, notification_host):
        """Test the notification carries the correlation tag."""
        dismiss = await emitter.emit("Title", "Body", "item_1")

        assert dismiss is not None
        title, body, options = notification_host.shown[0]
        assert (title, body) == ("Title", "Body")
        assert options.tag == "item_1"
        assert options.data == {"id": "item_1"}

    @pytest.mark.asyncio
    async def test_auto_retire_after_display_window(self, emitter, notification_host, timers):
        """Test notifications are dismissed after the display window."""
        await emitter.emit("Title", "Body", "item_1")

        await timers.advance(timedelta(seconds=9))
        assert notification_host.dismissed == []

        await timers.advance(timedelta(seconds=1))
        assert notification_host.dismissed == ["item_1"]

    @pytest.mark.asyncio
    async def test_retired_timer_is_forgotten(self, emitter, timers):
        await emitter.emit("Title", "Body", "item_1")
        assert emitter.pending_retirements() == 1

        await timers.advance(timedelta(seconds=10))

        assert emitter.pending_retirements() == 0

    @pytest.mark.asyncio
    async def test_cancel_retirements(self, emitter, notification_host, timers):
        """Test cancelled auto-retire timers never dismiss."""
        await emitter.emit("Title", "Body", "item_1")
        await emitter.emit("Title", "Body", "item_2")

        emitter.cancel_retirements()

        assert timers.pending == 0
        await timers.advance(timedelta(minutes=1))
        assert notification_host.dismissed == []

    @pytest.mark.asyncio
    async def test_no_emit_without_permission(self, emitter, notification_host, permission_host, timers):
        """Test nothing is shown or scheduled when not granted."""
        permission_host.state = PermissionState.UNSET

        assert await emitter.emit("Title", "Body", "item_1") is None
        assert notification_host.shown == []
        assert timers.pending == 0

    @pytest.mark.asyncio
    async def test_no_emit_without_capability(self, permission_host, timers):
        """Test a missing host is a silent no-op."""
        emitter = NotificationEmitter(None, PermissionGate(permission_host), timers)

        assert await emitter.emit("Title", "Body", "item_1") is None

    @pytest.mark.asyncio
    async def test_host_failure_is_swallowed(self, emitter, notification_host, timers):
        """Test host errors never reach the caller."""
        notification_host.fail = True

        assert await emitter.emit("Title", "Body", "item_1") is None
        assert timers.pending == 0

    @pytest.mark.asyncio
    async def test_activate_runs_callback_once(self, emitter):
        """Test activation callbacks, sync and async."""
        sync_callback = MagicMock(return_value=None)
        async_callback = AsyncMock()
        await emitter.emit("Title", "Body", "item_1", on_activate=sync_callback)
        await emitter.emit("Title", "Body", "item_2", on_activate=async_callback)

        assert await emitter.activate("item_1") is True
        assert await emitter.activate("item_2") is True
        assert await emitter.activate("item_1") is False

        sync_callback.assert_called_once()
        async_callback.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_activate_unknown(self, emitter):
        assert await emitter.activate("missing") is False
