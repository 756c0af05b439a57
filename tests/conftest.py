"""
Pytest configuration and shared fixtures.

Reminder tests run on a simulated clock: ``FakeTimers`` keeps scheduled
actions in memory and ``advance()`` runs the ones that come due.
"""

from datetime import datetime, timedelta, timezone
from typing import Dict, List, Tuple
from unittest.mock import MagicMock, patch

import pytest

from scheduler.notifier import NotificationHost, NotificationOptions
from scheduler.permission import PermissionHost, PermissionOutcome, PermissionState
from scheduler.reminders import ReminderEngine
from scheduler.timers import TimerFactory

START = datetime(2026, 1, 15, 12, 0, tzinfo=timezone.utc)


class FakeClock:
    """Manually advanced clock."""

    def __init__(self, now: datetime = START):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


class FakeTimers(TimerFactory):
    """In-memory timers driven by FakeClock."""

    def __init__(self, clock: FakeClock):
        self.clock = clock
        self._jobs: Dict[int, list] = {}
        self._next_handle = 0

    def create(self, delay, action):
        return self._add(self.clock() + delay, action, None)

    def every(self, period, action):
        return self._add(self.clock() + period, action, period)

    def cancel(self, handle) -> None:
        self._jobs.pop(handle, None)

    def _add(self, fire_at, action, period) -> int:
        self._next_handle += 1
        self._jobs[self._next_handle] = [fire_at, action, period]
        return self._next_handle

    @property
    def pending(self) -> int:
        return len(self._jobs)

    def periodic_count(self) -> int:
        return sum(1 for job in self._jobs.values() if job[2] is not None)

    async def advance(self, delta: timedelta) -> None:
        """Move the clock forward, running every action that comes due."""
        target = self.clock.now + delta
        while True:
            due = [(job[0], handle) for handle, job in self._jobs.items() if job[0] <= target]
            if not due:
                break

            fire_at, handle = min(due)
            _, action, period = self._jobs[handle]
            self.clock.now = max(self.clock.now, fire_at)
            if period is None:
                del self._jobs[handle]
            else:
                self._jobs[handle][0] = fire_at + period
            await action()

        self.clock.now = target


class FakeNotificationHost(NotificationHost):
    """Records shown and dismissed notifications."""

    def __init__(self, available: bool = True):
        self._available = available
        self.shown: List[Tuple[str, str, NotificationOptions]] = []
        self.dismissed: List[str] = []
        self.fail = False

    @property
    def available(self) -> bool:
        return self._available

    async def show(self, title, body, options):
        if self.fail:
            raise RuntimeError("host failure")

        self.shown.append((title, body, options))

        async def dismiss() -> None:
            self.dismissed.append(options.tag)

        return dismiss

    @property
    def tags(self) -> List[str]:
        return [options.tag for _, _, options in self.shown]


class FakePermissionHost(PermissionHost):
    """Permission host with a settable state and request outcome."""

    def __init__(
        self,
        state: PermissionState = PermissionState.GRANTED,
        outcome: PermissionOutcome = PermissionOutcome.GRANTED,
    ):
        self.state = state
        self.outcome = outcome
        self.requests = 0

    def current(self) -> PermissionState:
        return self.state

    async def request(self) -> PermissionOutcome:
        self.requests += 1
        if self.outcome is PermissionOutcome.GRANTED:
            self.state = PermissionState.GRANTED
        elif self.outcome is PermissionOutcome.DENIED:
            self.state = PermissionState.DENIED
        return self.outcome


@pytest.fixture(autouse=True)
def mock_settings():
    """Mock settings for all tests."""
    with patch("config.settings") as mock_settings:
        mock_settings.bot_token = "test_token"
        mock_settings.reminder_chat_id = 123456789
        mock_settings.supabase_url = "https://test.supabase.co"
        mock_settings.supabase_key = "test_key"
        mock_settings.timezone = "UTC"
        mock_settings.reminder_horizon_days = 7
        mock_settings.sweep_period_minutes = 5
        mock_settings.notification_display_seconds = 10
        mock_settings.log_level = "INFO"
        mock_settings.log_dir = "logs"
        mock_settings.environment = "test"
        yield mock_settings


@pytest.fixture
def mock_supabase_client():
    """Create a mock Supabase client."""
    mock_client = MagicMock()
    mock_table = MagicMock()
    mock_client.table.return_value = mock_table
    return mock_client, mock_table


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def timers(clock):
    return FakeTimers(clock)


@pytest.fixture
def notification_host():
    return FakeNotificationHost()


@pytest.fixture
def permission_host():
    return FakePermissionHost()


@pytest.fixture
def engine(notification_host, permission_host, timers, clock):
    """Reminder engine on the simulated clock with permission granted."""
    return ReminderEngine(notification_host, permission_host, timers, clock=clock)
