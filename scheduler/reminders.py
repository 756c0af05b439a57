"""
Reminder scheduling engine for revision items.

Decides for every revision item whether a reminder is shown now, deferred
with a timer, or suppressed because it is beyond the horizon; keeps at most
one pending timer per item; runs the periodic overdue sweep.

Timers run on APScheduler's AsyncIOScheduler (in-memory job store: reminder
jobs are closures and are rebuilt from the database on every start).
"""

import logging
from datetime import timedelta
from typing import Any, List, Mapping, Optional, Sequence, Union

from apscheduler.schedulers.asyncio import AsyncIOScheduler

from config import settings
from scheduler.notifier import ActivationCallback, NotificationEmitter, NotificationHost
from scheduler.permission import (
    PermissionGate,
    PermissionHost,
    PermissionOutcome,
    PermissionState,
)
from scheduler.policy import ReminderAction, ReminderDecision, classify
from scheduler.registry import TimerRegistry
from scheduler.sweeper import ItemsProvider, OverdueSweeper, StopFn
from scheduler.timers import APSchedulerTimers, Clock, TimerFactory
from utils.constants import (
    NOTIFICATION_DISPLAY_WINDOW,
    REMINDER_HORIZON,
    SWEEP_PERIOD,
)
from utils.datetime_utils import utc_now

logger = logging.getLogger(__name__)

REMINDER_TITLE = "🔔 Revision Reminder"
OVERDUE_TITLE = "🔔 Revision Overdue"


def _field(item: Any, name: str) -> Any:
    """Read a field from a model or a plain row dict."""
    if isinstance(item, Mapping):
        return item.get(name)
    return getattr(item, name, None)


class ReminderEngine:
    """
    Facade used by the persistence/UI layer.

    Host capabilities and the timer factory are injected so the engine can be
    driven by a simulated clock in tests.
    """

    def __init__(
        self,
        notification_host: Optional[NotificationHost],
        permission_host: Optional[PermissionHost],
        timers: TimerFactory,
        clock: Clock = utc_now,
        horizon: timedelta = REMINDER_HORIZON,
        sweep_period: timedelta = SWEEP_PERIOD,
        display_window: timedelta = NOTIFICATION_DISPLAY_WINDOW,
    ):
        self._clock = clock
        self._horizon = horizon
        self.gate = PermissionGate(permission_host)
        self.emitter = NotificationEmitter(
            notification_host, self.gate, timers, display_window
        )
        self.registry = TimerRegistry(timers, clock)
        self.sweeper = OverdueSweeper(timers, self.check_overdue_now, sweep_period)

    @property
    def permission(self) -> PermissionState:
        return self.gate.current()

    async def request_permission(self) -> PermissionOutcome:
        """Ask the host for notification permission."""
        return await self.gate.request()

    def classify(self, next_review: Any) -> ReminderDecision:
        return classify(self._clock(), next_review, self._horizon)

    async def schedule_reminder(
        self,
        item_id: str,
        title: str,
        next_review: Any,
        on_activate: Optional[ActivationCallback] = None,
    ) -> Optional[ReminderDecision]:
        """
        (Re)schedule the reminder for one item.

        Overdue items are notified immediately without a timer; items due
        within the horizon get exactly one pending timer; items further out
        get nothing. Any earlier pending timer for the item is replaced.

        Returns:
            The decision taken, or None when notifications are not permitted
        """
        if not self.gate.is_granted():
            return None

        decision = self.classify(next_review)

        if decision.action is ReminderAction.DEFERRED:

            async def fire() -> None:
                await self.emitter.emit(
                    REMINDER_TITLE,
                    f'📚 Time to review: "{title}"',
                    item_id,
                    on_activate,
                )

            self.registry.schedule(item_id, fire, decision.delay)
            logger.info(
                f'Reminder scheduled for "{title}" in '
                f"{round(decision.delay.total_seconds())} seconds"
            )
            return decision

        # The item's previous timer no longer matches its due time
        self.registry.cancel(item_id)

        if decision.action is ReminderAction.IMMEDIATE:
            await self.emitter.emit(
                REMINDER_TITLE,
                f'⚠️ OVERDUE: Time to review "{title}"',
                item_id,
                on_activate,
            )
        else:
            logger.debug(f'Reminder for "{title}" is beyond the horizon, not scheduled')

        return decision

    def cancel_reminder(self, item_id: str) -> None:
        """Cancel the pending reminder for an item. Unknown IDs are ignored."""
        if self.registry.cancel(item_id):
            logger.info(f"Cancelled reminder for {item_id}")

    async def check_overdue_now(self, items: Sequence[Any]) -> List[Any]:
        """
        Notify every overdue item.

        Returns:
            The overdue subset of ``items`` (also when notifications are not
            permitted, in which case nothing is shown)
        """
        overdue = [
            item
            for item in items
            if self.classify(_field(item, "next_review")).is_immediate
        ]

        for item in overdue:
            await self.emitter.emit(
                OVERDUE_TITLE,
                f'⚠️ OVERDUE: "{_field(item, "title")}" needs review!',
                str(_field(item, "id")),
            )

        return overdue

    async def start_periodic_sweep(
        self, items: Union[Sequence[Any], ItemsProvider]
    ) -> StopFn:
        """
        Check for overdue items now and then every sweep period.

        Args:
            items: Item snapshot, or a callable returning the current items

        Returns:
            Function that stops the sweep
        """
        if not self.gate.is_granted():
            return lambda: None

        if callable(items):
            provider = items
        else:
            snapshot = list(items)
            provider = lambda: snapshot  # noqa: E731

        return await self.sweeper.start(provider)

    async def schedule_all(self, items: Sequence[Any]) -> int:
        """
        Schedule reminders for every item.

        Returns:
            Number of pending timers afterwards
        """
        for item in items:
            await self.schedule_reminder(
                str(_field(item, "id")),
                _field(item, "title"),
                _field(item, "next_review"),
            )
        return self.pending_count()

    def stop_all_reminders(self) -> None:
        """Stop the sweep and cancel every pending timer, auto-retire included."""
        self.sweeper.stop()
        self.registry.clear()
        self.emitter.cancel_retirements()
        logger.info("Stopped all reminders and checking")

    def pending_count(self) -> int:
        return self.registry.count()


def _create_scheduler() -> AsyncIOScheduler:
    """Create the in-memory AsyncIOScheduler used for reminder timers."""
    return AsyncIOScheduler(timezone="UTC")


scheduler = _create_scheduler()

# Engine instance - created via create_engine
_engine: Optional[ReminderEngine] = None


def create_engine(
    notification_host: Optional[NotificationHost],
    permission_host: Optional[PermissionHost],
) -> ReminderEngine:
    """
    Build the process-wide engine on top of the module scheduler.

    Args:
        notification_host: Host that displays notifications
        permission_host: Host that owns the permission flag

    Returns:
        The engine, also available through get_engine()
    """
    global _engine

    _engine = ReminderEngine(
        notification_host,
        permission_host,
        APSchedulerTimers(scheduler),
        horizon=timedelta(days=settings.reminder_horizon_days),
        sweep_period=timedelta(minutes=settings.sweep_period_minutes),
        display_window=timedelta(seconds=settings.notification_display_seconds),
    )
    logger.info("Reminder engine created")
    return _engine


def get_engine() -> ReminderEngine:
    """Get the process-wide engine."""
    if _engine is None:
        raise RuntimeError("Reminder engine not created - call create_engine() first")
    return _engine


def setup_scheduler() -> None:
    """Start the scheduler."""
    if not scheduler.running:
        scheduler.start()
        logger.info("Scheduler started")


def shutdown_scheduler() -> None:
    """Release every reminder resource and stop the scheduler."""
    if _engine is not None:
        _engine.stop_all_reminders()

    if scheduler.running:
        scheduler.shutdown(wait=False)
        logger.info("Scheduler stopped")
