"""
Deferred-callback timers.

The registry, sweeper and emitter only depend on ``TimerFactory``. In the
running bot it is backed by APScheduler's ``AsyncIOScheduler``; tests use a
simulated clock implementation.

Actions must be coroutine functions: APScheduler's ``AsyncIOExecutor`` runs
them on the event loop, while plain functions would be sent to a thread pool.
"""

import logging
from abc import ABC, abstractmethod
from datetime import datetime, timedelta
from typing import Any, Awaitable, Callable

from apscheduler.jobstores.base import JobLookupError
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.date import DateTrigger
from apscheduler.triggers.interval import IntervalTrigger

from utils.datetime_utils import utc_now

logger = logging.getLogger(__name__)

TimerAction = Callable[[], Awaitable[None]]
Clock = Callable[[], datetime]


class TimerFactory(ABC):
    """Creates and cancels deferred actions."""

    @abstractmethod
    def create(self, delay: timedelta, action: TimerAction) -> Any:
        """Run ``action`` once after ``delay``. Returns a cancellation handle."""

    @abstractmethod
    def every(self, period: timedelta, action: TimerAction) -> Any:
        """Run ``action`` every ``period``, first after one period."""

    @abstractmethod
    def cancel(self, handle: Any) -> None:
        """Cancel a handle. Unknown, fired or already cancelled handles are ignored."""


class APSchedulerTimers(TimerFactory):
    """TimerFactory backed by an APScheduler AsyncIOScheduler."""

    def __init__(self, scheduler: AsyncIOScheduler, clock: Clock = utc_now):
        self._scheduler = scheduler
        self._clock = clock

    def create(self, delay: timedelta, action: TimerAction):
        # Absolute target; a target that passed while the process was
        # suspended still fires on resume
        run_date = self._clock() + delay
        return self._scheduler.add_job(
            action,
            trigger=DateTrigger(run_date=run_date),
            misfire_grace_time=None,
        )

    def every(self, period: timedelta, action: TimerAction):
        return self._scheduler.add_job(
            action,
            trigger=IntervalTrigger(seconds=period.total_seconds()),
            coalesce=True,
            max_instances=1,
            misfire_grace_time=None,
        )

    def cancel(self, handle) -> None:
        if handle is None:
            return
        try:
            handle.remove()
        except JobLookupError:
            logger.debug(f"Timer job {handle.id} already gone")
