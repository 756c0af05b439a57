"""
Timer registry: at most one pending reminder timer per revision item.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Dict, Optional

from scheduler.timers import Clock, TimerAction, TimerFactory
from utils.constants import MAX_TIMER_DELAY
from utils.datetime_utils import utc_now

logger = logging.getLogger(__name__)


@dataclass
class PendingTimer:
    """A reminder timer that has neither fired nor been cancelled."""

    item_id: str
    handle: Any
    fire_at: datetime


class TimerRegistry:
    """
    Maps item IDs to their pending timer.

    Invariant: after ``schedule(item_id, ...)`` returns there is exactly one
    pending timer for ``item_id``; after ``cancel(item_id)`` or the timer
    firing there is none.
    """

    def __init__(
        self,
        timers: TimerFactory,
        clock: Clock = utc_now,
        max_delay: timedelta = MAX_TIMER_DELAY,
    ):
        self._timers = timers
        self._clock = clock
        self._max_delay = max_delay
        self._pending: Dict[str, PendingTimer] = {}

    def schedule(
        self, item_id: str, fire_action: TimerAction, delay: timedelta
    ) -> PendingTimer:
        """
        Install a timer for an item, replacing any pending one.

        Args:
            item_id: Revision item ID
            fire_action: Coroutine function run when the timer fires
            delay: Delay before firing, clamped to ``[0, max_delay]``

        Returns:
            The installed PendingTimer
        """
        self.cancel(item_id)

        delay = self._clamp(item_id, delay)
        entry = PendingTimer(item_id=item_id, handle=None, fire_at=self._clock() + delay)

        async def fire() -> None:
            try:
                await fire_action()
            finally:
                # A newer schedule() may have replaced this entry meanwhile
                if self._pending.get(item_id) is entry:
                    del self._pending[item_id]

        entry.handle = self._timers.create(delay, fire)
        self._pending[item_id] = entry
        return entry

    def cancel(self, item_id: str) -> bool:
        """
        Cancel the pending timer for an item.

        Returns:
            True if a timer was cancelled, False if none was pending
        """
        entry = self._pending.pop(item_id, None)
        if entry is None:
            return False

        self._timers.cancel(entry.handle)
        return True

    def get(self, item_id: str) -> Optional[PendingTimer]:
        return self._pending.get(item_id)

    def count(self) -> int:
        """Number of pending timers."""
        return len(self._pending)

    def clear(self) -> None:
        """Cancel and forget every pending timer."""
        entries = list(self._pending.values())
        self._pending.clear()
        for entry in entries:
            self._timers.cancel(entry.handle)

    def __contains__(self, item_id: str) -> bool:
        return item_id in self._pending

    def __len__(self) -> int:
        return len(self._pending)

    def _clamp(self, item_id: str, delay: timedelta) -> timedelta:
        if delay < timedelta(0):
            return timedelta(0)
        if delay > self._max_delay:
            logger.warning(
                f"Reminder delay for {item_id} ({delay}) exceeds timer limit, "
                f"clamping to {self._max_delay}"
            )
            return self._max_delay
        return delay
