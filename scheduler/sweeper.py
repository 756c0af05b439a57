"""
Overdue sweeper: periodic re-evaluation of the whole item set.

Sweeps notify directly and are not deduplicated against earlier sweeps, so
an item that stays overdue is notified again every period.
"""

import logging
from datetime import timedelta
from typing import Any, Awaitable, Callable, List, Optional, Sequence

from scheduler.timers import TimerFactory
from utils.constants import SWEEP_PERIOD

logger = logging.getLogger(__name__)

ItemsProvider = Callable[[], Sequence[Any]]
OverdueCheck = Callable[[Sequence[Any]], Awaitable[List[Any]]]
StopFn = Callable[[], None]


class OverdueSweeper:
    """Runs ``check`` over the provided items now and then every ``period``."""

    def __init__(
        self,
        timers: TimerFactory,
        check: OverdueCheck,
        period: timedelta = SWEEP_PERIOD,
    ):
        self._timers = timers
        self._check = check
        self._period = period
        self._handle: Optional[Any] = None

    @property
    def running(self) -> bool:
        return self._handle is not None

    async def start(self, provider: ItemsProvider) -> StopFn:
        """
        Start sweeping, replacing any active sweeper.

        Args:
            provider: Returns the current item set on every sweep

        Returns:
            Function that stops this sweeper (and not a later one)
        """
        self.stop()

        async def tick() -> None:
            await self.sweep(provider)

        handle = self._timers.every(self._period, tick)
        self._handle = handle
        logger.info(f"Started periodic overdue checking (every {self._period})")

        await self.sweep(provider)

        def stop() -> None:
            if self._handle is handle:
                self.stop()

        return stop

    def stop(self) -> None:
        """Stop the active sweeper, if any."""
        if self._handle is None:
            return

        handle, self._handle = self._handle, None
        self._timers.cancel(handle)
        logger.info("Stopped periodic overdue checking")

    async def sweep(self, provider: ItemsProvider) -> List[Any]:
        """Run one sweep. Failures are logged and never stop the sweeper."""
        try:
            items = list(provider())
            overdue = await self._check(items)
        except Exception as e:
            logger.error(f"Overdue sweep failed: {e}", exc_info=True)
            return []

        logger.debug(f"Overdue sweep: {len(overdue)} of {len(items)} items overdue")
        return overdue
