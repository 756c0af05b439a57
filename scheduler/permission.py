"""
Permission gate for emitting notifications.

The gate never caches the host's answer: ``current()`` re-reads the host
every time so changes made outside the process (e.g. the user blocking the
bot) are observed on the next call.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from enum import Enum
from typing import Optional

logger = logging.getLogger(__name__)


class PermissionState(str, Enum):
    """Whether notifications may be emitted."""

    UNSET = "unset"
    GRANTED = "granted"
    DENIED = "denied"


class PermissionOutcome(str, Enum):
    """Result of asking the host for permission."""

    GRANTED = "granted"
    DENIED = "denied"
    DISMISSED = "dismissed"


class PermissionHost(ABC):
    """Host capability that owns the actual permission flag."""

    @property
    def available(self) -> bool:
        """False when the host cannot deliver notifications at all."""
        return True

    @abstractmethod
    def current(self) -> PermissionState:
        """Current permission as seen by the host."""

    @abstractmethod
    async def request(self) -> PermissionOutcome:
        """Ask for permission. The host serializes prompts."""


class PermissionGate:
    """Tri-state permission flag consulted by every reminder component."""

    def __init__(self, host: Optional[PermissionHost]):
        self._host = host
        self._in_flight: Optional[asyncio.Future] = None

    @property
    def capable(self) -> bool:
        return self._host is not None and self._host.available

    def current(self) -> PermissionState:
        """Current permission state. Missing capability reads as denied."""
        if not self.capable:
            return PermissionState.DENIED
        return PermissionState(self._host.current())

    def is_granted(self) -> bool:
        return self.current() is PermissionState.GRANTED

    async def request(self) -> PermissionOutcome:
        """
        Ask the host for permission.

        Concurrent callers share the request already in flight.

        Returns:
            PermissionOutcome; DENIED when the capability is missing or the
            host fails
        """
        if not self.capable:
            return PermissionOutcome.DENIED

        if self._in_flight is None:
            self._in_flight = asyncio.ensure_future(self._request_from_host())
            self._in_flight.add_done_callback(self._clear_in_flight)

        return await asyncio.shield(self._in_flight)

    def _clear_in_flight(self, _future: asyncio.Future) -> None:
        self._in_flight = None

    async def _request_from_host(self) -> PermissionOutcome:
        try:
            outcome = PermissionOutcome(await self._host.request())
        except Exception as e:
            logger.error(f"Notification permission request failed: {e}", exc_info=True)
            return PermissionOutcome.DENIED

        logger.info(f"Notification permission request: {outcome.value}")
        return outcome
