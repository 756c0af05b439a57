"""
Notification emitter.

Wraps the host notification capability: shows a titled alert tagged with a
correlation ID and retires it after a fixed display window.
"""

import inspect
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Any, Awaitable, Callable, Dict, Optional, Union

from scheduler.permission import PermissionGate
from scheduler.timers import TimerFactory
from utils.constants import NOTIFICATION_DISPLAY_WINDOW

logger = logging.getLogger(__name__)

DismissHandle = Callable[[], Awaitable[None]]
ActivationCallback = Callable[[], Union[None, Awaitable[None]]]


@dataclass
class NotificationOptions:
    """Presentation options passed to the host."""

    # A later notification with the same tag replaces the earlier one
    tag: str
    data: Dict[str, Any] = field(default_factory=dict)
    require_interaction: bool = True


class NotificationHost(ABC):
    """Host capability that actually displays notifications."""

    @property
    def available(self) -> bool:
        return True

    @abstractmethod
    async def show(
        self, title: str, body: str, options: NotificationOptions
    ) -> DismissHandle:
        """Display a notification. Returns a coroutine function that removes it."""


class NotificationEmitter:
    """Permission-gated notification emitter with auto-retire."""

    def __init__(
        self,
        host: Optional[NotificationHost],
        permission: PermissionGate,
        timers: TimerFactory,
        display_window: timedelta = NOTIFICATION_DISPLAY_WINDOW,
    ):
        self._host = host
        self._permission = permission
        self._timers = timers
        self._display_window = display_window
        self._activations: Dict[str, ActivationCallback] = {}
        # Pending auto-retire timers, keyed by emit sequence number
        self._retirements: Dict[int, Any] = {}
        self._retire_seq = 0

    async def emit(
        self,
        title: str,
        body: str,
        correlation_id: str,
        on_activate: Optional[ActivationCallback] = None,
    ) -> Optional[DismissHandle]:
        """
        Show a notification.

        Args:
            title: Notification title
            body: Notification text
            correlation_id: Tag; usually the revision item ID
            on_activate: Called when the user activates the notification

        Returns:
            Dismiss handle, or None when nothing was shown
        """
        if self._host is None or not self._host.available:
            return None
        if not self._permission.is_granted():
            return None

        options = NotificationOptions(tag=correlation_id, data={"id": correlation_id})
        try:
            dismiss = await self._host.show(title, body, options)
        except Exception as e:
            logger.error(
                f"Failed to show notification for {correlation_id}: {e}", exc_info=True
            )
            return None

        if on_activate is not None:
            self._activations[correlation_id] = on_activate
        else:
            self._activations.pop(correlation_id, None)

        self._retire_seq += 1
        seq = self._retire_seq

        async def retire() -> None:
            self._retirements.pop(seq, None)
            try:
                await dismiss()
            except Exception as e:
                logger.warning(f"Failed to retire notification {correlation_id}: {e}")

        self._retirements[seq] = self._timers.create(self._display_window, retire)
        return dismiss

    def cancel_retirements(self) -> None:
        """Cancel every pending auto-retire timer."""
        handles = list(self._retirements.values())
        self._retirements.clear()
        for handle in handles:
            self._timers.cancel(handle)

    def pending_retirements(self) -> int:
        return len(self._retirements)

    async def activate(self, correlation_id: str) -> bool:
        """
        Run the activation callback of a notification.

        Returns:
            True if a callback was registered for the tag
        """
        callback = self._activations.pop(correlation_id, None)
        if callback is None:
            return False

        result = callback()
        if inspect.isawaitable(result):
            await result
        return True
