"""
Telegram implementations of the reminder host capabilities.

- Permission: the chat must be reachable by the bot. Blocking the bot
  revokes it; the next send attempt notices.
- Notifications: one message per tag. Showing a new notification for a tag
  deletes the previous message with that tag.
"""

import html
import logging
from typing import Dict, Optional

from aiogram import Bot
from aiogram.exceptions import (
    TelegramAPIError,
    TelegramBadRequest,
    TelegramForbiddenError,
)

from bot.keyboards import get_reminder_keyboard
from scheduler.notifier import DismissHandle, NotificationHost, NotificationOptions
from scheduler.permission import PermissionHost, PermissionOutcome, PermissionState

logger = logging.getLogger(__name__)


class TelegramPermissionHost(PermissionHost):
    """Permission to message the configured reminder chat."""

    def __init__(self, bot: Bot, chat_id: Optional[int]):
        self._bot = bot
        self._chat_id = chat_id
        self._state = PermissionState.UNSET

    @property
    def available(self) -> bool:
        return self._chat_id is not None

    def current(self) -> PermissionState:
        return self._state

    async def request(self) -> PermissionOutcome:
        """
        Probe the chat.

        Returns:
            GRANTED if the bot can reach the chat, DENIED if the user blocked
            the bot, DISMISSED if the chat is unknown (user never started it)
        """
        try:
            await self._bot.get_chat(self._chat_id)
        except TelegramForbiddenError:
            self._state = PermissionState.DENIED
            return PermissionOutcome.DENIED
        except TelegramBadRequest as e:
            logger.warning(f"Reminder chat {self._chat_id} not reachable: {e}")
            return PermissionOutcome.DISMISSED

        self._state = PermissionState.GRANTED
        return PermissionOutcome.GRANTED

    def revoke(self) -> None:
        """Record that the user blocked the bot."""
        if self._state is not PermissionState.DENIED:
            logger.warning(f"Bot blocked in chat {self._chat_id}, reminders disabled")
        self._state = PermissionState.DENIED


class TelegramNotificationHost(NotificationHost):
    """Shows reminders as chat messages with action buttons."""

    def __init__(
        self,
        bot: Bot,
        chat_id: Optional[int],
        permission: Optional[TelegramPermissionHost] = None,
    ):
        self._bot = bot
        self._chat_id = chat_id
        self._permission = permission
        # tag -> message ID of the message currently shown for it
        self._messages: Dict[str, int] = {}

    @property
    def available(self) -> bool:
        return self._chat_id is not None

    async def show(
        self, title: str, body: str, options: NotificationOptions
    ) -> DismissHandle:
        previous = self._messages.pop(options.tag, None)
        if previous is not None:
            await self._delete(previous)

        text = f"<b>{html.escape(title)}</b>\n\n{html.escape(body)}"
        try:
            message = await self._bot.send_message(
                self._chat_id,
                text,
                reply_markup=get_reminder_keyboard(options.tag),
            )
        except TelegramForbiddenError:
            if self._permission is not None:
                self._permission.revoke()
            raise

        message_id = message.message_id
        self._messages[options.tag] = message_id

        async def dismiss() -> None:
            if self._messages.get(options.tag) != message_id:
                return
            del self._messages[options.tag]
            await self._delete(message_id)

        return dismiss

    async def _delete(self, message_id: int) -> None:
        try:
            await self._bot.delete_message(self._chat_id, message_id)
        except TelegramAPIError as e:
            # Already deleted by the user, or older than 48h
            logger.debug(f"Could not delete reminder message {message_id}: {e}")
