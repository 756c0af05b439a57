"""Telegram bot handlers and reminder host capabilities."""

from .handlers import register_handlers
from .notifications import TelegramNotificationHost, TelegramPermissionHost

__all__ = [
    "register_handlers",
    "TelegramNotificationHost",
    "TelegramPermissionHost",
]
