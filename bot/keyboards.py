"""
Inline keyboards for bot interactions.
"""

from typing import List

from aiogram.types import InlineKeyboardButton, InlineKeyboardMarkup
from aiogram.utils.keyboard import InlineKeyboardBuilder

from models.revision_item import RevisionItem
from utils.constants import DUE_ITEMS_DISPLAY_LIMIT

REVIEWED_PREFIX = "reviewed"
REMIND_PREFIX = "remind"

MAX_BUTTON_TITLE_LENGTH = 40


def get_main_menu_keyboard() -> InlineKeyboardMarkup:
    """Get main menu keyboard."""
    builder = InlineKeyboardBuilder()

    builder.row(
        InlineKeyboardButton(text="📋 Due for Review", callback_data="due_items")
    )
    builder.row(
        InlineKeyboardButton(text="📅 Today's Plan", callback_data="today")
    )
    builder.row(
        InlineKeyboardButton(text="🔔 Enable Reminders", callback_data="enable_notifications"),
        InlineKeyboardButton(text="🔍 Check Now", callback_data="check_now"),
    )

    return builder.as_markup()


def get_reminder_keyboard(item_id: str) -> InlineKeyboardMarkup:
    """Get keyboard attached to a reminder notification."""
    builder = InlineKeyboardBuilder()

    builder.row(
        InlineKeyboardButton(text="✅ Reviewed", callback_data=f"{REVIEWED_PREFIX}:{item_id}"),
        InlineKeyboardButton(text="📖 Open", callback_data=f"{REMIND_PREFIX}:{item_id}"),
    )

    return builder.as_markup()


def get_due_items_keyboard(items: List[RevisionItem]) -> InlineKeyboardMarkup:
    """Get keyboard with one 'mark reviewed' button per due item."""
    builder = InlineKeyboardBuilder()

    for item in items[:DUE_ITEMS_DISPLAY_LIMIT]:
        title = item.title
        if len(title) > MAX_BUTTON_TITLE_LENGTH:
            title = title[: MAX_BUTTON_TITLE_LENGTH - 1] + "…"
        builder.row(
            InlineKeyboardButton(
                text=f"✅ {title}",
                callback_data=f"{REVIEWED_PREFIX}:{item.id}",
            )
        )

    builder.row(InlineKeyboardButton(text="🔙 Main Menu", callback_data="main_menu"))

    return builder.as_markup()


def get_back_to_menu_keyboard() -> InlineKeyboardMarkup:
    """Get simple back to menu keyboard."""
    builder = InlineKeyboardBuilder()

    builder.row(InlineKeyboardButton(text="🔙 Main Menu", callback_data="main_menu"))

    return builder.as_markup()
