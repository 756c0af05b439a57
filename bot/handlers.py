"""
Bot handlers for the study planner.
Handles revision items, reminders and the daily study plan.
"""

import html
import logging
from typing import List

from aiogram import Router
from aiogram.filters import Command, CommandObject
from aiogram.types import CallbackQuery, Message

from bot.keyboards import (
    REMIND_PREFIX,
    REVIEWED_PREFIX,
    get_back_to_menu_keyboard,
    get_due_items_keyboard,
    get_main_menu_keyboard,
    get_reminder_keyboard,
)
from config import settings
from models.revision_item import RevisionItem
from models.schedule import StudySession
from scheduler.permission import PermissionOutcome
from scheduler.reminders import get_engine
from services import get_revision_service, get_session_service
from utils.datetime_utils import format_local, today_in
from utils.exceptions import DatabaseError, RevisionItemNotFoundError, ValidationError
from utils.validation import parse_add_command, split_callback_data

logger = logging.getLogger(__name__)

router = Router()

WELCOME_TEXT = "📚 Study Planner\n\nChoose an option:"


# ========== Formatting ==========


def format_due_items(items: List[RevisionItem]) -> str:
    """Format due revision items for a message."""
    if not items:
        return "✅ No overdue items!"

    lines = [f"📋 {len(items)} item(s) due for review:\n"]
    for item in items:
        due = format_local(item.next_review, settings.timezone)
        lines.append(
            f"• <b>{html.escape(item.title)}</b> ({item.subject}, {item.priority}) - due {due}"
        )
    return "\n".join(lines)


def format_sessions(sessions: List[StudySession]) -> str:
    """Format study sessions for a message."""
    if not sessions:
        return "📅 Nothing planned for today."

    lines = ["📅 Today's plan:\n"]
    for session in sessions:
        mark = "✅" if session.completed else "⏳"
        lines.append(
            f"{mark} {session.start_time.strftime('%H:%M')}-{session.end_time.strftime('%H:%M')} "
            f"{session.subject}: {html.escape(session.topic)}"
        )
    return "\n".join(lines)


def format_permission_outcome(outcome: PermissionOutcome, scheduled: int) -> str:
    """Reply text for a notification permission request."""
    if outcome is PermissionOutcome.GRANTED:
        text = "🔔 Notifications enabled! You'll now receive reminders."
        if scheduled > 0:
            text += f"\n📅 {scheduled} reminders scheduled!"
        return text
    if outcome is PermissionOutcome.DENIED:
        return "❌ Notifications blocked. Unblock the bot and try again."
    return "⚠️ Notification permission dismissed. Send /start to the bot first."


# ========== Start Command & Main Menu ==========


@router.message(Command("start"))
async def cmd_start(message: Message):
    """Handle /start command."""
    service = get_revision_service()

    text = WELCOME_TEXT
    overdue = service.overdue_count()
    if overdue:
        text = f"⚠️ {overdue} item(s) overdue for review.\n\n" + text

    await message.answer(text, reply_markup=get_main_menu_keyboard())


@router.callback_query(lambda c: c.data == "main_menu")
async def show_main_menu(callback: CallbackQuery):
    """Show main menu."""
    await callback.message.edit_text(WELCOME_TEXT, reply_markup=get_main_menu_keyboard())
    await callback.answer()


# ========== Reminders ==========


@router.message(Command("notify"))
async def cmd_notify(message: Message):
    """Enable reminder notifications."""
    try:
        outcome, scheduled = await get_revision_service().enable_notifications()
    except Exception as e:
        logger.error(f"Failed to enable notifications: {e}", exc_info=True)
        await message.answer("❌ Failed to enable notifications")
        return

    await message.answer(format_permission_outcome(outcome, scheduled))


@router.callback_query(lambda c: c.data == "enable_notifications")
async def handle_enable_notifications(callback: CallbackQuery):
    """Enable reminder notifications from the menu."""
    await cmd_notify(callback.message)
    await callback.answer()


@router.message(Command("check"))
async def cmd_check(message: Message):
    """Manual check for overdue items."""
    overdue = await get_revision_service().check_now()

    if overdue is None:
        await message.answer("Enable notifications first: /notify")
    elif not overdue:
        await message.answer("✅ No overdue items!")
    else:
        await message.answer(f"📋 Found {len(overdue)} overdue items")


@router.callback_query(lambda c: c.data == "check_now")
async def handle_check_now(callback: CallbackQuery):
    """Manual overdue check from the menu."""
    await cmd_check(callback.message)
    await callback.answer()


@router.callback_query(lambda c: c.data and c.data.startswith(f"{REMIND_PREFIX}:"))
async def handle_reminder_activation(callback: CallbackQuery):
    """User opened a reminder notification."""
    try:
        _, item_id = split_callback_data(callback.data)
    except ValidationError as e:
        await callback.answer(str(e), show_alert=True)
        return

    await get_engine().emitter.activate(item_id)

    item = get_revision_service().get_item(item_id)
    if item is None:
        await callback.answer("Item not found", show_alert=True)
        return

    text = f"📖 <b>{html.escape(item.title)}</b>\n{item.subject} · {item.priority}"
    if item.content_text:
        text += f"\n\n{html.escape(item.content_text)}"
    text += f"\n\nReviews so far: {item.review_count}"

    await callback.message.answer(text, reply_markup=get_reminder_keyboard(item.id))
    await callback.answer()


# ========== Revision Items ==========


@router.message(Command("due"))
async def cmd_due(message: Message):
    """List items due for review."""
    items = get_revision_service().due_items()
    await message.answer(
        format_due_items(items),
        reply_markup=get_due_items_keyboard(items) if items else get_back_to_menu_keyboard(),
    )


@router.callback_query(lambda c: c.data == "due_items")
async def handle_due_items(callback: CallbackQuery):
    """List due items from the menu."""
    items = get_revision_service().due_items()
    await callback.message.edit_text(
        format_due_items(items),
        reply_markup=get_due_items_keyboard(items) if items else get_back_to_menu_keyboard(),
    )
    await callback.answer()


@router.message(Command("add"))
async def cmd_add(message: Message, command: CommandObject):
    """Add a revision item: /add <subject> | <title> [| notes]."""
    try:
        item_data = parse_add_command(command.args)
    except ValidationError as e:
        await message.answer(f"❌ {html.escape(str(e))}")
        return

    service = get_revision_service()
    try:
        item = await service.create_item(item_data)
    except DatabaseError:
        await message.answer("❌ Failed to create revision item")
        return

    if service.notifications_enabled:
        due = format_local(item.next_review, settings.timezone)
        await message.answer(f"✅ Item added! Reminder set for {due}")
    else:
        await message.answer("✅ Revision item added successfully")


@router.callback_query(lambda c: c.data and c.data.startswith(f"{REVIEWED_PREFIX}:"))
async def handle_mark_reviewed(callback: CallbackQuery):
    """Mark an item as reviewed."""
    try:
        _, item_id = split_callback_data(callback.data)
    except ValidationError as e:
        await callback.answer(str(e), show_alert=True)
        return

    service = get_revision_service()
    try:
        item = await service.mark_as_reviewed(item_id)
    except RevisionItemNotFoundError:
        await callback.answer("Item not found", show_alert=True)
        return
    except DatabaseError:
        await callback.answer("❌ Failed to mark as reviewed", show_alert=True)
        return

    if service.notifications_enabled:
        due = format_local(item.next_review, settings.timezone)
        text = f"✅ Marked as reviewed! Next reminder: {due}"
    else:
        text = "✅ Marked as reviewed"

    await callback.message.answer(text)
    await callback.answer()


# ========== Study Plan ==========


@router.message(Command("today"))
async def cmd_today(message: Message):
    """Show today's study sessions."""
    sessions = get_session_service().sessions_for(today_in(settings.timezone))
    await message.answer(format_sessions(sessions), reply_markup=get_back_to_menu_keyboard())


@router.callback_query(lambda c: c.data == "today")
async def handle_today(callback: CallbackQuery):
    """Show today's study sessions from the menu."""
    sessions = get_session_service().sessions_for(today_in(settings.timezone))
    await callback.message.edit_text(
        format_sessions(sessions), reply_markup=get_back_to_menu_keyboard()
    )
    await callback.answer()


def register_handlers(dp) -> None:
    """Register all handlers with dispatcher."""
    dp.include_router(router)
