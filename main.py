"""
Main entry point for the Study Planner reminder bot.
Runs the Telegram bot in polling mode together with the reminder scheduler.
"""

import asyncio
import sys

from aiogram import Bot, Dispatcher
from aiogram.client.default import DefaultBotProperties
from aiogram.enums import ParseMode
from aiogram.fsm.storage.memory import MemoryStorage

from bot import TelegramNotificationHost, TelegramPermissionHost, register_handlers
from config import settings
from scheduler import create_engine, setup_scheduler, shutdown_scheduler
from services import get_revision_service, get_session_service
from utils.exceptions import DatabaseError
from utils.logging_config import get_logger

# Configure logging using centralized configuration
logger = get_logger(__name__, log_file="bot.log")
for package in ("bot", "db", "services"):
    get_logger(package, log_file="bot.log")

# Validate configuration
try:
    settings.validate_all_required()
except ValueError as e:
    logger.error(f"Configuration error: {e}")
    sys.exit(1)

# Initialize bot and dispatcher
bot = Bot(
    token=settings.bot_token,
    default=DefaultBotProperties(parse_mode=ParseMode.HTML),
)

dp = Dispatcher(storage=MemoryStorage())


async def on_startup() -> None:
    """Wire reminder hosts, load data and schedule reminders."""
    permission_host = TelegramPermissionHost(bot, settings.reminder_chat_id)
    notification_host = TelegramNotificationHost(
        bot, settings.reminder_chat_id, permission=permission_host
    )
    create_engine(notification_host, permission_host)
    setup_scheduler()

    revision_service = get_revision_service()
    outcome, _ = await revision_service.enable_notifications()
    logger.info(f"Reminder permission on startup: {outcome.value}")

    try:
        await revision_service.refresh()
        await get_session_service().refresh()
    except DatabaseError as e:
        # Keep running; /start and the commands still work once the DB is back
        logger.error(f"Initial data load failed: {e}")

    logger.info(f"{revision_service.pending_count()} reminders pending")


async def on_shutdown() -> None:
    """Release every reminder resource."""
    shutdown_scheduler()
    logger.info("Scheduler stopped")


async def main() -> None:
    """Main async function to run the bot."""
    try:
        logger.info("Starting Study Planner bot...")

        register_handlers(dp)
        logger.info("Handlers registered")

        await on_startup()

        logger.info("Bot is running in polling mode. Press Ctrl+C to stop.")
        await dp.start_polling(bot, allowed_updates=dp.resolve_used_update_types())

    except KeyboardInterrupt:
        logger.info("Bot stopped by user")
    except asyncio.CancelledError:
        logger.info("Bot cancelled")
    except Exception as e:
        logger.error(f"Fatal error: {e}", exc_info=True)
        raise
    finally:
        logger.info("Shutting down...")
        await on_shutdown()

        try:
            await bot.session.close()
            logger.info("Bot session closed")
        except Exception as e:
            logger.error(f"Error closing bot session: {e}", exc_info=True)

        logger.info("Bot shutdown complete")


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        sys.exit(0)
