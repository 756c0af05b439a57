"""Reminder scheduling engine for revision items."""

from utils.logging_config import setup_logging

# Package logger; every scheduler.* module logs through it
setup_logging(name=__name__, log_level="INFO", log_file="reminders.log", log_dir="logs")

from .intervals import REVIEW_INTERVALS, next_delay, next_review_after  # noqa: E402
from .permission import PermissionOutcome, PermissionState  # noqa: E402
from .policy import ReminderAction, ReminderDecision, classify  # noqa: E402
from .reminders import (  # noqa: E402
    ReminderEngine,
    create_engine,
    get_engine,
    setup_scheduler,
    shutdown_scheduler,
)

__all__ = [
    "REVIEW_INTERVALS",
    "next_delay",
    "next_review_after",
    "PermissionOutcome",
    "PermissionState",
    "ReminderAction",
    "ReminderDecision",
    "classify",
    "ReminderEngine",
    "create_engine",
    "get_engine",
    "setup_scheduler",
    "shutdown_scheduler",
]
