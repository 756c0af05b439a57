"""
Reminder policy.

Maps an item's next review time to one of three decisions:

- IMMEDIATE: the item is due (or its due time is unknown), notify now
- DEFERRED: the item is due within the horizon, install a timer for ``delay``
- SUPPRESSED: the item is due beyond the horizon, install nothing; a later
  scheduling call or sweep picks it up once it enters the horizon
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Any, Optional

from utils.constants import REMINDER_HORIZON
from utils.datetime_utils import ensure_aware, parse_iso_datetime

logger = logging.getLogger(__name__)


class ReminderAction(str, Enum):
    """What to do about an item's reminder."""

    IMMEDIATE = "immediate"
    DEFERRED = "deferred"
    SUPPRESSED = "suppressed"


@dataclass(frozen=True)
class ReminderDecision:
    """Result of classifying an item."""

    action: ReminderAction
    delay: Optional[timedelta] = None

    @property
    def is_immediate(self) -> bool:
        return self.action is ReminderAction.IMMEDIATE

    @property
    def is_deferred(self) -> bool:
        return self.action is ReminderAction.DEFERRED


IMMEDIATE = ReminderDecision(ReminderAction.IMMEDIATE)
SUPPRESSED = ReminderDecision(ReminderAction.SUPPRESSED)


def coerce_instant(value: Any) -> Optional[datetime]:
    """
    Normalize a next review value to an aware datetime.

    Strings are parsed as ISO 8601, naive datetimes are taken as UTC.
    Anything that cannot be interpreted becomes None, which the policy
    treats as due now.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return ensure_aware(value)
    if isinstance(value, str):
        try:
            return parse_iso_datetime(value)
        except ValueError:
            logger.warning(f"Malformed next review value {value!r}, treating as due now")
            return None

    logger.warning(f"Unsupported next review value {value!r}, treating as due now")
    return None


def classify(
    now: datetime,
    next_review: Any,
    horizon: timedelta = REMINDER_HORIZON,
) -> ReminderDecision:
    """
    Classify an item's reminder.

    Args:
        now: Current time
        next_review: When the item is next due (datetime, ISO string or None)
        horizon: Furthest look-ahead for a deferred timer

    Returns:
        ReminderDecision
    """
    due_at = coerce_instant(next_review)
    if due_at is None:
        return IMMEDIATE

    delay = due_at - ensure_aware(now)
    if delay <= timedelta(0):
        return IMMEDIATE
    if delay <= horizon:
        return ReminderDecision(ReminderAction.DEFERRED, delay)
    return SUPPRESSED
