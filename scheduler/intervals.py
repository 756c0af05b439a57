"""Spaced-repetition interval table."""

from datetime import datetime, timedelta
from typing import Tuple

# Delay before the next review, indexed by how many reviews are already done
REVIEW_INTERVALS: Tuple[timedelta, ...] = (
    timedelta(hours=1),
    timedelta(days=1),
    timedelta(days=3),
    timedelta(weeks=1),
    timedelta(weeks=2),
)


def next_delay(review_count: int) -> timedelta:
    """
    Get the review delay for an item.

    Counts beyond the end of the table reuse the longest interval.

    Args:
        review_count: Number of completed reviews

    Returns:
        Delay until the next review
    """
    index = min(max(review_count, 0), len(REVIEW_INTERVALS) - 1)
    return REVIEW_INTERVALS[index]


def next_review_after(review_count: int, reviewed_at: datetime) -> datetime:
    """Instant at which an item reviewed at ``reviewed_at`` is due again."""
    return reviewed_at + next_delay(review_count)
