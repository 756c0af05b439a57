"""
Unit tests for the interval table and reminder policy.
"""

from datetime import datetime, timedelta, timezone

import pytest

from scheduler.intervals import REVIEW_INTERVALS, next_delay, next_review_after
from scheduler.policy import ReminderAction, classify, coerce_instant

NOW = datetime(2026, 1, 15, 12, 0, tzinfo=timezone.utc)


class TestIntervals:
    """Test the spaced-repetition interval table."""

    @pytest.mark.parametrize(
        "review_count, expected",
        [
            (0, timedelta(hours=1)),
            (1, timedelta(days=1)),
            (2, timedelta(days=3)),
            (3, timedelta(weeks=1)),
            (4, timedelta(weeks=2)),
            (10, timedelta(weeks=2)),
        ],
    )
    def test_next_delay(self, review_count, expected):
        """Test lookup by review count, clamped to the last entry."""
        assert next_delay(review_count) == expected

    def test_next_delay_negative_count(self):
        """Test negative counts use the first interval."""
        assert next_delay(-3) == timedelta(hours=1)

    def test_table_is_increasing(self):
        """Test intervals grow with each review."""
        assert list(REVIEW_INTERVALS) == sorted(REVIEW_INTERVALS)
        assert len(REVIEW_INTERVALS) == 5

    def test_next_review_after(self):
        """Test first review of a new item is due one hour later."""
        assert next_review_after(0, NOW) == NOW + timedelta(hours=1)


class TestClassify:
    """Test reminder classification."""

    def test_absent_is_immediate(self):
        assert classify(NOW, None).action is ReminderAction.IMMEDIATE

    def test_past_is_immediate(self):
        decision = classify(NOW, NOW - timedelta(minutes=10))
        assert decision.action is ReminderAction.IMMEDIATE
        assert decision.delay is None

    def test_exactly_now_is_immediate(self):
        assert classify(NOW, NOW).action is ReminderAction.IMMEDIATE

    def test_within_horizon_is_deferred(self):
        decision = classify(NOW, NOW + timedelta(hours=2))
        assert decision.action is ReminderAction.DEFERRED
        assert decision.delay == timedelta(hours=2)

    def test_horizon_boundary_is_deferred(self):
        decision = classify(NOW, NOW + timedelta(days=7))
        assert decision.action is ReminderAction.DEFERRED
        assert decision.delay == timedelta(days=7)

    def test_beyond_horizon_is_suppressed(self):
        decision = classify(NOW, NOW + timedelta(days=7, seconds=1))
        assert decision.action is ReminderAction.SUPPRESSED
        assert decision.delay is None

    def test_custom_horizon(self):
        decision = classify(NOW, NOW + timedelta(days=2), horizon=timedelta(days=1))
        assert decision.action is ReminderAction.SUPPRESSED

    def test_iso_string(self):
        decision = classify(NOW, "2026-01-15T13:00:00Z")
        assert decision.action is ReminderAction.DEFERRED
        assert decision.delay == timedelta(hours=1)

    def test_malformed_string_is_immediate(self):
        assert classify(NOW, "tomorrow-ish").action is ReminderAction.IMMEDIATE

    def test_naive_datetime_is_utc(self):
        decision = classify(NOW, datetime(2026, 1, 15, 12, 30))
        assert decision.delay == timedelta(minutes=30)


class TestCoerceInstant:
    """Test next review normalization."""

    def test_none_and_empty(self):
        assert coerce_instant(None) is None
        assert coerce_instant("") is None

    def test_unsupported_type(self):
        assert coerce_instant(12345) is None

    def test_offset_string(self):
        value = coerce_instant("2026-01-15T14:00:00+02:00")
        assert value == NOW
