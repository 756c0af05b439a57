"""
Unit tests for the APScheduler-backed timer factory.
"""

from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, MagicMock

from apscheduler.jobstores.base import JobLookupError
from apscheduler.triggers.date import DateTrigger
from apscheduler.triggers.interval import IntervalTrigger

from scheduler.timers import APSchedulerTimers

START = datetime(2026, 1, 15, 12, 0, tzinfo=timezone.utc)


def make_timers():
    mock_scheduler = MagicMock()
    return APSchedulerTimers(mock_scheduler, clock=lambda: START), mock_scheduler


def test_create_adds_date_job():
    """Test one-shot timers use an absolute date trigger."""
    timers, mock_scheduler = make_timers()
    action = AsyncMock()

    handle = timers.create(timedelta(minutes=30), action)

    assert handle is mock_scheduler.add_job.return_value
    args, kwargs = mock_scheduler.add_job.call_args
    assert args[0] is action
    assert isinstance(kwargs["trigger"], DateTrigger)
    assert kwargs["trigger"].run_date == START + timedelta(minutes=30)
    assert kwargs["misfire_grace_time"] is None


def test_every_adds_interval_job():
    """Test periodic timers never overlap."""
    timers, mock_scheduler = make_timers()

    timers.every(timedelta(minutes=5), AsyncMock())

    kwargs = mock_scheduler.add_job.call_args.kwargs
    assert isinstance(kwargs["trigger"], IntervalTrigger)
    assert kwargs["trigger"].interval == timedelta(minutes=5)
    assert kwargs["coalesce"] is True
    assert kwargs["max_instances"] == 1


def test_cancel_removes_job():
    timers, _ = make_timers()
    job = MagicMock()

    timers.cancel(job)

    job.remove.assert_called_once()


def test_cancel_fired_job_is_ignored():
    """Test cancelling a job that already ran does not raise."""
    timers, _ = make_timers()
    job = MagicMock()
    job.remove.side_effect = JobLookupError("job_1")

    timers.cancel(job)
    timers.cancel(None)
