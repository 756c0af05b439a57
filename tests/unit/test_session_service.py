"""
Unit tests for the study session service.
"""

from datetime import date, time
from unittest.mock import AsyncMock, MagicMock

import pytest

from models.schedule import SessionSubject, StudySession, StudySessionCreate
from services.session_service import SessionService
from utils.exceptions import DatabaseError

DAY = date(2026, 1, 15)


def make_session(session_id, start_hour, day=DAY, completed=False):
    return StudySession(
        id=session_id,
        date=day,
        start_time=time(start_hour, 0),
        end_time=time(start_hour + 1, 0),
        subject=SessionSubject.MATHEMATICS,
        topic=f"Topic {session_id}",
        completed=completed,
    )


@pytest.fixture
def mock_db():
    db = MagicMock()
    db.get_study_sessions = AsyncMock(return_value=[])
    db.create_study_session = AsyncMock()
    db.update_study_session = AsyncMock()
    db.mark_session_completed = AsyncMock()
    db.delete_study_session = AsyncMock(return_value=True)
    return db


@pytest.fixture
def service(mock_db):
    return SessionService(mock_db)


@pytest.mark.asyncio
async def test_refresh(service, mock_db):
    mock_db.get_study_sessions.return_value = [make_session("s1", 9)]

    sessions = await service.refresh()

    assert [s.id for s in sessions] == ["s1"]


@pytest.mark.asyncio
async def test_refresh_database_error(service, mock_db):
    mock_db.get_study_sessions.side_effect = DatabaseError("timeout")

    with pytest.raises(DatabaseError):
        await service.refresh()


@pytest.mark.asyncio
async def test_create_keeps_order(service, mock_db):
    """Test sessions stay sorted by date and start time."""
    service.sessions = [make_session("s1", 9), make_session("s3", 14)]
    mock_db.create_study_session.return_value = make_session("s2", 11)

    await service.create_session(
        StudySessionCreate(
            date=DAY,
            start_time=time(11, 0),
            end_time=time(12, 0),
            subject=SessionSubject.MATHEMATICS,
            topic="Topic s2",
        )
    )

    assert [s.id for s in service.sessions] == ["s1", "s2", "s3"]


@pytest.mark.asyncio
async def test_mark_completed(service, mock_db):
    service.sessions = [make_session("s1", 9)]
    mock_db.mark_session_completed.return_value = make_session("s1", 9, completed=True)

    session = await service.mark_completed("s1")

    assert session.completed is True
    assert service.sessions[0].completed is True


@pytest.mark.asyncio
async def test_update_session_moves_it(service, mock_db):
    service.sessions = [make_session("s1", 9), make_session("s2", 11)]
    mock_db.update_study_session.return_value = make_session("s1", 15)

    await service.update_session("s1", {"start_time": "15:00:00", "end_time": "16:00:00"})

    assert [s.id for s in service.sessions] == ["s2", "s1"]


@pytest.mark.asyncio
async def test_delete_session(service):
    service.sessions = [make_session("s1", 9), make_session("s2", 11)]

    assert await service.delete_session("s1") is True
    assert [s.id for s in service.sessions] == ["s2"]


def test_sessions_for(service):
    service.sessions = [
        make_session("s1", 9),
        make_session("s2", 9, day=date(2026, 1, 16)),
    ]

    assert [s.id for s in service.sessions_for(DAY)] == ["s1"]
