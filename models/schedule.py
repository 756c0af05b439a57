"""Study session models for the daily study planner."""

from datetime import date, datetime, time
from enum import Enum
from typing import Optional

from pydantic import BaseModel, model_validator


class SessionSubject(str, Enum):
    """Study session subject."""

    PHYSICS = "Physics"
    CHEMISTRY = "Chemistry"
    MATHEMATICS = "Mathematics"
    REVISION = "Revision"
    MOCK_TEST = "Mock Test"


class StudySession(BaseModel):
    """Study session (row of the ``schedules`` table)."""

    id: Optional[str] = None
    date: date
    start_time: time
    end_time: time
    subject: SessionSubject
    topic: str
    completed: bool = False
    completed_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        use_enum_values = True
        json_schema_extra = {
            "example": {
                "date": "2026-01-15",
                "start_time": "09:00:00",
                "end_time": "11:00:00",
                "subject": "Mathematics",
                "topic": "Definite integrals",
            }
        }


class StudySessionCreate(BaseModel):
    """Study session creation model."""

    date: date
    start_time: time
    end_time: time
    subject: SessionSubject
    topic: str

    @model_validator(mode="after")
    def _check_times(self) -> "StudySessionCreate":
        if self.end_time <= self.start_time:
            raise ValueError("end_time must be after start_time")
        return self
