"""Revision item models for spaced-repetition tracking."""

import logging
from datetime import datetime
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator

from utils.datetime_utils import ensure_aware, parse_iso_datetime

logger = logging.getLogger(__name__)


class Subject(str, Enum):
    """Revision item subject."""

    PHYSICS = "Physics"
    CHEMISTRY = "Chemistry"
    MATHEMATICS = "Mathematics"
    GENERAL = "General"


class Priority(str, Enum):
    """Revision item priority."""

    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"


class RevisionItem(BaseModel):
    """Revision item model."""

    id: str = Field(..., description="Revision item ID (Supabase UUID)")
    title: str
    content_text: Optional[str] = None
    image_url: Optional[str] = None
    subject: Subject = Subject.GENERAL
    priority: Priority = Priority.MEDIUM
    created_at: Optional[datetime] = None
    last_reviewed: Optional[datetime] = None
    review_count: int = Field(default=0, ge=0)
    # None means "due now"
    next_review: Optional[datetime] = None

    class Config:
        use_enum_values = True
        json_schema_extra = {
            "example": {
                "id": "uuid-here",
                "title": "Rotational dynamics formulas",
                "subject": "Physics",
                "priority": "High",
                "review_count": 2,
                "next_review": "2026-01-15T10:00:00+00:00",
            }
        }

    @field_validator("next_review", mode="before")
    @classmethod
    def _lenient_next_review(cls, value: Any) -> Optional[datetime]:
        """Unparseable values are treated as due now instead of failing the row."""
        if value is None or value == "":
            return None
        if isinstance(value, datetime):
            return ensure_aware(value)
        if isinstance(value, str):
            try:
                return parse_iso_datetime(value)
            except ValueError:
                logger.warning(f"Unparseable next_review {value!r}, treating as due now")
                return None
        logger.warning(f"Unexpected next_review type {type(value).__name__}, treating as due now")
        return None


class RevisionItemCreate(BaseModel):
    """Revision item creation model."""

    title: str = Field(..., min_length=1)
    subject: Subject
    priority: Priority = Priority.MEDIUM
    content_text: Optional[str] = None
    image_url: Optional[str] = None


class RevisionItemUpdate(BaseModel):
    """Partial update for a revision item."""

    title: Optional[str] = None
    subject: Optional[Subject] = None
    priority: Optional[Priority] = None
    content_text: Optional[str] = None
    image_url: Optional[str] = None
    next_review: Optional[datetime] = None
