"""Pydantic models for data validation and serialization."""

from .revision_item import (
    Priority,
    RevisionItem,
    RevisionItemCreate,
    RevisionItemUpdate,
    Subject,
)
from .schedule import SessionSubject, StudySession, StudySessionCreate

__all__ = [
    "Priority",
    "RevisionItem",
    "RevisionItemCreate",
    "RevisionItemUpdate",
    "Subject",
    "SessionSubject",
    "StudySession",
    "StudySessionCreate",
]
