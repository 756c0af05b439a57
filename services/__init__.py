"""Application services tying persistence to reminders."""

from .revision_service import RevisionService, get_revision_service
from .session_service import SessionService, get_session_service

__all__ = [
    "RevisionService",
    "get_revision_service",
    "SessionService",
    "get_session_service",
]
