"""Study session (daily planner) service."""

import logging
from datetime import date
from typing import Any, Dict, List, Optional

from db import SupabaseClient, get_db_client
from models.schedule import StudySession, StudySessionCreate
from utils.exceptions import DatabaseError

logger = logging.getLogger(__name__)


class SessionService:
    """Keeps the study sessions in date and start-time order."""

    def __init__(self, db: SupabaseClient):
        self._db = db
        self.sessions: List[StudySession] = []

    async def refresh(self) -> List[StudySession]:
        try:
            self.sessions = await self._db.get_study_sessions()
        except DatabaseError as e:
            logger.error(f"Failed to fetch study sessions: {e}", exc_info=True)
            raise
        return self.sessions

    def sessions_for(self, day: date) -> List[StudySession]:
        return [session for session in self.sessions if session.date == day]

    async def create_session(self, session_data: StudySessionCreate) -> StudySession:
        try:
            session = await self._db.create_study_session(session_data)
        except DatabaseError as e:
            logger.error(f"Failed to create study session: {e}", exc_info=True)
            raise

        self.sessions.append(session)
        self._sort()
        return session

    async def update_session(
        self, session_id: str, updates: Dict[str, Any]
    ) -> StudySession:
        try:
            session = await self._db.update_study_session(session_id, updates)
        except DatabaseError as e:
            logger.error(f"Failed to update study session {session_id}: {e}", exc_info=True)
            raise

        self._replace(session)
        return session

    async def mark_completed(self, session_id: str) -> StudySession:
        try:
            session = await self._db.mark_session_completed(session_id)
        except DatabaseError as e:
            logger.error(
                f"Failed to mark study session {session_id} completed: {e}", exc_info=True
            )
            raise

        self._replace(session)
        return session

    async def delete_session(self, session_id: str) -> bool:
        try:
            deleted = await self._db.delete_study_session(session_id)
        except DatabaseError as e:
            logger.error(f"Failed to delete study session {session_id}: {e}", exc_info=True)
            raise

        self.sessions = [s for s in self.sessions if s.id != session_id]
        return deleted

    def _replace(self, updated: StudySession) -> None:
        self.sessions = [updated if s.id == updated.id else s for s in self.sessions]
        self._sort()

    def _sort(self) -> None:
        self.sessions.sort(key=lambda s: (s.date, s.start_time))


# Global service instance
_session_service: Optional[SessionService] = None


def get_session_service() -> SessionService:
    """Get or create the study session service."""
    global _session_service
    if _session_service is None:
        _session_service = SessionService(get_db_client())
    return _session_service
