"""
Supabase database client with CRUD operations.
Handles all database interactions for revision items and study sessions.

Row Level Security (RLS) Notes:
==============================
The study planner is a single-user tool. The tables created by
``migrations/001_study_planner.sql`` enable RLS with a permissive
policy for the ``anon`` role, so the anon key is sufficient. Use the
service_role key only for maintenance scripts.
"""

from datetime import date, datetime
from typing import Any, Dict, List, Optional

from supabase import Client as SupabaseClientType
from supabase import create_client

from config import settings
from models.revision_item import (
    RevisionItem,
    RevisionItemCreate,
    RevisionItemUpdate,
)
from models.schedule import StudySession, StudySessionCreate
from utils.constants import INITIAL_REVIEW_DELAY
from utils.datetime_utils import parse_iso_datetime, to_iso_string, utc_now
from utils.exceptions import (
    DatabaseError,
    RevisionItemNotFoundError,
    StudySessionNotFoundError,
)

REVISION_ITEMS_TABLE = "revision_items"
SCHEDULES_TABLE = "schedules"


class SupabaseClient:
    """
    Supabase database client wrapper.

    The underlying supabase-py client is synchronous; methods are declared
    async so callers on the event loop treat persistence uniformly.
    """

    def __init__(self):
        """Initialize Supabase client."""
        self.client: SupabaseClientType = create_client(
            settings.supabase_url, settings.supabase_key
        )

    # ========== Revision Item Operations ==========

    async def get_revision_items(self) -> List[RevisionItem]:
        """Get all revision items, newest first."""
        try:
            response = (
                self.client.table(REVISION_ITEMS_TABLE)
                .select("*")
                .order("created_at", desc=True)
                .execute()
            )

            return [self._parse_revision_item(item) for item in response.data]
        except Exception as e:
            raise DatabaseError(f"Failed to fetch revision items: {e}") from e

    async def get_revision_item(self, item_id: str) -> Optional[RevisionItem]:
        """Get revision item by ID."""
        try:
            response = (
                self.client.table(REVISION_ITEMS_TABLE)
                .select("*")
                .eq("id", item_id)
                .execute()
            )

            if response.data:
                return self._parse_revision_item(response.data[0])
            return None
        except Exception as e:
            raise DatabaseError(f"Failed to get revision item: {e}") from e

    async def create_revision_item(self, item_data: RevisionItemCreate) -> RevisionItem:
        """
        Create a new revision item.

        New items start with ``review_count = 0`` and become due
        ``INITIAL_REVIEW_DELAY`` after creation.
        """
        try:
            data = item_data.model_dump(mode="json", exclude_none=True)
            data["review_count"] = 0
            data["next_review"] = to_iso_string(utc_now() + INITIAL_REVIEW_DELAY)

            response = self.client.table(REVISION_ITEMS_TABLE).insert(data).execute()

            if not response.data:
                raise ValueError("no data returned")

            return self._parse_revision_item(response.data[0])
        except Exception as e:
            raise DatabaseError(f"Failed to create revision item: {e}") from e

    async def update_revision_item(
        self, item_id: str, updates: RevisionItemUpdate
    ) -> RevisionItem:
        """
        Apply a partial update to a revision item.

        Raises:
            RevisionItemNotFoundError: If no row matched the ID
            DatabaseError: On any other failure
        """
        data = updates.model_dump(mode="json", exclude_none=True)
        if updates.next_review is not None:
            data["next_review"] = to_iso_string(updates.next_review)

        try:
            response = (
                self.client.table(REVISION_ITEMS_TABLE)
                .update(data)
                .eq("id", item_id)
                .execute()
            )
        except Exception as e:
            raise DatabaseError(f"Failed to update revision item: {e}") from e

        if not response.data:
            raise RevisionItemNotFoundError(f"Revision item {item_id} not found")

        return self._parse_revision_item(response.data[0])

    async def delete_revision_item(self, item_id: str) -> bool:
        """
        Delete a revision item.

        Returns:
            True if a row was deleted, False otherwise
        """
        try:
            response = (
                self.client.table(REVISION_ITEMS_TABLE)
                .delete()
                .eq("id", item_id)
                .execute()
            )
            return len(response.data) > 0
        except Exception as e:
            raise DatabaseError(f"Failed to delete revision item: {e}") from e

    async def increment_review_count(
        self, item_id: str, next_review: datetime
    ) -> RevisionItem:
        """
        Record a completed review.

        Calls the ``increment_review_count`` database function, which bumps
        ``review_count`` by one, stamps ``last_reviewed`` and stores the next
        review time in a single statement.
        """
        try:
            response = self.client.rpc(
                "increment_review_count",
                {
                    "item_id": item_id,
                    "next_review_date": to_iso_string(next_review),
                },
            ).execute()
        except Exception as e:
            raise DatabaseError(f"Failed to record review: {e}") from e

        row = response.data
        if isinstance(row, list):
            row = row[0] if row else None
        if not row:
            raise RevisionItemNotFoundError(f"Revision item {item_id} not found")

        return self._parse_revision_item(row)

    # ========== Study Session Operations ==========

    async def get_study_sessions(
        self, on_date: Optional[date] = None
    ) -> List[StudySession]:
        """Get study sessions ordered by date and start time."""
        try:
            query = self.client.table(SCHEDULES_TABLE).select("*")

            if on_date:
                query = query.eq("date", on_date.isoformat())

            response = (
                query.order("date", desc=False)
                .order("start_time", desc=False)
                .execute()
            )

            return [self._parse_study_session(item) for item in response.data]
        except Exception as e:
            raise DatabaseError(f"Failed to fetch study sessions: {e}") from e

    async def create_study_session(
        self, session_data: StudySessionCreate
    ) -> StudySession:
        """Create a new study session."""
        try:
            data = session_data.model_dump(mode="json")

            response = self.client.table(SCHEDULES_TABLE).insert(data).execute()

            if not response.data:
                raise ValueError("no data returned")

            return self._parse_study_session(response.data[0])
        except Exception as e:
            raise DatabaseError(f"Failed to create study session: {e}") from e

    async def update_study_session(
        self, session_id: str, updates: Dict[str, Any]
    ) -> StudySession:
        """Apply a partial update to a study session."""
        try:
            response = (
                self.client.table(SCHEDULES_TABLE)
                .update(updates)
                .eq("id", session_id)
                .execute()
            )
        except Exception as e:
            raise DatabaseError(f"Failed to update study session: {e}") from e

        if not response.data:
            raise StudySessionNotFoundError(f"Study session {session_id} not found")

        return self._parse_study_session(response.data[0])

    async def mark_session_completed(self, session_id: str) -> StudySession:
        """Mark a study session as completed now."""
        return await self.update_study_session(
            session_id,
            {"completed": True, "completed_at": to_iso_string(utc_now())},
        )

    async def delete_study_session(self, session_id: str) -> bool:
        """Delete a study session."""
        try:
            response = (
                self.client.table(SCHEDULES_TABLE)
                .delete()
                .eq("id", session_id)
                .execute()
            )
            return len(response.data) > 0
        except Exception as e:
            raise DatabaseError(f"Failed to delete study session: {e}") from e

    # ========== Helper Methods ==========

    def _parse_revision_item(self, item: dict) -> RevisionItem:
        """
        Parse revision item data from database response.

        ``next_review`` is left to the model, which maps unparseable values
        to None.
        """
        item = item.copy()
        for field in ["created_at", "last_reviewed"]:
            if item.get(field):
                item[field] = parse_iso_datetime(item[field])
        return RevisionItem(**item)

    def _parse_study_session(self, item: dict) -> StudySession:
        """Parse study session data from database response."""
        item = item.copy()
        for field in ["completed_at", "created_at", "updated_at"]:
            if item.get(field):
                item[field] = parse_iso_datetime(item[field])
        return StudySession(**item)


# Global database client instance
_db_client: Optional[SupabaseClient] = None


def get_db_client() -> SupabaseClient:
    """Get or create database client instance."""
    global _db_client
    if _db_client is None:
        _db_client = SupabaseClient()
    return _db_client
