"""
Revision item service.

Keeps the working set of revision items and wires every CRUD operation to
the reminder engine, so reminders follow the data without waiting for the
next periodic sweep.
"""

import logging
from typing import List, Optional, Tuple

from db import SupabaseClient, get_db_client
from models.revision_item import RevisionItem, RevisionItemCreate, RevisionItemUpdate
from scheduler.intervals import next_review_after
from scheduler.permission import PermissionOutcome, PermissionState
from scheduler.reminders import ReminderEngine, get_engine
from scheduler.sweeper import StopFn
from scheduler.timers import Clock
from utils.datetime_utils import utc_now
from utils.exceptions import DatabaseError, RevisionItemNotFoundError

logger = logging.getLogger(__name__)


class RevisionService:
    """Revision items plus their reminders."""

    def __init__(
        self,
        db: SupabaseClient,
        engine: ReminderEngine,
        clock: Clock = utc_now,
    ):
        self._db = db
        self._engine = engine
        self._clock = clock
        self.items: List[RevisionItem] = []
        self._stop_sweep: Optional[StopFn] = None

    @property
    def notifications_enabled(self) -> bool:
        return self._engine.permission is PermissionState.GRANTED

    def get_item(self, item_id: str) -> Optional[RevisionItem]:
        for item in self.items:
            if item.id == item_id:
                return item
        return None

    # ========== Loading ==========

    async def refresh(self) -> List[RevisionItem]:
        """Reload items from the database and resync reminders."""
        try:
            self.items = await self._db.get_revision_items()
        except DatabaseError as e:
            logger.error(f"Failed to fetch revision items: {e}", exc_info=True)
            raise

        logger.info(f"Loaded {len(self.items)} revision items")
        await self.sync_reminders()
        return self.items

    async def sync_reminders(self) -> int:
        """
        Restart the overdue sweep and schedule every item.

        Returns:
            Number of pending reminders
        """
        if not self.notifications_enabled:
            return 0

        # Started even for an empty set: the sweep reads the live item list,
        # so items added or pushed past the horizon later are still caught
        self._stop_sweep = await self._engine.start_periodic_sweep(lambda: self.items)
        return await self._engine.schedule_all(self.items)

    # ========== CRUD ==========

    async def create_item(self, item_data: RevisionItemCreate) -> RevisionItem:
        """Create an item and schedule its first reminder."""
        try:
            item = await self._db.create_revision_item(item_data)
        except DatabaseError as e:
            logger.error(f"Failed to create revision item: {e}", exc_info=True)
            raise

        self.items.insert(0, item)
        await self._schedule(item)
        return item

    async def update_item(
        self, item_id: str, updates: RevisionItemUpdate
    ) -> RevisionItem:
        """Update an item; reschedules its reminder when next_review changed."""
        try:
            item = await self._db.update_revision_item(item_id, updates)
        except DatabaseError as e:
            logger.error(f"Failed to update revision item {item_id}: {e}", exc_info=True)
            raise

        self._replace(item)
        if updates.next_review is not None:
            await self._schedule(item)
        return item

    async def delete_item(self, item_id: str) -> bool:
        """Delete an item and cancel its pending reminder."""
        try:
            deleted = await self._db.delete_revision_item(item_id)
        except DatabaseError as e:
            logger.error(f"Failed to delete revision item {item_id}: {e}", exc_info=True)
            raise

        self.items = [item for item in self.items if item.id != item_id]
        self._engine.cancel_reminder(item_id)
        return deleted

    async def mark_as_reviewed(self, item_id: str) -> RevisionItem:
        """
        Record a completed review.

        The next review is one interval (chosen by the current review count)
        from now; the reminder is rescheduled for it.

        Raises:
            RevisionItemNotFoundError: If the item does not exist
        """
        current = self.get_item(item_id) or await self._db.get_revision_item(item_id)
        if current is None:
            raise RevisionItemNotFoundError(f"Revision item {item_id} not found")

        next_review = next_review_after(current.review_count, self._clock())
        try:
            item = await self._db.increment_review_count(item_id, next_review)
        except DatabaseError as e:
            logger.error(f"Failed to mark {item_id} as reviewed: {e}", exc_info=True)
            raise

        self._replace(item)
        await self._schedule(item)
        return item

    # ========== Notifications ==========

    async def enable_notifications(self) -> Tuple[PermissionOutcome, int]:
        """
        Ask for notification permission and, once granted, schedule everything.

        Returns:
            (permission outcome, number of pending reminders)
        """
        outcome = await self._engine.request_permission()
        if outcome is not PermissionOutcome.GRANTED:
            return outcome, 0

        return outcome, await self.sync_reminders()

    def due_items(self) -> List[RevisionItem]:
        """Items due now, most overdue first (unknown due time first)."""
        due = [
            item
            for item in self.items
            if self._engine.classify(item.next_review).is_immediate
        ]
        return sorted(due, key=lambda item: (item.next_review is not None, item.next_review))

    def overdue_count(self) -> int:
        return len(self.due_items())

    async def check_now(self) -> Optional[List[RevisionItem]]:
        """
        Manual overdue check.

        Returns:
            Overdue items (each notified), or None when notifications are off
        """
        if not self.notifications_enabled:
            return None
        return await self._engine.check_overdue_now(self.items)

    def pending_count(self) -> int:
        return self._engine.pending_count()

    def shutdown(self) -> None:
        """Stop the sweep and drop every pending reminder."""
        if self._stop_sweep is not None:
            self._stop_sweep()
            self._stop_sweep = None
        self._engine.stop_all_reminders()

    # ========== Helpers ==========

    def _replace(self, updated: RevisionItem) -> None:
        if self.get_item(updated.id) is None:
            self.items.insert(0, updated)
            return
        self.items = [updated if item.id == updated.id else item for item in self.items]

    async def _schedule(self, item: RevisionItem) -> None:
        if self.notifications_enabled and not self._engine.sweeper.running:
            self._stop_sweep = await self._engine.start_periodic_sweep(
                lambda: self.items
            )

        def on_activate() -> None:
            logger.info(f"Notification activated for item {item.id}")

        await self._engine.schedule_reminder(
            item.id, item.title, item.next_review, on_activate
        )


# Global service instance
_revision_service: Optional[RevisionService] = None


def get_revision_service() -> RevisionService:
    """Get or create the revision service."""
    global _revision_service
    if _revision_service is None:
        _revision_service = RevisionService(get_db_client(), get_engine())
    return _revision_service
