"""
Database setup script for Supabase.
Run this after applying migrations/001_study_planner.sql to seed sample data.
"""

import asyncio
import sys
from datetime import time, timedelta
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from db import get_db_client  # noqa: E402
from models.revision_item import Priority, RevisionItemCreate, Subject  # noqa: E402
from models.schedule import SessionSubject, StudySessionCreate  # noqa: E402
from utils.datetime_utils import utc_now  # noqa: E402

SAMPLE_ITEMS = [
    ("Rotational dynamics formulas", Subject.PHYSICS, Priority.HIGH),
    ("Periodic table trends", Subject.CHEMISTRY, Priority.MEDIUM),
    ("Integration by parts", Subject.MATHEMATICS, Priority.HIGH),
]

SAMPLE_DAY = [
    (time(9, 0), time(11, 0), SessionSubject.MATHEMATICS, "Definite integrals"),
    (time(11, 30), time(13, 0), SessionSubject.PHYSICS, "Rotational dynamics"),
    (time(15, 0), time(16, 30), SessionSubject.CHEMISTRY, "Chemical bonding"),
    (time(18, 0), time(19, 0), SessionSubject.REVISION, "Revision items due today"),
]


async def create_sample_items():
    """Create sample revision items."""
    db = get_db_client()

    for title, subject, priority in SAMPLE_ITEMS:
        try:
            item = await db.create_revision_item(
                RevisionItemCreate(title=title, subject=subject, priority=priority)
            )
            print(f"Created revision item: {item.title}")
        except Exception as e:
            print(f"Failed to create revision item: {e}")


async def create_sample_sessions(days: int = 7):
    """Create a sample study plan for the next days."""
    db = get_db_client()
    start = utc_now().date()

    sessions_created = 0
    for day in range(days):
        for start_time, end_time, subject, topic in SAMPLE_DAY:
            session_data = StudySessionCreate(
                date=start + timedelta(days=day),
                start_time=start_time,
                end_time=end_time,
                subject=subject,
                topic=topic,
            )
            try:
                await db.create_study_session(session_data)
                sessions_created += 1
            except Exception as e:
                print(f"Failed to create study session: {e}")

    print(f"\n✅ Created {sessions_created} study sessions")


async def main():
    """Main setup function."""
    print("🚀 Setting up database...")
    print("\nNote: Make sure you've run migrations/001_study_planner.sql in the Supabase SQL Editor first!\n")

    try:
        get_db_client()
        print("✅ Database connection successful")

        response = input("\nCreate sample revision items and study plan? (y/n): ")
        if response.lower() == "y":
            await create_sample_items()
            await create_sample_sessions()

        print("\n✅ Database setup complete!")

    except Exception as e:
        print(f"❌ Error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    asyncio.run(main())
