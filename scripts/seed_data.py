"""
Data Seeder for Time Arc.
Populates the ledger with realistic daily totals for demo purposes.
"""

import asyncio
import sys
import random
from datetime import date, timedelta
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from timearc.infra.config import get_settings, configure_logging
from timearc.infra.db import get_engine
from timearc.infra.repository import DailyLedgerRepository


async def reset_database(db_path: Path):
    """Delete the existing database file to ensure a fresh seed"""
    if db_path.exists():
        print(f"Removing existing database at: {db_path}")
        try:
            db_path.unlink()
            print("Database removed.")
        except PermissionError:
            print("ERROR: Could not remove database. It might be in use.")
            sys.exit(1)
    else:
        print(f"No existing database found at: {db_path}")


async def seed(days: int = 45):
    settings = get_settings()
    configure_logging(settings.preferences.log_level)

    db_path = settings.get_db_path()
    if db_path is None:
        print(f"ERROR: {settings.get_db_url()} is not a SQLite file; refusing to reset it.")
        sys.exit(1)
    await reset_database(db_path)
    print("Starting data seeding...")

    engine = get_engine(settings.get_db_url())
    await engine.create_tables()
    ledger = DailyLedgerRepository(engine.session_factory)

    task_names = ["Default", "Reading", "Coding", "Exercise"]

    # Pattern: weekdays get 2-4 tasks, weekends are mostly empty
    current = date.today() - timedelta(days=days)
    while current <= date.today():
        if current.weekday() >= 5 and random.random() > 0.3:
            current += timedelta(days=1)
            continue

        for name in random.sample(task_names, k=random.randint(2, 4)):
            # Credit in a few sessions like the stopwatch would
            for _ in range(random.randint(1, 3)):
                await ledger.credit(current, name, random.uniform(5 * 60, 90 * 60))

        print(f"Generated entries for {current}")
        current += timedelta(days=1)

    await engine.engine.dispose()
    print("Seeding complete.")


if __name__ == "__main__":
    asyncio.run(seed())
