"""
Pytest configuration and fixtures.
"""

import datetime
import sys
from pathlib import Path
import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker

# Add project root
sys.path.insert(0, str(Path(__file__).parent.parent))

from timearc.domain.clock import FixedClock
from timearc.domain.errors import LedgerWriteFailure
from timearc.infra.db import Base
from timearc.infra.repository import DailyLedgerRepository


@pytest_asyncio.fixture
async def db_engine(tmp_path):
    """Create a throwaway SQLite database file for testing"""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'ledger.db'}")

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def ledger(db_engine):
    """Ledger repository bound to the test database"""
    session_factory = async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)
    return DailyLedgerRepository(session_factory)


class FlakyLedger:
    """Delegates to a real ledger but fails every credit while `failing` is set"""

    def __init__(self, inner):
        self.inner = inner
        self.failing = False
        self.attempts = 0

    async def credit(self, day, task_name, seconds):
        self.attempts += 1
        if self.failing:
            raise LedgerWriteFailure("disk full", day=day, task_name=task_name, seconds=seconds)
        return await self.inner.credit(day, task_name, seconds)

    def __getattr__(self, name):
        return getattr(self.inner, name)


@pytest_asyncio.fixture
async def flaky_ledger(ledger):
    return FlakyLedger(ledger)


@pytest.fixture
def clock():
    """Clock parked at a Monday morning"""
    return FixedClock(datetime.datetime(2026, 3, 9, 9, 0, 0))
