"""
Repository Pattern Implementation.

Architecture Decision: Why Repository Pattern?
Separates data access logic from business logic. Makes it easy to:
- Switch database implementations
- Mock data for testing (the stopwatch only sees credit/query)
- Change data sources (local DB to cloud API)
"""

import asyncio
import datetime
import logging
from typing import List, Optional, Tuple

from sqlalchemy import select, and_, delete
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from timearc.domain.errors import LedgerWriteFailure
from timearc.domain.models import DailyTimeEntry, MAX_DAILY_SECONDS
from timearc.infra.db import DailyTimeEntryModel, get_engine

logger = logging.getLogger(__name__)

KEY_LOCK_COUNT = 64


class DailyLedgerRepository:
    """
    Durable mapping (day, task name) -> accumulated seconds.

    Credits to the same key are serialized with a lock and applied as
    a read-modify-write inside one transaction, so concurrent credits merge
    instead of overwriting each other. Share one instance per database.
    """

    def __init__(self, session_factory: Optional[async_sessionmaker] = None):
        self.session_factory = session_factory
        # Fixed pool picked by key hash; keys sharing a lock only wait on each other
        self._key_locks: List[asyncio.Lock] = [asyncio.Lock() for _ in range(KEY_LOCK_COUNT)]

    def _lock_for(self, day: datetime.date, task_name: str) -> asyncio.Lock:
        return self._key_locks[hash((day, task_name)) % len(self._key_locks)]

    def _get_session(self) -> AsyncSession:
        """Get session - from the injected factory or the global engine"""
        if self.session_factory is not None:
            return self.session_factory()
        return get_engine().get_session()

    async def credit(self, day: datetime.date, task_name: str, seconds: float) -> DailyTimeEntry:
        """
        Merge seconds into the entry for (day, task_name).

        The entry is created on first credit. The stored total is clamped to
        one day's worth of seconds.

        Raises:
            ValueError: seconds is negative
            LedgerWriteFailure: the storage layer rejected the write
        """
        if seconds < 0:
            raise ValueError(f"Cannot credit negative seconds: {seconds}")

        async with self._lock_for(day, task_name):
            try:
                session = self._get_session()
                async with session:
                    result = await session.execute(
                        select(DailyTimeEntryModel).where(
                            and_(
                                DailyTimeEntryModel.day == day,
                                DailyTimeEntryModel.task_name == task_name
                            )
                        )
                    )
                    model = result.scalar_one_or_none()
                    if model is None:
                        model = DailyTimeEntryModel(
                            day=day,
                            task_name=task_name,
                            seconds=min(seconds, MAX_DAILY_SECONDS)
                        )
                        session.add(model)
                    else:
                        total = model.seconds + seconds
                        if total > MAX_DAILY_SECONDS:
                            logger.warning(
                                f"Clamping {task_name!r} on {day} to {MAX_DAILY_SECONDS:.0f}s "
                                f"(would be {total:.2f}s)"
                            )
                        model.seconds = min(total, MAX_DAILY_SECONDS)

                    await session.commit()
                    return DailyTimeEntry.model_validate(model)
            except SQLAlchemyError as e:
                logger.error(f"Ledger credit failed for {task_name!r} on {day}: {e}")
                raise LedgerWriteFailure(
                    f"Failed to credit {seconds:.2f}s to {task_name!r} on {day}",
                    day=day, task_name=task_name, seconds=seconds
                ) from e

    async def get_entry(self, day: datetime.date, task_name: str) -> Optional[DailyTimeEntry]:
        """Get the entry for a single key"""
        session = self._get_session()
        async with session:
            result = await session.execute(
                select(DailyTimeEntryModel).where(
                    and_(
                        DailyTimeEntryModel.day == day,
                        DailyTimeEntryModel.task_name == task_name
                    )
                )
            )
            model = result.scalar_one_or_none()
            return DailyTimeEntry.model_validate(model) if model else None

    async def query(self, day: datetime.date) -> List[Tuple[str, float]]:
        """Get (task name, seconds) pairs recorded for a day, ordered by name"""
        session = self._get_session()
        async with session:
            result = await session.execute(
                select(DailyTimeEntryModel.task_name, DailyTimeEntryModel.seconds)
                .where(DailyTimeEntryModel.day == day)
                .order_by(DailyTimeEntryModel.task_name)
            )
            return [(name, seconds) for name, seconds in result.all()]

    async def query_range(self, start_day: datetime.date, end_day: datetime.date) -> List[DailyTimeEntry]:
        """Get all entries between start_day and end_day (inclusive)"""
        session = self._get_session()
        async with session:
            result = await session.execute(
                select(DailyTimeEntryModel)
                .where(
                    and_(
                        DailyTimeEntryModel.day >= start_day,
                        DailyTimeEntryModel.day <= end_day
                    )
                )
                .order_by(DailyTimeEntryModel.day, DailyTimeEntryModel.task_name)
            )
            return [DailyTimeEntry.model_validate(m) for m in result.scalars().all()]

    async def list_days(self, limit: Optional[int] = None) -> List[datetime.date]:
        """Get the days that have entries, newest first"""
        session = self._get_session()
        async with session:
            stmt = (
                select(DailyTimeEntryModel.day)
                .distinct()
                .order_by(DailyTimeEntryModel.day.desc())
            )
            if limit is not None:
                stmt = stmt.limit(limit)
            result = await session.execute(stmt)
            return list(result.scalars().all())

    async def delete_all(self) -> int:
        """Delete all entries. Returns count of deleted rows."""
        session = self._get_session()
        async with session:
            result = await session.execute(delete(DailyTimeEntryModel))
            await session.commit()
            return result.rowcount
