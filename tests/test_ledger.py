"""
Tests for the daily ledger repository.
"""

import asyncio
import datetime

import pytest
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker

from timearc.domain.errors import LedgerWriteFailure
from timearc.domain.models import MAX_DAILY_SECONDS
from timearc.infra.repository import DailyLedgerRepository, KEY_LOCK_COUNT


DAY = datetime.date(2026, 2, 14)


@pytest.mark.asyncio
async def test_first_credit_creates_entry(ledger):
    entry = await ledger.credit(DAY, "Reading", 42.5)

    assert entry.id is not None
    assert entry.day == DAY
    assert entry.task_name == "Reading"
    assert entry.seconds == pytest.approx(42.5)


@pytest.mark.asyncio
async def test_credits_merge_by_addition(ledger):
    await ledger.credit(DAY, "A", 10)
    await ledger.credit(DAY, "A", 15)

    assert await ledger.query(DAY) == [("A", pytest.approx(25))]


@pytest.mark.asyncio
async def test_concurrent_credits_are_not_lost(ledger):
    """Two concurrent credits to the same key both land"""
    await asyncio.gather(
        ledger.credit(DAY, "A", 10),
        ledger.credit(DAY, "A", 15),
    )

    entry = await ledger.get_entry(DAY, "A")
    assert entry.seconds == pytest.approx(25)


@pytest.mark.asyncio
async def test_many_concurrent_credits_mixed_keys(ledger):
    other = DAY + datetime.timedelta(days=1)
    await asyncio.gather(*(
        ledger.credit(DAY if i % 2 else other, "A", 1.0) for i in range(20)
    ))

    assert (await ledger.get_entry(DAY, "A")).seconds == pytest.approx(10)
    assert (await ledger.get_entry(other, "A")).seconds == pytest.approx(10)


@pytest.mark.asyncio
async def test_total_is_clamped_to_one_day(ledger):
    await ledger.credit(DAY, "A", 86_000)
    entry = await ledger.credit(DAY, "A", 1_000)
    assert entry.seconds == MAX_DAILY_SECONDS

    entry = await ledger.credit(DAY, "B", 90_000)
    assert entry.seconds == MAX_DAILY_SECONDS


@pytest.mark.asyncio
async def test_negative_credit_rejected(ledger):
    with pytest.raises(ValueError):
        await ledger.credit(DAY, "A", -1)
    assert await ledger.query(DAY) == []


@pytest.mark.asyncio
async def test_keys_are_per_day_and_name(ledger):
    await ledger.credit(DAY, "B", 5)
    await ledger.credit(DAY, "A", 7)
    await ledger.credit(DAY + datetime.timedelta(days=1), "A", 3)

    assert await ledger.query(DAY) == [("A", 7), ("B", 5)]


@pytest.mark.asyncio
async def test_query_range_is_inclusive_and_ordered(ledger):
    for offset, name in [(0, "A"), (2, "B"), (4, "C"), (1, "A")]:
        await ledger.credit(DAY + datetime.timedelta(days=offset), name, 60)

    entries = await ledger.query_range(DAY + datetime.timedelta(days=1), DAY + datetime.timedelta(days=4))

    assert [(e.day.day, e.task_name) for e in entries] == [(15, "A"), (16, "B"), (18, "C")]


@pytest.mark.asyncio
async def test_list_days_newest_first(ledger):
    for offset in (3, 0, 7):
        await ledger.credit(DAY + datetime.timedelta(days=offset), "A", 1)
    await ledger.credit(DAY, "B", 1)

    days = await ledger.list_days()
    assert days == [DAY + datetime.timedelta(days=7), DAY + datetime.timedelta(days=3), DAY]
    assert await ledger.list_days(limit=1) == [DAY + datetime.timedelta(days=7)]


@pytest.mark.asyncio
async def test_delete_all(ledger):
    await ledger.credit(DAY, "A", 1)
    await ledger.credit(DAY, "B", 1)
    assert await ledger.delete_all() == 2
    assert await ledger.query(DAY) == []


@pytest.mark.asyncio
async def test_storage_error_becomes_ledger_write_failure(tmp_path):
    # No tables created, so the first statement fails
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'empty.db'}")
    repo = DailyLedgerRepository(async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False))

    with pytest.raises(LedgerWriteFailure) as exc_info:
        await repo.credit(DAY, "A", 10)

    assert exc_info.value.__cause__ is not None
    assert exc_info.value.task_name == "A"
    assert exc_info.value.seconds == 10
    await engine.dispose()


@pytest.mark.asyncio
async def test_key_locks_do_not_grow_with_keys(ledger):
    for offset in range(200):
        await ledger.credit(DAY + datetime.timedelta(days=offset), "A", 1)

    assert len(ledger._key_locks) == KEY_LOCK_COUNT
    assert ledger._lock_for(DAY, "A") is ledger._lock_for(DAY, "A")
    assert (await ledger.get_entry(DAY + datetime.timedelta(days=199), "A")).seconds == 1
