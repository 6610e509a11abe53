"""
Stopwatch Engine - Core time tracking logic.

Architecture Decision: Injected clock, no timer of its own
The engine never schedules anything. A host (the Qt TrackerService, a test,
a replay script) calls tick() on its own cadence and may pass synthetic
instants, which keeps day-rollover behaviour deterministic under test.

Bookkeeping:
    elapsed_seconds      live value shown to the user, mirrored into the
                         selected task's current_session_seconds
    credited_seconds     (per task) how much of the session the ledger
                         already holds; only the difference is ever credited
"""

import asyncio
import datetime
import logging
from typing import Dict, Optional, Tuple

from timearc.domain.clock import Clock, SystemClock, local_day, same_local_day, seconds_between, start_of_day
from timearc.domain.errors import AlreadyRunning, NotRunning, LedgerWriteFailure
from timearc.domain.models import Task, StopwatchState
from timearc.infra.repository import DailyLedgerRepository
from timearc.services.aggregator import format_duration
from timearc.services.task_registry import TaskRegistry

logger = logging.getLogger(__name__)


class StopwatchEngine:
    """
    Two-state machine (Stopped, Running) that accumulates elapsed time for the
    selected task and flushes it to the ledger on stop and on day rollover.

    start()/stop() on the wrong state raise AlreadyRunning/NotRunning; the
    presentation facade turns those into no-ops.
    """

    def __init__(self, registry: TaskRegistry, ledger: DailyLedgerRepository,
                 clock: Optional[Clock] = None, tz: Optional[datetime.tzinfo] = None):
        self.registry = registry
        self.ledger = ledger
        self.clock = clock or SystemClock(tz)
        self.tz = tz

        self.is_running: bool = False
        self.elapsed_seconds: float = registry.selected.current_session_seconds
        self.last_tick_instant: Optional[datetime.datetime] = None

        # Rollover credits the ledger refused, keyed by (day, task name);
        # retried on every tick and written before any later credit
        self._unflushed: Dict[Tuple[datetime.date, str], float] = {}

        # At most one tick or command in flight
        self._lock = asyncio.Lock()

    @property
    def selected_task(self) -> Task:
        return self.registry.selected

    @property
    def pending_rollover_day(self) -> Optional[datetime.date]:
        """Oldest day whose rollover credit is still waiting for the ledger"""
        return min((day for day, _ in self._unflushed), default=None)

    @property
    def state(self) -> StopwatchState:
        return StopwatchState(
            is_running=self.is_running,
            elapsed_seconds=self.elapsed_seconds,
            last_tick_instant=self.last_tick_instant,
            selected_task_id=self.selected_task.id,
            formatted_elapsed=format_duration(self.elapsed_seconds, "MM:SS"),
        )

    async def start(self) -> None:
        """
        Start accumulating time for the selected task.

        Raises:
            AlreadyRunning: the stopwatch is already running
        """
        async with self._lock:
            if self.is_running:
                raise AlreadyRunning("Stopwatch is already running")
            self.last_tick_instant = self.clock.now()
            self.is_running = True
            logger.debug(f"Started {self.selected_task.name!r} at {self.last_tick_instant}")

    async def tick(self, now: Optional[datetime.datetime] = None) -> float:
        """
        Advance the stopwatch to now.

        Returns:
            The new elapsed seconds

        Raises:
            NotRunning: the stopwatch is stopped
        """
        async with self._lock:
            if not self.is_running:
                raise NotRunning("Stopwatch is not running")
            await self._advance(now if now is not None else self.clock.now())
            return self.elapsed_seconds

    async def stop(self, now: Optional[datetime.datetime] = None) -> float:
        """
        Stop and credit the uncredited part of the session to the ledger.

        elapsed_seconds keeps its final value for display.

        Raises:
            NotRunning: the stopwatch is stopped
            LedgerWriteFailure: the credit failed; the stopwatch keeps running
        """
        async with self._lock:
            if not self.is_running:
                raise NotRunning("Stopwatch is not running")
            return await self._stop(now if now is not None else self.clock.now())

    async def select_task(self, task_id: str, now: Optional[datetime.datetime] = None) -> Task:
        """
        Switch the selected task.

        Switching while running stops (and flushes) the outgoing task first,
        so the engine is always Stopped afterwards.
        """
        async with self._lock:
            self.registry.index_of(task_id)  # raises TaskNotFound before any side effect
            if self.is_running:
                await self._stop(now if now is not None else self.clock.now())

            outgoing = self.selected_task
            outgoing.current_session_seconds = self.elapsed_seconds
            incoming = self.registry.select(task_id)
            self.elapsed_seconds = incoming.current_session_seconds
            return incoming

    def load_selected(self) -> None:
        """Pick up the registry's selection after an add or delete"""
        if self.is_running:
            raise AlreadyRunning("Cannot change the selected task while running")
        self.elapsed_seconds = self.selected_task.current_session_seconds

    async def _stop(self, now: datetime.datetime) -> float:
        await self._advance(now)

        task = self.selected_task
        if self._unflushed:
            await self._flush_unflushed()
        await self._credit(local_day(now, self.tz), task)

        self.is_running = False
        logger.debug(f"Stopped {task.name!r} at {self.elapsed_seconds:.2f}s")
        return self.elapsed_seconds

    async def _advance(self, now: datetime.datetime) -> None:
        task = self.selected_task
        delta = seconds_between(self.last_tick_instant, now)
        if delta < 0:
            logger.debug(f"Clock moved backwards by {-delta:.3f}s; ignoring")
            delta = 0.0

        if self._unflushed:
            await self._retry_unflushed()

        if not same_local_day(self.last_tick_instant, now, self.tz):
            previous_day = local_day(self.last_tick_instant, self.tz)
            days = (local_day(now, self.tz) - previous_day).days
            if abs(days) > 1:
                # Suspended across whole days: the gap is not credited
                logger.info(f"{days} days passed between ticks; dropping {delta:.0f}s gap")
                delta = 0.0
            else:
                # Only the part of the tick after local midnight belongs to the new day
                since_midnight = seconds_between(start_of_day(now, self.tz), now)
                delta = min(delta, max(0.0, since_midnight))
            await self._rollover(previous_day, task)

        self.elapsed_seconds += delta
        task.current_session_seconds = self.elapsed_seconds
        self.last_tick_instant = now

    async def _rollover(self, previous_day: datetime.date, task: Task) -> None:
        amount = task.uncredited_seconds
        self._reset_session(task)
        if amount <= 0:
            return
        try:
            await self.ledger.credit(previous_day, task.name, amount)
        except LedgerWriteFailure:
            key = (previous_day, task.name)
            self._unflushed[key] = self._unflushed.get(key, 0.0) + amount
            logger.warning(
                f"Rollover flush of {amount:.2f}s for {previous_day} failed; "
                f"keeping it in memory for retry"
            )
            return
        logger.info(f"Day rollover: credited {amount:.2f}s of {task.name!r} to {previous_day}")

    async def _retry_unflushed(self) -> None:
        try:
            await self._flush_unflushed()
        except LedgerWriteFailure:
            logger.warning(f"Retrying rollover flush for {self.pending_rollover_day} failed again")
            return
        logger.info("Pending rollover flushes succeeded on retry")

    async def _flush_unflushed(self) -> None:
        """Write held rollover credits oldest first; stops at the first failure"""
        for key in sorted(self._unflushed):
            day, name = key
            await self.ledger.credit(day, name, self._unflushed[key])
            del self._unflushed[key]

    async def _credit(self, day: datetime.date, task: Task) -> None:
        amount = task.uncredited_seconds
        if amount <= 0:
            return
        await self.ledger.credit(day, task.name, amount)
        task.credited_seconds = task.current_session_seconds

    def _reset_session(self, task: Task) -> None:
        self.elapsed_seconds = 0.0
        task.current_session_seconds = 0.0
        task.credited_seconds = 0.0
