"""
Tracker Service - presentation-facing facade over the tracking core.

Architecture Decision: Observer Pattern (Qt Signals)
The service emits signals when state changes, keeping it decoupled from UI.
A repeating QTimer drives the engine on the Qt thread and each
callback runs the async engine to completion, so ticks never overlap.
"""

import asyncio
import datetime
import logging
from typing import Dict, List, Optional

from PySide6.QtCore import QObject, QTimer, Signal

from timearc.domain.clock import Clock
from timearc.domain.errors import (
    AlreadyRunning, NotRunning, EmptyTaskName, LastTaskDeletion, TaskNotFound, LedgerWriteFailure
)
from timearc.domain.models import Task, StopwatchState, DayBreakdown, MonthGridCell, TrackerPreferences
from timearc.infra.config import Settings, get_settings, configure_logging
from timearc.infra.db import get_engine
from timearc.infra.repository import DailyLedgerRepository
from timearc.services.aggregator import Aggregator
from timearc.services.calendar_service import CalendarService
from timearc.services.stopwatch import StopwatchEngine
from timearc.services.task_registry import TaskRegistry

logger = logging.getLogger(__name__)


class TrackerService(QObject):
    """
    Accepts UI commands and exposes read models.
    Knows nothing about widgets; misuse of start/stop is a silent no-op here.
    """

    # Signals
    ticked = Signal(str, float)  # (formatted_elapsed, elapsed_seconds)
    started = Signal(str)  # task_id
    stopped = Signal(str, float)  # task_id, elapsed_seconds
    tasks_changed = Signal()
    ledger_error = Signal(str)  # message

    def __init__(self, ledger: DailyLedgerRepository,
                 preferences: Optional[TrackerPreferences] = None,
                 clock: Optional[Clock] = None,
                 tz: Optional[datetime.tzinfo] = None,
                 loop: Optional[asyncio.AbstractEventLoop] = None):
        super().__init__()
        self.preferences = preferences or TrackerPreferences()
        self.loop = loop or asyncio.new_event_loop()

        self.ledger = ledger
        self.registry = TaskRegistry(self.preferences.default_task_name)
        self.engine = StopwatchEngine(self.registry, ledger, clock=clock, tz=tz)

        calendar_service = None
        if self.preferences.holiday_country:
            calendar_service = CalendarService(
                self.preferences.holiday_country, self.preferences.holiday_subdiv
            )
        self.aggregator = Aggregator(
            ledger, calendar_service,
            week_start=self.preferences.week_start, clock=clock, tz=tz
        )

        self._rollover_error_reported = False

        self.timer = QTimer(self)
        self.timer.setInterval(self.preferences.tick_interval_ms)
        self.timer.timeout.connect(self._on_tick)

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None,
                      loop: Optional[asyncio.AbstractEventLoop] = None) -> 'TrackerService':
        """Build a service wired to the configured database"""
        settings = settings or get_settings()
        configure_logging(settings.preferences.log_level)

        loop = loop or asyncio.new_event_loop()
        db = get_engine(settings.get_db_url())
        loop.run_until_complete(db.create_tables())

        ledger = DailyLedgerRepository(db.session_factory)
        return cls(ledger, settings.preferences, tz=settings.get_timezone(), loop=loop)

    def _run(self, coro):
        return self.loop.run_until_complete(coro)

    # Commands

    def start(self) -> bool:
        """Start the stopwatch; returns False if it was already running"""
        try:
            self._run(self.engine.start())
        except AlreadyRunning:
            logger.debug("start ignored: already running")
            return False

        self.timer.start()
        self.started.emit(self.registry.selected.id)
        return True

    def stop(self) -> bool:
        """Stop the stopwatch; returns False if stopped already or the flush failed"""
        task_id = self.registry.selected.id
        try:
            elapsed = self._run(self.engine.stop())
        except NotRunning:
            logger.debug("stop ignored: not running")
            return False
        except LedgerWriteFailure as e:
            self.ledger_error.emit(str(e))
            return False

        self.timer.stop()
        self._rollover_error_reported = False
        self.stopped.emit(task_id, elapsed)
        return True

    def toggle(self) -> bool:
        """Start when stopped, stop when running"""
        if self.engine.is_running:
            return self.stop()
        return self.start()

    def select_task(self, task_id: str) -> Optional[Task]:
        """Switch tasks; a running stopwatch is stopped and flushed first"""
        was_running = self.engine.is_running
        outgoing_id = self.registry.selected.id
        try:
            task = self._run(self.engine.select_task(task_id))
        except TaskNotFound:
            logger.warning(f"select_task: unknown task {task_id}")
            return None
        except LedgerWriteFailure as e:
            self.ledger_error.emit(str(e))
            return None

        if was_running:
            self.timer.stop()
            self.stopped.emit(outgoing_id, self.registry.get(outgoing_id).current_session_seconds)
        self.tasks_changed.emit()
        return task

    def add_task(self, name: str) -> Optional[Task]:
        """Add and select a task; empty names are rejected without side effects"""
        try:
            TaskRegistry.clean_name(name)
        except EmptyTaskName:
            logger.info("add_task rejected: empty name")
            return None

        if self.engine.is_running and not self.stop():
            return None

        task = self.registry.add_task(name)
        self.engine.load_selected()
        self.tasks_changed.emit()
        return task

    def rename_task(self, task_id: str, name: str) -> Optional[Task]:
        """Rename a task; past ledger entries keep the old name"""
        try:
            task = self.registry.rename_task(task_id, name)
        except (EmptyTaskName, TaskNotFound) as e:
            logger.info(f"rename_task rejected: {e!r}")
            return None

        self.tasks_changed.emit()
        return task

    def delete_task(self, task_id: str) -> bool:
        """Delete a task; the last remaining task cannot be deleted"""
        try:
            self.registry.index_of(task_id)
        except TaskNotFound:
            logger.warning(f"delete_task: unknown task {task_id}")
            return False
        if len(self.registry) <= 1:
            logger.info("delete_task rejected: last remaining task")
            return False

        deleting_selected = task_id == self.registry.selected.id
        if deleting_selected and self.engine.is_running and not self.stop():
            return False

        try:
            self.registry.delete_task(task_id)
        except LastTaskDeletion:
            return False

        if deleting_selected:
            self.engine.load_selected()
        self.tasks_changed.emit()
        return True

    def shutdown(self) -> None:
        """Flush a running session and stop the timer"""
        if self.engine.is_running:
            self.stop()
        self.timer.stop()

    # Read models

    @property
    def state(self) -> StopwatchState:
        return self.engine.state

    @property
    def task_names(self) -> List[str]:
        return self.registry.names

    @property
    def selected_index(self) -> int:
        return self.registry.selected_index

    def day_totals(self, day: datetime.date) -> Dict[str, float]:
        return self._run(self.aggregator.totals_for_day(day))

    def day_breakdown(self, day: datetime.date) -> DayBreakdown:
        return self._run(self.aggregator.day_breakdown(day))

    def month_totals(self, anchor_day: datetime.date) -> Dict[datetime.date, float]:
        return self._run(self.aggregator.totals_for_month(anchor_day))

    def month_grid(self, anchor_day: datetime.date) -> List[List[MonthGridCell]]:
        return self._run(self.aggregator.month_grid(anchor_day))

    def history(self, limit: Optional[int] = None) -> List[DayBreakdown]:
        return self._run(self.aggregator.history(limit))

    def _on_tick(self):
        """Called by the timer on every interval"""
        try:
            elapsed = self._run(self.engine.tick())
        except NotRunning:
            self.timer.stop()
            return

        pending = self.engine.pending_rollover_day
        if pending is not None and not self._rollover_error_reported:
            self._rollover_error_reported = True
            self.ledger_error.emit(f"Could not save time for {pending}; will retry")
        elif pending is None:
            self._rollover_error_reported = False

        self.ticked.emit(self.engine.state.formatted_elapsed, elapsed)
