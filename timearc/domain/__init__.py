"""Domain layer - Pure business entities and logic"""

from .clock import Clock, SystemClock, FixedClock, local_day, same_local_day, start_of_day, seconds_between
from .errors import (
    TimeArcError,
    AlreadyRunning,
    NotRunning,
    EmptyTaskName,
    LastTaskDeletion,
    TaskNotFound,
    LedgerWriteFailure,
)
from .models import (
    MAX_DAILY_SECONDS,
    Task,
    DailyTimeEntry,
    StopwatchState,
    DayBreakdown,
    MonthGridCell,
    TrackerPreferences,
)

__all__ = [
    "Clock", "SystemClock", "FixedClock", "local_day", "same_local_day", "start_of_day",
    "seconds_between",
    "TimeArcError", "AlreadyRunning", "NotRunning", "EmptyTaskName",
    "LastTaskDeletion", "TaskNotFound", "LedgerWriteFailure",
    "MAX_DAILY_SECONDS", "Task", "DailyTimeEntry", "StopwatchState",
    "DayBreakdown", "MonthGridCell", "TrackerPreferences",
]
