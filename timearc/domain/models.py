"""
Domain Models using Pydantic for validation.

Architecture Decision: Why Pydantic?
Pydantic provides runtime data validation, ensuring data integrity when loading
from YAML config files or the ledger database. It also provides easy
serialization for the read models handed to the presentation layer.
"""

import datetime
import uuid
from typing import Optional, List, Tuple
from pydantic import BaseModel, Field, ConfigDict


# One calendar day's worth of seconds; a ledger entry never exceeds it.
MAX_DAILY_SECONDS = 86_400.0


def _new_task_id() -> str:
    return uuid.uuid4().hex


class Task(BaseModel):
    """
    Represents a trackable task.

    Tasks live in memory only. The ledger keeps a copy of the name at credit
    time, so renaming a task never touches historical entries.
    """
    id: str = Field(default_factory=_new_task_id)
    name: str = Field(..., min_length=1, max_length=200)

    # Volatile session counters
    current_session_seconds: float = Field(default=0.0, ge=0)
    credited_seconds: float = Field(default=0.0, ge=0)  # part of the session already in the ledger

    @property
    def uncredited_seconds(self) -> float:
        return max(0.0, self.current_session_seconds - self.credited_seconds)


class DailyTimeEntry(BaseModel):
    """
    Accumulated seconds for one task on one local calendar day.

    At most one entry exists per (day, task_name); credits merge by addition.
    """
    model_config = ConfigDict(from_attributes=True)

    id: Optional[int] = None
    day: datetime.date
    task_name: str
    seconds: float = Field(default=0.0, ge=0, le=MAX_DAILY_SECONDS)


class StopwatchState(BaseModel):
    """Snapshot of the stopwatch handed to the presentation layer."""
    is_running: bool = False
    elapsed_seconds: float = Field(default=0.0, ge=0)
    last_tick_instant: Optional[datetime.datetime] = None
    selected_task_id: Optional[str] = None
    formatted_elapsed: str = "00:00.00"


class DayBreakdown(BaseModel):
    """Per-task totals for one day plus the day total."""
    day: datetime.date
    items: List[Tuple[str, float]] = Field(default_factory=list)
    total_seconds: float = 0.0


class MonthGridCell(BaseModel):
    """One cell of the month calendar grid."""
    day: datetime.date
    in_month: bool
    total_seconds: float = 0.0
    is_today: bool = False
    holiday_name: str = ""

    @property
    def has_activity(self) -> bool:
        return self.total_seconds > 0


class TrackerPreferences(BaseModel):
    """
    User configuration and preferences.

    This allows users to customize behavior without touching code.
    """
    model_config = ConfigDict(from_attributes=True)

    default_task_name: str = Field(default="Default", min_length=1, description="Name of the initial task")
    tick_interval_ms: int = Field(default=10, ge=1, le=1000, description="Stopwatch tick cadence")
    week_start: int = Field(default=0, ge=0, le=6, description="First weekday of the month grid (0=Monday)")
    timezone: Optional[str] = Field(default=None, description="IANA zone for day boundaries; host local if unset")

    # Calendar decorations
    holiday_country: Optional[str] = Field(default=None, description="ISO country code for public holidays")
    holiday_subdiv: Optional[str] = Field(default=None, description="Subdivision code, e.g. 'BY'")

    log_level: str = Field(default="INFO", description="Root log level")
