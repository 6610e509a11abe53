"""
Aggregator - read-side views over the daily ledger.

Turns (day, task, seconds) rows into day totals, per-task breakdowns,
month-grid summaries and the reverse-chronological history list.
"""

import calendar
import datetime
import logging
from collections import defaultdict
from typing import Dict, List, Optional

from timearc.domain.clock import Clock, SystemClock, local_day
from timearc.domain.models import DayBreakdown, MonthGridCell
from timearc.infra.repository import DailyLedgerRepository
from timearc.services.calendar_service import CalendarService

logger = logging.getLogger(__name__)

STYLE_STOPWATCH = "MM:SS"     # live display, 05:07.25
STYLE_TOTAL = "Hh Mm"         # historical totals, 2h 5m / 5m
STYLE_TOTAL_SHORT = "Mm"      # same rendering; hours are dropped when zero anyway
STYLE_COMPACT = "compact"     # history rows, minutes:seconds without hundredths


def format_duration(seconds: float, style: str = STYLE_STOPWATCH) -> str:
    """
    Format a duration for display.

    Args:
        seconds: Duration in seconds (negative values render as zero)
        style: "MM:SS" for MM:SS.CC, "Hh Mm" / "Mm" for totals, "compact" for MM:SS

    Returns:
        The formatted string
    """
    seconds = max(0.0, float(seconds))

    if style == STYLE_STOPWATCH:
        # Work in whole centiseconds so 0.29 does not render as .28
        centis = int(seconds * 100 + 1e-6)
        minutes, rest = divmod(centis, 6000)
        secs, hundredths = divmod(rest, 100)
        return f"{minutes:02d}:{secs:02d}.{hundredths:02d}"

    if style in (STYLE_TOTAL, STYLE_TOTAL_SHORT):
        whole = int(seconds)
        hours, remainder = divmod(whole, 3600)
        minutes = remainder // 60
        if hours:
            return f"{hours}h {minutes}m"
        return f"{minutes}m"

    if style == STYLE_COMPACT:
        minutes, secs = divmod(int(seconds), 60)
        return f"{minutes:02d}:{secs:02d}"

    raise ValueError(f"Unknown duration style: {style!r}")


class Aggregator:
    """
    Builds calendar and report read models from the ledger.
    Never assumes one entry per task and day; rows are always summed.
    """

    format_duration = staticmethod(format_duration)

    def __init__(self, ledger: DailyLedgerRepository,
                 calendar_service: Optional[CalendarService] = None,
                 week_start: int = calendar.MONDAY,
                 clock: Optional[Clock] = None,
                 tz: Optional[datetime.tzinfo] = None):
        """
        Initialize the aggregator.

        Args:
            ledger: Source of daily entries
            calendar_service: Optional holiday lookup for grid cells
            week_start: First weekday of grid rows (0=Monday ... 6=Sunday)
            clock: Used to mark today's cell
            tz: Zone defining "today"
        """
        self.ledger = ledger
        self.calendar_service = calendar_service
        self.week_start = week_start
        self.clock = clock or SystemClock(tz)
        self.tz = tz

    async def totals_for_day(self, day: datetime.date) -> Dict[str, float]:
        """Map task name -> seconds for a day"""
        totals: Dict[str, float] = defaultdict(float)
        for task_name, seconds in await self.ledger.query(day):
            totals[task_name] += seconds
        return dict(totals)

    async def day_breakdown(self, day: datetime.date) -> DayBreakdown:
        """Per-task rows sorted by name, plus the day total"""
        totals = await self.totals_for_day(day)
        items = sorted(totals.items())
        return DayBreakdown(day=day, items=items, total_seconds=sum(totals.values()))

    def month_grid_days(self, anchor_day: datetime.date) -> List[datetime.date]:
        """
        Days covering full week rows for the month containing anchor_day.

        Leading and trailing days from adjacent months complete the first
        and last rows.
        """
        cal = calendar.Calendar(firstweekday=self.week_start)
        weeks = cal.monthdatescalendar(anchor_day.year, anchor_day.month)
        return [day for week in weeks for day in week]

    async def totals_for_month(self, anchor_day: datetime.date) -> Dict[datetime.date, float]:
        """
        Map every grid day of anchor_day's month -> total seconds across tasks.

        Days without entries map to 0.0 rather than being absent.
        """
        grid = self.month_grid_days(anchor_day)
        totals: Dict[datetime.date, float] = {day: 0.0 for day in grid}

        for entry in await self.ledger.query_range(grid[0], grid[-1]):
            if entry.day in totals:
                totals[entry.day] += entry.seconds
        return totals

    async def month_grid(self, anchor_day: datetime.date,
                         today: Optional[datetime.date] = None) -> List[List[MonthGridCell]]:
        """Week rows of cells ready for a month calendar widget"""
        if today is None:
            today = local_day(self.clock.now(), self.tz)

        totals = await self.totals_for_month(anchor_day)
        cells = []
        for day in self.month_grid_days(anchor_day):
            holiday = ""
            if self.calendar_service is not None:
                holiday = self.calendar_service.get_holiday_name(day)
            cells.append(MonthGridCell(
                day=day,
                in_month=day.month == anchor_day.month,
                total_seconds=totals[day],
                is_today=day == today,
                holiday_name=holiday
            ))
        return [cells[i:i + 7] for i in range(0, len(cells), 7)]

    async def history(self, limit: Optional[int] = None) -> List[DayBreakdown]:
        """Breakdowns for every recorded day, newest first"""
        days = await self.ledger.list_days(limit)
        if not days:
            return []

        grouped: Dict[datetime.date, Dict[str, float]] = defaultdict(lambda: defaultdict(float))
        for entry in await self.ledger.query_range(min(days), max(days)):
            grouped[entry.day][entry.task_name] += entry.seconds

        result = []
        for day in days:
            totals = grouped.get(day, {})
            result.append(DayBreakdown(
                day=day,
                items=sorted(totals.items()),
                total_seconds=sum(totals.values())
            ))
        return result
