"""Services layer - Business logic"""

from .calendar_service import CalendarService
from .task_registry import TaskRegistry
from .aggregator import Aggregator, format_duration
from .stopwatch import StopwatchEngine
from .tracker_service import TrackerService

__all__ = ["CalendarService", "TaskRegistry", "Aggregator", "format_duration", "StopwatchEngine", "TrackerService"]
