"""Infrastructure layer - Database and persistence"""

from .db import DatabaseEngine, get_engine, init_db
from .models import DailyTimeEntryModel
from .repository import DailyLedgerRepository

__all__ = ["DatabaseEngine", "get_engine", "init_db", "DailyTimeEntryModel", "DailyLedgerRepository"]
