"""
SQLAlchemy ORM models.
Separated from db.py for cleaner imports.
"""

from .db import DailyTimeEntryModel, Base

__all__ = ["DailyTimeEntryModel", "Base"]
