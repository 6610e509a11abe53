"""
Calendar Service - Public holiday lookup for the month grid.

Architecture Decision: Strategy Pattern
Any country supported by the holidays library can decorate the grid; the
aggregator only asks for a holiday name per day.
"""

import datetime
from typing import Optional

import holidays


class CalendarService:
    """
    Wraps the holidays library.
    Separated from aggregation logic for Separation of Concerns.
    """

    def __init__(self, country: Optional[str] = None, subdiv: Optional[str] = None,
                 language: Optional[str] = None):
        """
        Initialize with a country code.

        Args:
            country: ISO country code (e.g., 'DE'); None disables holidays
            subdiv: Subdivision code (e.g., 'BY' for Bavaria)
            language: Language for holiday names, library default if None
        """
        self.country = country
        self.subdiv = subdiv

        if country:
            self.holidays = holidays.country_holidays(country, subdiv=subdiv, language=language)
        else:
            self.holidays = {}

    def is_holiday(self, date_obj: datetime.date) -> bool:
        """Check if date is a public holiday"""
        return date_obj in self.holidays

    def get_holiday_name(self, date_obj: datetime.date) -> str:
        """
        Get the name of the holiday for a given date.

        Returns:
            Holiday name or empty string if not a holiday
        """
        return self.holidays.get(date_obj, "") or ""

    def is_weekend(self, date_obj: datetime.date) -> bool:
        """Check if date is a weekend"""
        return date_obj.weekday() > 4
