"""
Tests for public holiday lookup used by the month grid.

These tests verify that regional variations come through the holidays
library and that the service can be disabled entirely.
"""

import datetime
import pytest
from timearc.services.calendar_service import CalendarService


GERMAN_STATES = ["BW", "BY", "BE", "HH", "NW", "SN", "TH"]


class TestGermanHolidays:

    @pytest.mark.parametrize("state", GERMAN_STATES)
    def test_new_year_is_holiday_in_all_states(self, state: str):
        """New Year's Day (January 1st) is a public holiday in all states."""
        service = CalendarService("DE", state)
        assert service.is_holiday(datetime.date(2026, 1, 1)), f"New Year should be a holiday in {state}"

    def test_epiphany_is_regional(self):
        """Epiphany (January 6th) is a holiday in Bavaria but not in Berlin."""
        epiphany = datetime.date(2026, 1, 6)
        assert CalendarService("DE", "BY").is_holiday(epiphany)
        assert not CalendarService("DE", "BE").is_holiday(epiphany)

    def test_holiday_name(self):
        service = CalendarService("DE", "BY", language="en_US")
        assert "Christmas" in service.get_holiday_name(datetime.date(2026, 12, 25))
        assert service.get_holiday_name(datetime.date(2026, 12, 22)) == ""


class TestDisabled:

    def test_no_country_means_no_holidays(self):
        service = CalendarService()
        assert not service.is_holiday(datetime.date(2026, 1, 1))
        assert service.get_holiday_name(datetime.date(2026, 12, 25)) == ""

    def test_weekend(self):
        service = CalendarService()
        assert service.is_weekend(datetime.date(2026, 1, 3))  # Saturday
        assert not service.is_weekend(datetime.date(2026, 1, 5))  # Monday
