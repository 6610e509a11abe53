"""
Clock abstraction and local calendar-day helpers.

Day boundaries are decided by explicit pure functions taking a timezone,
so tests can pin the zone independently of the host locale.
"""

import datetime
from typing import Optional, Protocol


class Clock(Protocol):
    """Supplies the current instant"""

    def now(self) -> datetime.datetime:
        ...


class SystemClock:
    """Wall clock. Always returns aware instants, in host local time when no zone is given."""

    def __init__(self, tz: Optional[datetime.tzinfo] = None):
        self.tz = tz

    def now(self) -> datetime.datetime:
        if self.tz is not None:
            return datetime.datetime.now(self.tz)
        return datetime.datetime.now().astimezone()


class FixedClock:
    """Manually driven clock for tests and scripted replays."""

    def __init__(self, instant: datetime.datetime):
        self.instant = instant

    def now(self) -> datetime.datetime:
        return self.instant

    def set(self, instant: datetime.datetime) -> None:
        self.instant = instant

    def advance(self, seconds: float) -> datetime.datetime:
        self.instant += datetime.timedelta(seconds=seconds)
        return self.instant


def local_day(instant: datetime.datetime, tz: Optional[datetime.tzinfo] = None) -> datetime.date:
    """
    Get the local calendar day of an instant.

    Args:
        instant: Naive datetimes are taken as local wall time
        tz: Zone defining "local"; host local time if None

    Returns:
        The calendar date
    """
    if instant.tzinfo is None:
        return instant.date()
    return instant.astimezone(tz).date()


def same_local_day(a: datetime.datetime, b: datetime.datetime,
                   tz: Optional[datetime.tzinfo] = None) -> bool:
    """Check whether two instants fall on the same local calendar day"""
    return local_day(a, tz) == local_day(b, tz)


def start_of_day(instant: datetime.datetime, tz: Optional[datetime.tzinfo] = None) -> datetime.datetime:
    """Local midnight of the day containing instant"""
    day = local_day(instant, tz)
    if instant.tzinfo is None:
        return datetime.datetime.combine(day, datetime.time.min)
    if tz is None:
        # Host offset at midnight, which may differ from the offset at instant
        return datetime.datetime.combine(day, datetime.time.min).astimezone()
    return datetime.datetime.combine(day, datetime.time.min, tzinfo=tz)


def seconds_between(earlier: datetime.datetime, later: datetime.datetime) -> float:
    """
    Real seconds from earlier to later.

    Aware instants are compared in UTC, so a daylight-saving jump of the wall
    clock is not counted as elapsed time. Naive instants carry no offset and
    are compared as they are.
    """
    if earlier.tzinfo is not None and later.tzinfo is not None:
        earlier = earlier.astimezone(datetime.timezone.utc)
        later = later.astimezone(datetime.timezone.utc)
    return (later - earlier).total_seconds()
