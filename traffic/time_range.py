"""
Time Range Resolution
Maps a filter preset (hour/day/week/month/custom) to a concrete [start, end]
interval anchored on "now".
"""
import calendar
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from enum import Enum
from typing import Optional, Union

from config.settings import (
    DEFAULT_CUSTOM_RANGE_DAYS, END_OF_DAY, PRESET_LABELS, START_OF_DAY
)

DateLike = Union[date, datetime]


class Preset(str, Enum):
    HOUR = "hour"
    DAY = "day"
    WEEK = "week"
    MONTH = "month"
    CUSTOM = "custom"

    @property
    def label(self) -> str:
        return PRESET_LABELS[self.value]


@dataclass(frozen=True)
class TimeRange:
    start: datetime
    end: datetime

    def __post_init__(self):
        if self.start > self.end:
            raise ValueError(f"TimeRange start {self.start} is after end {self.end}")

    @property
    def duration(self) -> timedelta:
        return self.end - self.start


@dataclass(frozen=True)
class CustomRange:
    """User selection from the range picker; either endpoint may still be missing."""
    start: Optional[DateLike] = None
    end: Optional[DateLike] = None

    @property
    def is_complete(self) -> bool:
        return self.start is not None and self.end is not None


def as_date(value: DateLike) -> date:
    return value.date() if isinstance(value, datetime) else value


def _at(day: date, at_time, tzinfo) -> datetime:
    return datetime.combine(day, at_time).replace(tzinfo=tzinfo)


def _shift(now: datetime, delta: timedelta) -> datetime:
    # Elapsed time, not wall-clock time: goes through UTC
    if now.tzinfo is None:
        return (now.astimezone() + delta).astimezone().replace(tzinfo=None)
    return (now.astimezone(timezone.utc) + delta).astimezone(now.tzinfo)


def start_of_day(value: DateLike, tzinfo=None) -> datetime:
    if isinstance(value, datetime):
        tzinfo = value.tzinfo
    return _at(as_date(value), START_OF_DAY, tzinfo)


def end_of_day(value: DateLike, tzinfo=None) -> datetime:
    if isinstance(value, datetime):
        tzinfo = value.tzinfo
    return _at(as_date(value), END_OF_DAY, tzinfo)


def resolve(preset, now: datetime,
            custom_range: Optional[CustomRange] = None) -> Optional[TimeRange]:
    """
    Resolve a preset into a TimeRange.

    Every returned instant carries now's tzinfo. A naive `now` is local
    wall-clock time (midnights are local midnights, DST included); an aware
    `now` should carry a zone such as ZoneInfo rather than a fixed offset
    if its range may cross a DST change. For all presets except 'custom'
    the result depends on `now` alone.

    Args:
        preset: Preset member or its string value
        now: Anchor instant
        custom_range: Previously picked custom range (only used for 'custom')

    Returns:
        TimeRange, or None for a custom range with only one endpoint picked.
        Callers must not fetch on None.
    """
    preset = Preset(preset)
    tz = now.tzinfo
    today = now.date()

    if preset is Preset.HOUR:
        return TimeRange(_shift(now, -timedelta(hours=1)), now)

    if preset is Preset.DAY:
        return TimeRange(_at(today, START_OF_DAY, tz), _at(today, END_OF_DAY, tz))

    if preset is Preset.WEEK:
        # weekday() is Monday=0; shift so Sunday=0
        day_of_week = (now.weekday() + 1) % 7
        sunday = today - timedelta(days=day_of_week)
        saturday = sunday + timedelta(days=6)
        return TimeRange(_at(sunday, START_OF_DAY, tz), _at(saturday, END_OF_DAY, tz))

    if preset is Preset.MONTH:
        last_day = calendar.monthrange(today.year, today.month)[1]
        return TimeRange(
            _at(today.replace(day=1), START_OF_DAY, tz),
            _at(today.replace(day=last_day), END_OF_DAY, tz),
        )

    # Preset.CUSTOM
    if custom_range is None or (custom_range.start is None and custom_range.end is None):
        week_ago = today - timedelta(days=DEFAULT_CUSTOM_RANGE_DAYS)
        return TimeRange(_at(week_ago, START_OF_DAY, tz), _at(today, END_OF_DAY, tz))

    if not custom_range.is_complete:
        return None

    start = custom_range.start
    if not isinstance(start, datetime):
        start = start_of_day(start, tz)
    return TimeRange(start, end_of_day(custom_range.end, tz))
