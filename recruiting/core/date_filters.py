"""
Calendar-day helpers.

Holidays are calendar days in the reference timezone (ATTENDANCE_TIMEZONE).
Attendance rows store the canonical instant of their day: midnight in the
reference timezone, expressed as a naive UTC datetime. A day-range is the
half-open interval [midnight, next midnight) in that timezone.
"""

from datetime import date, datetime, time, timedelta, timezone
from typing import Optional, Tuple, Union
from zoneinfo import ZoneInfo

from recruiting.core.config import settings

WEEKDAY_NAMES = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")


def utc_now() -> datetime:
    """Naive UTC timestamp, the convention for every DateTime column."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def reference_timezone(tz_name: Optional[str] = None) -> ZoneInfo:
    return ZoneInfo(tz_name or settings.ATTENDANCE_TIMEZONE)


def to_calendar_day(value: Union[date, datetime], tz_name: Optional[str] = None) -> date:
    """
    Reduce a date or datetime to its calendar day in the reference timezone.

    - date: returned as is
    - aware datetime: converted to the reference timezone first
    - naive datetime: taken as wall-clock time in the reference timezone
    """
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(reference_timezone(tz_name))
        return value.date()
    return value


def canonical_midnight(value: Union[date, datetime], tz_name: Optional[str] = None) -> datetime:
    """Midnight of the value's calendar day in the reference timezone, as naive UTC."""
    tz = reference_timezone(tz_name)
    day = to_calendar_day(value, tz_name)
    local_midnight = datetime.combine(day, time.min, tzinfo=tz)
    return local_midnight.astimezone(timezone.utc).replace(tzinfo=None)


def day_range(value: Union[date, datetime], tz_name: Optional[str] = None) -> Tuple[datetime, datetime]:
    """Returns (start, end) bounding the calendar day; end is exclusive."""
    day = to_calendar_day(value, tz_name)
    start = canonical_midnight(day, tz_name)
    # Computed from the next calendar day so DST transitions keep 23/25h days
    end = canonical_midnight(day + timedelta(days=1), tz_name)
    return (start, end)


def weekday_name(value: Union[date, datetime], tz_name: Optional[str] = None) -> str:
    return WEEKDAY_NAMES[to_calendar_day(value, tz_name).weekday()]
