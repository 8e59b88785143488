"""Wall-clock time and calendar date helpers.

Times are plain ``datetime.time`` values and dates are ``datetime.date``
values; every conversion to and from strings goes through here.
"""

import re
from datetime import date, datetime, time, timedelta

_STRICT_TIME_PATTERN = re.compile(r'^\d{2}:\d{2}(:\d{2})?$')
_LOOSE_TIME_PATTERN = re.compile(r'^\d{1,2}:\d{1,2}(:\d{1,2})?$')


def parse_wall_clock(value: time | str, strict: bool = False) -> time:
    """Parse ``HH:MM`` (optionally ``:SS``) into a ``time``.

    In permissive mode single-digit components such as ``9:5`` are padded
    instead of rejected. Out-of-range hours or minutes raise ``ValueError``
    in both modes.
    """
    if isinstance(value, datetime):
        return value.time().replace(second=0, microsecond=0)
    if isinstance(value, time):
        return value.replace(second=0, microsecond=0)
    if not isinstance(value, str):
        raise ValueError(f'Unsupported time value: {value!r}')

    normalized = value.strip()
    pattern = _STRICT_TIME_PATTERN if strict else _LOOSE_TIME_PATTERN
    if not pattern.match(normalized):
        raise ValueError(f'Invalid time: {value!r}')

    parts = [int(part) for part in normalized.split(':')]
    hours, minutes = parts[0], parts[1]
    if not 0 <= hours <= 23 or not 0 <= minutes <= 59:
        raise ValueError(f'Time out of range: {value!r}')

    return time(hours, minutes)


def parse_calendar_date(value: date | str) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        raise ValueError(f'Unsupported date value: {value!r}')
    return date.fromisoformat(value.strip()[:10])


def to_minutes(value: time) -> int:
    return value.hour * 60 + value.minute


def from_minutes(total_minutes: int) -> time:
    if not 0 <= total_minutes < 24 * 60:
        raise ValueError('Time arithmetic rolled past midnight.')
    return time(total_minutes // 60, total_minutes % 60)


def add_minutes(value: time, minutes: int) -> time:
    return from_minutes(to_minutes(value) + minutes)


def minutes_between(start: time, end: time) -> int:
    return to_minutes(end) - to_minutes(start)


def format_wall_clock(value: time) -> str:
    return value.strftime('%H:%M')


def iterate_dates(start: date, end: date):
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)
