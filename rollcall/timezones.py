"""
Time zone evaluation for check-in scheduling.

Forward conversion (instant -> local wall clock) uses the IANA rule data
through zoneinfo, so DST transitions are handled correctly.

Reverse conversion (local date + time -> instant) uses a two-pass
"guess and correct": treat the wall clock as UTC, see what local time
that instant maps to, and shift by the difference. This is accurate
except when the wall clock falls inside a DST gap or overlap; those
instants are not re-verified. Meeting starts only need to be
approximately right, so this is accepted.

Weekdays are Sunday-indexed throughout (0 = Sunday ... 6 = Saturday).
"""

import re
from collections import namedtuple
from datetime import date, datetime, timedelta, timezone
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

WEEKDAY_NAMES = ['sunday', 'monday', 'tuesday', 'wednesday', 'thursday', 'friday', 'saturday']

TIME_LOCAL_RE = re.compile(r'^(\d{2}):(\d{2})(?::(\d{2}))?$')

LocalParts = namedtuple('LocalParts', ['weekday', 'year', 'month', 'day', 'hour', 'minute', 'second'])


def utc_now() -> datetime:
    """Current UTC time as a naive datetime (storage convention)."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def get_zone(tz_name: str) -> ZoneInfo:
    """Look up an IANA zone, raising ValueError for unknown names."""
    if not tz_name or not isinstance(tz_name, str):
        raise ValueError('Timezone is required')
    try:
        return ZoneInfo(tz_name)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise ValueError(f'Unknown timezone: {tz_name}') from e


def is_valid_timezone(tz_name) -> bool:
    try:
        get_zone(tz_name)
    except ValueError:
        return False
    return True


def _as_aware_utc(instant: datetime) -> datetime:
    # Naive datetimes are UTC by convention
    if instant.tzinfo is None:
        return instant.replace(tzinfo=timezone.utc)
    return instant.astimezone(timezone.utc)


def to_naive_utc(instant: datetime) -> datetime:
    return _as_aware_utc(instant).replace(tzinfo=None)


def local_parts(instant: datetime, tz_name: str) -> LocalParts:
    """Break an instant into wall-clock parts in the given zone."""
    local = _as_aware_utc(instant).astimezone(get_zone(tz_name))
    return LocalParts(
        weekday=(local.weekday() + 1) % 7,
        year=local.year,
        month=local.month,
        day=local.day,
        hour=local.hour,
        minute=local.minute,
        second=local.second,
    )


def local_date_string(parts: LocalParts) -> str:
    return f'{parts.year:04d}-{parts.month:02d}-{parts.day:02d}'


def parse_time_local(value: str):
    """
    Parse HH:MM or HH:MM:SS into (hour, minute, second).

    Raises:
        ValueError: on malformed or out-of-range input
    """
    match = TIME_LOCAL_RE.match(value or '')
    if not match:
        raise ValueError(f'Invalid time format: {value!r} (expected HH:MM or HH:MM:SS)')
    hour, minute = int(match.group(1)), int(match.group(2))
    second = int(match.group(3) or 0)
    if hour > 23 or minute > 59 or second > 59:
        raise ValueError(f'Time out of range: {value!r}')
    return hour, minute, second


def normalize_weekday(value) -> int:
    """Accept 0-6 (Sunday-indexed) or a day name, return 0-6."""
    if isinstance(value, bool):
        raise ValueError(f'Invalid weekday: {value!r}')
    if isinstance(value, int):
        weekday = value
    elif isinstance(value, str) and value.strip().isdigit():
        weekday = int(value.strip())
    elif isinstance(value, str) and value.strip().lower() in WEEKDAY_NAMES:
        return WEEKDAY_NAMES.index(value.strip().lower())
    else:
        raise ValueError(f'Invalid weekday: {value!r}')
    if weekday < 0 or weekday > 6:
        raise ValueError(f'Weekday must be between 0 and 6, got {weekday}')
    return weekday


def minutes_of_day(hour: int, minute: int) -> int:
    return hour * 60 + minute


def local_datetime_to_instant(date_local: str, time_local: str, tz_name: str) -> datetime:
    """
    Convert a local calendar date + wall clock time to a naive UTC datetime.

    Args:
        date_local: YYYY-MM-DD
        time_local: HH:MM or HH:MM:SS
        tz_name: IANA timezone identifier

    Returns:
        naive datetime in UTC
    """
    day = date.fromisoformat(date_local)
    hour, minute, second = parse_time_local(time_local)
    wall = datetime(day.year, day.month, day.day, hour, minute, second)

    # First pass: pretend the wall clock is UTC
    guess = wall
    observed = local_parts(guess, tz_name)
    observed_wall = datetime(observed.year, observed.month, observed.day,
                             observed.hour, observed.minute, observed.second)

    # Second pass: shift by how far off the guess landed
    delta = observed_wall - wall
    return guess - delta


def hours_ago(hours: int, now: datetime = None) -> datetime:
    now = to_naive_utc(now) if now else utc_now()
    return now - timedelta(hours=hours)
