"""UTC clock and human-readable duration parsing for token lifetimes."""

import re
from datetime import datetime, timedelta, timezone

_DURATION_PATTERN = re.compile(r"^\s*(\d+)\s*([a-zA-Z]*)\s*$")

_UNIT_SECONDS = {
    "": 1,
    "s": 1,
    "sec": 1,
    "secs": 1,
    "second": 1,
    "seconds": 1,
    "m": 60,
    "min": 60,
    "mins": 60,
    "minute": 60,
    "minutes": 60,
    "h": 3600,
    "hr": 3600,
    "hrs": 3600,
    "hour": 3600,
    "hours": 3600,
    "d": 86400,
    "day": 86400,
    "days": 86400,
    "w": 604800,
    "week": 604800,
    "weeks": 604800,
}


def now_utc() -> datetime:
    """
    Current time in UTC.

    Use this instead of datetime.now() everywhere.
    """
    return datetime.now(timezone.utc)


def parse_duration(value: str | int) -> timedelta:
    """
    Parse a duration such as "30m", "12h", "7d" or "900" into a timedelta.

    Bare numbers (int or digit-only string) are seconds. Unit suffixes are
    case-insensitive.

    Raises ValueError for empty, negative, zero or unrecognised durations.
    """
    if isinstance(value, bool):
        raise ValueError(f"Invalid duration: {value!r}")

    if isinstance(value, int):
        seconds = value
    else:
        match = _DURATION_PATTERN.match(value or "")
        if match is None:
            raise ValueError(f"Invalid duration: {value!r}")

        amount, unit = match.groups()
        unit = unit.lower()
        if unit not in _UNIT_SECONDS:
            raise ValueError(f"Unknown duration unit '{unit}' in {value!r}")
        seconds = int(amount) * _UNIT_SECONDS[unit]

    if seconds <= 0:
        raise ValueError(f"Duration must be positive: {value!r}")

    return timedelta(seconds=seconds)
