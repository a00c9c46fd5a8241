"""Date/time normalization between Python values and SQLite text.

Temporal values travel as text in ``YYYY-MM-DD HH:MM:SS.fff``. Aware values
are shifted to UTC and stored without an offset, so reading them back always
yields a naive datetime: local offset information is intentionally dropped.
"""

import re
from datetime import UTC, date, datetime, time, timedelta

# Tried in order before falling back to datetime.fromisoformat
_SQLITE_FORMATS = (
    "%Y-%m-%d %H:%M:%S.%f",
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%d %H:%M",
    "%Y-%m-%d",
    "%Y-%m-%dT%H:%M:%S.%f",
    "%Y-%m-%dT%H:%M:%S",
    "%H:%M:%S",
    "%Y-%m-%dT%H:%M:%S.%fZ",
)

_UNIX_EPOCH_JULIAN_DAY = 2440587.5
_UNIX_EPOCH = datetime(1970, 1, 1)

_TIMESPAN_RE = re.compile(
    r"^(?P<sign>-)?(?:(?P<days>\d+)\.)?(?P<h>\d{1,2}):(?P<m>\d{2}):(?P<s>\d{2})(?:\.(?P<frac>\d{1,7}))?$"
)


def _to_naive_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value
    return value.astimezone(UTC).replace(tzinfo=None)


def _format(value: datetime) -> str:
    return (
        f"{value.year:04d}-{value.month:02d}-{value.day:02d} "
        f"{value.hour:02d}:{value.minute:02d}:{value.second:02d}.{value.microsecond // 1000:03d}"
    )


def format_datetime(value: datetime | date) -> str:
    """Format a datetime as SQLite text; aware values are converted to UTC first."""
    if not isinstance(value, datetime):
        value = datetime.combine(value, time())
    return _format(_to_naive_utc(value))


def format_datetime_offset(value: datetime) -> str:
    """Format an offset datetime at zero offset. Naive values are taken as UTC."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return _format(value.astimezone(UTC))


def parse_datetime(text: str) -> datetime:
    """Parse SQLite datetime text into a naive datetime.

    Raises ValueError when no known format matches.
    """
    text = text.strip()
    for fmt in _SQLITE_FORMATS:
        try:
            return datetime.strptime(text, fmt)
        except ValueError:
            continue
    # fromisoformat handles offsets and the trailing Z on 3.11+
    return _to_naive_utc(datetime.fromisoformat(text))


def parse_datetime_offset(text: str) -> datetime:
    """Parse datetime text into an aware datetime; values without an offset are UTC."""
    text = text.strip()
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        parsed = parse_datetime(text)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def unix_to_datetime(seconds: int | float) -> datetime:
    """Naive UTC datetime for a unix timestamp."""
    return _UNIX_EPOCH + timedelta(seconds=seconds)


def julian_to_datetime(julian_day: float) -> datetime:
    """Naive datetime for a Julian day number (SQLite ``julianday()``)."""
    return _UNIX_EPOCH + timedelta(days=julian_day - _UNIX_EPOCH_JULIAN_DAY)


def format_timedelta(value: timedelta | time) -> str:
    """Format as ``[-][d.]hh:mm:ss[.fffffff]``; ``time`` values use ISO format."""
    if isinstance(value, time):
        return value.isoformat()
    negative = value < timedelta(0)
    value = abs(value)
    hours, rem = divmod(value.seconds, 3600)
    minutes, seconds = divmod(rem, 60)
    text = f"{hours:02d}:{minutes:02d}:{seconds:02d}"
    if value.days:
        text = f"{value.days}.{text}"
    if value.microseconds:
        # seven fractional digits, one per 100ns tick
        text = f"{text}.{value.microseconds * 10:07d}"
    return f"-{text}" if negative else text


def parse_timedelta(text: str) -> timedelta:
    """Parse ``[-][d.]hh:mm:ss[.fffffff]``. Raises ValueError on other input."""
    match = _TIMESPAN_RE.match(text.strip())
    if match is None:
        raise ValueError(f"Unable to parse '{text}' as a time span")
    frac = (match["frac"] or "").ljust(7, "0")
    result = timedelta(
        days=int(match["days"] or 0),
        hours=int(match["h"]),
        minutes=int(match["m"]),
        seconds=int(match["s"]),
        microseconds=int(frac) // 10,
    )
    return -result if match["sign"] else result
