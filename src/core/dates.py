"""Canonical ISO 8601 formatting and parsing of dates and times.

All dates leaving the API use one textual form:

- date-only fields: ``YYYY-MM-DD``
- date-time fields: ``YYYY-MM-DDTHH:MM:SSZ`` for UTC, or
  ``YYYY-MM-DDTHH:MM:SS+HH:MM`` when the value carries another offset

Offsets are never shifted silently. A value recorded at ``+05:30`` is written
at ``+05:30`` unless the caller asks for UTC explicitly. Naive datetimes carry
no offset at all, so they are rejected for date-time output unless the caller
states that they are UTC.

``parse`` accepts exactly the strings ``normalize`` produces, so every string
it accepts round-trips unchanged.
"""

import re
from collections.abc import Mapping
from datetime import UTC, date, datetime, timedelta, timezone
from enum import Enum
from typing import Any, Final

from src.core.exceptions import InvalidTimestampError

_DATE_PATTERN: Final = re.compile(r"([0-9]{4})-([0-9]{2})-([0-9]{2})")
_DATETIME_PATTERN: Final = re.compile(
    r"([0-9]{4})-([0-9]{2})-([0-9]{2})"
    r"T([0-9]{2}):([0-9]{2}):([0-9]{2})"
    r"(Z|[+-][0-9]{2}:[0-9]{2})"
)
_SECONDS_PER_MINUTE: Final = 60
_MINUTES_PER_HOUR: Final = 60
_MAX_OFFSET_HOURS: Final = 23


class Granularity(Enum):
    """How much of a timestamp a field exposes."""

    DATE_ONLY = "date_only"
    DATE_TIME = "date_time"


def _format_offset(offset: timedelta) -> str:
    total_seconds = offset.total_seconds()
    if total_seconds % _SECONDS_PER_MINUTE:
        raise InvalidTimestampError(
            f"UTC offset {offset} is not expressible as +HH:MM",
            context={"offset_seconds": total_seconds},
        )

    total_minutes = int(total_seconds) // _SECONDS_PER_MINUTE
    if total_minutes == 0:
        return "Z"

    sign = "+" if total_minutes > 0 else "-"
    hours, minutes = divmod(abs(total_minutes), _MINUTES_PER_HOUR)
    return f"{sign}{hours:02d}:{minutes:02d}"


def _format_date(value: date) -> str:
    return f"{value.year:04d}-{value.month:02d}-{value.day:02d}"


def _ensure_aware(value: datetime, *, assume_utc: bool) -> datetime:
    if value.utcoffset() is not None:
        return value
    if assume_utc:
        return value.replace(tzinfo=UTC)
    raise InvalidTimestampError(
        f"Naive datetime {value.isoformat()} has no UTC offset; "
        "pass assume_utc=True if it is UTC"
    )


def _to_utc(value: datetime) -> datetime:
    try:
        return value.astimezone(UTC)
    except OverflowError as e:
        raise InvalidTimestampError(
            f"{value.isoformat()} falls outside the calendar once converted to UTC",
            cause=e,
        ) from e


def normalize(
    value: date,
    granularity: Granularity,
    *,
    to_utc: bool = False,
    assume_utc: bool = False,
) -> str:
    """Format a date or datetime in its canonical ISO 8601 form.

    Args:
        value: The date or datetime to format.
        granularity: DATE_ONLY for ``YYYY-MM-DD``, DATE_TIME for a full
            timestamp with offset.
        to_utc: Convert aware datetimes to UTC before formatting.
        assume_utc: Treat naive datetimes as UTC instead of rejecting them.

    Returns:
        str: The canonical representation.

    Raises:
        InvalidTimestampError: If the value is not a date, is a naive datetime
            without ``assume_utc``, is a plain date asked for as DATE_TIME, or
            cannot be represented in the requested form.
    """
    if not isinstance(value, date):
        raise InvalidTimestampError(
            f"Expected a date or datetime, got {type(value).__name__}"
        )

    if granularity is Granularity.DATE_ONLY:
        if isinstance(value, datetime):
            if to_utc:
                value = _to_utc(_ensure_aware(value, assume_utc=assume_utc))
            value = value.date()
        return _format_date(value)

    if not isinstance(value, datetime):
        raise InvalidTimestampError(
            f"Date {_format_date(value)} has no time of day to format as date-time"
        )

    value = _ensure_aware(value, assume_utc=assume_utc)
    if to_utc:
        value = _to_utc(value)

    offset = value.utcoffset()
    suffix = _format_offset(offset if offset is not None else timedelta(0))
    return (
        f"{_format_date(value)}T"
        f"{value.hour:02d}:{value.minute:02d}:{value.second:02d}{suffix}"
    )


def _parse_offset(text: str, raw: str) -> timezone:
    if raw == "Z":
        return UTC

    sign = 1 if raw[0] == "+" else -1
    hours, minutes = int(raw[1:3]), int(raw[4:6])
    if hours == 0 and minutes == 0:
        raise InvalidTimestampError(f"'{text}' must write a zero UTC offset as 'Z'")
    if hours > _MAX_OFFSET_HOURS or minutes >= _MINUTES_PER_HOUR:
        raise InvalidTimestampError(f"'{text}' has an out-of-range UTC offset")
    return timezone(sign * timedelta(hours=hours, minutes=minutes))


def parse(text: str, granularity: Granularity) -> date:
    """Parse a canonical ISO 8601 string back into a date or datetime.

    Args:
        text: The string to parse.
        granularity: The form the string is expected to have.

    Returns:
        date: A ``date`` for DATE_ONLY, an aware ``datetime`` for DATE_TIME.

    Raises:
        InvalidTimestampError: If the string is not in canonical form or any
            component is out of range.
    """
    if not isinstance(text, str):
        raise InvalidTimestampError(f"Expected a string, got {type(text).__name__}")

    if granularity is Granularity.DATE_ONLY:
        match = _DATE_PATTERN.fullmatch(text)
        if match is None:
            raise InvalidTimestampError(f"'{text}' is not a YYYY-MM-DD date")
        year, month, day = (int(group) for group in match.groups())
        try:
            return date(year, month, day)
        except ValueError as e:
            raise InvalidTimestampError(
                f"'{text}' is not a valid calendar date", cause=e
            ) from e

    match = _DATETIME_PATTERN.fullmatch(text)
    if match is None:
        raise InvalidTimestampError(
            f"'{text}' is not a YYYY-MM-DDTHH:MM:SS timestamp with offset"
        )
    *components, raw_offset = match.groups()
    tzinfo = _parse_offset(text, raw_offset)
    year, month, day, hour, minute, second = (int(c) for c in components)
    try:
        return datetime(year, month, day, hour, minute, second, tzinfo=tzinfo)
    except ValueError as e:
        raise InvalidTimestampError(
            f"'{text}' is not a valid calendar date and time", cause=e
        ) from e


def normalize_fields(
    data: Mapping[str, Any],
    fields: Mapping[str, Granularity],
    *,
    to_utc: bool = False,
    assume_utc: bool = False,
) -> dict[str, Any]:
    """Return a copy of ``data`` with the named date fields normalized.

    Fields that are missing or None are left as they are.

    Raises:
        InvalidTimestampError: With ``field`` set to the offending field name.
    """
    result = dict(data)
    for name, granularity in fields.items():
        value = result.get(name)
        if value is None:
            continue
        try:
            result[name] = normalize(
                value, granularity, to_utc=to_utc, assume_utc=assume_utc
            )
        except InvalidTimestampError as e:
            raise InvalidTimestampError(e.message, field=name, cause=e) from e
    return result
