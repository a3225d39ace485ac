"""
Conversion of python values into their iCalendar text form.

:func:`to_ics` is the single entry point.  It looks at the shape of the
value it is given:

- ``str``: newlines are escaped
- ``datetime``: converted to UTC and written as ``YYYYMMDDTHHMMSS``
- legacy timestamp tuples ``((y, m, d), (H, M, S))``: treated as UTC
  and written like a datetime
- :class:`icalrule.rrule.RecurrenceRule`: serialized as an RRULE value
- anything else is returned unchanged
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any

#: (low, high) for year, month, day, hour, minute and second of a legacy
#: timestamp.  Second 60 is a leap second.
_TIMESTAMP_RANGES = (
    ((None, None), (1, 12), (1, 31)),
    ((0, 23), (0, 59), (0, 60)),
)


def _escape_text(text: str) -> str:
    return text.replace("\\n", "\\\\n").replace("\n", "\\n")


def _format_utc(dt: datetime) -> str:
    """Write a datetime as ``YYYYMMDDTHHMMSS`` in UTC.

    A naive datetime is assumed to be in UTC already.
    """
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    dt = dt.astimezone(timezone.utc)
    return (
        f"{dt.year:04d}{dt.month:02d}{dt.day:02d}"
        f"T{dt.hour:02d}{dt.minute:02d}{dt.second:02d}"
    )


def is_timestamp_tuple(value: Any) -> bool:
    """Check for the ``((year, month, day), (hour, minute, second))`` shape
    with every item an integer inside its range."""
    if not isinstance(value, tuple) or len(value) != 2:
        return False
    for part, ranges in zip(value, _TIMESTAMP_RANGES):
        if not isinstance(part, tuple) or len(part) != 3:
            return False
        for item, (low, high) in zip(part, ranges):
            if isinstance(item, bool) or not isinstance(item, int):
                return False
            if low is not None and not low <= item <= high:
                return False
    return True


def timestamp_to_datetime(value: tuple) -> datetime:
    """Convert a legacy timestamp tuple to a UTC datetime.

    A leap second rolls over into the next minute.

    Raises:
        ValueError: if the tuple names a day that does not exist,
            like the 31st of February.
    """
    (year, month, day), (hour, minute, second) = value
    leap = 0
    if second == 60:
        second, leap = 59, 1
    dt = datetime(year, month, day, hour, minute, second, tzinfo=timezone.utc)
    return dt + timedelta(seconds=leap)


def to_ics(value: Any) -> Any:
    """Convert ``value`` to its iCalendar text representation.

    Values of a shape that has no text form are returned as they are, so
    this is safe to call on anything.
    """
    ## Late import, rrule.py depends on this module
    from icalrule.rrule import RecurrenceRule, serialize

    if isinstance(value, RecurrenceRule):
        return serialize(value)
    if isinstance(value, str):
        return _escape_text(value)
    if isinstance(value, datetime):
        try:
            return _format_utc(value)
        except OverflowError:
            return value
    if is_timestamp_tuple(value):
        try:
            return _format_utc(timestamp_to_datetime(value))
        except (ValueError, OverflowError):
            return value
    return value
