"""
Helpers for turning raw RRULE tokens into python values: key parameters
and the date-time parsing used for UNTIL.
"""

from __future__ import annotations

import re
from datetime import datetime, time, timezone
from typing import Mapping
from zoneinfo import ZoneInfo

from icalendar.prop import vDate, vDatetime

_PARAMS_RE = re.compile(r"^(?P<key>[^\[\]]*)\[(?P<params>[^\[\]]*)\]$")


def retrieve_params(key: str) -> tuple[str, dict[str, str]]:
    """Split secondary parameters off an RRULE key.

    Parameters are written in brackets after the key, comma separated::

        UNTIL[TZID=Europe/Oslo]  ->  ("UNTIL", {"TZID": "Europe/Oslo"})
        FREQ                     ->  ("FREQ", {})

    Parameter names are uppercased, values are kept as given.  A key with
    unbalanced brackets is returned untouched and will be rejected later
    as an unrecognised property.
    """
    match = _PARAMS_RE.match(key)
    if not match:
        return key, {}
    params = {}
    for param in match.group("params").split(","):
        name, _, value = param.partition("=")
        if name.strip():
            params[name.strip().upper()] = value.strip()
    return match.group("key"), params


def _timezone(tzid: str):
    try:
        return ZoneInfo(tzid)
    except (KeyError, ValueError, OSError) as e:
        ## ZoneInfoNotFoundError is a KeyError
        raise ValueError(f"Unknown timezone: {tzid!r}") from e


def to_date(value: str, params: Mapping[str, str]) -> datetime:
    """Parse an iCalendar DATE or DATE-TIME into a timezone-aware datetime.

    Values with a trailing ``Z`` are UTC.  Floating values, and dates
    without a time part, are placed in the zone named by the ``TZID``
    parameter; a date becomes midnight of that day.

    Examples:
        to_date("20151224T083000Z", {})                    → 2015-12-24 08:30 UTC
        to_date("20151224T083000", {"TZID": "Etc/UTC"})    → 2015-12-24 08:30 UTC
        to_date("20151224", {"TZID": "America/Chicago"})   → 2015-12-24 00:00 CST

    Raises:
        ValueError: if the value is not a date or date-time, or if a
            floating value comes without a usable TZID, or if the
            value falls outside the datetime range once converted to UTC.
    """
    if len(value) == 8:
        parsed = vDate.from_ical(value)
    else:
        parsed = vDatetime.from_ical(value)

    if not isinstance(parsed, datetime):
        parsed = datetime.combine(parsed, time())

    if parsed.tzinfo is None:
        tzid = params.get("TZID")
        if not tzid:
            raise ValueError(f"Floating date-time {value!r} and no TZID given")
        parsed = parsed.replace(tzinfo=_timezone(tzid))

    ## the value is written back in UTC, so it must have a UTC equivalent
    try:
        parsed.astimezone(timezone.utc)
    except OverflowError as e:
        raise ValueError(f"{value!r} has no UTC equivalent") from e
    return parsed
