"""
Symbol tables for the RRULE grammar (RFC 5545 §3.3.10).

Every table maps the uppercase token used on the wire to the symbol used
internally.  The reverse direction is derived from the forward tables with
:func:`invert_map` when the module is imported, so the two can never drift
apart.  Nothing in here is mutated after import.
"""

from __future__ import annotations

from enum import Enum
from types import MappingProxyType
from typing import Mapping

from icalrule.lib.error import UnknownSymbolError, assert_


class Frequency(Enum):
    """Base repeat unit of a recurrence rule."""

    SECONDLY = "secondly"
    MINUTELY = "minutely"
    HOURLY = "hourly"
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


class Weekday(Enum):
    SUNDAY = "sunday"
    MONDAY = "monday"
    TUESDAY = "tuesday"
    WEDNESDAY = "wednesday"
    THURSDAY = "thursday"
    FRIDAY = "friday"
    SATURDAY = "saturday"


class Month(Enum):
    JANUARY = "january"
    FEBRUARY = "february"
    MARCH = "march"
    APRIL = "april"
    MAY = "may"
    JUNE = "june"
    JULY = "july"
    AUGUST = "august"
    SEPTEMBER = "september"
    OCTOBER = "october"
    NOVEMBER = "november"
    DECEMBER = "december"


def invert_map(forward: Mapping) -> Mapping:
    """Swap keys and values of a lookup table.

    Raises:
        ValueError: if two keys share a value, as the inverse would silently
            lose one of them.
    """
    inverted = {value: key for key, value in forward.items()}
    if len(inverted) != len(forward):
        raise ValueError(f"Cannot invert a table with duplicate values: {forward!r}")
    return MappingProxyType(inverted)


#: FREQ tokens.
FREQUENCIES: Mapping[str, Frequency] = MappingProxyType(
    {
        "SECONDLY": Frequency.SECONDLY,
        "MINUTELY": Frequency.MINUTELY,
        "HOURLY": Frequency.HOURLY,
        "DAILY": Frequency.DAILY,
        "WEEKLY": Frequency.WEEKLY,
        "MONTHLY": Frequency.MONTHLY,
        "YEARLY": Frequency.YEARLY,
    }
)

#: Two-letter weekday codes used by BYDAY and WKST.
DAYS: Mapping[str, Weekday] = MappingProxyType(
    {
        "SU": Weekday.SUNDAY,
        "MO": Weekday.MONDAY,
        "TU": Weekday.TUESDAY,
        "WE": Weekday.WEDNESDAY,
        "TH": Weekday.THURSDAY,
        "FR": Weekday.FRIDAY,
        "SA": Weekday.SATURDAY,
    }
)

#: BYMONTH carries months as 1-12, so this is looked up by position.
MONTHS: tuple = tuple(Month)

#: RRULE keys and the RecurrenceRule attribute each one populates.
PROPERTY_KEYS: Mapping[str, str] = MappingProxyType(
    {
        "FREQ": "frequency",
        "UNTIL": "until",
        "COUNT": "count",
        "INTERVAL": "interval",
        "BYSECOND": "by_second",
        "BYMINUTE": "by_minute",
        "BYHOUR": "by_hour",
        "BYDAY": "by_day",
        "BYMONTHDAY": "by_month_day",
        "BYYEARDAY": "by_year_day",
        "BYWEEKNO": "by_week_number",
        "BYMONTH": "by_month",
        "BYSETPOS": "by_set_pos",
        "WKST": "week_start",
        "X-NAME": "x_name",
    }
)

FREQUENCY_NAMES: Mapping[Frequency, str] = invert_map(FREQUENCIES)
DAY_NAMES: Mapping[Weekday, str] = invert_map(DAYS)
PROPERTY_NAMES: Mapping[str, str] = invert_map(PROPERTY_KEYS)

## every symbol must be reachable from its token
assert_(set(FREQUENCY_NAMES) == set(Frequency))
assert_(set(DAY_NAMES) == set(Weekday))
assert_(len(MONTHS) == 12)


def frequency_from_string(token: str) -> Frequency:
    try:
        return FREQUENCIES[token]
    except KeyError:
        raise UnknownSymbolError(token, f"'{token}' is not an accepted frequency")


def frequency_to_string(frequency: Frequency) -> str:
    return FREQUENCY_NAMES[frequency]


def day_from_string(token: str) -> Weekday:
    try:
        return DAYS[token]
    except KeyError:
        raise UnknownSymbolError(token, f"'{token}' is not a valid day string")


def day_to_string(day: Weekday) -> str:
    return DAY_NAMES[day]


def month_from_number(number: int) -> Month:
    """1 is January.  Note that 0 and negative numbers are rejected rather
    than being used as python sequence indexes."""
    if isinstance(number, bool) or not isinstance(number, int) or not 1 <= number <= 12:
        raise UnknownSymbolError(str(number), f"'{number}' is not a month number")
    return MONTHS[number - 1]


def month_to_number(month: Month) -> int:
    return MONTHS.index(month) + 1


def property_key_to_attr(key: str) -> str:
    try:
        return PROPERTY_KEYS[key]
    except KeyError:
        raise UnknownSymbolError(key, f"'{key}' is not a recognised property")


def attr_to_property_key(attr: str) -> str:
    return PROPERTY_NAMES[attr]
