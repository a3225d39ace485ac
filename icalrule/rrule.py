"""
Serialize and deserialize RRULE values (RFC 5545 §3.3.10).

Public API:
    deserialize(text, default_tzid=None) -> RecurrenceRule
    serialize(rule) -> str
    valid(rule) -> bool

Deserializing works on all tokens of the rule before giving up: every
problem found is collected in ``RecurrenceRule.errors`` and reported in one
:class:`~icalrule.lib.error.RRuleValidationError`.  Only text that cannot
be split into ``KEY=value`` tokens at all is rejected straight away, with
:class:`~icalrule.lib.error.RRuleSyntaxError`.
"""

from __future__ import annotations

import dataclasses
import re
from dataclasses import dataclass, field
from datetime import datetime
from functools import reduce
from typing import Any, Callable, Optional, Union

import icalendar

from icalrule import config
from icalrule.lib import tables
from icalrule.lib.dates import retrieve_params, to_date
from icalrule.lib.error import RRuleSyntaxError, RRuleValidationError, log, weirdness
from icalrule.lib.tables import Frequency, Month, Weekday
from icalrule.value import to_ics

_INTEGER_RE = re.compile(r"[+-]?[0-9]+")

## KEY, optionally followed by [PARAM=VALUE,...], then =value
_TOKEN_RE = re.compile(r"(?P<key>[^=\[\]]*(?:\[[^\[\]]*\])?)=(?P<value>.*)", re.DOTALL)

UNTIL_AND_COUNT = "You can only set UNTIL or COUNT: not both at the same time"


@dataclass
class Property:
    """One ``KEY=value`` token of an RRULE.

    ``value`` starts out as the raw string and is replaced by the typed
    value once the property has been validated.
    """

    key: str
    value: Any
    params: dict = field(default_factory=dict)


#: A property that failed validation, and the reason why.
PropertyError = tuple[Property, str]


@dataclass
class RecurrenceRule:
    """A parsed RRULE.

    The order of the fields is the order they are written in by
    :func:`serialize`.  ``errors`` is filled in by :func:`deserialize` and is
    empty for a valid rule.
    """

    frequency: Optional[Frequency] = None
    until: Optional[datetime] = None
    count: Optional[int] = None
    interval: Optional[int] = None
    by_second: list[int] = field(default_factory=list)
    by_minute: list[int] = field(default_factory=list)
    by_hour: list[int] = field(default_factory=list)
    by_day: list[Weekday] = field(default_factory=list)
    by_month_day: list[int] = field(default_factory=list)
    by_year_day: list[int] = field(default_factory=list)
    by_week_number: list[int] = field(default_factory=list)
    by_month: list[Month] = field(default_factory=list)
    by_set_pos: list[int] = field(default_factory=list)
    week_start: Optional[Weekday] = None
    x_name: Optional[str] = None
    errors: list[str] = field(default_factory=list)

    def valid(self) -> bool:
        return valid(self)

    def to_ics(self) -> str:
        return serialize(self)

    @classmethod
    def from_ics(cls, text: str, default_tzid: Optional[str] = None) -> RecurrenceRule:
        return deserialize(text, default_tzid=default_tzid)

    def to_vrecur(self) -> icalendar.vRecur:
        """Convert to an :class:`icalendar.vRecur`, e.g. for adding to an
        icalendar event with ``event.add("rrule", rule.to_vrecur())``."""
        return icalendar.vRecur.from_ical(serialize(self))

    @classmethod
    def from_vrecur(
        cls, vrecur: icalendar.vRecur, default_tzid: Optional[str] = None
    ) -> RecurrenceRule:
        """Build a rule from an :class:`icalendar.vRecur`, such as the
        ``RRULE`` property of an event parsed by icalendar."""
        text = vrecur.to_ical()
        if isinstance(text, bytes):
            text = text.decode("utf-8")
        return deserialize(text, default_tzid=default_tzid)


def valid(rule: RecurrenceRule) -> bool:
    """A rule is valid if no errors were collected for it

    >>> valid(RecurrenceRule(errors=[]))
    True
    >>> valid(RecurrenceRule(errors=["error"]))
    False
    """
    return rule.errors == []


## Deserializing


def deserialize(text: str, default_tzid: Optional[str] = None) -> RecurrenceRule:
    """Parse an RRULE value into a :class:`RecurrenceRule`.

    Example:
        "FREQ=DAILY;COUNT=10"  →  RecurrenceRule(frequency=Frequency.DAILY, count=10)

    Args:
        text: the RRULE value, e.g. ``"FREQ=WEEKLY;BYDAY=TU,TH"``.
        default_tzid: zone for UNTIL values given without one.  Defaults
            to :data:`icalrule.config.DEFAULT_TZID`.

    Raises:
        RRuleSyntaxError: if the text can't be split into ``KEY=value`` tokens.
        RRuleValidationError: if any token failed validation.  All the
            messages are in its ``errors`` attribute.
    """
    log.debug(f"deserializing RRULE {text!r}")
    if default_tzid is None:
        default_tzid = config.DEFAULT_TZID

    properties = tokenize(text)
    validated = [validate_param(prop, default_tzid) for prop in properties]
    rule = reduce(parse_attr, validated, RecurrenceRule())
    return respond(validate(rule), text)


def tokenize(text: str) -> list[Property]:
    tokens = [token for token in text.strip().split(";") if token]
    if not tokens:
        raise RRuleSyntaxError(text, "empty RRULE")
    properties = []
    for token in tokens:
        match = _TOKEN_RE.fullmatch(token)
        if match:
            key, value = match.group("key"), match.group("value")
        else:
            key, sep, value = token.partition("=")
            if not sep:
                raise RRuleSyntaxError(text, f"'{token}' is not a KEY=value pair")
        key, params = retrieve_params(key)
        properties.append(Property(key=key.upper(), value=value, params=params))
    return properties


def respond(rule: RecurrenceRule, text: Optional[str] = None) -> RecurrenceRule:
    if valid(rule):
        return rule
    raise RRuleValidationError(text, rule.errors)


def validate(rule: RecurrenceRule) -> RecurrenceRule:
    """Checks that involve more than one property"""
    if rule.until is not None and rule.count is not None:
        log.debug(UNTIL_AND_COUNT)
        rule.errors = [UNTIL_AND_COUNT] + rule.errors
    return rule


def parse_attr(
    rule: RecurrenceRule, prop: Union[Property, PropertyError]
) -> RecurrenceRule:
    """Fold one validated property into the rule"""
    if isinstance(prop, tuple):
        _, message = prop
        log.debug(f"RRULE validation failure: {message}")
        rule.errors = [message] + rule.errors
        return rule

    attr = tables.property_key_to_attr(prop.key)
    if getattr(rule, attr) not in (None, []):
        weirdness(f"{prop.key} given more than once in RRULE, keeping the last one")
    setattr(rule, attr, prop.value)
    return rule


def parse_value_as_list(
    value: str, operation: Optional[Callable[[str], Any]] = None
) -> list:
    """Split a comma separated value.  If an operation is given, it is
    applied to every item.

    >>> parse_value_as_list("a,b,c")
    ['a', 'b', 'c']
    >>> parse_value_as_list("1,2,3", int)
    [1, 2, 3]
    """
    values = value.split(",")
    if operation is None:
        return values
    return [operation(item) for item in values]


def _to_integer(value: str) -> Optional[int]:
    if not _INTEGER_RE.fullmatch(value):
        return None
    try:
        return int(value)
    except ValueError:
        ## more digits than sys.get_int_max_str_digits() allows
        return None


def _in_ranges(*ranges: tuple[int, int]) -> Callable[[Optional[int]], bool]:
    def check(value: Optional[int]) -> bool:
        return value is not None and any(low <= value <= high for low, high in ranges)

    return check


## (check on every item, error message) for the integer list properties
_INTEGER_LISTS = {
    "BYSECOND": (
        _in_ranges((0, 59)),
        "'BYSECOND' must be between 0 and 59 if it is set",
    ),
    "BYMINUTE": (
        _in_ranges((0, 59)),
        "'BYMINUTE' must be between 0 and 59 if it is set",
    ),
    "BYHOUR": (
        _in_ranges((0, 23)),
        "'BYHOUR' must be between 0 and 23 if it is set",
    ),
    "BYMONTHDAY": (
        _in_ranges((1, 31), (-31, -1)),
        "'BYMONTHDAY' must be between 1 and 31 or -1 and -31 if it is set",
    ),
    "BYYEARDAY": (
        _in_ranges((1, 366), (-366, -1)),
        "'BYYEARDAY' must be between 1 and 366 or -1 and -366 if it is set",
    ),
    "BYWEEKNO": (
        _in_ranges((1, 53), (-53, -1)),
        "'BYWEEKNO' must be between 1 and 53 or -1 and -53 if it is set",
    ),
    "BYSETPOS": (
        _in_ranges((1, 366), (-366, -1)),
        "'BYSETPOS' must be between 1 and 366 or -1 and -366 if it is set",
    ),
}

_POSITIVE_INTEGERS = ("COUNT", "INTERVAL")

_is_month_number = _in_ranges((1, 12))


def validate_param(
    prop: Property, default_tzid: str = config.DEFAULT_TZID
) -> Union[Property, PropertyError]:
    """Validate a single property and replace its value with the typed value.

    Returns the property on success, or a ``(property, message)`` tuple.
    Never raises on bad values.
    """
    key, value = prop.key, prop.value

    if key == "FREQ":
        if value in tables.FREQUENCIES:
            return dataclasses.replace(prop, value=tables.frequency_from_string(value))
        return prop, f"'{value}' is not an accepted frequency"

    if key == "UNTIL":
        params = {"TZID": default_tzid}
        params.update(prop.params)
        try:
            return dataclasses.replace(prop, value=to_date(value, params))
        except ValueError:
            return prop, f"'{value}' is not a valid date"

    if key in _POSITIVE_INTEGERS:
        number = _to_integer(value)
        if number is not None and number >= 1:
            return dataclasses.replace(prop, value=number)
        return prop, f"'{key}' must be >= 1 if it is set"

    if key in _INTEGER_LISTS:
        check, message = _INTEGER_LISTS[key]
        numbers = parse_value_as_list(value, _to_integer)
        if all(check(number) for number in numbers):
            return dataclasses.replace(prop, value=numbers)
        return prop, message

    if key == "BYDAY":
        days = parse_value_as_list(value, str.upper)
        if all(day in tables.DAYS for day in days):
            return dataclasses.replace(
                prop, value=[tables.day_from_string(day) for day in days]
            )
        return prop, "'BYDAY' must have a valid day string if set"

    if key == "BYMONTH":
        numbers = parse_value_as_list(value, _to_integer)
        if all(_is_month_number(number) for number in numbers):
            return dataclasses.replace(
                prop, value=[tables.month_from_number(number) for number in numbers]
            )
        return prop, "'BYMONTH' must be between 1 and 12 if it is set"

    if key == "WKST":
        day = value.upper()
        if day in tables.DAYS:
            return dataclasses.replace(prop, value=tables.day_from_string(day))
        return prop, "'WKST' must have a valid day string if set"

    if key == "X-NAME":
        return prop

    return prop, f"'{key}' is not a recognised property"


## Serializing


def _symbol_to_token(value: Any) -> Any:
    if isinstance(value, Frequency):
        return tables.frequency_to_string(value)
    if isinstance(value, Weekday):
        return tables.day_to_string(value)
    if isinstance(value, Month):
        return str(tables.month_to_number(value))
    return to_ics(value)


def _serialize_value(value: Any) -> str:
    if isinstance(value, list):
        return ",".join(str(_symbol_to_token(item)) for item in value)
    return str(_symbol_to_token(value))


def serialize(rule: RecurrenceRule) -> str:
    """Write a rule as an RRULE value, e.g. ``FREQ=DAILY;COUNT=10``.

    Properties are written in the order of the :class:`RecurrenceRule`
    fields.  Unset properties are left out.
    """
    pairs = []
    for rule_field in dataclasses.fields(rule):
        if rule_field.name == "errors":
            continue
        value = getattr(rule, rule_field.name)
        if value is None or value == []:
            continue
        key = tables.attr_to_property_key(rule_field.name)
        pairs.append(f"{key}={_serialize_value(value)}")
    return ";".join(pairs)
