#!/usr/bin/env python
import logging

__version__ = "0.1.0"

from .lib.error import RRuleError
from .lib.error import RRuleSyntaxError
from .lib.error import RRuleValidationError
from .lib.tables import Frequency
from .lib.tables import Month
from .lib.tables import Weekday
from .rrule import Property
from .rrule import RecurrenceRule
from .rrule import deserialize
from .rrule import serialize
from .rrule import valid
from .value import to_ics

# Silence notification of no default logging handler
log = logging.getLogger("icalrule")


class NullHandler(logging.Handler):
    def emit(self, record) -> None:
        pass


log.addHandler(NullHandler())

__all__ = [
    "__version__",
    "Frequency",
    "Month",
    "Property",
    "RecurrenceRule",
    "RRuleError",
    "RRuleSyntaxError",
    "RRuleValidationError",
    "Weekday",
    "deserialize",
    "serialize",
    "to_ics",
    "valid",
]
