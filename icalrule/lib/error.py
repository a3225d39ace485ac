#!/usr/bin/env python
import logging
import os
from typing import List
from typing import Optional

from icalrule import __version__

## Environmental variables prepended with "PYTHON_ICALRULE" are used for debug purposes,
## one of DEBUG_PDB, DEBUG, DEVELOPMENT, PRODUCTION
debugmode = os.environ.get("PYTHON_ICALRULE_DEBUGMODE")
if not debugmode:
    if "dev" in __version__ or __version__ == "(unknown)":
        debugmode = "DEVELOPMENT"
    else:
        debugmode = "PRODUCTION"

log = logging.getLogger("icalrule")
if debugmode.startswith("DEBUG"):
    log.setLevel(logging.DEBUG)
else:
    log.setLevel(logging.WARNING)


def weirdness(*reasons):
    reason = " : ".join([str(x) for x in reasons])
    log.warning(f"Deviation from expectations found: {reason}")
    if debugmode == "DEBUG_PDB":
        log.error(f"Dropping into debugger due to {reason}")
        import pdb

        pdb.set_trace()


def assert_(condition: object) -> None:
    try:
        assert condition
    except AssertionError:
        if debugmode == "PRODUCTION":
            log.error(
                "Deviation from expectations found.  %s" % ERR_FRAGMENT, exc_info=True
            )
        elif debugmode == "DEBUG_PDB":
            log.error("Deviation from expectations found.  Dropping into debugger")
            import pdb

            pdb.set_trace()
        else:
            raise


ERR_FRAGMENT: str = "Please consider raising an issue on the icalrule issue tracker, include this error, the traceback (if any) and the RRULE that triggered it"


class RRuleError(Exception):
    value: Optional[str] = None
    reason: str = "no reason"

    def __init__(self, value: Optional[str] = None, reason: Optional[str] = None) -> None:
        if value is not None:
            self.value = value
        if reason:
            self.reason = reason
        super().__init__(self.reason)

    def __str__(self) -> str:
        return "%s in '%s', reason %s" % (
            self.__class__.__name__,
            self.value,
            self.reason,
        )


class RRuleSyntaxError(RRuleError):
    """
    The RRULE text could not be split into KEY=value tokens.  This is
    raised immediately, as no further processing is possible.
    """

    reason = "malformed RRULE"


class RRuleValidationError(RRuleError):
    """
    One or more properties of the RRULE failed validation.  The errors
    property holds every message collected while folding the tokens,
    the most recent failure first.
    """

    reason = "invalid RRULE"

    def __init__(
        self,
        value: Optional[str] = None,
        errors: Optional[List[str]] = None,
    ) -> None:
        self.errors = list(errors or [])
        super().__init__(value, "; ".join(self.errors) or None)


class UnknownSymbolError(RRuleError, KeyError):
    """A token was looked up in one of the symbol tables and not found"""

    reason = "unknown symbol"
