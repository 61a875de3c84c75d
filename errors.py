# errors.py
"""
errors.py

Exceptions raised by the thinning routines. Both concrete errors derive from
ValueError so callers that already catch ValueError keep working.
"""


class ThinningError(Exception):
    """Base class for all thinning errors."""


class InvalidArgumentError(ThinningError, ValueError):
    """A scalar parameter or option name is out of range or unknown."""


class DimensionMismatchError(ThinningError, ValueError):
    """Input arrays do not have the expected shape or length."""
