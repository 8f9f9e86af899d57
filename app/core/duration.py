"""
Duration Parser

Parses the compact duration tokens used in trigger definitions:

    15m, 1h, 1h30m, 1.5h  -> general duration grammar
    2d, 1w                -> whole days / weeks

The day and week suffixes are not part of the general grammar, so they are
checked first and everything else falls through to it.
"""

import re
from datetime import timedelta

from app.core.errors import InvalidDurationError

DAY = timedelta(hours=24)
WEEK = 7 * DAY

_DAYS_WEEKS = re.compile(r"^(\d+)([wd])$")

# Sign, then one or more <decimal><unit> pairs, e.g. "-1h30m" or "1.5h"
_UNITS = {
    "ns": timedelta(microseconds=0.001),
    "us": timedelta(microseconds=1),
    "µs": timedelta(microseconds=1),  # U+00B5 micro sign
    "μs": timedelta(microseconds=1),  # U+03BC greek mu
    "ms": timedelta(milliseconds=1),
    "s": timedelta(seconds=1),
    "m": timedelta(minutes=1),
    "h": timedelta(hours=1),
}
_NUMBER = r"(?:\d+\.?\d*|\.\d+)"
_UNIT = r"(?:ns|us|µs|μs|ms|s|m|h)"
_GENERAL = re.compile(rf"^([-+]?)((?:{_NUMBER}{_UNIT})+)$")
_PAIR = re.compile(rf"({_NUMBER})({_UNIT})")


def parse_duration(token: str) -> timedelta:
    """
    Parse a duration token into a timedelta.

    Args:
        token: Duration such as "15m", "1h30m", "2d" or "1w". Empty means none.

    Returns:
        The parsed interval (zero for an empty token)

    Raises:
        InvalidDurationError: If the token is not a valid duration
    """
    if token == "":
        return timedelta(0)

    try:
        match = _DAYS_WEEKS.match(token)
        if match:
            count, unit = match.groups()
            return int(count) * (DAY if unit == "d" else WEEK)

        return _parse_general(token)
    except OverflowError:
        # Larger than timedelta can hold
        raise InvalidDurationError(token, f"duration {token!r} is too large") from None


def _parse_general(token: str) -> timedelta:
    # "0" is the only unit-less duration the general grammar allows
    if token in ("0", "+0", "-0"):
        return timedelta(0)

    match = _GENERAL.match(token)
    if not match:
        raise InvalidDurationError(token)

    sign, body = match.groups()
    total = timedelta(0)
    for number, unit in _PAIR.findall(body):
        total += float(number) * _UNITS[unit]

    return -total if sign == "-" else total


def duration_in_minutes(token: str) -> int:
    """Whole minutes in a duration token, truncated toward zero."""
    return int(parse_duration(token).total_seconds() / 60)
