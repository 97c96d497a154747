"""Wire format definitions for callwire.

A wire value is plain JSON: bare booleans, numbers and strings travel as-is,
and everything else is a single-key dict whose key names the variant:

    {"v": "null" | "undefined" | "NaN" | "Infinity" | "-Infinity" | "-0"}
    {"d": "2024-01-01T00:00:00.000Z"}
    {"r": [source, flags]}
    {"a": [wire, ...]}
    {"o": {key: wire, ...}}
    {"h": index}

The tag names and the special literal set are fixed vocabulary shared with
other implementations. An absent top-level value travels as ``None``.
"""

from __future__ import annotations

import re
from datetime import date, datetime, timezone
from typing import Final, Union

# Type alias for JSON-serializable values
Json = Union[None, bool, int, float, str, list["Json"], dict[str, "Json"]]

# A wire value is JSON restricted to the tagged shapes above
WireValue = Json

TAG_VALUE: Final[str] = "v"
TAG_DATE: Final[str] = "d"
TAG_REGEXP: Final[str] = "r"
TAG_ARRAY: Final[str] = "a"
TAG_OBJECT: Final[str] = "o"
TAG_HANDLE: Final[str] = "h"

TAGS: Final[frozenset[str]] = frozenset({
    TAG_VALUE, TAG_DATE, TAG_REGEXP, TAG_ARRAY, TAG_OBJECT, TAG_HANDLE,
})

SPECIAL_LITERALS: Final[frozenset[str]] = frozenset({
    "null", "undefined", "NaN", "Infinity", "-Infinity", "-0",
})


def wire_tag(wire: object) -> str | None:
    """Return the tag of a tagged wire dict, or None for anything else."""
    if isinstance(wire, dict) and len(wire) == 1:
        key = next(iter(wire))
        if key in TAGS:
            return key
    return None


# =============================================================================
# Dates
# =============================================================================


def format_instant(value: date) -> str:
    """Serialize a date or datetime the way JavaScript's Date.toJSON does.

    Naive datetimes are taken to be UTC, and plain dates are midnight UTC.
    Precision is milliseconds.
    """
    if not isinstance(value, datetime):
        value = datetime(value.year, value.month, value.day, tzinfo=timezone.utc)
    elif value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    else:
        try:
            value = value.astimezone(timezone.utc)
        except OverflowError:
            return _format_edge_instant(value)
    return value.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _format_edge_instant(value: datetime) -> str:
    """Format an instant whose UTC day lies just outside datetime's range.

    Offsets are under a day, so that day is 0000-12-31 or 10000-01-01. Years
    past 9999 use the expanded six-digit form, as JavaScript does.
    """
    anchor = date(2000, 1, 2)
    shifted = datetime.combine(anchor, value.time()) - value.utcoffset()
    day = "0000-12-31" if shifted.date() < anchor else "+010000-01-01"
    return f"{day}T{shifted.time().isoformat(timespec='milliseconds')}Z"


def parse_instant(text: str) -> datetime:
    """Parse an ISO-8601 instant into an aware UTC datetime.

    Raises:
        ValueError: On malformed text, or an instant outside years 1-9999
    """
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


# =============================================================================
# Regular expression flags
# =============================================================================

# Listed in JavaScript's canonical flag order
_FLAG_LETTERS: Final[tuple[tuple[str, re.RegexFlag], ...]] = (
    ("i", re.IGNORECASE),
    ("m", re.MULTILINE),
    ("s", re.DOTALL),
)

# str patterns are always unicode-aware in Python
_IMPLICIT_FLAG_LETTERS: Final[frozenset[str]] = frozenset({"u"})

# Python flags that have no JavaScript letter
PYTHON_ONLY_FLAGS: Final[int] = re.VERBOSE | re.ASCII | re.LOCALE


def pattern_flags_to_wire(flags: int) -> str:
    """Translate ``re`` flags into JavaScript flag letters.

    Flags in ``PYTHON_ONLY_FLAGS`` and the implicit ``re.UNICODE`` produce
    no letter.
    """
    return "".join(letter for letter, flag in _FLAG_LETTERS if flags & flag)


def pattern_flags_from_wire(letters: str) -> int | None:
    """Translate JavaScript flag letters into ``re`` flags.

    Returns None if any letter has no Python equivalent (``g``, ``y``, ...).
    """
    result = 0
    for letter in letters:
        if letter in _IMPLICIT_FLAG_LETTERS:
            continue
        for known, flag in _FLAG_LETTERS:
            if letter == known:
                result |= flag
                break
        else:
            return None
    return result
