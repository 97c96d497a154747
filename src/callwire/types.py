"""Application-level value types that have no native Python counterpart."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final


@dataclass(frozen=True, slots=True)
class UndefinedValue:
    """Represents JavaScript's undefined value.

    Python's ``None`` stands for ``null``; this marker keeps the two apart.

    Wire format: {"v": "undefined"}
    """

    def __repr__(self) -> str:
        return "UNDEFINED"


UNDEFINED: Final[UndefinedValue] = UndefinedValue()


@dataclass(frozen=True, slots=True)
class RegExpValue:
    """A regular expression kept in its wire form.

    Used when a pattern cannot become a compiled ``re.Pattern``: flags with
    no Python equivalent (``g``, ``y``, ``d``, ``v``) or syntax ``re``
    rejects.

    Wire format: {"r": [source, flags]}
    """

    source: str
    flags: str = ""


def is_symbol_like(value: object) -> bool:
    """Check if value carries no structure and should encode as undefined.

    Bare ``object()`` sentinels are Python's equivalent of a symbol.
    """
    return isinstance(value, UndefinedValue) or type(value) is object
