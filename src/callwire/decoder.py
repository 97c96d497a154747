"""Decoder - callwire wire values back to Python values.

Wire values are trees (the encoder refuses cycles), so decoding is a plain
recursive walk. Handle tags are resolved against a table the caller has
already filled with live objects.

Policies for input the encoder never produces:
- a dict that is not exactly one recognized tag is returned unchanged
  (or rejected under ``unknown_tag="error"``)
- a handle index outside the table is always a CodecError
"""

from __future__ import annotations

import logging
import math
import re
from collections.abc import Sequence
from typing import Any, Final

from callwire.config import DEFAULT_OPTIONS, CodecOptions
from callwire.error import CodecError
from callwire.types import UNDEFINED, RegExpValue
from callwire.wire import (
    WireValue,
    parse_instant,
    pattern_flags_from_wire,
    wire_tag,
)

logger = logging.getLogger(__name__)

_SPECIAL_VALUES: Final[dict[str, Any]] = {
    "null": None,
    "undefined": UNDEFINED,
    "NaN": math.nan,
    "Infinity": math.inf,
    "-Infinity": -math.inf,
    "-0": -0.0,
}


def _decode_regexp(source: str, flags: str) -> re.Pattern[str] | RegExpValue:
    py_flags = pattern_flags_from_wire(flags)
    if py_flags is None:
        return RegExpValue(source, flags)
    try:
        return re.compile(source, py_flags)
    except re.error:
        logger.debug("Keeping regex %r in wire form, re cannot compile it", source)
        return RegExpValue(source, flags)


class Decoder:
    """Converts wire values into Python values."""

    __slots__ = ("opts",)

    def __init__(self, opts: CodecOptions = DEFAULT_OPTIONS) -> None:
        self.opts = opts

    # ---------- Public API ----------

    def decode(self, wire: WireValue, handles: Sequence[Any] = ()) -> Any:
        """Decode a wire value.

        Args:
            wire: Wire value, as produced by Encoder.encode
            handles: Resolved objects, indexed by {"h": index} tags

        Returns:
            The reconstructed value

        Raises:
            CodecError: On a bad handle index, excessive nesting, or an
                unknown tag when ``unknown_tag="error"``
        """
        if wire is None:
            return UNDEFINED
        return self._dec(wire, handles, depth=0)

    # ---------- Decoding Internals ----------

    def _dec(self, wire: WireValue, handles: Sequence[Any], *, depth: int) -> Any:
        """Internal recursive decoder."""
        if depth > self.opts.max_depth:
            raise CodecError.depth_exceeded(self.opts.max_depth)

        if not isinstance(wire, dict):
            # Bare primitives (and absent values nested by hand) pass through
            if isinstance(wire, (list, tuple)):
                return self._unknown(wire)
            return wire

        if not wire:
            # Empty record, written for a callable toJSON member
            return {}

        if wire_tag(wire) is None:
            return self._unknown(wire)

        match wire:
            case {"v": str() as literal} if literal in _SPECIAL_VALUES:
                return _SPECIAL_VALUES[literal]
            case {"d": str() as text}:
                return parse_instant(text)
            case {"r": [str() as source, str() as flags]}:
                return _decode_regexp(source, flags)
            case {"a": list() as items}:
                return [self._dec(item, handles, depth=depth + 1) for item in items]
            case {"o": dict() as fields}:
                return {
                    key: self._dec(value, handles, depth=depth + 1)
                    for key, value in fields.items()
                }
            case {"h": index}:
                return self._resolve_handle(index, handles)
            case _:
                return self._unknown(wire)

    def _resolve_handle(self, index: Any, handles: Sequence[Any]) -> Any:
        # bool is an int subclass; True must not alias handle 1
        if (
            isinstance(index, bool)
            or not isinstance(index, int)
            or not 0 <= index < len(handles)
        ):
            raise CodecError.bad_handle(index, len(handles))
        return handles[index]

    def _unknown(self, wire: Any) -> Any:
        if self.opts.unknown_tag == "error":
            raise CodecError.unknown_tag(wire)
        logger.debug("Passing through unrecognized wire value %r", wire)
        return wire


# Global default decoder instance
_default_decoder: Decoder | None = None


def decode(
    wire: WireValue,
    handles: Sequence[Any] = (),
    opts: CodecOptions | None = None,
) -> Any:
    """Decode a wire value with the default options (or ``opts``)."""
    global _default_decoder
    if opts is not None:
        return Decoder(opts).decode(wire, handles)
    if _default_decoder is None:
        _default_decoder = Decoder()
    return _default_decoder.decode(wire, handles)
