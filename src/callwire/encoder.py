"""Encoder - arbitrary Python values to callwire wire values.

Every value is first shown to the caller's classifier, which may replace it
with a handle reference. Values that pass through are matched against a
fixed, ordered table of (predicate, handler) rules; the first matching rule
produces the wire value. Rule order is part of the format: ``True`` must hit
the primitive rule, ``-0.0`` must hit the signed-zero rule before it, and so
on.

Containers (lists, tuples, records) are tracked by identity in a visited
set while their children are encoded. Meeting one of them again below
itself is a cycle and aborts the encode; meeting it again as a sibling is
fine and encodes it twice.
"""

from __future__ import annotations

import logging
import math
import re
import traceback
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Callable, Final

from callwire.classify import Classifier, Handle, Passthrough, passthrough
from callwire.config import DEFAULT_OPTIONS, CodecOptions
from callwire.error import CodecError
from callwire.types import RegExpValue, is_symbol_like
from callwire.wire import (
    PYTHON_ONLY_FLAGS,
    TAG_ARRAY,
    TAG_DATE,
    TAG_HANDLE,
    TAG_OBJECT,
    TAG_REGEXP,
    TAG_VALUE,
    WireValue,
    format_instant,
    pattern_flags_to_wire,
)

logger = logging.getLogger(__name__)

# Key whose callable value is never invoked or walked
TO_JSON_KEY: Final[str] = "toJSON"


@dataclass(slots=True)
class _EncodeContext:
    """Per-call state, discarded when the top-level encode returns."""

    classify: Classifier
    visited: set[int] = field(default_factory=set)


# =============================================================================
# Rule predicates
# =============================================================================


def _is_null(v: Any) -> bool:
    return v is None


def _is_nan(v: Any) -> bool:
    return isinstance(v, float) and math.isnan(v)


def _is_positive_infinity(v: Any) -> bool:
    return isinstance(v, float) and v == math.inf


def _is_negative_infinity(v: Any) -> bool:
    return isinstance(v, float) and v == -math.inf


def _is_negative_zero(v: Any) -> bool:
    # 0.0 == -0.0, so only the sign bit tells them apart
    return isinstance(v, float) and v == 0.0 and math.copysign(1.0, v) < 0


def _is_primitive(v: Any) -> bool:
    return isinstance(v, (bool, int, float, str))


def _is_error(v: Any) -> bool:
    return isinstance(v, BaseException)


def _is_date(v: Any) -> bool:
    return isinstance(v, date)


def _is_regexp(v: Any) -> bool:
    return isinstance(v, (re.Pattern, RegExpValue))


def _is_array(v: Any) -> bool:
    return isinstance(v, (list, tuple))


def _is_object(v: Any) -> bool:
    return True


def _own_keys(value: Any) -> list[str]:
    """List the string keys of a record in enumeration order.

    Mappings enumerate their keys; other objects enumerate their instance
    ``__dict__`` followed by any ``__slots__`` along the MRO.
    """
    if isinstance(value, Mapping):
        return [k for k in value.keys() if isinstance(k, str)]

    keys: list[str] = []
    instance_dict = getattr(value, "__dict__", None)
    if isinstance(instance_dict, dict):
        keys.extend(k for k in instance_dict if isinstance(k, str))

    for cls in type(value).__mro__:
        slots = cls.__dict__.get("__slots__", ())
        if isinstance(slots, str):
            slots = (slots,)
        for name in slots:
            if name in ("__dict__", "__weakref__"):
                continue
            if name.startswith("__") and not name.endswith("__"):
                name = f"_{cls.__name__.lstrip('_')}{name}"
            if name not in keys:
                keys.append(name)
    return keys


def _read_key(value: Any, name: str) -> Any:
    if isinstance(value, Mapping):
        return value[name]
    return getattr(value, name)


# =============================================================================
# Encoder
# =============================================================================


Rule = tuple[Callable[[Any], bool], Callable[[Any, _EncodeContext, int], WireValue]]


class Encoder:
    """Converts Python values into wire values.

    Example:
        >>> Encoder().encode({"n": float("nan"), "xs": (1, -0.0)})
        {"o": {"n": {"v": "NaN"}, "xs": {"a": [1, {"v": "-0"}]}}}
    """

    __slots__ = ("opts", "_rules")

    def __init__(self, opts: CodecOptions = DEFAULT_OPTIONS) -> None:
        self.opts = opts
        self._rules: tuple[Rule, ...] = (
            (is_symbol_like, lambda v, ctx, depth: {TAG_VALUE: "undefined"}),
            (_is_null, lambda v, ctx, depth: {TAG_VALUE: "null"}),
            (_is_nan, lambda v, ctx, depth: {TAG_VALUE: "NaN"}),
            (_is_positive_infinity, lambda v, ctx, depth: {TAG_VALUE: "Infinity"}),
            (_is_negative_infinity, lambda v, ctx, depth: {TAG_VALUE: "-Infinity"}),
            (_is_negative_zero, lambda v, ctx, depth: {TAG_VALUE: "-0"}),
            (_is_primitive, lambda v, ctx, depth: v),
            (_is_error, self._encode_error),
            (_is_date, lambda v, ctx, depth: {TAG_DATE: format_instant(v)}),
            (_is_regexp, self._encode_regexp),
            (_is_array, self._encode_array),
            (_is_object, self._encode_object),
        )

    # ---------- Public API ----------

    def encode(self, value: Any, classify: Classifier = passthrough) -> WireValue:
        """Encode a value to its wire form.

        Args:
            value: Any Python value
            classify: Consulted first for every value, root included

        Returns:
            JSON-compatible wire value

        Raises:
            CodecError: On a circular structure or excessive nesting
            Exception: Anything ``classify`` raises, unchanged
        """
        return self._enc(value, _EncodeContext(classify), depth=0)

    # ---------- Encoding Internals ----------

    def _enc(self, value: Any, ctx: _EncodeContext, *, depth: int) -> WireValue:
        """Internal recursive encoder."""
        if depth > self.opts.max_depth:
            raise CodecError.depth_exceeded(self.opts.max_depth)

        verdict = ctx.classify(value)
        if isinstance(verdict, Handle):
            return {TAG_HANDLE: verdict.index}
        if not isinstance(verdict, Passthrough):
            raise CodecError.bad_classification(verdict)
        value = verdict.value

        for matches, handler in self._rules:
            if matches(value):
                return handler(value, ctx, depth)

        raise AssertionError("object rule matches every value")

    def _encode_error(self, exc: BaseException, ctx: _EncodeContext, depth: int) -> str:
        if exc.__traceback__ is not None:
            # Header, frames and chained causes already formatted together
            return "".join(traceback.format_exception(exc))
        return f"{type(exc).__name__}: {exc}\n"

    def _encode_regexp(
        self, pattern: re.Pattern[Any] | RegExpValue, ctx: _EncodeContext, depth: int
    ) -> WireValue:
        if isinstance(pattern, RegExpValue):
            return {TAG_REGEXP: [pattern.source, pattern.flags]}

        source = pattern.pattern
        if isinstance(source, bytes):
            source = source.decode("latin-1")
        dropped = pattern.flags & PYTHON_ONLY_FLAGS
        if dropped:
            logger.debug(
                "Dropping regex flags with no wire letter: %r", re.RegexFlag(dropped)
            )
        return {TAG_REGEXP: [source, pattern_flags_to_wire(pattern.flags)]}

    def _encode_array(
        self, items: list[Any] | tuple[Any, ...], ctx: _EncodeContext, depth: int
    ) -> WireValue:
        key = self._enter(items, ctx)
        result: list[WireValue] = []
        for item in items:
            result.append(self._enc(item, ctx, depth=depth + 1))
        ctx.visited.discard(key)
        return {TAG_ARRAY: result}

    def _encode_object(self, value: Any, ctx: _EncodeContext, depth: int) -> WireValue:
        key = self._enter(value, ctx)
        result: dict[str, WireValue] = {}
        for name in _own_keys(value):
            try:
                item = _read_key(value, name)
            except Exception:
                # Best effort: properties that refuse to be read are left out
                if not self.opts.skip_unreadable_keys:
                    raise
                logger.debug(
                    "Skipping unreadable key %r of %s", name, type(value).__name__,
                    exc_info=True,
                )
                continue
            if name == TO_JSON_KEY and callable(item):
                result[name] = {}
            else:
                result[name] = self._enc(item, ctx, depth=depth + 1)
        ctx.visited.discard(key)
        return {TAG_OBJECT: result}

    def _enter(self, container: Any, ctx: _EncodeContext) -> int:
        """Mark a container as on the current path, rejecting cycles."""
        key = id(container)
        if key in ctx.visited:
            raise CodecError.circular()
        ctx.visited.add(key)
        return key


# Global default encoder instance
_default_encoder: Encoder | None = None


def encode(
    value: Any,
    classify: Classifier = passthrough,
    opts: CodecOptions | None = None,
) -> WireValue:
    """Encode a value with the default options (or ``opts``)."""
    global _default_encoder
    if opts is not None:
        return Encoder(opts).encode(value, classify)
    if _default_encoder is None:
        _default_encoder = Encoder()
    return _default_encoder.encode(value, classify)
