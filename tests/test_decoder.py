"""Tests for Decoder.

These tests verify:
1. Special literals decode to their intrinsic values
2. Dates, regular expressions, arrays and records
3. Handle resolution and the bad-index policy
4. Unknown tag handling modes
5. Depth limit
"""

from __future__ import annotations

import math
import re
from datetime import datetime, timedelta, timezone
from typing import Any

import pytest

from callwire.config import DEFAULT_OPTIONS, CodecOptions
from callwire.decoder import Decoder, decode
from callwire.error import CodecError, ErrorCode
from callwire.types import UNDEFINED, RegExpValue, UndefinedValue


def nested_array_wire(levels: int) -> dict[str, Any]:
    """Wire form of `levels` lists, each the only element of the one above it."""
    wire: dict[str, Any] = {"a": []}
    for _ in range(levels - 1):
        wire = {"a": [wire]}
    return wire


def nested_record_wire(levels: int) -> dict[str, Any]:
    wire: dict[str, Any] = {"o": {}}
    for _ in range(levels - 1):
        wire = {"o": {"child": wire}}
    return wire


class TestSpecialLiterals:
    """{"v": ...} literals."""

    def test_null(self) -> None:
        assert decode({"v": "null"}) is None

    def test_undefined(self) -> None:
        assert decode({"v": "undefined"}) is UNDEFINED

    def test_absent_top_level_is_undefined(self) -> None:
        assert isinstance(decode(None), UndefinedValue)

    def test_nan(self) -> None:
        assert math.isnan(decode({"v": "NaN"}))

    def test_infinities(self) -> None:
        assert decode({"v": "Infinity"}) == math.inf
        assert decode({"v": "-Infinity"}) == -math.inf

    def test_negative_zero(self) -> None:
        value = decode({"v": "-0"})
        assert value == 0.0
        assert math.copysign(1.0, value) == -1.0


class TestPrimitives:
    """Bare primitives pass through."""

    def test_primitives(self) -> None:
        assert decode(True) is True
        assert decode(0) == 0
        assert decode(2.5) == 2.5
        assert decode("text") == "text"


class TestDates:
    """{"d": iso} decodes to an aware UTC datetime."""

    def test_zulu(self) -> None:
        value = decode({"d": "2024-01-02T03:04:05.678Z"})
        assert value == datetime(2024, 1, 2, 3, 4, 5, 678000, tzinfo=timezone.utc)
        assert value.utcoffset() == timedelta(0)

    def test_offset_normalized_to_utc(self) -> None:
        value = decode({"d": "2024-01-01T12:00:00+02:00"})
        assert value == datetime(2024, 1, 1, 10, tzinfo=timezone.utc)
        assert value.utcoffset() == timedelta(0)


class TestRegExps:
    """{"r": [source, flags]} decodes to re.Pattern or RegExpValue."""

    def test_compiles_known_flags(self) -> None:
        value = decode({"r": ["a+b", "im"]})
        assert isinstance(value, re.Pattern)
        assert value.pattern == "a+b"
        assert value.flags & re.IGNORECASE
        assert value.flags & re.MULTILINE
        assert not value.flags & re.DOTALL

    def test_unicode_flag_is_implicit(self) -> None:
        value = decode({"r": ["\\w", "su"]})
        assert isinstance(value, re.Pattern)
        assert value.flags & re.DOTALL

    def test_stateful_flags_kept_in_wire_form(self) -> None:
        assert decode({"r": ["a", "gi"]}) == RegExpValue("a", "gi")

    def test_uncompilable_source_kept_in_wire_form(self) -> None:
        assert decode({"r": ["(", ""]}) == RegExpValue("(", "")


class TestContainers:
    """{"a": [...]} and {"o": {...}}."""

    def test_array(self) -> None:
        assert decode({"a": [1, {"v": "null"}, "x"]}) == [1, None, "x"]

    def test_empty_array(self) -> None:
        assert decode({"a": []}) == []

    def test_record(self) -> None:
        decoded = decode({"o": {"b": 1, "a": {"a": [2]}}})
        assert decoded == {"b": 1, "a": [2]}
        assert list(decoded) == ["b", "a"]

    def test_empty_record_from_to_json(self) -> None:
        """The bare {} emitted for a callable toJSON passes through as {}."""
        assert decode({"o": {"toJSON": {}}}) == {"toJSON": {}}

    def test_tag_names_as_record_keys(self) -> None:
        wire = {"o": {"v": 1, "h": {"v": "NaN"}}}
        decoded = decode(wire)
        assert decoded["v"] == 1
        assert math.isnan(decoded["h"])


class TestHandles:
    """{"h": index} resolves against the handle table."""

    def test_resolve(self) -> None:
        table = ["first", "second"]
        assert decode({"h": 1}, table) == "second"

    def test_resolve_identity(self) -> None:
        remote = object()
        decoded = decode({"o": {"ref": {"h": 0}}}, [remote])
        assert decoded["ref"] is remote

    def test_index_out_of_range(self) -> None:
        with pytest.raises(CodecError) as exc_info:
            decode({"h": 5}, ["only"])
        assert exc_info.value.code is ErrorCode.BAD_HANDLE
        assert exc_info.value.data == {"index": 5, "table_size": 1}

    def test_negative_index_rejected(self) -> None:
        with pytest.raises(CodecError):
            decode({"h": -1}, ["a", "b"])

    def test_bool_index_rejected(self) -> None:
        with pytest.raises(CodecError):
            decode({"h": True}, ["a", "b"])

    def test_non_int_index_rejected(self) -> None:
        with pytest.raises(CodecError):
            decode({"h": "0"}, ["a"])

    def test_empty_table(self) -> None:
        with pytest.raises(CodecError, match="out of range"):
            decode({"h": 0})


class TestUnknownTags:
    """Unmatched wire values pass through by default."""

    def test_unknown_key_preserved(self) -> None:
        wire = {"x": {"v": "NaN"}}
        assert decode(wire) is wire

    def test_unknown_literal_preserved(self) -> None:
        assert decode({"v": "bogus"}) == {"v": "bogus"}

    def test_multiple_keys_preserved(self) -> None:
        wire = {"a": [], "o": {}}
        assert decode(wire) == wire

    def test_malformed_payload_preserved(self) -> None:
        assert decode({"r": "abc"}) == {"r": "abc"}
        assert decode({"a": "abc"}) == {"a": "abc"}

    def test_bare_list_preserved(self) -> None:
        assert decode([1, 2]) == [1, 2]

    def test_error_mode(self) -> None:
        decoder = Decoder(CodecOptions(unknown_tag="error"))
        with pytest.raises(CodecError, match="Unknown wire value") as exc_info:
            decoder.decode({"x": 1})
        assert exc_info.value.code is ErrorCode.UNKNOWN_TAG

    def test_error_mode_nested(self) -> None:
        with pytest.raises(CodecError):
            decode({"a": [1, {"zz": 2}]}, opts=CodecOptions(unknown_tag="error"))

    def test_error_mode_accepts_valid_input(self) -> None:
        decoder = Decoder(CodecOptions(unknown_tag="error"))
        assert decoder.decode({"a": [1, {"v": "null"}]}) == [1, None]

    def test_error_mode_accepts_empty_record(self) -> None:
        decoder = Decoder(CodecOptions(unknown_tag="error"))
        assert decoder.decode({}) == {}
        assert decoder.decode({"o": {"toJSON": {}, "x": 1}}) == {"toJSON": {}, "x": 1}


class TestDepthLimit:
    """Excessive nesting raises CodecError."""

    def test_max_depth_exceeded(self) -> None:
        decoder = Decoder(CodecOptions(max_depth=2))
        wire = {"a": [{"a": [{"a": [{"a": [1]}]}]}]}
        with pytest.raises(CodecError) as exc_info:
            decoder.decode(wire)
        assert exc_info.value.code is ErrorCode.DEPTH_EXCEEDED

    def test_max_depth_ok(self) -> None:
        decoder = Decoder(CodecOptions(max_depth=2))
        assert decoder.decode({"a": [{"a": []}]}) == [[]]

    def test_default_limit_nested_arrays(self) -> None:
        limit = DEFAULT_OPTIONS.max_depth
        assert decode(nested_array_wire(limit + 1)) is not None
        with pytest.raises(CodecError) as exc_info:
            decode(nested_array_wire(limit + 2))
        assert exc_info.value.code is ErrorCode.DEPTH_EXCEEDED

    def test_default_limit_nested_records(self) -> None:
        limit = DEFAULT_OPTIONS.max_depth
        assert decode(nested_record_wire(limit + 1)) is not None
        with pytest.raises(CodecError) as exc_info:
            decode(nested_record_wire(limit + 2))
        assert exc_info.value.code is ErrorCode.DEPTH_EXCEEDED
