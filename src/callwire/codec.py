"""ValueCodec - Encoder and Decoder behind one object, plus JSON text helpers."""

from __future__ import annotations

import json
from collections.abc import Sequence
from typing import Any

from callwire.classify import Classifier, passthrough
from callwire.config import DEFAULT_OPTIONS, CodecConfig, CodecOptions
from callwire.decoder import Decoder
from callwire.encoder import Encoder
from callwire.wire import WireValue


class ValueCodec:
    """Translates between Python values and callwire wire values.

    Example:
        >>> codec = ValueCodec()
        >>> codec.dumps([None, float("inf")])
        '{"a":[{"v":"null"},{"v":"Infinity"}]}'
        >>> codec.loads('{"a":[{"v":"null"},{"v":"Infinity"}]}')
        [None, inf]
    """

    __slots__ = ("opts", "encoder", "decoder")

    def __init__(self, opts: CodecOptions = DEFAULT_OPTIONS) -> None:
        self.opts = opts
        self.encoder = Encoder(opts)
        self.decoder = Decoder(opts)

    @classmethod
    def from_config(cls, config: CodecConfig) -> ValueCodec:
        return cls(config.to_options())

    def encode(self, value: Any, classify: Classifier = passthrough) -> WireValue:
        return self.encoder.encode(value, classify)

    def decode(self, wire: WireValue, handles: Sequence[Any] = ()) -> Any:
        return self.decoder.decode(wire, handles)

    def dumps(self, value: Any, classify: Classifier = passthrough) -> str:
        """Encode a value straight to compact JSON text.

        ``allow_nan=False`` holds because NaN and infinities travel as tags.
        """
        return json.dumps(
            self.encode(value, classify),
            allow_nan=False,
            ensure_ascii=False,
            separators=(",", ":"),
        )

    def loads(self, text: str | bytes, handles: Sequence[Any] = ()) -> Any:
        """Decode JSON text produced by ``dumps``."""
        return self.decode(json.loads(text), handles)


# =============================================================================
# Convenience Functions
# =============================================================================


# Global default codec instance
_default_codec: ValueCodec | None = None


def get_default_codec() -> ValueCodec:
    """Get the global default ValueCodec instance."""
    global _default_codec
    if _default_codec is None:
        _default_codec = ValueCodec()
    return _default_codec


def encode_value(value: Any, classify: Classifier = passthrough) -> WireValue:
    """Encode a value using the default codec."""
    return get_default_codec().encode(value, classify)


def decode_value(wire: WireValue, handles: Sequence[Any] = ()) -> Any:
    """Decode a wire value using the default codec."""
    return get_default_codec().decode(wire, handles)


def dumps(value: Any, classify: Classifier = passthrough) -> str:
    """Encode a value to JSON text using the default codec."""
    return get_default_codec().dumps(value, classify)


def loads(text: str | bytes, handles: Sequence[Any] = ()) -> Any:
    """Decode JSON text using the default codec."""
    return get_default_codec().loads(text, handles)
