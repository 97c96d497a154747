"""callwire - tagged JSON value codec for remote calls

Encodes arbitrary Python values into a JSON-compatible wire format that
keeps undefined, null, NaN, signed zero and infinities apart, carries
remote-object handles as integers, and rejects cyclic structures.
"""

from callwire.classify import (
    Classification,
    Classifier,
    Handle,
    HandleCollector,
    Passthrough,
    passthrough,
)
from callwire.codec import (
    ValueCodec,
    decode_value,
    dumps,
    encode_value,
    get_default_codec,
    loads,
)
from callwire.config import CodecConfig, CodecOptions
from callwire.decoder import Decoder, decode
from callwire.encoder import Encoder, encode
from callwire.error import CodecError, ErrorCode
from callwire.types import UNDEFINED, RegExpValue, UndefinedValue
from callwire.wire import WireValue

__version__ = "0.1.0"

__all__ = [
    # Core functions
    "encode",
    "decode",
    "Encoder",
    "Decoder",
    # Classification
    "Classifier",
    "Classification",
    "Handle",
    "Passthrough",
    "passthrough",
    "HandleCollector",
    # Value types
    "UNDEFINED",
    "UndefinedValue",
    "RegExpValue",
    "WireValue",
    # Errors
    "CodecError",
    "ErrorCode",
    # Configuration
    "CodecOptions",
    "CodecConfig",
    # ValueCodec - encoder/decoder pair with JSON text helpers
    "ValueCodec",
    "get_default_codec",
    "encode_value",
    "decode_value",
    "dumps",
    "loads",
]
