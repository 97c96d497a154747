"""Error types raised by the callwire codec."""

from __future__ import annotations

from enum import Enum
from typing import Any


class ErrorCode(Enum):
    """Failure categories surfaced by the encoder and decoder."""

    CIRCULAR_STRUCTURE = "circular_structure"
    DEPTH_EXCEEDED = "depth_exceeded"
    BAD_HANDLE = "bad_handle"
    UNKNOWN_TAG = "unknown_tag"
    BAD_CLASSIFICATION = "bad_classification"


class CodecError(Exception):
    """A fatal encode or decode failure.

    Recoverable conditions (an unreadable key, an unknown tag under the
    default policy) never raise; everything that does is one of the
    ``ErrorCode`` categories.

    Attributes:
        code: The failure category
        message: Human-readable description
        data: Optional structured details
    """

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        data: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.data = data

    def __repr__(self) -> str:
        return f"CodecError({self.code.name}, {self.message!r})"

    @classmethod
    def circular(cls) -> CodecError:
        return cls(ErrorCode.CIRCULAR_STRUCTURE, "Argument is a circular structure")

    @classmethod
    def depth_exceeded(cls, max_depth: int) -> CodecError:
        return cls(
            ErrorCode.DEPTH_EXCEEDED,
            f"Max nesting depth exceeded ({max_depth})",
            {"max_depth": max_depth},
        )

    @classmethod
    def bad_handle(cls, index: Any, table_size: int) -> CodecError:
        return cls(
            ErrorCode.BAD_HANDLE,
            f"Handle index {index!r} is out of range for a table of {table_size}",
            {"index": index, "table_size": table_size},
        )

    @classmethod
    def unknown_tag(cls, wire: Any) -> CodecError:
        return cls(ErrorCode.UNKNOWN_TAG, f"Unknown wire value: {wire!r}")

    @classmethod
    def bad_classification(cls, result: Any) -> CodecError:
        return cls(
            ErrorCode.BAD_CLASSIFICATION,
            f"Classifier must return Handle or Passthrough, got {type(result).__name__}",
        )
