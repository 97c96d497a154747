"""Configuration for callwire codecs.

``CodecOptions`` is the frozen dataclass the encoder and decoder read on
every value. ``CodecConfig`` is a Pydantic model for user-facing
construction (settings files, dependency injection) and is converted to
``CodecOptions`` once at startup, never consulted in hot paths.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

UnknownTagMode = Literal["preserve", "error"]


@dataclass(frozen=True, slots=True)
class CodecOptions:
    """Options shared by Encoder and Decoder."""

    # Nesting guard, raised as CodecError instead of RecursionError
    max_depth: int = 200

    # Decoding behavior for dicts that are not one recognized tag
    # "preserve" = return the raw wire value unchanged
    # "error" = raise CodecError(UNKNOWN_TAG)
    unknown_tag: UnknownTagMode = "preserve"

    # When reading a record key raises, drop the key (True) or let the
    # error abort the encode (False)
    skip_unreadable_keys: bool = True


DEFAULT_OPTIONS: Final[CodecOptions] = CodecOptions()


class CodecConfig(BaseModel):
    """Validated configuration for a ValueCodec.

    Attributes:
        max_depth: Maximum container nesting for encode and decode
        unknown_tag: Policy for unrecognized wire values on decode
        skip_unreadable_keys: Drop record keys whose read raises
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    max_depth: int = Field(
        default=DEFAULT_OPTIONS.max_depth,
        gt=0,
        description="Maximum container nesting depth",
    )
    unknown_tag: UnknownTagMode = Field(
        default=DEFAULT_OPTIONS.unknown_tag,
        description="Decode policy for unrecognized wire values",
    )
    skip_unreadable_keys: bool = Field(
        default=DEFAULT_OPTIONS.skip_unreadable_keys,
        description="Drop record keys whose value cannot be read",
    )

    @field_validator("unknown_tag", mode="before")
    @classmethod
    def normalize_unknown_tag(cls, v: object) -> object:
        """Accept the policy name case-insensitively."""
        if isinstance(v, str):
            return v.strip().lower()
        return v

    def to_options(self) -> CodecOptions:
        return CodecOptions(
            max_depth=self.max_depth,
            unknown_tag=self.unknown_tag,
            skip_unreadable_keys=self.skip_unreadable_keys,
        )
