"""Typed failures raised by the codec decoders."""

from __future__ import annotations


class CodecError(ValueError):
    pass


class MalformedInput(CodecError):
    """The top-level structure a decoder requires is missing."""


class NumericParseFailure(CodecError):
    """A sampling option value does not parse as its declared numeric type."""

    def __init__(self, field: str, raw: str) -> None:
        super().__init__(f"'{field}' must be a number, got {raw!r}.")
        self.field = field
        self.raw = raw
