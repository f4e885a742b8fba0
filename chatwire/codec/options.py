"""Sampling options decoding.

Input is a flat JSON object such as:

{"temperature": 0.7, "top_p": 0.9, "top_k": 40, "max_tokens": 256,
 "stop_sequences": ["</s>", "END"]}

Every key is optional; absent keys keep the `SamplingOptions` defaults.
"""

from __future__ import annotations

import re

from .errors import NumericParseFailure
from .scanner import Scanner
from .types import Decoded, SamplingOptions

_FLOAT_RE = re.compile(r"\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")
_UINT_RE = re.compile(r"\s*([+-]?\d+)")

_STOP_SEQUENCES_KEY = '"stop_sequences"'


def decode_options(text: str) -> Decoded[SamplingOptions]:
    """Decode sampling options, applying defaults for absent keys.

    Raises:
        NumericParseFailure: If a present numeric key has no parseable value.
    """
    defaults = SamplingOptions()
    if not text:
        return Decoded(defaults)

    temperature = _read_float(text, "temperature")
    top_p = _read_float(text, "top_p")
    top_k = _read_uint(text, "top_k")
    max_tokens = _read_uint(text, "max_tokens")

    return Decoded(
        SamplingOptions(
            temperature=defaults.temperature if temperature is None else temperature,
            top_p=defaults.top_p if top_p is None else top_p,
            top_k=defaults.top_k if top_k is None else top_k,
            max_tokens=defaults.max_tokens if max_tokens is None else max_tokens,
            stop_sequences=_read_stop_sequences(text),
        )
    )


def _value_scanner(text: str, field: str) -> Scanner | None:
    """Scanner positioned just after the colon following `"field"`, or None if absent."""
    scanner = Scanner(text)
    if not scanner.skip_past(f'"{field}"'):
        return None
    if not scanner.skip_past(":"):
        raise NumericParseFailure(field, text[scanner.pos : scanner.pos + 16])
    return scanner


def _read_float(text: str, field: str) -> float | None:
    scanner = _value_scanner(text, field)
    if scanner is None:
        return None
    m = scanner.match_prefix(_FLOAT_RE)
    if m is None:
        raise NumericParseFailure(field, text[scanner.pos : scanner.pos + 16])
    try:
        return float(m.group(1))
    except (ValueError, OverflowError) as exc:
        raise NumericParseFailure(field, m.group(1)[:16]) from exc


def _read_uint(text: str, field: str) -> int | None:
    scanner = _value_scanner(text, field)
    if scanner is None:
        return None
    m = scanner.match_prefix(_UINT_RE)
    if m is None:
        raise NumericParseFailure(field, text[scanner.pos : scanner.pos + 16])
    try:
        # int() refuses very long digit strings (sys.int_info.str_digits_check_threshold).
        value = int(m.group(1))
    except ValueError as exc:
        raise NumericParseFailure(field, m.group(1)[:16]) from exc
    if value < 0:
        raise NumericParseFailure(field, m.group(1)[:16])
    return value


def _read_stop_sequences(text: str) -> tuple[str, ...]:
    scanner = Scanner(text)
    if not scanner.skip_past(_STOP_SEQUENCES_KEY) or not scanner.skip_to("["):
        return ()
    # The list never nests, so the first "]" closes it.
    end = scanner.find("]")
    if end == -1:
        end = len(text)

    sequences: list[str] = []
    while True:
        open_at = scanner.find('"')
        if open_at == -1 or open_at >= end:
            break
        value = scanner.read_quoted()
        if value is None:
            break
        sequences.append(value)
    return tuple(sequences)
