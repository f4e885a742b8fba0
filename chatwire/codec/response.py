"""Response encoding.

The model signals tool use by emitting a JSON object containing a
"function_call" key somewhere in its output, for example:

    Let me check. {"function_call": {"name": "lookup", "arguments": {"q": "x"}}}

`extract_function_calls` splits such output into the visible text and the
verbatim call fragments; `encode_result` serializes the final result object.
`encode_error` is the fallback used when anything upstream has failed.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Sequence

from .scanner import Scanner
from .types import DecodedResponse, ResponseMetrics

logger = logging.getLogger(__name__)

FUNCTION_CALL_MARKER = '"function_call"'

_ESCAPES = {
    '"': '\\"',
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
    "\\": "\\\\",
}


def extract_function_calls(text: str) -> DecodedResponse:
    """Split raw model output into response text and function-call fragments.

    For each marker, the object that follows it is matched by brace depth and
    kept verbatim. The response text is cut before the object that wraps the
    first matched marker, so every recognized call is removed from the tail.
    An unterminated fragment ends the scan and is dropped.
    """
    scanner = Scanner(text)
    calls: list[str] = []
    cut = len(text)
    truncated = False

    while scanner.skip_to(FUNCTION_CALL_MARKER):
        marker_at = scanner.pos
        if not scanner.skip_to("{"):
            break
        fragment = scanner.match_balanced()
        if fragment is None:
            truncated = True
            logger.debug("Dropping unterminated function call at offset %d", scanner.pos)
            break
        calls.append(fragment)
        wrapper_at = text.rfind("{", 0, marker_at)
        cut = min(cut, marker_at if wrapper_at == -1 else wrapper_at)

    return DecodedResponse(response_text=text[:cut], function_calls=tuple(calls), truncated=truncated)


def escape_text(text: str) -> str:
    return "".join(_ESCAPES.get(c, c) for c in text)


def encode_result(
    response_text: str,
    function_calls: Sequence[str],
    metrics: ResponseMetrics,
) -> str:
    """Serialize a successful completion as a single-line JSON object.

    Function-call fragments are inserted as-is; they are already JSON objects.
    """
    parts = ['{"success":true,', '"response":"', escape_text(response_text), '",']
    if function_calls:
        parts.append('"function_calls":[')
        parts.append(",".join(function_calls))
        parts.append("],")
    parts.append(f'"time_to_first_token_ms":{metrics.time_to_first_token_ms:.2f},')
    parts.append(f'"total_time_ms":{metrics.total_time_ms:.2f},')
    parts.append(f'"tokens_per_second":{metrics.tokens_per_second:.2f},')
    parts.append(f'"prefill_tokens":{metrics.prefill_tokens},')
    parts.append(f'"decode_tokens":{metrics.decode_tokens},')
    parts.append(f'"total_tokens":{metrics.total_tokens}')
    parts.append("}")
    return "".join(parts)


def encode_error(message: str) -> str:
    """Error object for `message`, with quotes and newlines neutralized."""
    sanitized = message.replace('"', "'").replace("\n", " ")
    return '{"success":false,"error":"' + sanitized + '"}'


def write_bounded(document: str, buffer: bytearray | memoryview) -> bool:
    """Copy `document` into a fixed-capacity buffer as NUL-terminated UTF-8.

    Returns False and leaves `buffer` untouched when the document and its
    terminator do not fit.
    """
    data = document.encode("utf-8")
    if len(data) + 1 > len(buffer):
        return False
    end = len(data)
    buffer[:end] = data
    buffer[end : end + 1] = b"\0"
    return True


def encode_embedding(values: Sequence[float]) -> str:
    """Serialize an embedding vector.

    Raises:
        ValueError: If a component is NaN or infinite (not representable in JSON).
    """
    parts: list[str] = []
    for v in values:
        f = float(v)
        if not math.isfinite(f):
            raise ValueError("Embedding contains non-finite values")
        parts.append(repr(f))
    return '{"success":true,"embedding":[' + ",".join(parts) + "]}"
