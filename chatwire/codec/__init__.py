"""Text codec between callers and the inference engine.

Decoders scan raw JSON-like request text without a JSON library; the encoder
builds the result JSON by hand. Nothing here depends on the engine or on any
transport.
"""

from .errors import CodecError, MalformedInput, NumericParseFailure
from .messages import decode_messages
from .options import decode_options
from .response import encode_embedding, encode_error, encode_result, extract_function_calls, write_bounded
from .scanner import Scanner
from .tools import decode_tools, format_tools_for_prompt
from .types import (
    ChatTurn,
    Decoded,
    DecodedResponse,
    ResponseMetrics,
    SamplingOptions,
    ToolDescriptor,
)

__all__ = [
    # Errors
    "CodecError",
    "MalformedInput",
    "NumericParseFailure",
    # Types
    "ChatTurn",
    "Decoded",
    "DecodedResponse",
    "ResponseMetrics",
    "SamplingOptions",
    "ToolDescriptor",
    # Scanning
    "Scanner",
    # Decoders
    "decode_messages",
    "decode_tools",
    "decode_options",
    # Encoding
    "format_tools_for_prompt",
    "extract_function_calls",
    "encode_result",
    "encode_embedding",
    "encode_error",
    "write_bounded",
]
