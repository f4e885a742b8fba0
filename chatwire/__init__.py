"""
chatwire - Text codec between a language-model inference engine and its callers.

Decodes chat history, tool definitions and sampling options from JSON text,
and encodes completions (response text, function calls, timing) back to JSON.

Quick Start:
    from chatwire import complete, get_adapter

    adapter = get_adapter("transformers")
    adapter.load("Qwen/Qwen2.5-0.5B-Instruct")
    result_json = complete(
        adapter,
        '[{"role":"user","content":"What is the weather in Paris?"}]',
        '{"temperature":0.2,"max_tokens":128}',
    )

Submodules:
    - chatwire.codec: Decoders, response encoder, scanner
    - chatwire.engine: Adapters, registry and the request boundary
"""

__version__ = "0.1.0"

from chatwire.codec import (
    ChatTurn,
    CodecError,
    Decoded,
    DecodedResponse,
    MalformedInput,
    NumericParseFailure,
    ResponseMetrics,
    SamplingOptions,
    ToolDescriptor,
    decode_messages,
    decode_options,
    decode_tools,
    encode_embedding,
    encode_error,
    encode_result,
    extract_function_calls,
    format_tools_for_prompt,
    write_bounded,
)
from chatwire.engine.boundary import BoundaryConfig, complete, complete_into, embed
from chatwire.engine.registry import get_adapter, list_adapters, register_adapter
from chatwire.engine.types import Completion

__all__ = [
    # Version
    "__version__",
    # Codec types
    "ChatTurn",
    "Decoded",
    "DecodedResponse",
    "ResponseMetrics",
    "SamplingOptions",
    "ToolDescriptor",
    # Errors
    "CodecError",
    "MalformedInput",
    "NumericParseFailure",
    # Codec
    "decode_messages",
    "decode_options",
    "decode_tools",
    "format_tools_for_prompt",
    "extract_function_calls",
    "encode_result",
    "encode_error",
    "encode_embedding",
    "write_bounded",
    # Engine
    "BoundaryConfig",
    "Completion",
    "complete",
    "complete_into",
    "embed",
    "get_adapter",
    "list_adapters",
    "register_adapter",
]
