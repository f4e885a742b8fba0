"""Request boundary: wire text in, result JSON out.

`complete()` is the entry point a transport calls for generation. It decodes the
three request strings, runs the adapter, and encodes the outcome. `embed()` does
the same for embeddings. Neither raises: every failure is logged and turned
into an error object via `encode_error`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable

from chatwire.codec import (
    ChatTurn,
    CodecError,
    MalformedInput,
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

from .adapters.base import BaseAdapter

logger = logging.getLogger(__name__)

BUFFER_TOO_SMALL = "Response buffer too small"

# Smallest buffer that can still report an overflow: the error object plus its NUL.
MIN_RESPONSE_BYTES = len(encode_error(BUFFER_TOO_SMALL).encode("utf-8")) + 1

DEFAULT_TOOLS_INSTRUCTION = (
    "You have access to the following tools:\n"
    "[\n{tools}\n]\n\n"
    "To call a tool, reply with a JSON object of the form "
    '{"function_call": {"name": "<tool name>", "arguments": {<arguments>}}}.'
)


@dataclass(frozen=True)
class BoundaryConfig:
    """Configuration for the request boundary.

    Notes:
    - `max_response_bytes` is the capacity of the fixed-size response buffer
      used by `complete_into` callers (None = no limit).
    - `tools_instruction` must contain the `{tools}` placeholder.
    """

    max_response_bytes: int | None = None
    tools_instruction: str = DEFAULT_TOOLS_INSTRUCTION

    def validate(self) -> None:
        if self.max_response_bytes is not None and self.max_response_bytes < MIN_RESPONSE_BYTES:
            raise ValueError(f"'max_response_bytes' must be >= {MIN_RESPONSE_BYTES}.")
        if "{tools}" not in self.tools_instruction:
            raise ValueError("'tools_instruction' must contain '{tools}'.")


def build_prompt_turns(
    turns: list[ChatTurn],
    tools: list[ToolDescriptor],
    instruction: str = DEFAULT_TOOLS_INSTRUCTION,
) -> list[ChatTurn]:
    """Embed tool definitions into the system turn, adding one if needed."""
    if not tools:
        return list(turns)
    tools_text = instruction.replace("{tools}", format_tools_for_prompt(tools))
    if turns and turns[0].role == "system":
        system = ChatTurn(role="system", content=f"{turns[0].content}\n\n{tools_text}")
        return [system, *turns[1:]]
    return [ChatTurn(role="system", content=tools_text), *turns]


def complete(
    adapter: BaseAdapter,
    messages_json: str,
    options_json: str = "",
    tools_json: str = "",
    *,
    config: BoundaryConfig | None = None,
    on_token: Callable[[str], None] | None = None,
) -> str:
    """Run one request end to end and return the result (or error) JSON."""
    config = config or BoundaryConfig()
    try:
        messages = decode_messages(messages_json)
        if messages.partial:
            logger.warning("Using %d message(s) from a partially decoded history", len(messages.value))
        if not messages.value:
            raise MalformedInput("No messages provided")
        options = decode_options(options_json).value
        tools = decode_tools(tools_json).value
    except CodecError as exc:
        logger.warning("Rejecting request: %s", exc)
        return encode_error(str(exc))

    turns = build_prompt_turns(messages.value, tools, config.tools_instruction)
    try:
        completion = adapter.complete(turns, options, on_token=on_token)
    except Exception as exc:
        logger.exception("Completion failed")
        return encode_error(str(exc) or type(exc).__name__)

    decoded = extract_function_calls(completion.text)
    if decoded.truncated:
        logger.info("Dropped an unterminated function call from the model output")
    return encode_result(decoded.response_text, decoded.function_calls, completion.metrics())


def complete_into(
    buffer: bytearray | memoryview,
    adapter: BaseAdapter,
    messages_json: str,
    options_json: str = "",
    tools_json: str = "",
    *,
    config: BoundaryConfig | None = None,
    on_token: Callable[[str], None] | None = None,
) -> bool:
    """Like `complete()`, but writes into a fixed-capacity buffer.

    Returns False if the result did not fit. In that case a short error object
    is written instead when it fits, and otherwise the buffer is left untouched.
    """
    document = complete(
        adapter,
        messages_json,
        options_json,
        tools_json,
        config=config,
        on_token=on_token,
    )
    if write_bounded(document, buffer):
        return True
    logger.warning("Response of %d bytes does not fit a %d-byte buffer", len(document.encode("utf-8")), len(buffer))
    write_bounded(encode_error(BUFFER_TOO_SMALL), buffer)
    return False


def embed(adapter: BaseAdapter, text: str) -> str:
    """Embed `text` and return the embedding (or error) JSON. Never raises."""
    try:
        return encode_embedding(adapter.embed(text))
    except Exception as exc:
        logger.exception("Embedding failed")
        return encode_error(str(exc) or type(exc).__name__)
