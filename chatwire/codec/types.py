"""Codec value types.

These types are what the decoders produce and the encoder consumes. They are
independent of the engine adapters and of any HTTP transport.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Generic, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class ChatTurn:
    """One role-tagged message of a conversation, content already unescaped."""

    role: str
    content: str


@dataclass(frozen=True)
class ToolDescriptor:
    """A callable function as exposed to the model.

    `parameters` holds at most one entry, "schema", whose value is the verbatim
    JSON object text of the parameter schema.
    """

    name: str = ""
    description: str = ""
    parameters: dict[str, str] = field(default_factory=dict)

    @property
    def schema(self) -> str | None:
        return self.parameters.get("schema")


@dataclass(frozen=True)
class SamplingOptions:
    """Generation controls for one inference call.

    Notes:
    - temperature/top_p of -1.0 and top_k of 0 mean "use the engine default".
    """

    temperature: float = -1.0
    top_p: float = -1.0
    top_k: int = 0
    max_tokens: int = 100
    stop_sequences: tuple[str, ...] = ()


@dataclass(frozen=True)
class DecodedResponse:
    """Raw model output split into visible text and function-call fragments."""

    response_text: str
    function_calls: tuple[str, ...] = ()
    truncated: bool = False  # An unterminated trailing fragment was dropped


@dataclass(frozen=True)
class ResponseMetrics:
    time_to_first_token_ms: float = 0.0
    total_time_ms: float = 0.0
    tokens_per_second: float = 0.0
    prefill_tokens: int = 0
    decode_tokens: int = 0

    @property
    def total_tokens(self) -> int:
        return self.prefill_tokens + self.decode_tokens


@dataclass(frozen=True)
class Decoded(Generic[T]):
    """Result of a decode call.

    `partial` is set when scanning stopped at a missing required field; `value`
    then holds everything collected before that point. Fatal failures are
    raised as `CodecError` subclasses instead.
    """

    value: T
    partial: bool = False
