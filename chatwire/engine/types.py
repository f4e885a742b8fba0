"""Engine result types.

These types are produced by adapters and consumed by the boundary. They are
independent of any HTTP/API layer.
"""

from __future__ import annotations

from dataclasses import dataclass

from chatwire.codec.types import ResponseMetrics


@dataclass(frozen=True)
class Completion:
    """Raw output of one inference pass plus its timing."""

    text: str
    prompt_tokens: int = 0
    completion_tokens: int = 0
    time_to_first_token_ms: float = 0.0
    total_time_ms: float = 0.0

    @property
    def tokens_per_second(self) -> float:
        # Decode throughput: tokens produced after prefill over the time spent producing them.
        decode_s = (self.total_time_ms - self.time_to_first_token_ms) / 1000.0
        if decode_s <= 0 or self.completion_tokens <= 0:
            return 0.0
        return self.completion_tokens / decode_s

    def metrics(self) -> ResponseMetrics:
        return ResponseMetrics(
            time_to_first_token_ms=self.time_to_first_token_ms,
            total_time_ms=self.total_time_ms,
            tokens_per_second=self.tokens_per_second,
            prefill_tokens=self.prompt_tokens,
            decode_tokens=self.completion_tokens,
        )
