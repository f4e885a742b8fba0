"""Adapter for Hugging Face Transformers causal language models."""

from __future__ import annotations

import logging
import threading
import time
from typing import TYPE_CHECKING, Any, Callable

from chatwire.codec.types import ChatTurn, SamplingOptions

from ..types import Completion
from .base import BaseAdapter

if TYPE_CHECKING:
    import torch

logger = logging.getLogger(__name__)


class TransformersAdapter(BaseAdapter):
    """
    Adapter for any chat model loadable with `AutoModelForCausalLM`.

    Prompts are built with the tokenizer's chat template. Generation runs in a
    background thread and is consumed through `TextIteratorStreamer`, which is
    what lets us measure time to first token and forward text chunks to an
    `on_token` callback.

    Thread Safety:
        This adapter is NOT thread-safe. Do not call `complete()` concurrently
        on the same instance; the HTTP layer serializes access with a lock.

    Example:
        >>> adapter = TransformersAdapter()
        >>> adapter.load("Qwen/Qwen2.5-0.5B-Instruct", device="cpu")
        >>> adapter.complete([ChatTurn("user", "Hi!")], SamplingOptions()).text
    """

    def __init__(self) -> None:
        self._model = None
        self._tokenizer = None
        self._model_path: str | None = None
        self._device: str = "cpu"
        self._dtype = None
        self._stop_requested = threading.Event()

    @property
    def model(self):
        """Access the underlying model (for advanced use cases)."""
        return self._model

    @property
    def tokenizer(self):
        return self._tokenizer

    @property
    def model_info(self) -> dict[str, Any]:
        return {
            "model_path": self._model_path,
            "device": self._device,
            "dtype": str(self._dtype),
            "loaded": self._model is not None,
        }

    def load(self, model_path: str, **kwargs) -> None:
        """Load a causal LM and its tokenizer.

        Args:
            model_path: Path to the model (local or HF hub).
            device: Device / device_map (default: "cpu").
            dtype: Torch dtype (default: torch.float32).
            trust_remote_code: Passed to from_pretrained() (default: False).
            **kwargs: Additional kwargs passed to the model's from_pretrained().
        """
        import torch
        from transformers import AutoModelForCausalLM, AutoTokenizer

        self._model_path = model_path
        self._device = kwargs.pop("device", "cpu")
        self._dtype = kwargs.pop("dtype", torch.float32)
        trust_remote_code = kwargs.pop("trust_remote_code", False)

        self._tokenizer = AutoTokenizer.from_pretrained(
            model_path,
            trust_remote_code=trust_remote_code,
        )
        self._model = AutoModelForCausalLM.from_pretrained(
            model_path,
            torch_dtype=self._dtype,
            device_map=self._device,
            trust_remote_code=trust_remote_code,
            **kwargs,
        )
        self._model.eval()
        logger.info("Loaded %s on %s (%s)", model_path, self._device, self._dtype)

    def unload(self) -> None:
        """Unload the model and free accelerator memory."""
        import gc
        import torch

        del self._model
        del self._tokenizer
        self._model = None
        self._tokenizer = None

        gc.collect()
        if torch.cuda.is_available():
            torch.cuda.empty_cache()

    def complete(
        self,
        turns: list[ChatTurn],
        options: SamplingOptions,
        *,
        on_token: Callable[[str], None] | None = None,
    ) -> Completion:
        self._ensure_loaded()

        import torch
        from transformers import StoppingCriteria, StoppingCriteriaList, TextIteratorStreamer

        t0 = time.perf_counter()
        messages = [{"role": turn.role, "content": turn.content} for turn in turns]
        input_ids = self._tokenizer.apply_chat_template(
            messages,
            add_generation_prompt=True,
            return_tensors="pt",
        ).to(self._model.device)
        prompt_len = int(input_ids.shape[1])

        streamer = TextIteratorStreamer(self._tokenizer, skip_prompt=True, skip_special_tokens=True)
        gen_kwargs = self._generation_kwargs(options)

        stop_requested = self._stop_requested
        stop_requested.clear()

        class _StopOnRequest(StoppingCriteria):
            def __call__(self, input_ids, scores, **kwargs):
                return torch.full(
                    (input_ids.shape[0],),
                    stop_requested.is_set(),
                    dtype=torch.bool,
                    device=input_ids.device,
                )

        gen_kwargs["stopping_criteria"] = StoppingCriteriaList([_StopOnRequest()])
        outputs: list[torch.Tensor] = []
        errors: list[BaseException] = []

        def _run_generate() -> None:
            try:
                with torch.no_grad():
                    outputs.append(
                        self._model.generate(input_ids=input_ids, streamer=streamer, **gen_kwargs)
                    )
            except Exception as exc:
                errors.append(exc)
                # generate() never reached end(); unblock the consumer.
                streamer.end()

        thread = threading.Thread(target=_run_generate, daemon=True)
        thread.start()

        first_token_at: float | None = None
        chunks: list[str] = []
        try:
            for chunk in streamer:
                if not chunk:
                    continue
                if first_token_at is None:
                    first_token_at = time.perf_counter()
                chunks.append(chunk)
                if on_token is not None:
                    on_token(chunk)
        finally:
            thread.join()

        if errors:
            raise errors[0]

        end = time.perf_counter()
        completion_tokens = int(outputs[0].shape[1]) - prompt_len if outputs else 0
        text = _cut_at_stop_sequence("".join(chunks), options.stop_sequences)
        ttft = first_token_at if first_token_at is not None else end
        return Completion(
            text=text,
            prompt_tokens=prompt_len,
            completion_tokens=max(completion_tokens, 0),
            time_to_first_token_ms=(ttft - t0) * 1000.0,
            total_time_ms=(end - t0) * 1000.0,
        )

    def stop(self) -> None:
        """Ask the running `complete()` to stop after the current token."""
        self._stop_requested.set()

    def embed(self, text: str) -> list[float]:
        """Mean-pool the last hidden layer over the tokens of `text`."""
        self._ensure_loaded()

        import torch

        encoded = self._tokenizer(text, return_tensors="pt").to(self._model.device)
        with torch.no_grad():
            out = self._model(**encoded, output_hidden_states=True)

        hidden = out.hidden_states[-1][0]  # (seq, dim)
        mask = encoded["attention_mask"][0].unsqueeze(-1).to(hidden.dtype)
        pooled = (hidden * mask).sum(dim=0) / mask.sum().clamp(min=1)
        return pooled.float().cpu().tolist()

    def _ensure_loaded(self) -> None:
        if self._model is None or self._tokenizer is None:
            raise RuntimeError("Model not loaded. Call load() first.")

    def _generation_kwargs(self, options: SamplingOptions) -> dict[str, Any]:
        """Map sampling options onto generate() kwargs.

        Sentinel values are left out so the model's generation_config applies.
        """
        pad_token_id = self._tokenizer.pad_token_id or self._tokenizer.eos_token_id
        kwargs: dict[str, Any] = {
            "max_new_tokens": int(options.max_tokens),
            "pad_token_id": pad_token_id,
            "use_cache": True,
        }
        if options.temperature >= 0:
            do_sample = options.temperature > 0
            kwargs["do_sample"] = do_sample
            if do_sample:
                kwargs["temperature"] = float(options.temperature)
        if options.top_p >= 0:
            kwargs["top_p"] = float(options.top_p)
        if options.top_k > 0:
            kwargs["top_k"] = int(options.top_k)
        if options.stop_sequences:
            kwargs["stop_strings"] = list(options.stop_sequences)
            kwargs["tokenizer"] = self._tokenizer
        return kwargs


def _cut_at_stop_sequence(text: str, stop_sequences: tuple[str, ...]) -> str:
    """Drop the earliest stop sequence and everything after it."""
    cut = len(text)
    for stop in stop_sequences:
        if not stop:
            continue
        i = text.find(stop)
        if i != -1:
            cut = min(cut, i)
    return text[:cut]
