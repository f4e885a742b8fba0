"""Base adapter interface for inference engines."""

from abc import ABC, abstractmethod
from typing import Any, Callable

from chatwire.codec.types import ChatTurn, SamplingOptions

from ..types import Completion


class BaseAdapter(ABC):
    """
    Abstract base class for engine adapters.

    The boundary hands every adapter already-decoded turns and options, so an
    adapter never sees wire text.
    """

    @abstractmethod
    def load(self, model_path: str, **kwargs) -> None:
        """
        Load model and tokenizer from the given path or HF repo.

        Args:
            model_path: Local path or HF Hub model identifier.
            **kwargs: Engine-specific loading options (dtype, device, etc.).
        """
        pass

    @abstractmethod
    def complete(
        self,
        turns: list[ChatTurn],
        options: SamplingOptions,
        *,
        on_token: Callable[[str], None] | None = None,
    ) -> Completion:
        """
        Run one completion over a conversation.

        Args:
            turns: Conversation so far, in order. Tool definitions, if any,
                are already embedded in the system turn.
            options: Sampling controls. Sentinel values (-1.0, 0) mean
                "use the engine default".
            on_token: Called with each chunk of generated text as it arrives.

        Returns:
            The raw generated text with token counts and timing.
        """
        pass

    @property
    @abstractmethod
    def model_info(self) -> dict[str, Any]:
        """
        Return metadata about the loaded model.

        Returns:
            Dict with keys like 'model_path', 'device', 'dtype', 'loaded'.
        """
        pass

    def embed(self, text: str) -> list[float]:
        """
        Return a fixed-size embedding vector for `text`.

        Default implementation raises; override in adapters that support it.
        """
        raise NotImplementedError(f"{type(self).__name__} does not support embeddings")

    def stop(self) -> None:
        """
        Ask an in-flight `complete()` to finish early. Safe to call from
        another thread, and a no-op when nothing is generating.

        Default implementation does nothing; override if generation can be
        interrupted.
        """
        pass

    def unload(self) -> None:
        """
        Unload the model and free resources.

        Default implementation does nothing; override if cleanup is needed.
        """
        pass
