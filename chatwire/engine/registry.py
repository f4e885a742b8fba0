"""Engine adapter registry.

Maps adapter names to their adapter classes.
"""

from typing import Type

from .adapters.base import BaseAdapter
from .adapters.hf import TransformersAdapter

# Registry mapping adapter names to adapter classes
_ADAPTER_REGISTRY: dict[str, Type[BaseAdapter]] = {
    "transformers": TransformersAdapter,
}


def get_adapter(name: str) -> BaseAdapter:
    """
    Get an adapter instance by name.

    Args:
        name: Registered adapter name (e.g., "transformers").

    Returns:
        A fresh, unloaded adapter instance.

    Raises:
        ValueError: If the name is not registered.
    """
    if name not in _ADAPTER_REGISTRY:
        available = ", ".join(_ADAPTER_REGISTRY.keys())
        raise ValueError(f"Unknown adapter: {name!r}. Available: {available}")
    return _ADAPTER_REGISTRY[name]()


def register_adapter(name: str, adapter_cls: Type[BaseAdapter]) -> None:
    """
    Register a new adapter.

    Args:
        name: Name callers will pass to `get_adapter`.
        adapter_cls: Adapter class (must inherit from BaseAdapter).
    """
    _ADAPTER_REGISTRY[name] = adapter_cls


def list_adapters() -> list[str]:
    """Return list of registered adapter names."""
    return list(_ADAPTER_REGISTRY.keys())
