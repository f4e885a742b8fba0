from .base import BaseAdapter
from .hf import TransformersAdapter

__all__ = ["BaseAdapter", "TransformersAdapter"]
