import pytest

from chatwire.engine import registry
from chatwire.engine.adapters.hf import TransformersAdapter
from chatwire.engine.registry import get_adapter, list_adapters, register_adapter


def test_get_adapter_returns_fresh_instance():
    a = get_adapter("transformers")
    b = get_adapter("transformers")
    assert isinstance(a, TransformersAdapter)
    assert a is not b


def test_get_adapter_unknown_raises():
    with pytest.raises(ValueError, match="Unknown adapter"):
        get_adapter("nope")


def test_register_adapter(monkeypatch):
    monkeypatch.setattr(registry, "_ADAPTER_REGISTRY", dict(registry._ADAPTER_REGISTRY))

    class OtherAdapter(TransformersAdapter):
        pass

    register_adapter("other", OtherAdapter)
    assert "other" in list_adapters()
    assert isinstance(get_adapter("other"), OtherAdapter)
