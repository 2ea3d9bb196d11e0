"""Tests for plugin specs, the registry and plugin resolution."""

from __future__ import annotations

import pytest

from pixmin.errors import ConfigurationError, EmptyPluginChainError, PluginNotFoundError
from pixmin.plugins import PluginRegistry, PluginSpec, resolve_plugins


def test_register_rejects_duplicates_unless_replaced(registry):
    with pytest.raises(ValueError):
        registry.register("identity", lambda: (lambda d: d))

    registry.register("identity", lambda: (lambda d: b"x"), replace=True)
    assert registry.create(PluginSpec("identity"))(b"abc") == b"x"


def test_names_are_sorted(registry):
    assert registry.names() == ["boom", "identity", "suffix", "upper"]
    assert "upper" in registry
    assert "missing" not in registry


def test_resolve_preserves_requested_order(registry):
    handles = resolve_plugins(["suffix", "upper"], registry=registry)
    assert [h.name for h in handles] == ["suffix", "upper"]

    data = b"ab"
    for handle in handles:
        data = handle(data)
    assert data == b"AB!"

    reversed_handles = resolve_plugins(["upper", "suffix:text=x"], registry=registry)
    data = b"ab"
    for handle in reversed_handles:
        data = handle(data)
    assert data == b"ABx"


def test_resolve_uses_defaults_when_nothing_requested(registry):
    handles = resolve_plugins([], registry=registry, defaults=("upper", "identity"))
    assert [h.name for h in handles] == ["upper", "identity"]


def test_resolve_rejects_empty_chain(registry):
    with pytest.raises(EmptyPluginChainError):
        resolve_plugins(None, registry=registry, defaults=())


def test_unknown_plugin_message_names_plugin_and_hint(registry):
    with pytest.raises(PluginNotFoundError) as exc:
        resolve_plugins(["upper", "pngquant"], registry=registry)

    message = str(exc.value)
    assert "Unknown plugin: pngquant" in message
    assert "pip install pixmin-pngquant" in message
    assert isinstance(exc.value, ConfigurationError)


def test_spec_parse_coerces_option_values():
    spec = PluginSpec.parse("optipng:optimization_level=5,strip=true,mode=fast")
    assert spec.name == "optipng"
    assert spec.options == {"optimization_level": 5, "strip": True, "mode": "fast"}

    assert PluginSpec.parse("svgo") == PluginSpec("svgo")


@pytest.mark.parametrize("text", ["", ":level=1", "optipng:level"])
def test_spec_parse_rejects_malformed_text(text):
    with pytest.raises(ConfigurationError):
        PluginSpec.parse(text)


def test_bad_factory_options_are_configuration_errors(registry):
    with pytest.raises(ConfigurationError) as exc:
        registry.create(PluginSpec("upper", {"nope": 1}))
    assert "upper" in str(exc.value)


class _FakeEntryPoint:
    def __init__(self, name, obj=None, error=None):
        self.name = name
        self.value = f"fake_module:{name}"
        self._obj = obj
        self._error = error

    def load(self):
        if self._error:
            raise self._error
        return self._obj


def test_entry_point_plugins_are_loaded_on_demand(monkeypatch):
    groups = []

    def fake_entry_points(group):
        groups.append(group)
        return [
            _FakeEntryPoint("other", obj=lambda: (lambda d: d)),
            _FakeEntryPoint("webp", obj=lambda quality=80: (lambda d: d + str(quality).encode())),
        ]

    monkeypatch.setattr("pixmin.plugins.registry.entry_points", fake_entry_points)
    registry = PluginRegistry(entry_point_group="pixmin.plugins")

    handles = resolve_plugins(["webp:quality=50"], registry=registry)
    assert handles[0](b"img") == b"img50"
    assert groups == ["pixmin.plugins"]
    assert "webp" in registry


def test_broken_entry_point_is_reported_as_unknown(monkeypatch):
    monkeypatch.setattr(
        "pixmin.plugins.registry.entry_points",
        lambda group: [_FakeEntryPoint("webp", error=ImportError("no module"))],
    )
    registry = PluginRegistry()

    with pytest.raises(PluginNotFoundError):
        resolve_plugins(["webp"], registry=registry)
