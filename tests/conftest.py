"""Shared pytest fixtures for the dispatch and CLI tests."""

from __future__ import annotations

import io

import pytest

from pixmin.errors import PluginError
from pixmin.plugins import REGISTRY, PluginHandle, PluginRegistry


def _identity():
    return lambda data: data


def _upper():
    return lambda data: data.upper()


def _suffix(text="!"):
    return lambda data: data + text.encode()


def _boom(match="bad"):
    def transform(data):
        if match.encode() in data:
            raise PluginError("boom", "cannot handle this image")
        return data

    return transform


STUB_FACTORIES = {
    "identity": _identity,
    "upper": _upper,
    "suffix": _suffix,
    "boom": _boom,
}


@pytest.fixture()
def registry() -> PluginRegistry:
    reg = PluginRegistry(entry_point_group=None)
    for name, factory in STUB_FACTORIES.items():
        reg.register(name, factory)
    return reg


@pytest.fixture()
def stub_registry(monkeypatch):
    """Swap the global registry's plugins for in-process stubs."""
    monkeypatch.setattr(REGISTRY, "_factories", dict(STUB_FACTORIES))
    monkeypatch.setattr(REGISTRY, "_entry_point_group", None)
    return REGISTRY


@pytest.fixture()
def upper_chain():
    return [PluginHandle("upper", lambda data: data.upper()), PluginHandle("suffix", lambda data: data + b"!")]


@pytest.fixture()
def images(tmp_path, monkeypatch):
    """A small tree of fake images under tmp_path/images; cwd is tmp_path."""
    root = tmp_path / "images"
    (root / "icons").mkdir(parents=True)
    (root / "a.png").write_bytes(b"png-a")
    (root / "b.jpg").write_bytes(b"jpg-b")
    (root / "icons" / "c.png").write_bytes(b"png-c")
    monkeypatch.chdir(tmp_path)
    return root


class FakeStdin:
    def __init__(self, data: bytes = b"", tty: bool = False):
        self.buffer = io.BytesIO(data)
        self._tty = tty

    def isatty(self):
        return self._tty


@pytest.fixture()
def fake_stdin():
    return FakeStdin
