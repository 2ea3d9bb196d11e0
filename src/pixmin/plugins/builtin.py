"""
Built-in optimizer plugins backed by external executables.

Each factory checks that its executable is on PATH when it is constructed and
returns a ``bytes -> bytes`` transform. Transforms leave input in formats they
do not handle untouched, so the default chain can be applied to a mixed batch.
"""
import tempfile
from pathlib import Path

from pixmin.errors import PluginError
from pixmin.utils import system_util
from pixmin.utils.constants import GIF_SIGNATURES, JPEG_SIGNATURE, PNG_SIGNATURE

_STDERR_TAIL = 300


def _is_svg(data: bytes) -> bool:
    head = data[:1024].lstrip()
    return head.startswith(b"<svg") or (head.startswith(b"<?xml") and b"<svg" in head)


def _check(plugin: str, code: int, err: bytes) -> None:
    if code != 0:
        detail = err.decode("utf-8", errors="replace").strip()[-_STDERR_TAIL:]
        raise PluginError(plugin, f"exited with code {code}" + (f": {detail}" if detail else ""))


def _pipe(plugin: str, cmd, data: bytes) -> bytes:
    code, out, err = system_util.run_cmd(cmd, data)
    _check(plugin, code, err)
    return out


def gifsicle(optimization_level: int = 1, interlaced: bool = False):
    binary = system_util.which_or_raise("gifsicle", "gifsicle")
    cmd = [binary, "--no-warnings", f"--optimize={optimization_level}"]
    if interlaced:
        cmd.append("--interlace")

    def transform(data: bytes) -> bytes:
        if not data.startswith(GIF_SIGNATURES):
            return data
        return _pipe("gifsicle", cmd, data)

    return transform


def jpegtran(progressive: bool = False, arithmetic: bool = False):
    binary = system_util.which_or_raise("jpegtran", "jpegtran")
    cmd = [binary, "-copy", "none"]
    cmd.append("-arithmetic" if arithmetic else "-optimize")
    if progressive:
        cmd.append("-progressive")

    def transform(data: bytes) -> bytes:
        if not data.startswith(JPEG_SIGNATURE):
            return data
        return _pipe("jpegtran", cmd, data)

    return transform


def optipng(optimization_level: int = 2):
    # optipng only rewrites files in place, so each call goes through a temp file
    binary = system_util.which_or_raise("optipng", "optipng")

    def transform(data: bytes) -> bytes:
        if not data.startswith(PNG_SIGNATURE):
            return data
        with tempfile.TemporaryDirectory(prefix="pixmin-") as tmp:
            path = Path(tmp) / "image.png"
            path.write_bytes(data)
            code, _, err = system_util.run_cmd([binary, "-quiet", f"-o{optimization_level}", str(path)])
            _check("optipng", code, err)
            return path.read_bytes()

    return transform


def svgo(multipass: bool = False):
    binary = system_util.which_or_raise("svgo", "svgo")
    cmd = [binary, "--input", "-", "--output", "-"]
    if multipass:
        cmd.append("--multipass")

    def transform(data: bytes) -> bytes:
        if not _is_svg(data):
            return data
        return _pipe("svgo", cmd, data)

    return transform


BUILTIN_PLUGINS = {
    "gifsicle": gifsicle,
    "jpegtran": jpegtran,
    "optipng": optipng,
    "svgo": svgo,
}


def register_builtins(registry) -> None:
    """Register every built-in plugin with `registry`."""
    for name, factory in BUILTIN_PLUGINS.items():
        registry.register(name, factory, replace=True)
