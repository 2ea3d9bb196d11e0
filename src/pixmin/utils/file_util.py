"""
Glob expansion and path helpers for resolving inputs and mirroring them
under an output directory.
"""
import glob
import os
from pathlib import Path
from typing import Iterable, List, Tuple

_MAGIC_CHARS = set("*?[")


def has_magic(pattern: str) -> bool:
    """Return True if `pattern` contains glob wildcards."""
    return any(c in _MAGIC_CHARS for c in pattern)


def static_base(pattern: str) -> Path:
    """
    Return the leading directory of `pattern` that contains no wildcards.

    For a plain file path this is the file's parent directory, so
    ``images/a.png`` and ``images/**/*.png`` both have base ``images``.
    """
    parts = Path(pattern).parts
    static: List[str] = []
    for part in parts[:-1]:
        if has_magic(part):
            break
        static.append(part)
    return Path(*static) if static else Path(".")


def expand_patterns(patterns: Iterable[str]) -> Tuple[List[Tuple[Path, Path]], List[str]]:
    """
    Expand paths and glob patterns into concrete existing files.

    Directories are excluded, order follows the patterns (matches of a single
    pattern are sorted), and a file matched by several patterns is kept once.

    Returns:
        A tuple of ``([(file, base), ...], unmatched_patterns)`` where `base`
        is the static directory of the pattern that produced `file`.
    """
    found: List[Tuple[Path, Path]] = []
    seen = set()
    unmatched: List[str] = []

    for pattern in patterns:
        expanded = os.path.expanduser(pattern)
        if has_magic(expanded):
            matches = sorted(glob.glob(expanded, recursive=True))
        else:
            matches = [expanded] if os.path.exists(expanded) else []

        files = [Path(m) for m in matches if os.path.isfile(m)]
        if not files:
            unmatched.append(pattern)
            continue

        base = static_base(expanded)
        for f in files:
            key = f.resolve()
            if key in seen:
                continue
            seen.add(key)
            found.append((f, base))

    return found, unmatched


def common_base(bases: Iterable[Path]) -> Path:
    """
    Return the deepest directory containing every base in `bases`.

    Paths are made absolute without following symlinks. With no bases, or
    bases on different drives, the current directory is used.
    """
    absolute = [os.path.abspath(b) for b in bases]
    if not absolute:
        return Path.cwd()
    try:
        return Path(os.path.commonpath(absolute))
    except ValueError:
        return Path.cwd()


def mirror_path(src: Path, base: Path, dest_dir: Path) -> Path:
    """Mirror `src`'s path relative to `base` under `dest_dir`."""
    rel = os.path.relpath(os.path.abspath(src), os.path.abspath(base))
    if rel == os.pardir or rel.startswith(os.pardir + os.sep):
        rel = src.name
    return dest_dir / rel
