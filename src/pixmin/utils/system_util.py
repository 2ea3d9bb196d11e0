"""
Utility functions for running optimizer executables and verifying their availability.

Functions:
    - run_cmd: Executes a command with optional bytes on stdin and returns its exit
      code along with its raw standard output and error streams.
    - which_or_raise: Locates a binary on the system's PATH and raises a
      configuration error naming the missing executable if it is unavailable.
"""
import shutil
import subprocess
from typing import Optional, Tuple, List

from pixmin.errors import PluginUnavailableError


def run_cmd(cmd: List[str], data: Optional[bytes] = None) -> Tuple[int, bytes, bytes]:
    """Run a command, feeding `data` on stdin, and return (code, stdout, stderr)."""
    p = subprocess.run(cmd, input=data, stdout=subprocess.PIPE, stderr=subprocess.PIPE)
    return p.returncode, p.stdout, p.stderr


def which_or_raise(binary: str, plugin: str) -> str:
    """Return the full path of `binary`, raising if it is not on PATH."""
    path = shutil.which(binary)
    if path is None:
        raise PluginUnavailableError(plugin, binary)
    return path
