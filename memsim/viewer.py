"""Open a terminal window showing a hex dump of a memory or swap file."""

from __future__ import annotations

import shlex
import subprocess


def _open_hexdump(file_path: str) -> subprocess.Popen | None:
    command = f"hexdump -C {shlex.quote(file_path)} | less"
    try:
        return subprocess.Popen(["xterm", "-hold", "-e", "bash", "-c", command])
    except OSError:
        return None


def show_dump(path: str) -> subprocess.Popen | None:
    """Show ``<path>.dmp`` in a terminal; None if no terminal could be started."""
    return _open_hexdump(path + ".dmp")


def show_swap(path: str) -> subprocess.Popen | None:
    """Show the swap file at ``path`` in a terminal; None if none could be started."""
    return _open_hexdump(path)