"""Swap file holding the pages of suspended processes.

Each suspension appends one block of this form::

    PID: <pid>
    Cantidad Paginas:<N>
    <empty line>
    Pagina1:
    <page bytes>
    ...

A block without pages ends with one extra empty line instead.
"""

from __future__ import annotations

import os
import re
import threading
from collections.abc import Iterable, Iterator

_LINE = re.compile(rb"[^\n]*\n|[^\n]+")
_COUNT = re.compile(rb"[+-]?[0-9]+")
_COUNT_PREFIX = b"Cantidad Paginas:"
_PID_PREFIX = b"PID: "


class SwapError(Exception):
    """Raised when the swap file cannot be written, read or parsed."""


def _lines(data: bytes) -> Iterator[bytes]:
    """Split bytes into lines that keep their trailing newline."""
    for match in _LINE.finditer(data):
        yield match.group(0)


class SwapFile:
    """Append-only store of process blocks on disk."""

    def __init__(self, path: str) -> None:
        self.path = path
        self._lock = threading.Lock()

    def clear(self) -> bool:
        """Delete the swap file; returns whether there was one to delete."""
        with self._lock:
            try:
                os.remove(self.path)
            except FileNotFoundError:
                return False
            except OSError as exc:
                raise SwapError(f"cannot remove swap file {self.path!r}: {exc}") from exc
            return True

    def append_block(self, pid: int, pages: Iterable[bytes]) -> None:
        """Append the block of ``pid`` holding ``pages`` in order."""
        pages = [bytes(page) for page in pages]
        parts = [f"PID: {pid}\n".encode(), _COUNT_PREFIX + f"{len(pages)}\n".encode(), b"\n"]
        if not pages:
            parts.append(b"\n")
        for number, page in enumerate(pages, start=1):
            parts.append(f"Pagina{number}:\n".encode())
            parts.append(page)
            parts.append(b"\n")
        with self._lock:
            try:
                with open(self.path, "ab") as handle:
                    handle.write(b"".join(parts))
            except OSError as exc:
                raise SwapError(f"cannot write swap file {self.path!r}: {exc}") from exc

    def read_block(self, pid: int, skip: int) -> bytes:
        """Return the block of ``pid`` found after passing ``skip`` earlier ones."""
        with self._lock:
            try:
                with open(self.path, "rb") as handle:
                    content = handle.read()
            except OSError as exc:
                raise SwapError(f"cannot read swap file {self.path!r}: {exc}") from exc

        marker = f"PID: {pid}".encode()
        lines = _lines(content)
        seen = 0
        while seen <= skip:
            line = next(lines, None)
            if line is None:
                raise SwapError(f"block {skip + 1} of PID {pid} not found in swap file")
            if line.startswith(marker):
                seen += 1

        block = [f"PID: {pid}\n".encode()]
        for line in lines:
            if line.startswith(_PID_PREFIX):
                break
            block.append(line)
        return b"".join(block)


class _Cursor:
    """Reads lines and fixed-size chunks from a byte string."""

    def __init__(self, data: bytes) -> None:
        self._data = data
        self._pos = 0

    def line(self, what: str) -> bytes:
        end = self._data.find(b"\n", self._pos)
        if end < 0:
            raise SwapError(f"cannot read {what}: unexpected end of block")
        line = self._data[self._pos:end + 1]
        self._pos = end + 1
        return line

    def exactly(self, size: int, what: str) -> bytes:
        chunk = self._data[self._pos:self._pos + size]
        if len(chunk) != size:
            raise SwapError(f"cannot read {what}: expected {size} bytes, got {len(chunk)}")
        self._pos += size
        return chunk

    def skip_newline(self) -> None:
        if self._data[self._pos:self._pos + 1] == b"\n":
            self._pos += 1


def parse_block(block: bytes, page_size: int) -> tuple[int, bytes]:
    """Parse a block into its page count and the concatenated page bytes."""
    cursor = _Cursor(block)
    cursor.line("PID header")
    header = cursor.line("page count header").strip()
    if not header.startswith(_COUNT_PREFIX):
        raise SwapError(f"invalid header {header.decode(errors='replace')!r}")
    number = header[len(_COUNT_PREFIX):].strip()
    if not _COUNT.fullmatch(number):
        raise SwapError(f"invalid page count {number.decode(errors='replace')!r}")
    page_count = int(number)
    if page_count < 0:
        raise SwapError(f"page count cannot be negative: {page_count}")
    cursor.skip_newline()

    pages = []
    for index in range(page_count):
        cursor.line(f"label of page {index}")
        pages.append(cursor.exactly(page_size, f"data of page {index}"))
        cursor.skip_newline()
    return page_count, b"".join(pages)