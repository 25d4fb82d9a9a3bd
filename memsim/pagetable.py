"""Multi-level page tables mapping page indices to physical frames."""

from __future__ import annotations

from collections import deque
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from typing import TypeVar

_T = TypeVar("_T")


class PageTableError(LookupError):
    """Raised for an invalid page table build or lookup."""


@dataclass
class PageTable:
    """One table: either a list of sub-tables or, at the last level, frames."""

    children: list[PageTable] = field(default_factory=list)
    frames: list[int] = field(default_factory=list)
    is_last_level: bool = False


def build_page_table(frames: Iterable[int], entries_per_page: int, levels: int) -> PageTable:
    """Build a table tree holding ``frames`` in order.

    Tables are only filled while frames remain; once they run out the
    remaining tables are left empty. Unused slots of a last-level table hold 0.
    """
    if entries_per_page < 1:
        raise PageTableError(f"entries per page must be positive, got {entries_per_page}")
    if levels < 1:
        raise PageTableError(f"number of levels must be positive, got {levels}")
    return _build(deque(frames), 1, entries_per_page, levels)


def _build(remaining: deque, level: int, entries: int, levels: int) -> PageTable:
    table = PageTable()
    if not remaining:
        return table
    if level == levels:
        taken = [remaining.popleft() for _ in range(min(entries, len(remaining)))]
        table.frames = taken + [0] * (entries - len(taken))
        table.is_last_level = True
    else:
        table.children = [_build(remaining, level + 1, entries, levels) for _ in range(entries)]
    return table


def _select(items: Sequence[_T], index: int) -> _T:
    if isinstance(index, bool) or not isinstance(index, int) or not 0 <= index < len(items):
        raise PageTableError(f"index {index!r} outside table of {len(items)} entries")
    return items[index]


def lookup_frame(table: PageTable, indices: Sequence[int], levels: int) -> int:
    """Walk the tree with one index per level and return the frame found."""
    if len(indices) != levels:
        raise PageTableError(f"expected {levels} indices, got {len(indices)}")
    node = table
    for index in indices:
        if node.is_last_level:
            return _select(node.frames, indices[-1])
        node = _select(node.children, index)
    raise PageTableError(f"indices {list(indices)} do not reach a last-level table")