"""Per-process usage counters kept by the memory module."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class ProcessMetrics:
    """Counters of what a process asked of memory during its life."""

    table_accesses: int = 0
    instructions_requested: int = 0
    swap_outs: int = 0
    swap_ins: int = 0
    memory_reads: int = 0
    memory_writes: int = 0

    def add_table_access(self, levels: int) -> None:
        """Count one page-table walk, which touches one table per level."""
        if levels < 0:
            raise ValueError(f"number of levels cannot be negative, got {levels}")
        self.table_accesses += levels

    def summary(self, pid: int) -> str:
        """The line logged when the process is destroyed."""
        return (
            f"## PID: {pid} - Proceso Destruido - Métricas - "
            f"Acc.T.Pag: {self.table_accesses}; "
            f"Inst.Sol.: {self.instructions_requested}; "
            f"SWAP: {self.swap_outs}; "
            f"Mem.Prin.: {self.swap_ins}; "
            f"Lec.Mem.: {self.memory_reads}; "
            f"Esc.Mem.: {self.memory_writes}"
        )


def table_accesses(levels: int, frame_count: int) -> int:
    """Number of table accesses needed to reach ``frame_count`` frames."""
    return levels * frame_count