"""Processes held by the memory module: creation, access, swapping and teardown."""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

from memsim.config import MemoryConfig
from memsim.metrics import ProcessMetrics
from memsim.models import Instruction
from memsim.pagetable import PageTable, build_page_table, lookup_frame
from memsim.swap import SwapError, SwapFile, parse_block
from memsim.usermemory import UserMemory


class ProcessError(LookupError):
    """Raised for an unknown process or a request it cannot satisfy."""


@dataclass
class MemoryProcess:
    """A process known to memory, with its script and usage counters."""

    pid: int
    size: int
    path: str
    instructions: tuple[Instruction, ...] = ()
    in_swap: bool = False
    metrics: ProcessMetrics = field(default_factory=ProcessMetrics)


def load_instructions(path: str) -> list[Instruction]:
    """Read a script: one instruction per non-blank line, fields split on whitespace."""
    try:
        with open(path, encoding="utf-8") as handle:
            lines = handle.read().splitlines()
    except OSError as exc:
        raise ProcessError(f"cannot read instructions from {path!r}: {exc}") from exc
    instructions = []
    for line in lines:
        parts = line.split()
        if parts:
            instructions.append(Instruction(parts[0], tuple(parts[1:])))
    return instructions


class MemoryManager:
    """User memory, page tables, swap and the processes that use them."""

    def __init__(self, config: MemoryConfig, logger: logging.Logger | None = None) -> None:
        self.config = config
        self.logger = logger or logging.getLogger(__name__)
        self.memory = UserMemory(config.memory_size, config.page_size)
        self.swap = SwapFile(config.swap_path)
        self._processes: dict[int, MemoryProcess] = {}
        self._tables: dict[int, PageTable] = {}
        self._lock = threading.RLock()

    def _build_table(self, pid: int) -> None:
        self._tables[pid] = build_page_table(
            self.memory.frames_of(pid),
            self.config.entries_per_page,
            self.config.number_of_levels,
        )

    def create_process(
        self, pid: int, size: int, instructions: Iterable[Instruction], path: str
    ) -> MemoryProcess:
        """Register a process, reserve its frames and build its page table."""
        with self._lock:
            if pid in self._processes:
                raise ProcessError(f"PID {pid} already exists")
            process = MemoryProcess(
                pid=pid,
                size=size,
                path=self.config.scripts_path + path,
                instructions=tuple(instructions),
            )
            if size > 0:
                self.memory.occupy_frames(pid, self.memory.frames_needed(size))
            self._processes[pid] = process
            self._build_table(pid)
            self.logger.info("## PID: %d - Proceso Creado - Tamaño: %d", pid, size)
            return process

    def find_process(self, pid: int) -> MemoryProcess:
        """The process with ``pid``."""
        with self._lock:
            try:
                return self._processes[pid]
            except KeyError:
                raise ProcessError(f"PID {pid} does not exist") from None

    def fetch_instruction(self, pid: int, pc: int) -> Instruction:
        """Instruction number ``pc`` of the process script."""
        with self._lock:
            process = self.find_process(pid)
            count = len(process.instructions)
            if not 0 <= pc < count:
                raise ProcessError(f"pc {pc} out of range [0,{count}) for PID {pid}")
            process.metrics.instructions_requested += 1
            instruction = process.instructions[pc]
        self.logger.info(
            "## PID: %d - Obtener instrucción: %d - Operación: %s - Argumentos: %s",
            pid, pc, instruction.operation, list(instruction.arguments),
        )
        return instruction

    def read(self, pid: int, address: int, size: int) -> bytes:
        """Read user memory on behalf of ``pid``."""
        with self._lock:
            process = self._processes.get(pid)
            if process is not None:
                process.metrics.memory_reads += 1
            data = self.memory.read(address, size)
        self.logger.info(
            "## PID: %d - Lectura - Dir. Física: %d - Tamaño: %d", pid, address, len(data)
        )
        return data

    def write(self, pid: int, address: int, data: bytes) -> None:
        """Write user memory on behalf of ``pid``."""
        with self._lock:
            process = self._processes.get(pid)
            if process is not None:
                process.metrics.memory_writes += 1
            self.memory.write(address, data)
        self.logger.info(
            "## PID: %d - Escritura - Dir. Física: %d - Tamaño: %d", pid, address, len(data)
        )

    def page(self, address: int) -> bytes:
        """One page of user memory starting at ``address``."""
        return self.memory.page(address)

    def frame_for(self, pid: int, indices: Sequence[int]) -> int:
        """Walk the page table of ``pid`` and return the frame it maps to."""
        levels = self.config.number_of_levels
        with self._lock:
            table = self._tables.get(pid)
            if table is None:
                raise ProcessError(f"PID {pid} has no page table")
            frame = lookup_frame(table, indices, levels)
            process = self._processes.get(pid)
            if process is not None:
                process.metrics.add_table_access(levels)
        self.logger.debug("Marco: PID=%d, indices=%s -> marco=%d", pid, list(indices), frame)
        return frame

    def frames_of(self, pid: int) -> list[int]:
        """Frames currently owned by ``pid``."""
        return self.memory.frames_of(pid)

    def free_bytes(self) -> int:
        """Bytes of user memory not owned by any process."""
        return self.memory.free_bytes()

    def finalize(self, pid: int) -> MemoryProcess | None:
        """Free everything held by ``pid``; returns the process, or None if unknown."""
        with self._lock:
            self.memory.release_frames(pid)
            self._tables.pop(pid, None)
            process = self._processes.pop(pid, None)
        if process is None:
            self.logger.error("FinalizarProceso: PID=%d no encontrado para métricas", pid)
            return None
        self.logger.info(process.metrics.summary(pid))
        return process

    def suspend(self, pid: int) -> None:
        """Move the pages of ``pid`` to swap and free its frames."""
        with self._lock:
            process = self.find_process(pid)
            process.metrics.swap_outs += 1
            process.in_swap = True
            frames = self.memory.frames_of(pid)
            self.swap.append_block(pid, (self.memory.frame_bytes(f) for f in frames))
            self.memory.release_frames(pid)
        self.logger.debug("SuspenderProceso: PID=%d guardado en swap", pid)

    def resume(self, pid: int) -> None:
        """Bring the pages of ``pid`` back from swap into fresh frames."""
        with self._lock:
            process = self.find_process(pid)
            block = self.swap.read_block(pid, process.metrics.swap_outs - 1)
            page_count, data = parse_block(block, self.config.page_size)
            self.memory.occupy_frames(pid, self.memory.frames_needed(process.size))
            frames = self.memory.frames_of(pid)
            if len(frames) < page_count:
                self.memory.release_frames(pid)
                raise SwapError(
                    f"PID {pid} expected {page_count} frames, found {len(frames)}"
                )
            page_size = self.config.page_size
            for number, frame in enumerate(frames[:page_count]):
                self.memory.load_frame(
                    frame, data[number * page_size:(number + 1) * page_size]
                )
            self._build_table(pid)
            process.metrics.swap_ins += 1
            process.in_swap = False
        self.logger.debug("DesuspenderProceso: PID=%d recuperado de swap", pid)

    def request_resume(self, pid: int) -> None:
        """Resume ``pid`` if enough free memory exists for it."""
        with self._lock:
            process = self.find_process(pid)
            if not self.memory.has_space(process.size):
                raise ProcessError(f"not enough free memory for PID {pid}")
            self.resume(pid)

    def clear_swap(self) -> bool:
        """Remove the swap file; returns whether one existed."""
        removed = self.swap.clear()
        if removed:
            self.logger.debug("Swap previo eliminado")
        else:
            self.logger.debug("LimpiarSwap: no había swap previo")
        return removed