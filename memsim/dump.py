"""Memory dumps: the frames of one process written to a file."""

from __future__ import annotations

import os
from datetime import datetime

from memsim.manager import MemoryManager
from memsim.usermemory import MemoryAccessError


class DumpError(Exception):
    """Raised when a memory dump cannot be produced."""


def _timestamp(moment: datetime) -> str:
    return f"{moment:%Y%m%d_%H%M%S}.{moment.microsecond // 1000:03d}"


def dump_memory(
    manager: MemoryManager,
    pid: int,
    dump_dir: str,
    now: datetime | None = None,
) -> str:
    """Write every frame of ``pid`` in ascending order to a ``.dmp`` file.

    The file is named ``<pid>-<YYYYmmdd_HHMMSS.mmm>.dmp`` inside ``dump_dir``,
    which is created if needed. Returns the path of the file written.
    """
    logger = manager.logger
    logger.info("## PID: %d - Memory Dump solicitado", pid)

    frames = sorted(manager.frames_of(pid))
    if not frames:
        logger.error("DumpMemory: PID=%d sin marcos asignados", pid)
        raise DumpError(f"PID={pid} has no memory assigned")

    try:
        os.makedirs(dump_dir, mode=0o755, exist_ok=True)
    except OSError as exc:
        logger.error("DumpMemory: fallo creando directorio '%s': %s", dump_dir, exc)
        raise DumpError(f"cannot create dump directory {dump_dir!r}: {exc}") from exc

    moment = now if now is not None else datetime.now()
    path = os.path.join(dump_dir, f"{pid}-{_timestamp(moment)}.dmp")

    try:
        with open(path, "wb") as handle:
            for frame in frames:
                try:
                    data = manager.memory.frame_bytes(frame)
                except MemoryAccessError as exc:
                    logger.error("DumpMemory: marco inválido %d: %s", frame, exc)
                    raise DumpError(f"memory out of range while dumping frame {frame}") from exc
                handle.write(data)
                logger.debug(
                    "DumpMemory: PID=%d marco %d volcado (%d bytes)", pid, frame, len(data)
                )
    except OSError as exc:
        logger.error("DumpMemory: fallo escribiendo '%s': %s", path, exc)
        raise DumpError(f"cannot write dump {path!r}: {exc}") from exc

    logger.debug("DumpMemory: fin PID=%d, archivo '%s' creado", pid, path)
    return path