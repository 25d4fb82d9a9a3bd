"""User memory: a byte array split into page-sized frames owned by processes."""

from __future__ import annotations

import threading

FREE = -1


class MemoryAccessError(IndexError):
    """Raised for an access outside user memory or a frame that does not exist."""


class UserMemory:
    """Physical user memory together with the map of which process owns each frame."""

    def __init__(self, size: int, page_size: int) -> None:
        if page_size < 1:
            raise ValueError(f"page size must be positive, got {page_size}")
        if size < 0:
            raise ValueError(f"memory size cannot be negative, got {size}")
        self.size = size
        self.page_size = page_size
        self._data = bytearray(size)
        self._owners = [FREE] * (size // page_size)
        self._lock = threading.RLock()

    def frame_count(self) -> int:
        """Total number of frames."""
        return len(self._owners)

    def free_frames(self) -> int:
        """Number of frames not owned by any process."""
        with self._lock:
            return self._owners.count(FREE)

    def frames_needed(self, size: int) -> int:
        """Frames required to hold ``size`` bytes."""
        if size < 0:
            raise ValueError(f"size cannot be negative, got {size}")
        return -(-size // self.page_size)

    def has_space(self, size: int) -> bool:
        """Whether enough free frames exist for ``size`` bytes."""
        return self.frames_needed(size) <= self.free_frames()

    def free_bytes(self) -> int:
        """Bytes held by free frames."""
        return self.free_frames() * self.page_size

    def read(self, address: int, size: int) -> bytes:
        """Read up to ``size`` bytes from ``address``, stopping at the end of memory."""
        with self._lock:
            if not 0 <= address < len(self._data):
                raise MemoryAccessError(f"read address out of range: {address}")
            if size < 0:
                raise MemoryAccessError(f"read size cannot be negative: {size}")
            return bytes(self._data[address:address + size])

    def write(self, address: int, data: bytes) -> None:
        """Write ``data`` starting at ``address``; it must fit entirely."""
        with self._lock:
            end = address + len(data)
            if address < 0 or end > len(self._data):
                raise MemoryAccessError(
                    f"write out of range: start={address}, length={len(data)}, "
                    f"memory size={len(self._data)}"
                )
            self._data[address:end] = data

    def page(self, address: int) -> bytes:
        """Return ``page_size`` bytes starting at ``address``."""
        with self._lock:
            end = address + self.page_size
            if address < 0 or end > len(self._data):
                raise MemoryAccessError(
                    f"page at {address} ends at {end}, beyond memory of {len(self._data)} bytes"
                )
            return bytes(self._data[address:end])

    def occupy_frames(self, pid: int, count: int) -> list[int]:
        """Give ``count`` free frames to ``pid``, lowest first, and zero its frames.

        Returns the frames newly assigned.
        """
        if count < 0:
            raise ValueError(f"frame count cannot be negative, got {count}")
        with self._lock:
            free = [frame for frame, owner in enumerate(self._owners) if owner == FREE]
            if count > len(free):
                raise MemoryAccessError(
                    f"PID {pid} needs {count} frames but only {len(free)} are free"
                )
            assigned = free[:count]
            for frame in assigned:
                self._owners[frame] = pid
            for frame in self.frames_of(pid):
                self._zero(frame)
            return assigned

    def release_frames(self, pid: int) -> list[int]:
        """Free and zero every frame owned by ``pid``; returns the frames released."""
        with self._lock:
            released = self.frames_of(pid)
            for frame in released:
                self._owners[frame] = FREE
                self._zero(frame)
            return released

    def frames_of(self, pid: int) -> list[int]:
        """Frames owned by ``pid`` in ascending order."""
        with self._lock:
            return [frame for frame, owner in enumerate(self._owners) if owner == pid]

    def frame_bytes(self, frame: int) -> bytes:
        """Copy of the contents of one frame."""
        with self._lock:
            start = self._frame_start(frame)
            return bytes(self._data[start:start + self.page_size])

    def load_frame(self, frame: int, data: bytes) -> None:
        """Overwrite one frame with exactly one page of data."""
        if len(data) != self.page_size:
            raise MemoryAccessError(
                f"frame data must be {self.page_size} bytes, got {len(data)}"
            )
        with self._lock:
            start = self._frame_start(frame)
            self._data[start:start + self.page_size] = data

    def _frame_start(self, frame: int) -> int:
        if not 0 <= frame < len(self._owners):
            raise MemoryAccessError(f"frame {frame} out of range")
        return frame * self.page_size

    def _zero(self, frame: int) -> None:
        start = frame * self.page_size
        self._data[start:start + self.page_size] = bytes(self.page_size)