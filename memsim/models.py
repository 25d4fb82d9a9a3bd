"""Messages exchanged between the memory module and its peers."""

from __future__ import annotations

import base64
import binascii
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import timedelta
from enum import Enum
from typing import Any


class State(str, Enum):
    """Scheduling state of a process."""

    NEW = "NEW"
    READY = "READY"
    EXEC = "EXEC"
    BLOCKED = "BLOCKED"
    SUSP_BLOCKED = "SUSP_BLOCKED"
    SUSP_READY = "SUSP_READY"
    EXIT = "EXIT"


def _object(data: Any) -> Mapping:
    if not isinstance(data, Mapping):
        raise ValueError(f"expected a JSON object, got {type(data).__name__}")
    return data


def _lookup(data: Mapping, key: str) -> Any:
    """Value for key (case-insensitive fallback), or None if absent."""
    if key in data:
        return data[key]
    lowered = key.lower()
    for name, value in data.items():
        if isinstance(name, str) and name.lower() == lowered:
            return value
    return None


def _int(data: Mapping, key: str) -> int:
    value = _lookup(data, key)
    if value is None:
        return 0
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"field {key!r} must be an integer, got {value!r}")
    return value


def _str(data: Mapping, key: str) -> str:
    value = _lookup(data, key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValueError(f"field {key!r} must be a string, got {value!r}")
    return value


def _bytes(data: Mapping, key: str) -> bytes:
    value = _lookup(data, key)
    if value is None:
        return b""
    if not isinstance(value, str):
        raise ValueError(f"field {key!r} must be a base64 string, got {value!r}")
    try:
        return base64.b64decode(value, validate=True)
    except binascii.Error as exc:
        raise ValueError(f"field {key!r} is not valid base64: {exc}") from exc


@dataclass(frozen=True)
class Instruction:
    """One line of a process script: an operation and its arguments."""

    operation: str
    arguments: tuple[str, ...] = ()

    @classmethod
    def from_dict(cls, data: Any) -> Instruction:
        data = _object(data)
        args = _lookup(data, "argumentos")
        if args is None:
            args = []
        if not isinstance(args, list) or not all(isinstance(a, str) for a in args):
            raise ValueError(f"field 'argumentos' must be a list of strings, got {args!r}")
        return cls(_str(data, "operacion"), tuple(args))

    def to_dict(self) -> dict:
        return {"operacion": self.operation, "argumentos": list(self.arguments)}


@dataclass(frozen=True)
class Message:
    """A plain text message."""

    text: str

    def to_dict(self) -> dict:
        return {"mensaje": self.text}


@dataclass(frozen=True)
class Handshake:
    """Address a module announces to another."""

    port: int
    ip: str

    @classmethod
    def from_dict(cls, data: Any) -> Handshake:
        data = _object(data)
        return cls(_int(data, "Puerto"), _str(data, "IP"))

    def to_dict(self) -> dict:
        return {"Puerto": self.port, "IP": self.ip}


@dataclass(frozen=True)
class ProcessRequest:
    """Request to load a new process into memory."""

    pid: int
    size: int
    path: str

    @classmethod
    def from_dict(cls, data: Any) -> ProcessRequest:
        data = _object(data)
        return cls(_int(data, "PID"), _int(data, "Tamanio"), _str(data, "PATH"))


@dataclass(frozen=True)
class WriteRequest:
    """Request to write bytes at a physical address."""

    pid: int
    physical_address: int
    data: bytes = field(default=b"")

    @classmethod
    def from_dict(cls, data: Any) -> WriteRequest:
        data = _object(data)
        return cls(_int(data, "PID"), _int(data, "DirFisica"), _bytes(data, "Datos"))


@dataclass(frozen=True)
class ReadRequest:
    """Request to read bytes from a physical address."""

    pid: int
    physical_address: int
    size: int

    @classmethod
    def from_dict(cls, data: Any) -> ReadRequest:
        data = _object(data)
        return cls(_int(data, "PID"), _int(data, "DirFisica"), _int(data, "Tamanio"))


@dataclass(frozen=True)
class IoRequest:
    """Request for a process to use an I/O device for some time."""

    pid: int
    device_name: str
    duration: timedelta

    def to_dict(self) -> dict:
        nanoseconds = (self.duration // timedelta(microseconds=1)) * 1000
        return {"PID": self.pid, "NombreIO": self.device_name, "Duracion": nanoseconds}


@dataclass(frozen=True)
class IoResponse:
    """Notice that a device finished serving a process."""

    device_name: str
    pid: int

    def to_dict(self) -> dict:
        return {"NombreIO": self.device_name, "PID": self.pid}


@dataclass(frozen=True)
class IoDisconnected:
    """Notice that an I/O device went away."""

    name: str
    port: int
    ip: str

    def to_dict(self) -> dict:
        return {"Nombre": self.name, "Puerto": self.port, "IP": self.ip}


@dataclass(frozen=True)
class MemoryInfo:
    """Paging parameters handed to a CPU at handshake."""

    page_size: int
    entries_per_page: int
    levels: int

    def to_dict(self) -> dict:
        return {
            "Tamaño_pagina": self.page_size,
            "Cant_entradas": self.entries_per_page,
            "Numeros_de_nivel": self.levels,
        }


@dataclass(frozen=True)
class DumpResult:
    """Answer to a memory dump request."""

    pid: int
    response: str

    def to_dict(self) -> dict:
        return {"PID": self.pid, "Respuesta": self.response}


@dataclass(frozen=True)
class FreeSpace:
    """Number of free bytes in user memory."""

    free_bytes: int

    def to_dict(self) -> dict:
        return {"BytesLibres": self.free_bytes}