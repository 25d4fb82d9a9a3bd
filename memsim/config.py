"""Configuration files of the memory module and of its peer modules."""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass, field, fields
from typing import Any, TypeVar

_T = TypeVar("_T")


class ConfigError(Exception):
    """Raised when a configuration cannot be read or decoded."""


def _int(key: str) -> Any:
    return field(default=0, metadata={"key": key})


def _str(key: str) -> Any:
    return field(default="", metadata={"key": key})


def _float(key: str) -> Any:
    return field(default=0.0, metadata={"key": key})


def _lookup(data: Mapping, key: str) -> tuple[bool, Any]:
    """Find a key exactly, falling back to a case-insensitive match."""
    if key in data:
        return True, data[key]
    lowered = key.lower()
    for name, value in data.items():
        if isinstance(name, str) and name.lower() == lowered:
            return True, value
    return False, None


def _coerce(value: Any, default: Any, key: str) -> Any:
    if isinstance(default, float):
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ConfigError(f"field {key!r} must be a number, got {value!r}")
        return float(value)
    if isinstance(default, int):
        if isinstance(value, bool) or not isinstance(value, int):
            raise ConfigError(f"field {key!r} must be an integer, got {value!r}")
        return value
    if not isinstance(value, str):
        raise ConfigError(f"field {key!r} must be a string, got {value!r}")
    return value


def _from_mapping(cls: type[_T], data: Any) -> _T:
    """Decode a JSON object; missing or null keys keep their zero value."""
    if not isinstance(data, Mapping):
        raise ConfigError(f"configuration must be a JSON object, got {type(data).__name__}")
    values = {}
    for spec in fields(cls):  # type: ignore[arg-type]
        key = spec.metadata["key"]
        found, value = _lookup(data, key)
        if found and value is not None:
            values[spec.name] = _coerce(value, spec.default, key)
    return cls(**values)


@dataclass(frozen=True)
class MemoryConfig:
    """Settings of the memory module."""

    port_memory: int = _int("port_memory")
    ip_memory: str = _str("ip_memory")
    memory_size: int = _int("memory_size")
    page_size: int = _int("page_size")
    entries_per_page: int = _int("entries_per_page")
    number_of_levels: int = _int("number_of_levels")
    memory_delay: int = _int("memory_delay")
    swap_path: str = _str("swapfile_path")
    swap_delay: int = _int("swap_delay")
    log_level: str = _str("log_level")
    dump_path: str = _str("dump_path")
    scripts_path: str = _str("scripts_path")

    @classmethod
    def from_dict(cls, data: Any) -> MemoryConfig:
        """Build the settings from a decoded JSON object."""
        return _from_mapping(cls, data)


@dataclass(frozen=True)
class CpuConfig:
    """Settings of a CPU module."""

    port_cpu: int = _int("port_cpu")
    ip_cpu: str = _str("ip_cpu")
    ip_memory: str = _str("ip_memory")
    port_memory: int = _int("port_memory")
    ip_kernel: str = _str("ip_kernel")
    port_kernel: int = _int("port_kernel")
    tlb_entries: int = _int("tlb_entries")
    tlb_replacement: str = _str("tlb_replacement")
    cache_entries: int = _int("cache_entries")
    cache_replacement: str = _str("cache_replacement")
    cache_delay: int = _int("cache_delay")
    log_level: str = _str("log_level")
    message: str = _str("mensaje")

    @classmethod
    def from_dict(cls, data: Any) -> CpuConfig:
        """Build the settings from a decoded JSON object."""
        return _from_mapping(cls, data)


@dataclass(frozen=True)
class IoConfig:
    """Settings of an I/O device module."""

    port_io: int = _int("port_io")
    ip_io: str = _str("ip_io")
    ip_kernel: str = _str("ip_kernel")
    port_kernel: int = _int("port_kernel")
    log_level: str = _str("log_level")
    message: str = _str("mensaje")

    @classmethod
    def from_dict(cls, data: Any) -> IoConfig:
        """Build the settings from a decoded JSON object."""
        return _from_mapping(cls, data)


@dataclass(frozen=True)
class KernelConfig:
    """Settings of the kernel module."""

    ip_memory: str = _str("ip_memory")
    port_memory: int = _int("port_memory")
    scheduler_algorithm: str = _str("scheduler_algorithm")
    ready_ingress_algorithm: str = _str("ready_ingress_algorithm")
    alpha: int = _int("alpha")
    initial_estimate: float = _float("initial_estimate")
    suspension_time: int = _int("suspension_time")
    log_level: str = _str("log_level")
    port_kernel: int = _int("port_kernel")
    ip_kernel: str = _str("ip_kernel")
    message: str = _str("mensaje")

    @classmethod
    def from_dict(cls, data: Any) -> KernelConfig:
        """Build the settings from a decoded JSON object."""
        return _from_mapping(cls, data)


def load_memory_config(path: str) -> MemoryConfig:
    """Read a memory configuration from a JSON file."""
    try:
        with open(path, encoding="utf-8") as handle:
            data = json.load(handle)
    except OSError as exc:
        raise ConfigError(f"cannot open memory config {path!r}: {exc}") from exc
    except ValueError as exc:
        raise ConfigError(f"cannot parse memory config {path!r}: {exc}") from exc
    return MemoryConfig.from_dict(data)


def listen_address(port: int) -> str:
    """Return the address a server listens on for every interface."""
    return f":{port}"