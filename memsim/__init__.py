"""Simulated memory module with multilevel paging, swap, memory dumps and an HTTP service."""

__version__ = "0.1.0"

__all__ = [
    "client",
    "config",
    "dump",
    "logger",
    "manager",
    "metrics",
    "models",
    "pagetable",
    "server",
    "swap",
    "usermemory",
    "viewer",
]