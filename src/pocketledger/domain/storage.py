"""Persistence store protocol."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class StorageUsage:
    """Bytes used versus the configured quota."""

    used_bytes: int
    limit_bytes: int

    @property
    def percentage(self) -> float:
        if self.limit_bytes <= 0:
            return 0.0
        return self.used_bytes / self.limit_bytes * 100

    @property
    def nearly_full(self) -> bool:
        return self.percentage >= 80


class KeyValueStore(Protocol):
    """Durable key-value storage of JSON-compatible values.

    Implementations never propagate storage-layer exceptions: reads fall back
    to the caller's default and writes report failure as ``False``.
    """

    def get(self, key: str, default: T) -> Any | T:
        """Return the decoded value under ``key`` or ``default`` when absent."""
        ...

    def set(self, key: str, value: Any) -> bool:
        """Store ``value`` under ``key``; return whether the write succeeded."""
        ...

    def remove(self, key: str) -> bool:
        """Delete ``key``; return whether the delete succeeded."""
        ...

    def usage(self) -> StorageUsage:
        """Report storage consumption."""
        ...

    def clear_all(self) -> bool:
        """Remove every stored key."""
        ...
