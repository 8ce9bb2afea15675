"""Protocol definitions for the ledger's collaborators."""

from .session import SessionGate
from .storage import KeyValueStore, StorageUsage

__all__ = ["KeyValueStore", "SessionGate", "StorageUsage"]
