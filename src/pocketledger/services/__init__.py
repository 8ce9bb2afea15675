"""Service module exports."""

from . import auth, backup, ledger, periods, preferences, summaries

__all__ = [
    "auth",
    "backup",
    "ledger",
    "periods",
    "preferences",
    "summaries",
]
