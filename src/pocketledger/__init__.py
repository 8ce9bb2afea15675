"""PocketLedger personal finance ledger package."""

from __future__ import annotations

from .config import BaseConfig, DevConfig
from .context import create_ledger_context

__all__ = ["BaseConfig", "DevConfig", "create_ledger_context"]
