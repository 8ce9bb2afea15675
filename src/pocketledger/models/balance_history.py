"""Daily balance snapshots per account."""

from __future__ import annotations

from datetime import datetime

from pydantic import FiniteFloat

from .base import LedgerRecord


class BalanceHistory(LedgerRecord):
    """Balance of one account at the end of one calendar day."""

    account_id: str
    date: datetime
    balance: FiniteFloat
