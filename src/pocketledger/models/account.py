"""Account model holding a stored running balance."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import FiniteFloat
from sqlmodel import Field

from .base import LedgerRecord


class AccountType(str, Enum):
    """Kinds of accounts a user can track."""

    BANK = "bank"
    CASH = "cash"
    SAVINGS = "savings"
    CREDIT = "credit"
    INVESTMENT = "investment"
    OTHER = "other"


class Account(LedgerRecord):
    """A money container whose balance the ledger keeps current."""

    id: str = Field(min_length=1)
    name: str
    type: AccountType = AccountType.BANK
    initial_balance: FiniteFloat = 0.0
    current_balance: FiniteFloat = 0.0
    icon: Optional[str] = None
    color: Optional[str] = None
    is_archived: bool = False
    created_at: datetime
    updated_at: datetime
