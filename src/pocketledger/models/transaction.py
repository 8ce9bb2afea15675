"""Ledger transaction definitions."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import FiniteFloat
from sqlmodel import Field

from .base import LedgerRecord


class TransactionType(str, Enum):
    """Direction of money movement."""

    INCOME = "income"
    EXPENSE = "expense"
    TRANSFER = "transfer"


class RecurrenceFrequency(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


class RecurrencePattern(LedgerRecord):
    """Repeat schedule recorded alongside a transaction (not expanded)."""

    frequency: RecurrenceFrequency
    interval: int = Field(default=1, ge=1)
    end_date: Optional[datetime] = None


class Transaction(LedgerRecord):
    """A single income, expense or transfer entry.

    ``to_account_id`` is only meaningful for transfers. ``category_id`` and
    ``account_id`` are not guaranteed to resolve; see ``Ledger.find_account``.
    """

    id: str = Field(min_length=1)
    amount: FiniteFloat = Field(gt=0)
    type: TransactionType
    category_id: str
    account_id: str
    to_account_id: Optional[str] = None
    date: datetime
    notes: Optional[str] = None
    tags: list[str] = Field(default_factory=list)
    is_recurring: bool = False
    recurrence_pattern: Optional[RecurrencePattern] = None
    created_at: datetime
    updated_at: datetime
