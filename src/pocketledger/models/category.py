"""Ledger category definitions."""

from __future__ import annotations

from enum import Enum
from typing import Optional

from sqlmodel import Field

from .base import LedgerRecord


class CategoryType(str, Enum):
    """Whether a category classifies income or expenses."""

    INCOME = "income"
    EXPENSE = "expense"


class Category(LedgerRecord):
    """Transaction category used for breakdowns and pickers."""

    id: str = Field(min_length=1)
    name: str
    type: CategoryType
    color: str = "#6B7280"
    icon: Optional[str] = None
    is_default: bool = False
    is_archived: bool = False
