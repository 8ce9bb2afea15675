"""Per-user display preferences."""

from __future__ import annotations

from enum import Enum
from typing import Optional

from sqlmodel import Field

from .base import LedgerRecord


class AppTheme(str, Enum):
    LIGHT = "light"
    DARK = "dark"


class DashboardLayout(LedgerRecord):
    """Which dashboard panels are visible."""

    show_balance_trend: bool = True
    show_expense_distribution: bool = True
    show_income_breakdown: bool = True
    show_budget_utilization: bool = True


class UserPreferences(LedgerRecord):
    theme: AppTheme = AppTheme.LIGHT
    currency: str = Field(default="IDR", min_length=3, max_length=3)
    currency_symbol: str = "Rp"
    use_pin_protection: bool = False
    pin: Optional[str] = None
    dashboard_layout: DashboardLayout = Field(default_factory=DashboardLayout)
