"""SQLModel record and table exports."""

from .account import Account, AccountType
from .balance_history import BalanceHistory
from .category import Category, CategoryType
from .credentials import UserCredentials
from .preferences import AppTheme, DashboardLayout, UserPreferences
from .stored_value import StoredValue
from .transaction import RecurrenceFrequency, RecurrencePattern, Transaction, TransactionType

__all__ = [
    "Account",
    "AccountType",
    "AppTheme",
    "BalanceHistory",
    "Category",
    "CategoryType",
    "DashboardLayout",
    "RecurrenceFrequency",
    "RecurrencePattern",
    "StoredValue",
    "Transaction",
    "TransactionType",
    "UserCredentials",
    "UserPreferences",
]
